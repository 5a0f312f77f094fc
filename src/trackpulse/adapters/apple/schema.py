"""Pydantic models for Apple Music catalog song payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AppleBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class AlbumAttributes(AppleBaseModel):
    name: str = ""


class AlbumResource(AppleBaseModel):
    id: str
    attributes: AlbumAttributes | None = None


class AlbumRelationship(AppleBaseModel):
    data: list[AlbumResource] = Field(default_factory=list[AlbumResource])


class SongRelationships(AppleBaseModel):
    albums: AlbumRelationship | None = None


class SongAttributes(AppleBaseModel):
    name: str = ""
    artist_name: str = Field(default="", alias="artistName")
    album_name: str = Field(default="", alias="albumName")
    url: str = ""
    isrc: str | None = None


class SongResource(AppleBaseModel):
    id: str
    type: str = "songs"
    attributes: SongAttributes = Field(default_factory=SongAttributes)
    relationships: SongRelationships | None = None

    @property
    def album(self) -> AlbumResource | None:
        if self.relationships is None or self.relationships.albums is None:
            return None
        albums = self.relationships.albums.data
        return albums[0] if albums else None


class SongsResponse(AppleBaseModel):
    data: list[SongResource] = Field(default_factory=list[SongResource])
