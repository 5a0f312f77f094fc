"""Pydantic models for the Spotify Web API payloads the tracker reads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SpotifyBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class SpotifyTokenResponse(SpotifyBaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int = 3600


class SpotifyExternalUrls(SpotifyBaseModel):
    spotify: str = ""


class SpotifyArtist(SpotifyBaseModel):
    id: str | None = None
    name: str = ""


class SpotifyAlbum(SpotifyBaseModel):
    id: str | None = None
    name: str = ""


class SpotifyTrack(SpotifyBaseModel):
    id: str
    name: str = ""
    popularity: int | None = None
    album: SpotifyAlbum | None = None
    artists: list[SpotifyArtist] = Field(default_factory=list[SpotifyArtist])
    external_urls: SpotifyExternalUrls = Field(default_factory=SpotifyExternalUrls)
    external_ids: dict[str, str] = Field(default_factory=dict[str, str])

    @property
    def isrc(self) -> str | None:
        return self.external_ids.get("isrc")


class SpotifyTrackPage(SpotifyBaseModel):
    items: list[SpotifyTrack] = Field(default_factory=list[SpotifyTrack])
    total: int | None = None


class SpotifySearchResponse(SpotifyBaseModel):
    tracks: SpotifyTrackPage = Field(default_factory=SpotifyTrackPage)
