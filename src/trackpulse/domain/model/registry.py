"""Denormalised per-track registry of the latest catalog data per provider."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from trackpulse.domain.model.enums import Provider

if TYPE_CHECKING:
    from datetime import datetime

    from trackpulse.domain.model.primitives import CreatorId, Isrc, PlatformId, TrackId


@dataclass(frozen=True)
class SpotifyEntry:
    id: PlatformId = ""
    name: str = ""
    album: str = ""
    popularity: int = 0
    external_url: str = ""
    last_updated: datetime | None = None

    def __composite_values__(self) -> tuple[object, ...]:
        return (
            self.id,
            self.name,
            self.album,
            self.popularity,
            self.external_url,
            self.last_updated,
        )


@dataclass(frozen=True)
class AppleEntry:
    id: PlatformId = ""
    name: str = ""
    album_name: str = ""
    album_id: str = ""
    external_url: str = ""
    last_updated: datetime | None = None

    def __composite_values__(self) -> tuple[object, ...]:
        return (
            self.id,
            self.name,
            self.album_name,
            self.album_id,
            self.external_url,
            self.last_updated,
        )


@dataclass(frozen=True)
class YouTubeEntry:
    id: PlatformId = ""
    title: str = ""
    channel_title: str = ""
    published_at: str = ""
    external_url: str = ""
    views: int = 0
    likes: int = 0
    comments: int = 0
    last_updated: datetime | None = None

    def __composite_values__(self) -> tuple[object, ...]:
        return (
            self.id,
            self.title,
            self.channel_title,
            self.published_at,
            self.external_url,
            self.views,
            self.likes,
            self.comments,
            self.last_updated,
        )


type PlatformEntry = SpotifyEntry | AppleEntry | YouTubeEntry


@dataclass(eq=False, kw_only=True)
class TrackRegistry:
    track_id: TrackId
    title: str
    artist: str
    isrc: Isrc
    creator_id: CreatorId
    mlc_work_id: str = ""
    spotify: SpotifyEntry = field(default_factory=SpotifyEntry)
    apple: AppleEntry = field(default_factory=AppleEntry)
    youtube: YouTubeEntry = field(default_factory=YouTubeEntry)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def entry_for(self, provider: Provider) -> PlatformEntry:
        return getattr(self, provider.value)

    def replace_entry(self, provider: Provider, entry: PlatformEntry) -> None:
        # composites are only flushed when the attribute is reassigned
        if not isinstance(entry, _ENTRY_TYPES[provider]):
            raise TypeError(f"Expected {_ENTRY_TYPES[provider].__name__} for {provider}")
        setattr(self, provider.value, entry)


_ENTRY_TYPES: dict[Provider, type[PlatformEntry]] = {
    Provider.SPOTIFY: SpotifyEntry,
    Provider.APPLE: AppleEntry,
    Provider.YOUTUBE: YouTubeEntry,
}
