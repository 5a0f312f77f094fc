"""Daily per-track counter snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from trackpulse.domain.model.enums import Provider

if TYPE_CHECKING:
    from datetime import datetime

    from trackpulse.domain.model.primitives import TrackId


@dataclass(frozen=True)
class SpotifyBucket:
    # the public API exposes no stream counts; 0 is a sentinel, not a measurement
    streams: int = 0
    popularity: int = 0
    followers: int = 0

    def __post_init__(self) -> None:
        if min(self.streams, self.followers) < 0:
            raise ValueError("Spotify counters must be non-negative")
        if not 0 <= self.popularity <= 100:  # noqa: PLR2004
            raise ValueError(f"Spotify popularity out of range: {self.popularity}")

    def __composite_values__(self) -> tuple[int, int, int]:
        return (self.streams, self.popularity, self.followers)


@dataclass(frozen=True)
class AppleBucket:
    rank: int | None = None
    plays: int = 0

    def __post_init__(self) -> None:
        if self.rank is not None and self.rank <= 0:
            raise ValueError(f"Apple rank must be positive or None: {self.rank}")
        if self.plays < 0:
            raise ValueError("Apple plays must be non-negative")

    def __composite_values__(self) -> tuple[int | None, int]:
        return (self.rank, self.plays)


@dataclass(frozen=True)
class YouTubeBucket:
    views: int = 0
    likes: int = 0
    comments: int = 0

    def __post_init__(self) -> None:
        if min(self.views, self.likes, self.comments) < 0:
            raise ValueError("YouTube counters must be non-negative")

    def __composite_values__(self) -> tuple[int, int, int]:
        return (self.views, self.likes, self.comments)


type ProviderCounters = SpotifyBucket | AppleBucket | YouTubeBucket

DEFAULT_BUCKETS: dict[Provider, ProviderCounters] = {
    Provider.SPOTIFY: SpotifyBucket(),
    Provider.APPLE: AppleBucket(),
    Provider.YOUTUBE: YouTubeBucket(),
}


@dataclass(eq=False, kw_only=True)
class DailyTrackingStats:
    track_id: TrackId
    date: datetime
    spotify: SpotifyBucket = field(default_factory=SpotifyBucket)
    apple: AppleBucket = field(default_factory=AppleBucket)
    youtube: YouTubeBucket = field(default_factory=YouTubeBucket)
    updated_at: datetime | None = None

    def bucket_for(self, provider: Provider) -> ProviderCounters:
        return getattr(self, provider.value)

    @property
    def total_counters(self) -> int:
        """Spotify streams + Apple plays + YouTube views (not revenue)."""
        return self.spotify.streams + self.apple.plays + self.youtube.views
