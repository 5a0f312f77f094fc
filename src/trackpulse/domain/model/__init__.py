"""Public domain model surface."""

from __future__ import annotations

from trackpulse.domain.model.enums import (
    FailureKind,
    LookupStatus,
    Provider,
    ReconciliationState,
)
from trackpulse.domain.model.lookup import (
    CatalogValue,
    Disabled,
    LookupFailed,
    LookupOutcome,
    NotFound,
    ProviderResult,
)
from trackpulse.domain.model.primitives import (
    CreatorId,
    Isrc,
    PlatformId,
    TrackId,
    canonical_isrc,
    clamp_popularity,
    non_negative,
)
from trackpulse.domain.model.registry import (
    AppleEntry,
    PlatformEntry,
    SpotifyEntry,
    TrackRegistry,
    YouTubeEntry,
)
from trackpulse.domain.model.stats import (
    DEFAULT_BUCKETS,
    AppleBucket,
    DailyTrackingStats,
    ProviderCounters,
    SpotifyBucket,
    YouTubeBucket,
)
from trackpulse.domain.model.track import PlatformIds, Track

__all__ = [  # noqa: RUF022
    # enums
    "FailureKind",
    "LookupStatus",
    "Provider",
    "ReconciliationState",
    # primitives
    "CreatorId",
    "Isrc",
    "PlatformId",
    "TrackId",
    "canonical_isrc",
    "clamp_popularity",
    "non_negative",
    # tracks
    "PlatformIds",
    "Track",
    # registry
    "AppleEntry",
    "PlatformEntry",
    "SpotifyEntry",
    "TrackRegistry",
    "YouTubeEntry",
    # daily stats
    "DEFAULT_BUCKETS",
    "AppleBucket",
    "DailyTrackingStats",
    "ProviderCounters",
    "SpotifyBucket",
    "YouTubeBucket",
    # lookup outcomes
    "CatalogValue",
    "Disabled",
    "LookupFailed",
    "LookupOutcome",
    "NotFound",
    "ProviderResult",
]
