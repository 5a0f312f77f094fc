"""Catalog-wide overview figures for a creator (or everyone)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from trackpulse.domain.model import Provider

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from trackpulse.domain.model import DailyTrackingStats, Track, TrackRegistry


@dataclass(frozen=True, slots=True)
class TrackingSummary:
    total_tracks: int
    tracks_with_isrc: int
    spotify_linked: int
    apple_linked: int
    youtube_linked: int
    missing_ids: int
    # spotify streams + apple plays + youtube views; a counter total, never revenue
    total_counters: int

    def as_dict(self) -> dict[str, int]:
        return {
            "total_tracks": self.total_tracks,
            "tracks_with_isrc": self.tracks_with_isrc,
            "spotify_linked": self.spotify_linked,
            "apple_linked": self.apple_linked,
            "youtube_linked": self.youtube_linked,
            "missing_ids": self.missing_ids,
            "total_counters": self.total_counters,
        }


def summarise(
    tracks: Sequence[Track],
    registries: Iterable[TrackRegistry],
    latest_stats: Iterable[DailyTrackingStats],
) -> TrackingSummary:
    """Summarise linking progress and the latest counters.

    ``missing_ids`` counts tracks that carry an ISRC but lack at least one
    platform id. YouTube views prefer the registry (refreshed on demand) over
    the latest daily row.
    """

    registry_views = {registry.track_id: registry.youtube.views for registry in registries}
    latest = {row.track_id: row for row in latest_stats}

    def linked(provider: Provider) -> int:
        return sum(1 for track in tracks if track.platform_ids.id_for(provider))

    missing = sum(
        1
        for track in tracks
        if track.is_eligible and len(track.platform_ids.linked()) < len(Provider)
    )

    total = 0
    for track in tracks:
        row = latest.get(track.id)
        streams = row.spotify.streams if row else 0
        plays = row.apple.plays if row else 0
        views = registry_views.get(track.id) or (row.youtube.views if row else 0)
        total += streams + plays + views

    return TrackingSummary(
        total_tracks=len(tracks),
        tracks_with_isrc=sum(1 for track in tracks if track.is_eligible),
        spotify_linked=linked(Provider.SPOTIFY),
        apple_linked=linked(Provider.APPLE),
        youtube_linked=linked(Provider.YOUTUBE),
        missing_ids=missing,
        total_counters=total,
    )
