"""Translate Spotify payloads into provider results."""

from __future__ import annotations

from typing import TYPE_CHECKING

from trackpulse.domain.model import (
    Provider,
    ProviderResult,
    SpotifyBucket,
    clamp_popularity,
)

if TYPE_CHECKING:
    from .schema import SpotifyTrack


def translate_track(track: SpotifyTrack) -> ProviderResult:
    popularity = clamp_popularity(track.popularity)
    return ProviderResult(
        provider=Provider.SPOTIFY,
        platform_id=track.id,
        # streams and followers are not exposed to client-credentials apps
        counters=SpotifyBucket(streams=0, popularity=popularity, followers=0),
        catalog={
            "id": track.id,
            "name": track.name,
            "album": track.album.name if track.album else "",
            "popularity": popularity,
            "external_url": track.external_urls.spotify,
        },
    )
