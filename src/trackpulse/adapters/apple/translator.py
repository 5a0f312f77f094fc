"""Translate Apple Music song resources into provider results."""

from __future__ import annotations

from typing import TYPE_CHECKING

from trackpulse.domain.model import AppleBucket, Provider, ProviderResult

if TYPE_CHECKING:
    from .schema import SongResource


def translate_song(song: SongResource) -> ProviderResult:
    album = song.album
    album_name = song.attributes.album_name
    if not album_name and album is not None and album.attributes is not None:
        album_name = album.attributes.name
    return ProviderResult(
        provider=Provider.APPLE,
        platform_id=song.id,
        # the catalog API publishes neither chart rank nor play counts
        counters=AppleBucket(rank=None, plays=0),
        catalog={
            "id": song.id,
            "name": song.attributes.name,
            "album_name": album_name,
            "album_id": album.id if album is not None else "",
            "external_url": song.attributes.url,
        },
    )
