"""Spotify adapter package."""

from __future__ import annotations

from .adapter import SpotifyAdapter
from .client import SpotifyClient
from .schema import SpotifyAlbum, SpotifySearchResponse, SpotifyTokenResponse, SpotifyTrack
from .translator import translate_track

__all__ = [
    "SpotifyAdapter",
    "SpotifyAlbum",
    "SpotifyClient",
    "SpotifySearchResponse",
    "SpotifyTokenResponse",
    "SpotifyTrack",
    "translate_track",
]
