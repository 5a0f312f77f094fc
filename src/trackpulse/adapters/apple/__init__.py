"""Apple Music adapter package."""

from __future__ import annotations

from .adapter import AppleMusicAdapter
from .client import AppleMusicClient
from .schema import SongResource, SongsResponse
from .translator import translate_song

__all__ = [
    "AppleMusicAdapter",
    "AppleMusicClient",
    "SongResource",
    "SongsResponse",
    "translate_song",
]
