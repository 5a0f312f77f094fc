"""Aggregate settings resolved from the environment."""

from __future__ import annotations

from dataclasses import dataclass

from .apple import AppleMusicConfig, get_apple_music_config
from .spotify import SpotifyConfig, get_spotify_config
from .storage import DatabaseConfig, get_database_config
from .tracking import TrackingConfig, get_tracking_config
from .youtube import YouTubeConfig, get_youtube_config


@dataclass(frozen=True, slots=True)
class Settings:
    tracking: TrackingConfig
    database: DatabaseConfig
    spotify: SpotifyConfig | None = None
    apple: AppleMusicConfig | None = None
    youtube: YouTubeConfig | None = None


def load_settings() -> Settings:
    """Read every option from the environment; call again to reload."""

    return Settings(
        tracking=get_tracking_config(),
        database=get_database_config(),
        spotify=get_spotify_config(),
        apple=get_apple_music_config(),
        youtube=get_youtube_config(),
    )
