"""Application configuration helpers."""

from __future__ import annotations

from .apple import AppleMusicConfig, get_apple_music_config
from .env import optional_env_vars, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import NO_RETRY, CacheConfig, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .settings import Settings, load_settings
from .spotify import SpotifyConfig, get_spotify_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .tracking import RateLimit, TrackingConfig, get_tracking_config
from .youtube import YouTubeConfig, get_youtube_config

__all__ = [
    "NO_RETRY",
    "AppleMusicConfig",
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "Settings",
    "SpotifyConfig",
    "StorageConfig",
    "TrackingConfig",
    "YouTubeConfig",
    "configure_logging",
    "get_apple_music_config",
    "get_database_config",
    "get_spotify_config",
    "get_storage_config",
    "get_tracking_config",
    "get_youtube_config",
    "load_settings",
    "optional_env_vars",
    "require_env_vars",
]
