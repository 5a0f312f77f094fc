"""Spotify configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import optional_env_vars
from .http_resilience import NO_RETRY, ResilienceConfig

SPOTIFY_API_BASE_URL = "https://api.spotify.com/v1/"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"
SPOTIFY_TIMEOUT_SECONDS = 10.0


def _default_resilience() -> ResilienceConfig:
    return ResilienceConfig(
        name="spotify",
        base_url=SPOTIFY_API_BASE_URL,
        timeout_seconds=SPOTIFY_TIMEOUT_SECONDS,
        retry=NO_RETRY,
    )


@dataclass(frozen=True)
class SpotifyConfig:
    """Client-credentials pair for the Spotify Web API."""

    client_id: str
    client_secret: str
    token_url: str = SPOTIFY_TOKEN_URL
    resilience: ResilienceConfig = field(default_factory=_default_resilience)


def get_spotify_config(*, resilience: ResilienceConfig | None = None) -> SpotifyConfig | None:
    """Return the Spotify config, or ``None`` when credentials are absent."""

    values = optional_env_vars(("SPOTIFY_CLIENT_ID", "SPOTIFY_CLIENT_SECRET"))
    if values is None:
        return None
    return SpotifyConfig(
        client_id=values["SPOTIFY_CLIENT_ID"],
        client_secret=values["SPOTIFY_CLIENT_SECRET"],
        resilience=resilience or _default_resilience(),
    )
