"""Apple Music configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import env_str, optional_env_vars
from .http_resilience import NO_RETRY, ResilienceConfig

APPLE_MUSIC_BASE_URL = "https://api.music.apple.com/v1/"
APPLE_MUSIC_TIMEOUT_SECONDS = 10.0
DEFAULT_STOREFRONT = "us"


def _default_resilience() -> ResilienceConfig:
    return ResilienceConfig(
        name="apple",
        base_url=APPLE_MUSIC_BASE_URL,
        timeout_seconds=APPLE_MUSIC_TIMEOUT_SECONDS,
        retry=NO_RETRY,
    )


@dataclass(frozen=True)
class AppleMusicConfig:
    developer_token: str
    storefront: str = DEFAULT_STOREFRONT
    resilience: ResilienceConfig = field(default_factory=_default_resilience)


def get_apple_music_config(
    *, resilience: ResilienceConfig | None = None
) -> AppleMusicConfig | None:
    values = optional_env_vars(("APPLE_MUSIC_DEVELOPER_TOKEN",))
    if values is None:
        return None
    return AppleMusicConfig(
        developer_token=values["APPLE_MUSIC_DEVELOPER_TOKEN"],
        storefront=env_str("APPLE_MUSIC_STOREFRONT", DEFAULT_STOREFRONT).lower(),
        resilience=resilience or _default_resilience(),
    )
