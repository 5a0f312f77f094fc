"""YouTube Data API configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import env_float, optional_env_vars
from .http_resilience import NO_RETRY, CacheConfig, ResilienceConfig, ShouldCacheHook

YOUTUBE_BASE_URL = "https://www.googleapis.com/youtube/v3/"
YOUTUBE_TIMEOUT_SECONDS = 10.0
DEFAULT_SEARCH_CACHE_TTL_HOURS = 24.0


def _default_resilience() -> ResilienceConfig:
    return ResilienceConfig(
        name="youtube",
        base_url=YOUTUBE_BASE_URL,
        timeout_seconds=YOUTUBE_TIMEOUT_SECONDS,
        retry=NO_RETRY,
    )


def default_search_resilience(
    *,
    ttl_hours: float = DEFAULT_SEARCH_CACHE_TTL_HOURS,
    cache_predicate: ShouldCacheHook | None = None,
) -> ResilienceConfig:
    """Resilience settings for ``search.list``; results are cached to save quota."""

    cache = (
        CacheConfig(
            backend="memory",
            default_ttl_seconds=ttl_hours * 3600,
            should_cache=cache_predicate,
        )
        if ttl_hours > 0
        else None
    )
    return ResilienceConfig(
        name="youtube-search",
        base_url=YOUTUBE_BASE_URL,
        timeout_seconds=YOUTUBE_TIMEOUT_SECONDS,
        retry=NO_RETRY,
        cache=cache,
    )


@dataclass(frozen=True)
class YouTubeConfig:
    api_key: str
    resilience: ResilienceConfig = field(default_factory=_default_resilience)
    search_resilience: ResilienceConfig = field(default_factory=default_search_resilience)


def get_youtube_config() -> YouTubeConfig | None:
    values = optional_env_vars(("YOUTUBE_API_KEY",))
    if values is None:
        return None
    ttl_hours = env_float(
        "YOUTUBE_SEARCH_CACHE_TTL_HOURS", DEFAULT_SEARCH_CACHE_TTL_HOURS, minimum=0.0
    )
    return YouTubeConfig(
        api_key=values["YOUTUBE_API_KEY"],
        search_resilience=default_search_resilience(ttl_hours=ttl_hours),
    )
