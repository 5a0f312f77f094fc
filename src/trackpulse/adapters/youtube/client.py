"""HTTP client for the YouTube Data API v3."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from trackpulse.adapters.catalog import ClientFactory, ClientPool, check_response, decode
from trackpulse.domain.model import Provider

from .schema import SearchResponse, VideoItem, VideosResponse, search_has_results

if TYPE_CHECKING:
    from trackpulse.config.http_resilience import ResilienceConfig
    from trackpulse.config.youtube import YouTubeConfig


def _with_search_predicate(resilience: ResilienceConfig) -> ResilienceConfig:
    if resilience.cache is None or resilience.cache.should_cache is not None:
        return resilience
    return replace(resilience, cache=replace(resilience.cache, should_cache=search_has_results))


class YouTubeClient:
    """``search.list`` goes through a response cache; ``videos.list`` never does."""

    def __init__(
        self,
        *,
        config: YouTubeConfig,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._config = config
        self._search_resilience = _with_search_predicate(config.search_resilience)
        self._pool = ClientPool(client_factory)

    async def aclose(self) -> None:
        await self._pool.aclose()

    async def search_video_id(self, query: str) -> str | None:
        client = self._pool.get(self._search_resilience)
        response = await client.get(
            "search",
            params={
                "part": "snippet",
                "q": query,
                "type": "video",
                "maxResults": 1,
                "key": self._config.api_key,
            },
        )
        check_response(response, provider=Provider.YOUTUBE, reference=query)
        payload = decode(
            SearchResponse, response.json(), provider=Provider.YOUTUBE, reference=query
        )
        return payload.first_video_id()

    async def video(self, video_id: str) -> VideoItem | None:
        client = self._pool.get(self._config.resilience)
        response = await client.get(
            "videos",
            params={
                "part": "statistics,snippet",
                "id": video_id,
                "key": self._config.api_key,
            },
        )
        check_response(response, provider=Provider.YOUTUBE, reference=video_id)
        payload = decode(
            VideosResponse, response.json(), provider=Provider.YOUTUBE, reference=video_id
        )
        return payload.items[0] if payload.items else None
