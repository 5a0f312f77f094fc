"""YouTube lookups expressed as provider outcomes.

YouTube has no ISRC index, so the ISRC path degrades to a free-text search on
"<title> <artist>" and takes the top video hit.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from trackpulse.adapters.catalog import CatalogAdapter
from trackpulse.domain.model import NotFound, Provider

from .client import YouTubeClient
from .translator import translate_video
from .urls import parse_video_id

if TYPE_CHECKING:
    from trackpulse.adapters.catalog import ClientFactory
    from trackpulse.config.youtube import YouTubeConfig
    from trackpulse.domain.model import Isrc, LookupOutcome, PlatformId, Track
    from trackpulse.domain.ports import ProviderAdapter


class YouTubeAdapter(CatalogAdapter):
    provider = Provider.YOUTUBE

    def __init__(
        self,
        config: YouTubeConfig | None,
        *,
        client: YouTubeClient | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        if client is None and config is not None:
            client = YouTubeClient(config=config, client_factory=client_factory)
        self._client = client

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def lookup(self, isrc: Isrc, track: Track | None = None) -> LookupOutcome:  # noqa: ARG002
        if self._client is None:
            return self._disabled()
        if track is None or not track.has_search_terms:
            return self._disabled("track title and artist required for search")
        query = f"{track.title.strip()} {track.artist.strip()}"
        return await self._guarded(self._search(self._client, query), reference=query)

    async def lookup_by_id(self, platform_id: PlatformId) -> LookupOutcome:
        """Refresh a known video; accepts a bare id or any supported URL form.

        Raises ``InvalidVideoReference`` before any network call when the
        reference cannot be parsed.
        """

        video_id = parse_video_id(platform_id)
        if self._client is None:
            return self._disabled()
        return await self._guarded(self._fetch(self._client, video_id), reference=video_id)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def _search(self, client: YouTubeClient, query: str) -> LookupOutcome:
        video_id = await client.search_video_id(query)
        if video_id is None:
            return NotFound(provider=self.provider, reference=query)
        return await self._fetch(client, video_id)

    async def _fetch(self, client: YouTubeClient, video_id: str) -> LookupOutcome:
        video = await client.video(video_id)
        if video is None:
            return NotFound(provider=self.provider, reference=video_id)
        return translate_video(video)


if TYPE_CHECKING:
    _adapter_check: ProviderAdapter = YouTubeAdapter(None)
