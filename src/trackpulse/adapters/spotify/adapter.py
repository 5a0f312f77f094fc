"""Spotify lookups expressed as provider outcomes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from trackpulse.adapters.catalog import CatalogAdapter
from trackpulse.domain.model import NotFound, Provider

from .client import SpotifyClient
from .translator import translate_track

if TYPE_CHECKING:
    from trackpulse.adapters.catalog import ClientFactory
    from trackpulse.config.spotify import SpotifyConfig
    from trackpulse.domain.model import Isrc, LookupOutcome, PlatformId, Track
    from trackpulse.domain.ports import ProviderAdapter


class SpotifyAdapter(CatalogAdapter):
    provider = Provider.SPOTIFY

    def __init__(
        self,
        config: SpotifyConfig | None,
        *,
        client: SpotifyClient | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        if client is None and config is not None:
            client = SpotifyClient(config=config, client_factory=client_factory)
        self._client = client

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def lookup(self, isrc: Isrc, track: Track | None = None) -> LookupOutcome:  # noqa: ARG002
        if self._client is None:
            return self._disabled()
        return await self._guarded(self._search(self._client, isrc), reference=isrc)

    async def lookup_by_id(self, platform_id: PlatformId) -> LookupOutcome:
        if self._client is None:
            return self._disabled()
        return await self._guarded(self._fetch(self._client, platform_id), reference=platform_id)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def _search(self, client: SpotifyClient, isrc: Isrc) -> LookupOutcome:
        found = await client.search_isrc(isrc)
        if found is None:
            return NotFound(provider=self.provider, reference=isrc)
        return translate_track(found)

    async def _fetch(self, client: SpotifyClient, platform_id: PlatformId) -> LookupOutcome:
        return translate_track(await client.get_track(platform_id))


if TYPE_CHECKING:
    _adapter_check: ProviderAdapter = SpotifyAdapter(None)
