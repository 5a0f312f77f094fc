"""Apple Music lookups expressed as provider outcomes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from trackpulse.adapters.catalog import CatalogAdapter
from trackpulse.domain.model import NotFound, Provider

from .client import AppleMusicClient
from .translator import translate_song

if TYPE_CHECKING:
    from trackpulse.adapters.catalog import ClientFactory
    from trackpulse.config.apple import AppleMusicConfig
    from trackpulse.domain.model import Isrc, LookupOutcome, PlatformId, Track
    from trackpulse.domain.ports import ProviderAdapter


class AppleMusicAdapter(CatalogAdapter):
    provider = Provider.APPLE

    def __init__(
        self,
        config: AppleMusicConfig | None,
        *,
        client: AppleMusicClient | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        if client is None and config is not None:
            client = AppleMusicClient(config=config, client_factory=client_factory)
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

    async def _search(self, client: AppleMusicClient, isrc: Isrc) -> LookupOutcome:
        songs = await client.songs_by_isrc(isrc)
        if not songs:
            return NotFound(provider=self.provider, reference=isrc)
        return translate_song(songs[0])

    async def _fetch(self, client: AppleMusicClient, platform_id: PlatformId) -> LookupOutcome:
        song = await client.song(platform_id)
        if song is None:
            return NotFound(provider=self.provider, reference=platform_id)
        return translate_song(song)


if TYPE_CHECKING:
    _adapter_check: ProviderAdapter = AppleMusicAdapter(None)
