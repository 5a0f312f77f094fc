"""HTTP client for the Apple Music catalog API."""

from __future__ import annotations

from typing import TYPE_CHECKING

from trackpulse.adapters.catalog import ClientFactory, ClientPool, check_response, decode
from trackpulse.domain.model import Provider

from .schema import SongResource, SongsResponse

if TYPE_CHECKING:
    from trackpulse.config.apple import AppleMusicConfig


class AppleMusicClient:
    def __init__(
        self,
        *,
        config: AppleMusicConfig,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._config = config
        self._pool = ClientPool(client_factory)

    async def aclose(self) -> None:
        await self._pool.aclose()

    async def songs_by_isrc(self, isrc: str) -> list[SongResource]:
        response = await self._get(
            f"catalog/{self._config.storefront}/songs",
            params={"filter[isrc]": isrc},
            reference=isrc,
        )
        return response.data

    async def song(self, song_id: str) -> SongResource | None:
        response = await self._get(
            f"catalog/{self._config.storefront}/songs/{song_id}",
            params=None,
            reference=song_id,
        )
        return response.data[0] if response.data else None

    async def _get(
        self,
        path: str,
        *,
        params: dict[str, str] | None,
        reference: str,
    ) -> SongsResponse:
        client = self._pool.get(self._config.resilience)
        response = await client.get(
            path,
            params=params,
            headers={"Authorization": f"Bearer {self._config.developer_token}"},
        )
        check_response(response, provider=Provider.APPLE, reference=reference)
        return decode(SongsResponse, response.json(), provider=Provider.APPLE, reference=reference)
