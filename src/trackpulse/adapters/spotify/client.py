"""HTTP client for the Spotify Web API using the client-credentials flow."""

from __future__ import annotations

import asyncio
import time
from logging import getLogger
from typing import TYPE_CHECKING

from trackpulse.adapters.catalog import (
    ClientFactory,
    ClientPool,
    UpstreamOutcome,
    check_response,
    decode,
)
from trackpulse.domain.model import FailureKind, LookupFailed, Provider

from .schema import SpotifySearchResponse, SpotifyTokenResponse, SpotifyTrack

if TYPE_CHECKING:
    from collections.abc import Callable

    from trackpulse.config.spotify import SpotifyConfig

log = getLogger(__name__)

# refresh this many seconds before the token actually expires
TOKEN_EXPIRY_MARGIN_SECONDS = 60.0


class SpotifyClient:
    """Token-caching wrapper around the two Spotify endpoints the tracker needs."""

    def __init__(
        self,
        *,
        config: SpotifyConfig,
        client_factory: ClientFactory | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config
        self._pool = ClientPool(client_factory)
        self._clock = clock
        self._token_lock = asyncio.Lock()
        self._token: str | None = None
        self._token_expires_at = 0.0

    async def aclose(self) -> None:
        await self._pool.aclose()

    def invalidate_token(self) -> None:
        self._token = None
        self._token_expires_at = 0.0

    async def access_token(self) -> str:
        async with self._token_lock:
            if self._token is not None and self._clock() < self._token_expires_at:
                return self._token
            token = await self._request_token()
            self._token = token.access_token
            self._token_expires_at = (
                self._clock() + token.expires_in - TOKEN_EXPIRY_MARGIN_SECONDS
            )
            log.debug("Obtained Spotify access token valid for %ss", token.expires_in)
            return self._token

    async def search_isrc(self, isrc: str) -> SpotifyTrack | None:
        payload = await self._get_json(
            "search",
            params={"q": f"isrc:{isrc}", "type": "track", "limit": 1},
            reference=isrc,
        )
        response = decode(
            SpotifySearchResponse, payload, provider=Provider.SPOTIFY, reference=isrc
        )
        items = response.tracks.items
        return items[0] if items else None

    async def get_track(self, track_id: str) -> SpotifyTrack:
        payload = await self._get_json(f"tracks/{track_id}", params=None, reference=track_id)
        return decode(SpotifyTrack, payload, provider=Provider.SPOTIFY, reference=track_id)

    async def _request_token(self) -> SpotifyTokenResponse:
        client = self._pool.get(self._config.resilience)
        response = await client.post(
            self._config.token_url,
            data={"grant_type": "client_credentials"},
            auth=(self._config.client_id, self._config.client_secret),
        )
        if not response.is_success:
            log.error("Spotify token request refused with HTTP %s", response.status_code)
            raise UpstreamOutcome(
                LookupFailed(
                    provider=Provider.SPOTIFY,
                    kind=FailureKind.AUTH,
                    message="token request refused",
                    status_code=response.status_code,
                )
            )
        return decode(
            SpotifyTokenResponse, response.json(), provider=Provider.SPOTIFY, reference="token"
        )

    async def _get_json(
        self,
        path: str,
        *,
        params: dict[str, str | int] | None,
        reference: str,
    ) -> object:
        client = self._pool.get(self._config.resilience)
        token = await self.access_token()
        response = await client.get(
            path,
            params=params,
            headers={"Authorization": f"Bearer {token}"},
        )
        if response.status_code == 401:  # noqa: PLR2004
            # the next call fetches a fresh token; this one is reported as-is
            self.invalidate_token()
        check_response(response, provider=Provider.SPOTIFY, reference=reference)
        return response.json()
