"""Per-track reconciliation: fan out to the providers, then persist in order.

Storage writes for one track are serialised as ids and registry (one
transaction per provider, so both land or neither does) followed by the daily
row. Every adapter result is collected before the first write.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from trackpulse.domain.model import (
    LookupFailed,
    NotFound,
    ProviderResult,
    ReconciliationState,
)
from trackpulse.domain.ports import StorageError

from .daily_stats import write_daily
from .errors import TrackNotFoundError
from .registry import upsert_registry
from .track_store import require_track, set_platform_id

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Collection, Sequence

    from trackpulse.domain.model import Isrc, LookupOutcome, Provider, Track
    from trackpulse.domain.ports import LookupGovernor, ProviderAdapter, TrackingUnitOfWork

log = getLogger(__name__)

DEFAULT_ADAPTER_TIMEOUT_SECONDS = 15.0


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class TrackOutcome:
    track_id: str
    state: ReconciliationState = ReconciliationState.PENDING
    results: dict[Provider, LookupOutcome] = field(default_factory=dict)
    errors: int = 0
    storage_failures: list[Provider] = field(default_factory=list)

    @property
    def successes(self) -> dict[Provider, ProviderResult]:
        return {
            provider: result
            for provider, result in self.results.items()
            if isinstance(result, ProviderResult)
        }


@dataclass(slots=True)
class _Fetched:
    outcome: LookupOutcome
    # a pinned id stopped resolving and the pin must be released
    unpin: bool = False


class ReconciliationPipeline:
    def __init__(
        self,
        adapters: Sequence[ProviderAdapter],
        governor: LookupGovernor,
        unit_of_work_factory: Callable[[], TrackingUnitOfWork],
        *,
        adapter_timeout: float = DEFAULT_ADAPTER_TIMEOUT_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.adapters = {adapter.provider: adapter for adapter in adapters}
        self.governor = governor
        self.unit_of_work_factory = unit_of_work_factory
        self.adapter_timeout = adapter_timeout
        self.clock = clock

    def adapter_for(self, provider: Provider) -> ProviderAdapter:
        return self.adapters[provider]

    async def aclose(self) -> None:
        for adapter in self.adapters.values():
            await adapter.aclose()

    # lookups -----------------------------------------------------------------

    async def governed(
        self,
        provider: Provider,
        operation: Callable[[], Awaitable[LookupOutcome]],
    ) -> LookupOutcome:
        return await self.governor.call(provider, operation, timeout=self.adapter_timeout)

    async def lookup(
        self,
        isrc: Isrc,
        track: Track | None = None,
        *,
        providers: Collection[Provider] | None = None,
    ) -> dict[Provider, LookupOutcome]:
        """Fan out an ISRC lookup without persisting anything."""

        fetched = await self._fetch_all(isrc, track, providers=providers, honour_pins=False)
        return {provider: item.outcome for provider, item in fetched.items()}

    async def _fetch_all(
        self,
        isrc: Isrc,
        track: Track | None,
        *,
        providers: Collection[Provider] | None,
        honour_pins: bool,
    ) -> dict[Provider, _Fetched]:
        selected = [
            adapter
            for provider, adapter in self.adapters.items()
            if providers is None or provider in providers
        ]
        fetched = await asyncio.gather(
            *(self._fetch_one(adapter, isrc, track, honour_pins=honour_pins) for adapter in selected)
        )
        return {adapter.provider: item for adapter, item in zip(selected, fetched, strict=True)}

    async def _fetch_one(
        self,
        adapter: ProviderAdapter,
        isrc: Isrc,
        track: Track | None,
        *,
        honour_pins: bool,
    ) -> _Fetched:
        provider = adapter.provider
        if honour_pins and track is not None and track.platform_ids.is_pinned(provider):
            pinned_id = track.platform_ids.id_for(provider)
            outcome = await self.governed(provider, lambda: adapter.lookup_by_id(pinned_id))
            if not isinstance(outcome, NotFound):
                return _Fetched(outcome)
            log.info(
                "Pinned %s id %s for track %s no longer resolves; searching by ISRC",
                provider,
                pinned_id,
                track.id,
            )
            outcome = await self.governed(provider, lambda: adapter.lookup(isrc, track))
            return _Fetched(outcome, unpin=True)
        return _Fetched(await self.governed(provider, lambda: adapter.lookup(isrc, track)))

    # reconciliation ----------------------------------------------------------

    async def reconcile(
        self,
        track: Track,
        *,
        providers: Collection[Provider] | None = None,
    ) -> TrackOutcome:
        """Run one reconciliation tick for ``track``.

        ``providers`` restricts the fan-out; buckets of providers left out keep
        their current values in today's daily row.
        """

        outcome = TrackOutcome(track_id=track.id)
        isrc = track.canonical_isrc
        if isrc is None:
            log.debug("Skipping track %s: no ISRC", track.id)
            outcome.state = ReconciliationState.SKIPPED
            return outcome

        outcome.state = ReconciliationState.FETCHING
        fetched = await self._fetch_all(isrc, track, providers=providers, honour_pins=True)
        outcome.results = {provider: item.outcome for provider, item in fetched.items()}
        unpinned = {provider for provider, item in fetched.items() if item.unpin}
        self._persist(track, isrc, outcome, unpinned=unpinned, providers=providers)
        return outcome

    async def refresh(self, track: Track, provider: Provider) -> TrackOutcome:
        """Re-fetch one provider by the id already stored on ``track``."""

        outcome = TrackOutcome(track_id=track.id, state=ReconciliationState.FETCHING)
        adapter = self.adapter_for(provider)
        platform_id = track.platform_ids.id_for(provider)
        result = await self.governed(provider, lambda: adapter.lookup_by_id(platform_id))
        outcome.results = {provider: result}
        self._persist(track, track.canonical_isrc, outcome, unpinned=set(), providers={provider})
        return outcome

    def _persist(
        self,
        track: Track,
        isrc: Isrc | None,
        outcome: TrackOutcome,
        *,
        unpinned: set[Provider],
        providers: Collection[Provider] | None,
    ) -> None:
        outcome.state = ReconciliationState.MERGING
        for provider, result in outcome.results.items():
            if isinstance(result, LookupFailed):
                outcome.errors += 1
                log.warning(
                    "Track %s: %s lookup failed (%s): %s",
                    track.id,
                    provider,
                    result.kind,
                    result.message,
                )

        now = self.clock()
        successes = outcome.successes
        for provider, result in successes.items():
            try:
                self._write_provider(track.id, isrc, result, now, unpin=provider in unpinned)
            except (StorageError, TrackNotFoundError) as exc:
                outcome.errors += 1
                outcome.storage_failures.append(provider)
                log.warning("Track %s: could not store %s ids: %s", track.id, provider, exc)
        for provider in unpinned - successes.keys():
            try:
                self._release_pin(track.id, provider)
            except (StorageError, TrackNotFoundError) as exc:
                log.warning("Track %s: could not release %s pin: %s", track.id, provider, exc)

        counters = {provider: result.counters for provider, result in successes.items()}
        try:
            with self.unit_of_work_factory() as uow:
                write_daily(
                    uow.repositories.daily_stats,
                    track.id,
                    counters,
                    now,
                    providers=providers,
                )
                uow.commit()
        except StorageError as exc:
            outcome.errors += 1
            outcome.state = ReconciliationState.FAILED
            log.warning("Track %s: daily stats write failed: %s", track.id, exc)
            return
        outcome.state = ReconciliationState.WRITTEN

    def _write_provider(
        self,
        track_id: str,
        isrc: Isrc | None,
        result: ProviderResult,
        now: datetime,
        *,
        unpin: bool,
    ) -> None:
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            set_platform_id(
                repositories.tracks,
                track_id,
                result.provider,
                result.platform_id,
                isrc=isrc,
                pinned=False if unpin else None,
            )
            stored = require_track(repositories.tracks, track_id)
            upsert_registry(repositories.registry, stored, {result.provider: result}, now)
            uow.commit()

    def _release_pin(self, track_id: str, provider: Provider) -> None:
        with self.unit_of_work_factory() as uow:
            tracks = uow.repositories.tracks
            current = require_track(tracks, track_id).platform_ids.id_for(provider)
            set_platform_id(tracks, track_id, provider, current, pinned=False)
            uow.commit()
