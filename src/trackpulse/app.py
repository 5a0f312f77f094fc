"""Application wiring and the synchronous on-demand facade."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from http import HTTPStatus
from logging import getLogger
from typing import TYPE_CHECKING

from trackpulse.adapters.apple import AppleMusicAdapter
from trackpulse.adapters.rate_governor import RateGovernor
from trackpulse.adapters.spotify import SpotifyAdapter
from trackpulse.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyTrackingUnitOfWork,
    is_started,
    startup,
)
from trackpulse.adapters.youtube import YouTubeAdapter, parse_video_id
from trackpulse.config import load_settings
from trackpulse.domain.model import (
    Disabled,
    LookupFailed,
    LookupStatus,
    NotFound,
    Provider,
    ProviderResult,
    canonical_isrc,
)
from trackpulse.domain.ports import TrackingUnitOfWork
from trackpulse.domain.tracking import (
    DEFAULT_WINDOW_DAYS,
    MissingPlatformIdError,
    ReconciliationPipeline,
    apply_manual_ids,
    register_track,
    require_track,
    set_platform_id,
    stats_window,
    summarise,
)
from trackpulse.scheduler import TrackingScheduler, serve_until_signalled

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import TracebackType

    from trackpulse.adapters.catalog import ClientFactory
    from trackpulse.config import Settings
    from trackpulse.domain.model import (
        DailyTrackingStats,
        LookupOutcome,
        Track,
        TrackId,
        TrackRegistry,
    )
    from trackpulse.domain.ports import ProviderAdapter
    from trackpulse.domain.tracking import TrackingSummary
    from trackpulse.scheduler import RunReport

UnitOfWorkFactory = Callable[[], TrackingUnitOfWork]

log = getLogger(__name__)

_HTTP_STATUS: dict[LookupStatus, HTTPStatus] = {
    LookupStatus.SUCCESS: HTTPStatus.OK,
    LookupStatus.NOT_FOUND: HTTPStatus.NOT_FOUND,
    LookupStatus.DISABLED: HTTPStatus.SERVICE_UNAVAILABLE,
    LookupStatus.ERROR: HTTPStatus.BAD_GATEWAY,
}


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class LookupResponse:
    """A lookup outcome shaped for the surrounding HTTP layer."""

    provider: Provider
    status: LookupStatus
    data: dict[str, object] | None = None
    message: str = ""

    @property
    def success(self) -> bool:
        return self.status is LookupStatus.SUCCESS

    @property
    def http_status(self) -> int:
        return int(_HTTP_STATUS[self.status])

    @classmethod
    def from_outcome(cls, outcome: LookupOutcome) -> LookupResponse:
        match outcome:
            case ProviderResult():
                data: dict[str, object] = dict(outcome.catalog)
                data["id"] = outcome.platform_id
                data["counters"] = asdict(outcome.counters)
                return cls(outcome.provider, outcome.status, data)
            case Disabled():
                return cls(outcome.provider, outcome.status, message=outcome.reason)
            case NotFound():
                return cls(outcome.provider, outcome.status, message="not found")
            case LookupFailed():
                return cls(outcome.provider, outcome.status, message=outcome.message)

    def as_dict(self) -> dict[str, object]:
        return {
            "provider": self.provider.value,
            "status": self.status.value,
            "success": self.success,
            "data": self.data,
            "message": self.message,
        }


def build_adapters(
    settings: Settings,
    *,
    client_factory: ClientFactory | None = None,
) -> list[ProviderAdapter]:
    """One adapter per provider; missing credentials yield a disabled adapter."""

    adapters: list[ProviderAdapter] = [
        SpotifyAdapter(settings.spotify, client_factory=client_factory),
        AppleMusicAdapter(settings.apple, client_factory=client_factory),
        YouTubeAdapter(settings.youtube, client_factory=client_factory),
    ]
    for adapter in adapters:
        if not adapter.enabled:
            log.warning("%s credentials not configured; adapter disabled", adapter.provider)
    return adapters


def build_pipeline(
    settings: Settings,
    *,
    unit_of_work_factory: UnitOfWorkFactory = SqlAlchemyTrackingUnitOfWork,
    adapters: Sequence[ProviderAdapter] | None = None,
    clock: Callable[[], datetime] = _utcnow,
) -> ReconciliationPipeline:
    return ReconciliationPipeline(
        adapters if adapters is not None else build_adapters(settings),
        RateGovernor(settings.tracking.rates),
        unit_of_work_factory,
        adapter_timeout=settings.tracking.adapter_timeout_seconds,
        clock=clock,
    )


def ensure_storage(settings: Settings) -> None:
    if not is_started():
        startup(database_uri=settings.database.uri)


class TrackingService:
    """Synchronous facade over the tracking engine.

    Calls run on one long-lived event loop so that pooled HTTP clients, the
    Spotify token cache and the rate governor survive between calls.
    """

    def __init__(
        self,
        pipeline: ReconciliationPipeline,
        *,
        unit_of_work_factory: UnitOfWorkFactory = SqlAlchemyTrackingUnitOfWork,
        scheduler: TrackingScheduler | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.pipeline = pipeline
        self.unit_of_work_factory = unit_of_work_factory
        self.scheduler = scheduler or TrackingScheduler(pipeline, unit_of_work_factory)
        self._clock = clock
        self._runner = asyncio.Runner()
        self._closed = False

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> TrackingService:
        resolved = settings or load_settings()
        ensure_storage(resolved)
        pipeline = build_pipeline(resolved)
        scheduler = TrackingScheduler(
            pipeline, SqlAlchemyTrackingUnitOfWork, resolved.tracking
        )
        return cls(pipeline, scheduler=scheduler)

    def __enter__(self) -> TrackingService:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._runner.run(self.pipeline.aclose())
        finally:
            self._runner.close()

    # tracks ------------------------------------------------------------------

    def register_track(
        self,
        track_id: TrackId,
        *,
        title: str,
        artist: str,
        isrc: str | None = None,
        creator_id: str = "",
    ) -> Track:
        with self.unit_of_work_factory() as uow:
            track = register_track(
                uow.repositories.tracks,
                track_id=track_id,
                title=title,
                artist=artist,
                isrc=isrc,
                creator_id=creator_id,
            )
            uow.commit()
        return track

    def _load_track(self, track_id: TrackId) -> Track:
        with self.unit_of_work_factory() as uow:
            return require_track(uow.repositories.tracks, track_id)

    def _find_by_isrc(self, isrc: str) -> Track | None:
        with self.unit_of_work_factory() as uow:
            return uow.repositories.tracks.find_by_isrc(isrc)

    # lookups -----------------------------------------------------------------

    def lookup_one(self, provider: Provider, isrc: str) -> LookupResponse:
        """Run one provider for one ISRC; persists when the ISRC belongs to a known track.

        A manually pinned id on that track is refreshed by id rather than
        replaced by the ISRC match.
        """

        return self._lookup(isrc, providers={provider})[provider]

    def lookup_all(self, isrc: str) -> dict[Provider, LookupResponse]:
        return self._lookup(isrc, providers=None)

    def _lookup(
        self,
        isrc: str,
        *,
        providers: set[Provider] | None,
    ) -> dict[Provider, LookupResponse]:
        canonical = canonical_isrc(isrc)
        if canonical is None:
            raise ValueError("An ISRC is required")
        track = self._find_by_isrc(canonical)
        if track is None:
            log.info("ISRC %s is not attached to a known track; nothing is stored", canonical)
            results = self._runner.run(self.pipeline.lookup(canonical, providers=providers))
        else:
            outcome = self._runner.run(self.pipeline.reconcile(track, providers=providers))
            results = outcome.results
        return {provider: LookupResponse.from_outcome(result) for provider, result in results.items()}

    def refresh_by_id(self, track_id: TrackId, provider: Provider) -> LookupResponse:
        """Re-fetch one provider using the platform id already linked to the track."""

        track = self._load_track(track_id)
        if not track.platform_ids.id_for(provider):
            raise MissingPlatformIdError(track_id, provider.value)
        outcome = self._runner.run(self.pipeline.refresh(track, provider))
        return LookupResponse.from_outcome(outcome.results[provider])

    # manual overrides ----------------------------------------------------------

    def set_ids(
        self,
        track_id: TrackId,
        *,
        spotify_id: str | None = None,
        apple_id: str | None = None,
        youtube_id: str | None = None,
        mlc_work_id: str | None = None,
    ) -> TrackRegistry:
        """Write user-supplied ids, bypassing the adapters.

        Supplied ids are pinned so scheduled runs refresh them by id instead
        of replacing them with an ISRC match; a blank value clears id and pin.
        YouTube URLs are reduced to their video id.
        """

        supplied: dict[Provider, str] = {}
        if spotify_id is not None:
            supplied[Provider.SPOTIFY] = spotify_id.strip()
        if apple_id is not None:
            supplied[Provider.APPLE] = apple_id.strip()
        if youtube_id is not None:
            stripped = youtube_id.strip()
            supplied[Provider.YOUTUBE] = parse_video_id(stripped) if stripped else ""

        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            track = require_track(repositories.tracks, track_id)
            for provider, value in supplied.items():
                set_platform_id(
                    repositories.tracks, track_id, provider, value, pinned=bool(value)
                )
            if mlc_work_id is not None:
                track.set_mlc_work_id(mlc_work_id)
            registry = apply_manual_ids(repositories.registry, track, supplied, self._clock())
            uow.commit()
        log.info("Manual ids set on track %s: %s", track_id, sorted(supplied))
        return registry

    # reads -------------------------------------------------------------------

    def stats(
        self,
        track_id: TrackId,
        window_days: int = DEFAULT_WINDOW_DAYS,
    ) -> list[DailyTrackingStats]:
        with self.unit_of_work_factory() as uow:
            require_track(uow.repositories.tracks, track_id)
            return stats_window(uow.repositories.daily_stats, track_id, self._clock(), window_days)

    def registry(self, track_id: TrackId) -> TrackRegistry | None:
        with self.unit_of_work_factory() as uow:
            return uow.repositories.registry.get(track_id)

    def summary(self, creator_id: str | None = None) -> TrackingSummary:
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            tracks = repositories.tracks.list_all(creator_id=creator_id)
            track_ids = [track.id for track in tracks]
            return summarise(
                tracks,
                repositories.registry.list_for(track_ids),
                repositories.daily_stats.latest_for(track_ids),
            )

    # scheduled work ------------------------------------------------------------

    def run_once(self) -> RunReport | None:
        """One full-set reconciliation (``None`` if a run is already in progress)."""

        return self._runner.run(self.scheduler.run_once())


def serve(settings: Settings | None = None) -> None:
    """Run the scheduler until interrupted."""

    resolved = settings or load_settings()
    ensure_storage(resolved)
    scheduler = TrackingScheduler(
        build_pipeline(resolved), SqlAlchemyTrackingUnitOfWork, resolved.tracking
    )

    log.info(
        "Tracking scheduler starting: every %sh, run_on_startup=%s",
        resolved.tracking.interval_hours,
        resolved.tracking.run_on_startup,
    )
    asyncio.run(serve_until_signalled(scheduler))
    log.info("Tracking scheduler stopped")
