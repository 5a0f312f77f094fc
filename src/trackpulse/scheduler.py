"""Periodic full-set reconciliation."""

from __future__ import annotations

import asyncio
import contextlib
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from logging import getLogger
from signal import SIGINT, SIGTERM, Signals
from typing import TYPE_CHECKING

from trackpulse.config.tracking import TrackingConfig
from trackpulse.domain.ports import StorageError
from trackpulse.domain.tracking import RunCounters, eligible_tracks, utc_midnight

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from trackpulse.domain.model import Track
    from trackpulse.domain.ports import TrackingUnitOfWork
    from trackpulse.domain.tracking import ReconciliationPipeline

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def next_boundary(now: datetime, interval_seconds: float) -> datetime:
    """First multiple of ``interval_seconds`` after UTC midnight that lies after ``now``."""

    midnight = utc_midnight(now)
    elapsed = (now - midnight).total_seconds()
    steps = int(elapsed // interval_seconds) + 1
    return midnight + timedelta(seconds=steps * interval_seconds)


@dataclass(slots=True)
class RunReport:
    started_at: datetime
    finished_at: datetime
    processed: int = 0
    errors: int = 0
    skipped: int = 0
    elapsed_seconds: float = 0.0
    cancelled: bool = False
    providers: dict[str, dict[str, int]] = field(default_factory=dict)

    @classmethod
    def from_counters(
        cls,
        counters: RunCounters,
        *,
        started_at: datetime,
        finished_at: datetime,
        elapsed_seconds: float,
        cancelled: bool,
    ) -> RunReport:
        return cls(
            started_at=started_at,
            finished_at=finished_at,
            processed=counters.processed,
            errors=counters.errors,
            skipped=counters.skipped,
            elapsed_seconds=elapsed_seconds,
            cancelled=cancelled,
            providers={
                provider.value: tally.as_dict() for provider, tally in counters.providers.items()
            },
        )

    def as_dict(self) -> dict[str, object]:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "processed": self.processed,
            "errors": self.errors,
            "skipped": self.skipped,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "cancelled": self.cancelled,
            "providers": self.providers,
        }


class TrackingScheduler:
    """Runs the pipeline over every eligible track on wall-clock boundaries.

    A firing that arrives while a run is in progress is dropped, so two
    full-set reconciliations never overlap.
    """

    def __init__(
        self,
        pipeline: ReconciliationPipeline,
        unit_of_work_factory: Callable[[], TrackingUnitOfWork],
        config: TrackingConfig | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
        time_source: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.pipeline = pipeline
        self.unit_of_work_factory = unit_of_work_factory
        self.config = config or TrackingConfig()
        self._clock = clock
        self._time_source = time_source
        self._lock = asyncio.Lock()
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self.last_report: RunReport | None = None

    @property
    def is_running(self) -> bool:
        task = self._task
        return bool(task and not task.done())

    @property
    def is_busy(self) -> bool:
        return self._lock.locked()

    async def start(self) -> bool:
        """Start the background loop; returns ``False`` if it is already running."""

        if self.is_running:
            return False
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(), name="tracking-scheduler")
        return True

    def request_stop(self) -> None:
        """Ask the loop to stop between tracks without waiting for it."""

        self._stop_event.set()

    async def stop(self, *, grace_seconds: float | None = None) -> None:
        """Signal the loop to stop between tracks and wait for it to finish."""

        self.request_stop()
        task = self._task
        if task is None:
            return
        grace = (
            grace_seconds
            if grace_seconds is not None
            else self.config.adapter_timeout_seconds * 2
        )
        try:
            await asyncio.wait_for(asyncio.shield(task), timeout=grace)
        except TimeoutError:
            log.warning("Tracking run did not stop within %.1fs; cancelling", grace)
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        finally:
            self._task = None

    async def aclose(self) -> None:
        await self.stop()
        await self.pipeline.aclose()

    async def wait(self) -> None:
        """Block until the background loop exits."""

        if self._task is not None:
            await self._task

    async def run_once(self) -> RunReport | None:
        """Reconcile the eligible set once; ``None`` when a run is already in progress."""

        if self._lock.locked():
            log.info("Tracking run already in progress; dropping overlapping firing")
            return None
        async with self._lock:
            report = await self._run_all()
        self.last_report = report
        log.info(
            "Tracking run finished: processed=%s errors=%s skipped=%s elapsed=%.2fs cancelled=%s",
            report.processed,
            report.errors,
            report.skipped,
            report.elapsed_seconds,
            report.cancelled,
        )
        return report

    async def _run(self) -> None:
        if self.config.run_on_startup:
            await self.run_once()
        while not self._stop_event.is_set():
            now = self._clock()
            due = next_boundary(now, self.config.interval_seconds)
            log.info("Next tracking run at %s", due.isoformat())
            if await self._sleep_or_stop((due - now).total_seconds()):
                break
            await self.run_once()

    async def _sleep_or_stop(self, seconds: float) -> bool:
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=max(seconds, 0.0))
        except TimeoutError:
            return False
        return True

    def _load_tracks(self) -> list[Track]:
        with self.unit_of_work_factory() as uow:
            return eligible_tracks(uow.repositories.tracks)

    async def _run_all(self) -> RunReport:
        started_at = self._clock()
        start = self._time_source()
        counters = RunCounters()
        cancelled = False

        try:
            tracks = self._load_tracks()
        except StorageError:
            log.exception("Could not load eligible tracks")
            counters.errors += 1
            tracks = []
        log.info("Tracking run started: %s eligible tracks", len(tracks))

        slots = asyncio.Semaphore(self.config.max_concurrent_tracks)
        async with asyncio.TaskGroup() as group:
            for track in tracks:
                await slots.acquire()
                if self._stop_event.is_set():
                    slots.release()
                    cancelled = True
                    break
                group.create_task(self._reconcile(track, slots, counters))

        if cancelled:
            log.info("Tracking run cancelled between tracks")
        return RunReport.from_counters(
            counters,
            started_at=started_at,
            finished_at=self._clock(),
            elapsed_seconds=self._time_source() - start,
            cancelled=cancelled,
        )

    async def _reconcile(
        self,
        track: Track,
        slots: asyncio.Semaphore,
        counters: RunCounters,
    ) -> None:
        try:
            outcome = await self.pipeline.reconcile(track)
            counters.absorb(outcome)
            if self.config.per_track_delay_seconds > 0:
                await asyncio.sleep(self.config.per_track_delay_seconds)
        except Exception:
            # one broken track must not abort the full-set run
            log.exception("Reconciliation of track %s failed", track.id)
            counters.processed += 1
            counters.errors += 1
        finally:
            slots.release()


async def serve_until_signalled(
    scheduler: TrackingScheduler,
    signals: Sequence[Signals] = (SIGINT, SIGTERM),
) -> None:
    """Run ``scheduler`` until one of ``signals`` arrives, then stop between tracks."""

    loop = asyncio.get_running_loop()

    def _on_signal(signum: Signals) -> None:
        log.info("Received %s; stopping after the tracks in flight", signum.name)
        scheduler.request_stop()

    await scheduler.start()
    for signum in signals:
        loop.add_signal_handler(signum, _on_signal, signum)
    try:
        await scheduler.wait()
    finally:
        for signum in signals:
            loop.remove_signal_handler(signum)
        await scheduler.aclose()
