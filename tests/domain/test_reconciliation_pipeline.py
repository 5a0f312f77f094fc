from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import TYPE_CHECKING

import pytest

from tests.helpers.catalog import FakeAdapter, apple_result, spotify_result, youtube_result
from trackpulse.adapters.rate_governor import RateGovernor
from trackpulse.domain.model import (
    AppleBucket,
    Disabled,
    FailureKind,
    LookupFailed,
    NotFound,
    Provider,
    ReconciliationState,
    SpotifyBucket,
    YouTubeBucket,
)
from trackpulse.domain.ports import StorageError
from trackpulse.domain.tracking import (
    ReconciliationPipeline,
    RunCounters,
    utc_midnight,
)
from trackpulse.domain.tracking import pipeline as pipeline_module

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from datetime import datetime

    from trackpulse.adapters.sqlalchemy.unit_of_work import SqlAlchemyTrackingUnitOfWork
    from trackpulse.domain.model import DailyTrackingStats, ProviderResult, Track, TrackRegistry
    from trackpulse.domain.ports import TrackRegistryRepository

    UowFactory = Callable[[], SqlAlchemyTrackingUnitOfWork]


@pytest.fixture
def adapters() -> dict[Provider, FakeAdapter]:
    return {
        Provider.SPOTIFY: FakeAdapter(
            Provider.SPOTIFY, by_isrc=spotify_result("SP1", popularity=57)
        ),
        Provider.APPLE: FakeAdapter(Provider.APPLE, by_isrc=apple_result("AP1")),
        Provider.YOUTUBE: FakeAdapter(
            Provider.YOUTUBE, by_isrc=youtube_result("YT1", views=1234)
        ),
    }


@pytest.fixture
def pipeline(
    adapters: dict[Provider, FakeAdapter],
    sqlite_unit_of_work: UowFactory,
    now: datetime,
) -> ReconciliationPipeline:
    return ReconciliationPipeline(
        list(adapters.values()),
        RateGovernor({}),
        sqlite_unit_of_work,
        clock=lambda: now,
    )


@pytest.fixture
def track(seed_track: Callable[..., Track]) -> Track:
    return seed_track("T", title="Hey", artist="Ana", isrc=" usrc17607839")


def _reload(uow_factory: UowFactory, track_id: str = "T") -> Track:
    with uow_factory() as uow:
        stored = uow.repositories.tracks.get(track_id)
    assert stored is not None
    return stored


def _daily_rows(
    uow_factory: UowFactory, now: datetime, track_id: str = "T"
) -> list[DailyTrackingStats]:
    since = utc_midnight(now) - timedelta(days=1)
    with uow_factory() as uow:
        return list(uow.repositories.daily_stats.window(track_id, since=since))


def test_full_hit_links_every_provider(
    pipeline: ReconciliationPipeline,
    track: Track,
    sqlite_unit_of_work: UowFactory,
    now: datetime,
) -> None:
    outcome = asyncio.run(pipeline.reconcile(track))

    assert outcome.state is ReconciliationState.WRITTEN
    assert outcome.errors == 0
    stored = _reload(sqlite_unit_of_work)
    assert stored.platform_ids.spotify_id == "SP1"
    assert stored.platform_ids.apple_id == "AP1"
    assert stored.platform_ids.youtube_id == "YT1"
    assert stored.platform_ids.isrc == "USRC17607839"

    with sqlite_unit_of_work() as uow:
        registry = uow.repositories.registry.get("T")
    assert registry is not None
    assert registry.isrc == "USRC17607839"
    assert (registry.spotify.id, registry.apple.id, registry.youtube.id) == ("SP1", "AP1", "YT1")
    assert registry.spotify.last_updated == now

    (row,) = _daily_rows(sqlite_unit_of_work, now)
    assert row.date == utc_midnight(now)
    assert row.spotify == SpotifyBucket(streams=0, popularity=57, followers=0)
    assert row.apple == AppleBucket(rank=None, plays=0)
    assert row.youtube == YouTubeBucket(views=1234, likes=10, comments=2)


def test_disabled_provider_is_not_an_error(
    pipeline: ReconciliationPipeline,
    adapters: dict[Provider, FakeAdapter],
    track: Track,
    sqlite_unit_of_work: UowFactory,
    now: datetime,
) -> None:
    adapters[Provider.SPOTIFY].by_isrc = Disabled(provider=Provider.SPOTIFY)

    outcome = asyncio.run(pipeline.reconcile(track))
    counters = RunCounters()
    counters.absorb(outcome)

    assert outcome.errors == 0
    assert counters.errors == 0
    assert counters.providers[Provider.SPOTIFY].disabled == 1
    stored = _reload(sqlite_unit_of_work)
    assert stored.platform_ids.spotify_id == ""
    assert stored.platform_ids.apple_id == "AP1"
    with sqlite_unit_of_work() as uow:
        registry = uow.repositories.registry.get("T")
    assert registry is not None
    assert registry.spotify.id == ""
    assert registry.spotify.last_updated is None
    (row,) = _daily_rows(sqlite_unit_of_work, now)
    assert row.spotify == SpotifyBucket(0, 0, 0)


def test_failed_provider_counts_one_error(
    pipeline: ReconciliationPipeline,
    adapters: dict[Provider, FakeAdapter],
    track: Track,
    sqlite_unit_of_work: UowFactory,
    now: datetime,
) -> None:
    adapters[Provider.YOUTUBE].by_isrc = LookupFailed(
        provider=Provider.YOUTUBE, kind=FailureKind.HTTP, message="HTTP 500", status_code=500
    )

    outcome = asyncio.run(pipeline.reconcile(track))

    assert outcome.errors == 1
    assert outcome.state is ReconciliationState.WRITTEN
    stored = _reload(sqlite_unit_of_work)
    assert stored.platform_ids.youtube_id == ""
    assert stored.platform_ids.spotify_id == "SP1"
    (row,) = _daily_rows(sqlite_unit_of_work, now)
    assert row.youtube == YouTubeBucket(0, 0, 0)
    assert row.spotify.popularity == 57


def test_second_tick_same_day_overwrites_daily_row(
    pipeline: ReconciliationPipeline,
    adapters: dict[Provider, FakeAdapter],
    track: Track,
    sqlite_unit_of_work: UowFactory,
    now: datetime,
) -> None:
    asyncio.run(pipeline.reconcile(track))
    adapters[Provider.YOUTUBE].by_isrc = youtube_result("YT1", views=1300)
    asyncio.run(pipeline.reconcile(_reload(sqlite_unit_of_work)))

    rows = _daily_rows(sqlite_unit_of_work, now)
    assert len(rows) == 1
    assert rows[0].youtube.views == 1300
    with sqlite_unit_of_work() as uow:
        registry = uow.repositories.registry.get("T")
    assert registry is not None
    assert registry.youtube.views == 1300


def test_repeat_run_is_idempotent(
    pipeline: ReconciliationPipeline,
    track: Track,
    sqlite_unit_of_work: UowFactory,
) -> None:
    def snapshot() -> tuple[object, ...]:
        with sqlite_unit_of_work() as uow:
            stored = uow.repositories.tracks.get("T")
            registry = uow.repositories.registry.get("T")
            assert stored is not None
            assert registry is not None
            return (
                stored.platform_ids,
                registry.spotify,
                registry.apple,
                registry.youtube,
                registry.isrc,
            )

    asyncio.run(pipeline.reconcile(track))
    first = snapshot()
    asyncio.run(pipeline.reconcile(_reload(sqlite_unit_of_work)))

    assert snapshot() == first


def test_track_without_isrc_is_skipped(
    pipeline: ReconciliationPipeline,
    adapters: dict[Provider, FakeAdapter],
    seed_track: Callable[..., Track],
    sqlite_unit_of_work: UowFactory,
    now: datetime,
) -> None:
    bare = seed_track("N", isrc=None)

    outcome = asyncio.run(pipeline.reconcile(bare))
    counters = RunCounters()
    counters.absorb(outcome)

    assert outcome.state is ReconciliationState.SKIPPED
    assert counters.skipped == 1
    assert counters.processed == 0
    assert all(not adapter.isrc_calls for adapter in adapters.values())
    with sqlite_unit_of_work() as uow:
        assert uow.repositories.registry.get("N") is None
    assert _daily_rows(sqlite_unit_of_work, now, "N") == []


def test_pinned_id_is_refreshed_by_id(
    pipeline: ReconciliationPipeline,
    adapters: dict[Provider, FakeAdapter],
    track: Track,
    sqlite_unit_of_work: UowFactory,
) -> None:
    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.tracks.get("T")
        assert stored is not None
        stored.set_platform_id(Provider.SPOTIFY, "SP_NEW", pinned=True)
        uow.commit()
    spotify = adapters[Provider.SPOTIFY]
    spotify.by_id = spotify_result("SP_NEW", popularity=12)

    asyncio.run(pipeline.reconcile(_reload(sqlite_unit_of_work)))

    assert spotify.id_calls == ["SP_NEW"]
    assert spotify.isrc_calls == []
    stored = _reload(sqlite_unit_of_work)
    assert stored.platform_ids.spotify_id == "SP_NEW"
    assert stored.platform_ids.is_pinned(Provider.SPOTIFY)


def test_pin_is_released_when_manual_id_stops_resolving(
    pipeline: ReconciliationPipeline,
    adapters: dict[Provider, FakeAdapter],
    track: Track,
    sqlite_unit_of_work: UowFactory,
) -> None:
    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.tracks.get("T")
        assert stored is not None
        stored.set_platform_id(Provider.SPOTIFY, "SP_GONE", pinned=True)
        uow.commit()
    spotify = adapters[Provider.SPOTIFY]
    spotify.by_id = NotFound(provider=Provider.SPOTIFY, reference="SP_GONE")

    outcome = asyncio.run(pipeline.reconcile(_reload(sqlite_unit_of_work)))

    assert spotify.id_calls == ["SP_GONE"]
    assert spotify.isrc_calls == ["USRC17607839"]
    assert outcome.results[Provider.SPOTIFY] == spotify_result("SP1", popularity=57)
    stored = _reload(sqlite_unit_of_work)
    assert stored.platform_ids.spotify_id == "SP1"
    assert not stored.platform_ids.is_pinned(Provider.SPOTIFY)


def test_pin_is_released_even_when_search_finds_nothing(
    pipeline: ReconciliationPipeline,
    adapters: dict[Provider, FakeAdapter],
    track: Track,
    sqlite_unit_of_work: UowFactory,
) -> None:
    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.tracks.get("T")
        assert stored is not None
        stored.set_platform_id(Provider.APPLE, "AP_GONE", pinned=True)
        uow.commit()
    adapters[Provider.APPLE].by_isrc = None

    asyncio.run(pipeline.reconcile(_reload(sqlite_unit_of_work)))

    stored = _reload(sqlite_unit_of_work)
    assert stored.platform_ids.apple_id == "AP_GONE"
    assert Provider.APPLE not in stored.platform_ids.pinned


def test_provider_write_is_atomic_per_provider(
    pipeline: ReconciliationPipeline,
    track: Track,
    sqlite_unit_of_work: UowFactory,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    real_upsert = pipeline_module.upsert_registry

    def flaky_upsert(
        repository: TrackRegistryRepository,
        stored: Track,
        snapshot: Mapping[Provider, ProviderResult],
        now: datetime,
    ) -> TrackRegistry:
        if Provider.YOUTUBE in snapshot:
            raise StorageError("disk full")
        return real_upsert(repository, stored, snapshot, now)

    monkeypatch.setattr(pipeline_module, "upsert_registry", flaky_upsert)

    outcome = asyncio.run(pipeline.reconcile(track))

    assert outcome.errors == 1
    assert outcome.storage_failures == [Provider.YOUTUBE]
    stored = _reload(sqlite_unit_of_work)
    # the id is rolled back together with the registry entry
    assert stored.platform_ids.youtube_id == ""
    assert stored.platform_ids.spotify_id == "SP1"
    with sqlite_unit_of_work() as uow:
        registry = uow.repositories.registry.get("T")
    assert registry is not None
    assert registry.youtube.id == ""
    assert registry.spotify.id == "SP1"


def test_daily_write_failure_marks_track_failed(
    pipeline: ReconciliationPipeline,
    track: Track,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def broken_write(*_: object, **__: object) -> None:
        raise StorageError("locked")

    monkeypatch.setattr(pipeline_module, "write_daily", broken_write)

    outcome = asyncio.run(pipeline.reconcile(track))

    assert outcome.state is ReconciliationState.FAILED
    assert outcome.errors == 1


def test_lookup_never_persists(
    pipeline: ReconciliationPipeline,
    sqlite_unit_of_work: UowFactory,
    now: datetime,
) -> None:
    results = asyncio.run(pipeline.lookup("USRC17607839", providers={Provider.APPLE}))

    assert set(results) == {Provider.APPLE}
    assert results[Provider.APPLE] == apple_result("AP1")
    with sqlite_unit_of_work() as uow:
        assert uow.repositories.registry.get("T") is None
    assert _daily_rows(sqlite_unit_of_work, now) == []


def test_single_provider_refresh_leaves_other_buckets(
    pipeline: ReconciliationPipeline,
    adapters: dict[Provider, FakeAdapter],
    track: Track,
    sqlite_unit_of_work: UowFactory,
    now: datetime,
) -> None:
    asyncio.run(pipeline.reconcile(track))
    adapters[Provider.YOUTUBE].by_id = youtube_result("YT1", views=2000)

    outcome = asyncio.run(pipeline.refresh(_reload(sqlite_unit_of_work), Provider.YOUTUBE))

    assert adapters[Provider.YOUTUBE].id_calls == ["YT1"]
    assert outcome.state is ReconciliationState.WRITTEN
    (row,) = _daily_rows(sqlite_unit_of_work, now)
    assert row.youtube.views == 2000
    assert row.spotify.popularity == 57


def test_aclose_closes_every_adapter(
    pipeline: ReconciliationPipeline,
    adapters: dict[Provider, FakeAdapter],
) -> None:
    asyncio.run(pipeline.aclose())

    assert all(adapter.closed for adapter in adapters.values())
