from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone
from typing import TYPE_CHECKING

import pytest

from trackpulse.domain.model import (
    AppleBucket,
    DailyTrackingStats,
    Provider,
    SpotifyBucket,
    YouTubeBucket,
)
from trackpulse.domain.tracking import clamp_window, stats_window, utc_midnight, write_daily

if TYPE_CHECKING:
    from collections.abc import Callable

    from trackpulse.adapters.sqlalchemy.unit_of_work import SqlAlchemyTrackingUnitOfWork
    from trackpulse.domain.model import Track


def test_utc_midnight_normalises_timezones() -> None:
    plus_two = timezone(timedelta(hours=2))

    assert utc_midnight(datetime(2026, 3, 15, 1, 30, tzinfo=plus_two)) == datetime(
        2026, 3, 14, tzinfo=UTC
    )
    assert utc_midnight(datetime(2026, 3, 14, 23, 59)) == datetime(2026, 3, 14, tzinfo=UTC)


@pytest.mark.parametrize(("requested", "expected"), [(0, 1), (-5, 1), (7, 7), (90, 90), (365, 90)])
def test_clamp_window(requested: int, expected: int) -> None:
    assert clamp_window(requested) == expected


@pytest.mark.parametrize(
    "build",
    [
        lambda: SpotifyBucket(popularity=101),
        lambda: SpotifyBucket(streams=-1),
        lambda: AppleBucket(rank=0),
        lambda: AppleBucket(plays=-3),
        lambda: YouTubeBucket(likes=-1),
    ],
)
def test_buckets_reject_invalid_counters(build: Callable[[], object]) -> None:
    with pytest.raises(ValueError, match="Spotify|Apple|YouTube"):
        build()


def test_total_counters_sums_streams_plays_and_views() -> None:
    row = DailyTrackingStats(
        track_id="t",
        date=datetime(2026, 3, 14, tzinfo=UTC),
        spotify=SpotifyBucket(streams=3, popularity=50),
        apple=AppleBucket(rank=4, plays=5),
        youtube=YouTubeBucket(views=7, likes=100),
    )

    assert row.total_counters == 15


def test_write_daily_defaults_missing_providers(
    sqlite_unit_of_work: Callable[[], SqlAlchemyTrackingUnitOfWork],
    seed_track: Callable[..., Track],
    now: datetime,
) -> None:
    seed_track("track-1")

    with sqlite_unit_of_work() as uow:
        row = write_daily(
            uow.repositories.daily_stats,
            "track-1",
            {Provider.SPOTIFY: SpotifyBucket(popularity=64)},
            now,
        )
        uow.commit()

    assert row.date == datetime(2026, 3, 14, tzinfo=UTC)
    assert row.spotify == SpotifyBucket(popularity=64)
    assert row.apple == AppleBucket(rank=None, plays=0)
    assert row.youtube == YouTubeBucket()
    assert row.updated_at == now


def test_write_daily_for_subset_keeps_other_buckets(
    sqlite_unit_of_work: Callable[[], SqlAlchemyTrackingUnitOfWork],
    seed_track: Callable[..., Track],
    now: datetime,
) -> None:
    seed_track("track-1")
    with sqlite_unit_of_work() as uow:
        write_daily(
            uow.repositories.daily_stats,
            "track-1",
            {
                Provider.SPOTIFY: SpotifyBucket(popularity=64),
                Provider.YOUTUBE: YouTubeBucket(views=500),
            },
            now,
        )
        uow.commit()

    with sqlite_unit_of_work() as uow:
        write_daily(
            uow.repositories.daily_stats,
            "track-1",
            {Provider.YOUTUBE: YouTubeBucket(views=650)},
            now + timedelta(hours=1),
            providers={Provider.YOUTUBE},
        )
        uow.commit()

    with sqlite_unit_of_work() as uow:
        row = uow.repositories.daily_stats.get("track-1", utc_midnight(now))

    assert row is not None
    assert row.spotify == SpotifyBucket(popularity=64)
    assert row.youtube == YouTubeBucket(views=650)


def test_stats_window_is_inclusive_and_ordered(
    sqlite_unit_of_work: Callable[[], SqlAlchemyTrackingUnitOfWork],
    seed_track: Callable[..., Track],
    now: datetime,
) -> None:
    seed_track("track-1")
    for days_ago in (0, 3, 6, 7, 30):
        with sqlite_unit_of_work() as uow:
            write_daily(
                uow.repositories.daily_stats,
                "track-1",
                {Provider.YOUTUBE: YouTubeBucket(views=100 - days_ago)},
                now - timedelta(days=days_ago),
            )
            uow.commit()

    with sqlite_unit_of_work() as uow:
        week = stats_window(uow.repositories.daily_stats, "track-1", now, 7)
        oversized = stats_window(uow.repositories.daily_stats, "track-1", now, 500)

    assert [row.youtube.views for row in week] == [94, 97, 100]
    assert [row.date for row in week] == sorted(row.date for row in week)
    assert len(oversized) == 5
