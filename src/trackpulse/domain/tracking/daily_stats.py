"""Daily snapshot rows: one per track per UTC day, latest write wins."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from trackpulse.domain.model import DEFAULT_BUCKETS, DailyTrackingStats, Provider

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping

    from trackpulse.domain.model import ProviderCounters, TrackId
    from trackpulse.domain.ports import DailyStatsRepository

DEFAULT_WINDOW_DAYS = 30
MAX_WINDOW_DAYS = 90


def utc_midnight(moment: datetime) -> datetime:
    """Start of the UTC day containing ``moment`` (naive values are taken as UTC)."""

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).replace(hour=0, minute=0, second=0, microsecond=0)


def clamp_window(window_days: int) -> int:
    return max(1, min(window_days, MAX_WINDOW_DAYS))


def write_daily(
    repository: DailyStatsRepository,
    track_id: TrackId,
    counters: Mapping[Provider, ProviderCounters],
    now: datetime,
    *,
    providers: Collection[Provider] | None = None,
) -> DailyTrackingStats:
    """Upsert the ``(track_id, utc_midnight(now))`` row.

    Every provider in ``providers`` (all of them by default) gets its counters
    from ``counters`` or the documented defaults; buckets of providers outside
    ``providers`` keep what the row already holds.
    """

    date = utc_midnight(now)
    attempted = tuple(Provider) if providers is None else tuple(providers)
    row = repository.get(track_id, date)
    if row is None:
        row = DailyTrackingStats(track_id=track_id, date=date)
        repository.add(row)
    for provider in attempted:
        setattr(row, provider.value, counters.get(provider, DEFAULT_BUCKETS[provider]))
    row.updated_at = now
    return row


def stats_window(
    repository: DailyStatsRepository,
    track_id: TrackId,
    now: datetime,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> list[DailyTrackingStats]:
    """Rows for the last ``window_days`` UTC days (today included), oldest first."""

    since = utc_midnight(now) - timedelta(days=clamp_window(window_days) - 1)
    return sorted(repository.window(track_id, since=since), key=lambda row: row.date)
