"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import func, select

from trackpulse.adapters.sqlalchemy.mappings import (
    daily_tracking_stats_table,
    track_registry_table,
    track_table,
)
from trackpulse.domain.model import DailyTrackingStats, Track, TrackRegistry, canonical_isrc

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from sqlalchemy import ColumnElement
    from sqlalchemy.orm import Session

    from trackpulse.domain.model import CreatorId, Isrc, TrackId
    from trackpulse.domain.ports import (
        DailyStatsRepository,
        TrackRegistryRepository,
        TrackRepository,
    )


def _normalised_isrc() -> ColumnElement[str]:
    return func.upper(func.trim(track_table.c.isrc))


class SqlAlchemyTrackRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Track) -> None:
        self.session.add(entity)

    def get(self, track_id: TrackId) -> Track | None:
        return self.session.get(Track, track_id)

    def find_by_isrc(self, isrc: Isrc) -> Track | None:
        canonical = canonical_isrc(isrc)
        if canonical is None:
            return None
        stmt = (
            select(Track)
            .where(_normalised_isrc() == canonical)
            .order_by(track_table.c.id)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def eligible(self) -> Sequence[Track]:
        stmt = (
            select(Track)
            .where(track_table.c.isrc.is_not(None))
            .where(func.trim(track_table.c.isrc) != "")
            .order_by(track_table.c.id)
        )
        return list(self.session.execute(stmt).scalars())

    def list_all(self, *, creator_id: CreatorId | None = None) -> Sequence[Track]:
        stmt = select(Track).order_by(track_table.c.id)
        if creator_id is not None:
            stmt = stmt.where(track_table.c.creator_id == creator_id)
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyTrackRegistryRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: TrackRegistry) -> None:
        self.session.add(entity)

    def get(self, track_id: TrackId) -> TrackRegistry | None:
        return self.session.get(TrackRegistry, track_id)

    def list_for(self, track_ids: Sequence[TrackId]) -> Sequence[TrackRegistry]:
        if not track_ids:
            return []
        stmt = (
            select(TrackRegistry)
            .where(track_registry_table.c.track_id.in_(track_ids))
            .order_by(track_registry_table.c.track_id)
        )
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyDailyStatsRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: DailyTrackingStats) -> None:
        self.session.add(entity)

    def get(self, track_id: TrackId, date: datetime) -> DailyTrackingStats | None:
        stmt = (
            select(DailyTrackingStats)
            .where(daily_tracking_stats_table.c.track_id == track_id)
            .where(daily_tracking_stats_table.c.date == date)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def window(self, track_id: TrackId, *, since: datetime) -> Sequence[DailyTrackingStats]:
        stmt = (
            select(DailyTrackingStats)
            .where(daily_tracking_stats_table.c.track_id == track_id)
            .where(daily_tracking_stats_table.c.date >= since)
            .order_by(daily_tracking_stats_table.c.date)
        )
        return list(self.session.execute(stmt).scalars())

    def latest_for(self, track_ids: Sequence[TrackId]) -> Sequence[DailyTrackingStats]:
        """Most recent row per track, for the ids that have any."""

        if not track_ids:
            return []
        stmt = (
            select(DailyTrackingStats)
            .where(daily_tracking_stats_table.c.track_id.in_(track_ids))
            .order_by(
                daily_tracking_stats_table.c.track_id,
                daily_tracking_stats_table.c.date.desc(),
            )
        )
        latest: dict[TrackId, DailyTrackingStats] = {}
        for row in self.session.execute(stmt).scalars():
            latest.setdefault(row.track_id, row)
        return list(latest.values())


if TYPE_CHECKING:
    _session_stub = cast("Session", object())
    _track_repo_check: TrackRepository = SqlAlchemyTrackRepository(_session_stub)
    _registry_repo_check: TrackRegistryRepository = SqlAlchemyTrackRegistryRepository(
        _session_stub
    )
    _daily_repo_check: DailyStatsRepository = SqlAlchemyDailyStatsRepository(_session_stub)
