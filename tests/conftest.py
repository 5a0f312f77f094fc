from __future__ import annotations

import os
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002

from trackpulse.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyTrackingUnitOfWork,
    shutdown,
    startup,
)
from trackpulse.domain.tracking import register_track

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from trackpulse.domain.model import Track

NOW = datetime(2026, 3, 14, 15, 30, tzinfo=UTC)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyTrackingUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyTrackingUnitOfWork:
        return SqlAlchemyTrackingUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def seed_track(
    sqlite_unit_of_work: Callable[[], SqlAlchemyTrackingUnitOfWork],
) -> Callable[..., Track]:
    def seed(
        track_id: str = "track-1",
        *,
        title: str = "Song",
        artist: str = "Artist",
        isrc: str | None = "USRC17607839",
        creator_id: str = "creator-1",
    ) -> Track:
        with sqlite_unit_of_work() as uow:
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

    return seed
