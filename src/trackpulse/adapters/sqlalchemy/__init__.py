"""SQLAlchemy adapter package for trackpulse."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyDailyStatsRepository,
    SqlAlchemyTrackRegistryRepository,
    SqlAlchemyTrackRepository,
)
from .unit_of_work import (
    SqlAlchemyTrackingUnitOfWork,
    StartupError,
    configured_engine,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyDailyStatsRepository",
    "SqlAlchemyTrackRegistryRepository",
    "SqlAlchemyTrackRepository",
    "SqlAlchemyTrackingUnitOfWork",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
