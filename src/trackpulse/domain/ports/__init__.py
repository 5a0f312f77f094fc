"""Domain port definitions for adapters."""

from __future__ import annotations

from .lookup import LookupGovernor, ProviderAdapter
from .persistence import (
    DailyStatsRepository,
    Repository,
    StorageError,
    TrackRegistryRepository,
    TrackRepository,
)
from .unit_of_work import (
    RepositoryCollection,
    TrackingRepositories,
    TrackingUnitOfWork,
    UnitOfWork,
)

__all__ = [
    "DailyStatsRepository",
    "LookupGovernor",
    "ProviderAdapter",
    "Repository",
    "RepositoryCollection",
    "StorageError",
    "TrackRegistryRepository",
    "TrackRepository",
    "TrackingRepositories",
    "TrackingUnitOfWork",
    "UnitOfWork",
]
