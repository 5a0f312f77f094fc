"""Ports for persisting tracking data."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from trackpulse.domain.model import (
        CreatorId,
        DailyTrackingStats,
        Isrc,
        Track,
        TrackId,
        TrackRegistry,
    )


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class TrackRepository(Repository["Track"], Protocol):
    """Read access to tracks; writes are limited to platform ids."""

    def get(self, track_id: TrackId) -> Track | None: ...

    def find_by_isrc(self, isrc: Isrc) -> Track | None: ...

    def eligible(self) -> Sequence[Track]: ...

    def list_all(self, *, creator_id: CreatorId | None = None) -> Sequence[Track]: ...


@runtime_checkable
class TrackRegistryRepository(Repository["TrackRegistry"], Protocol):
    def get(self, track_id: TrackId) -> TrackRegistry | None: ...

    def list_for(self, track_ids: Sequence[TrackId]) -> Sequence[TrackRegistry]: ...


@runtime_checkable
class DailyStatsRepository(Repository["DailyTrackingStats"], Protocol):
    def get(self, track_id: TrackId, date: datetime) -> DailyTrackingStats | None: ...

    def window(self, track_id: TrackId, *, since: datetime) -> Sequence[DailyTrackingStats]: ...

    def latest_for(self, track_ids: Sequence[TrackId]) -> Sequence[DailyTrackingStats]: ...


class StorageError(RuntimeError):
    """Raised by unit-of-work implementations when a read or write fails."""
