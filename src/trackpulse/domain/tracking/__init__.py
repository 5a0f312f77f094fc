"""Tracking engine core: track store, registry, daily stats and the pipeline."""

from __future__ import annotations

from .counters import ProviderTally, RunCounters
from .daily_stats import (
    DEFAULT_WINDOW_DAYS,
    MAX_WINDOW_DAYS,
    clamp_window,
    stats_window,
    utc_midnight,
    write_daily,
)
from .errors import MissingPlatformIdError, TrackNotFoundError
from .pipeline import ReconciliationPipeline, TrackOutcome
from .registry import apply_manual_ids, merge_entry, registry_for, upsert_registry
from .summary import TrackingSummary, summarise
from .track_store import eligible_tracks, register_track, require_track, set_platform_id

__all__ = [
    "DEFAULT_WINDOW_DAYS",
    "MAX_WINDOW_DAYS",
    "MissingPlatformIdError",
    "ProviderTally",
    "ReconciliationPipeline",
    "RunCounters",
    "TrackNotFoundError",
    "TrackOutcome",
    "TrackingSummary",
    "apply_manual_ids",
    "clamp_window",
    "eligible_tracks",
    "merge_entry",
    "register_track",
    "registry_for",
    "require_track",
    "set_platform_id",
    "stats_window",
    "summarise",
    "upsert_registry",
    "utc_midnight",
    "write_daily",
]
