"""Fold provider results into the per-track registry row."""

from __future__ import annotations

from dataclasses import fields, replace
from typing import TYPE_CHECKING

from trackpulse.domain.model import TrackRegistry

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from datetime import datetime

    from trackpulse.domain.model import PlatformEntry, Provider, ProviderResult, Track
    from trackpulse.domain.ports import TrackRegistryRepository

_UNMERGED_FIELDS = frozenset({"id", "last_updated"})


def _later(now: datetime, previous: datetime | None) -> datetime:
    return now if previous is None or now >= previous else previous


def merge_entry[TEntry: PlatformEntry](
    previous: TEntry,
    result: ProviderResult,
    now: datetime,
) -> TEntry:
    """Overlay the non-empty catalog fields of ``result`` onto ``previous``."""

    changes: dict[str, object] = {}
    for entry_field in fields(previous):
        if entry_field.name in _UNMERGED_FIELDS:
            continue
        value = result.catalog.get(entry_field.name)
        if value is None or value == "":
            continue
        changes[entry_field.name] = value
    return replace(
        previous,
        id=result.platform_id,
        last_updated=_later(now, previous.last_updated),
        **changes,
    )


def registry_for(repository: TrackRegistryRepository, track: Track) -> TrackRegistry:
    """Return the registry row for ``track``, creating it with the header on first use."""

    registry = repository.get(track.id)
    if registry is None:
        registry = TrackRegistry(
            track_id=track.id,
            title=track.title,
            artist=track.artist,
            isrc=track.canonical_isrc or "",
            creator_id=track.creator_id,
            mlc_work_id=track.platform_ids.mlc_work_id,
        )
        repository.add(registry)
        return registry

    isrc = track.canonical_isrc
    if isrc and registry.isrc != isrc:
        registry.isrc = isrc
    if track.platform_ids.mlc_work_id and registry.mlc_work_id != track.platform_ids.mlc_work_id:
        registry.mlc_work_id = track.platform_ids.mlc_work_id
    return registry


def upsert_registry(
    repository: TrackRegistryRepository,
    track: Track,
    snapshot: Mapping[Provider, ProviderResult],
    now: datetime,
) -> TrackRegistry:
    """Replace only the provider sub-records present in ``snapshot``."""

    registry = registry_for(repository, track)
    for provider, result in snapshot.items():
        merged = merge_entry(registry.entry_for(provider), result, now)
        registry.replace_entry(provider, merged)
    registry.updated_at = _later(now, registry.updated_at)
    return registry


def apply_manual_ids(
    repository: TrackRegistryRepository,
    track: Track,
    providers: Iterable[Provider],
    now: datetime,
) -> TrackRegistry:
    """Point the given sub-records at the track's (manually set) ids.

    A sub-record whose id changes is reset, since its catalog fields described
    the old id; the next refresh fills them in again.
    """

    registry = registry_for(repository, track)
    registry.mlc_work_id = track.platform_ids.mlc_work_id
    for provider in providers:
        entry = registry.entry_for(provider)
        platform_id = track.platform_ids.id_for(provider)
        if entry.id != platform_id:
            entry = type(entry)(id=platform_id)
        registry.replace_entry(provider, replace(entry, last_updated=_later(now, entry.last_updated)))
    registry.updated_at = _later(now, registry.updated_at)
    return registry
