"""Track store operations.

The engine itself only writes platform ids; ``register_track`` seeds rows on
behalf of the surrounding application.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from trackpulse.domain.model import Track

from .errors import TrackNotFoundError

if TYPE_CHECKING:
    from trackpulse.domain.model import Isrc, PlatformId, Provider, TrackId
    from trackpulse.domain.ports import TrackRepository

log = getLogger(__name__)


def eligible_tracks(repository: TrackRepository) -> list[Track]:
    """Tracks carrying an ISRC, ordered by id so a run is restartable."""

    return sorted(
        (track for track in repository.eligible() if track.is_eligible),
        key=lambda track: track.id,
    )


def require_track(repository: TrackRepository, track_id: TrackId) -> Track:
    track = repository.get(track_id)
    if track is None:
        raise TrackNotFoundError(track_id)
    return track


def set_platform_id(
    repository: TrackRepository,
    track_id: TrackId,
    provider: Provider,
    platform_id: PlatformId,
    *,
    isrc: Isrc | None = None,
    pinned: bool | None = None,
) -> bool:
    """Write ``platform_ids.<provider>_id`` (and the canonical ISRC when given).

    Re-applying the same value is a no-op; the return value says whether the
    stored record changed.
    """

    track = require_track(repository, track_id)
    changed = track.set_platform_id(provider, platform_id, isrc=isrc, pinned=pinned)
    if changed:
        log.debug("Track %s %s id set to %r", track_id, provider, platform_id)
    return changed


def register_track(
    repository: TrackRepository,
    *,
    track_id: TrackId,
    title: str,
    artist: str,
    isrc: Isrc | None = None,
    creator_id: str = "",
) -> Track:
    """Seed a track row the way the upload subsystem would; existing ids are updated."""

    track = repository.get(track_id)
    if track is None:
        track = Track(id=track_id, title=title, artist=artist, creator_id=creator_id, isrc=isrc)
        repository.add(track)
        log.info("Registered track %s", track_id)
        return track
    track.title = title
    track.artist = artist
    track.isrc = isrc
    track.creator_id = creator_id
    return track
