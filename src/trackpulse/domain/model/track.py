"""Tracks as consumed by the tracking engine.

The upload subsystem owns track rows; the engine only reads them and mutates the
``platform_ids`` record through :meth:`Track.set_platform_id`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from trackpulse.domain.model.enums import Provider
from trackpulse.domain.model.primitives import canonical_isrc

if TYPE_CHECKING:
    from trackpulse.domain.model.primitives import CreatorId, Isrc, PlatformId, TrackId


_ID_FIELDS: dict[Provider, str] = {
    Provider.SPOTIFY: "spotify_id",
    Provider.APPLE: "apple_id",
    Provider.YOUTUBE: "youtube_id",
}


@dataclass(frozen=True)
class PlatformIds:
    spotify_id: PlatformId = ""
    apple_id: PlatformId = ""
    youtube_id: PlatformId = ""
    isrc: Isrc = ""
    mlc_work_id: str = ""
    pinned: frozenset[Provider] = frozenset()

    def id_for(self, provider: Provider) -> PlatformId:
        return getattr(self, _ID_FIELDS[provider])

    def is_pinned(self, provider: Provider) -> bool:
        return provider in self.pinned and bool(self.id_for(provider))

    def with_id(self, provider: Provider, platform_id: PlatformId) -> PlatformIds:
        changes: dict[str, str] = {_ID_FIELDS[provider]: platform_id}
        return replace(self, **changes)

    def with_pin(self, provider: Provider, *, pinned: bool) -> PlatformIds:
        if pinned:
            return replace(self, pinned=self.pinned | {provider})
        return replace(self, pinned=self.pinned - {provider})

    def linked(self) -> frozenset[Provider]:
        return frozenset(provider for provider in Provider if self.id_for(provider))

    def __composite_values__(
        self,
    ) -> tuple[str, str, str, str, str, frozenset[Provider]]:
        """For SQLAlchemy composite columns (adapter-side convenience)."""
        return (
            self.spotify_id,
            self.apple_id,
            self.youtube_id,
            self.isrc,
            self.mlc_work_id,
            self.pinned,
        )


@dataclass(eq=False, kw_only=True)
class Track:
    id: TrackId
    title: str
    artist: str
    creator_id: CreatorId = ""
    isrc: Isrc | None = None
    platform_ids: PlatformIds = field(default_factory=PlatformIds)

    @property
    def canonical_isrc(self) -> Isrc | None:
        return canonical_isrc(self.isrc)

    @property
    def is_eligible(self) -> bool:
        """Only tracks carrying an ISRC take part in scheduled reconciliation."""
        return self.canonical_isrc is not None

    @property
    def has_search_terms(self) -> bool:
        return bool(self.title.strip()) and bool(self.artist.strip())

    def set_platform_id(
        self,
        provider: Provider,
        platform_id: PlatformId,
        *,
        isrc: Isrc | None = None,
        pinned: bool | None = None,
    ) -> bool:
        """Write one platform id (and echo the ISRC); return whether anything changed."""

        updated = self.platform_ids.with_id(provider, platform_id.strip())
        canonical = canonical_isrc(isrc)
        if canonical is not None:
            updated = replace(updated, isrc=canonical)
        if pinned is not None:
            updated = updated.with_pin(provider, pinned=pinned)
        if updated == self.platform_ids:
            return False
        self.platform_ids = updated
        return True

    def set_mlc_work_id(self, value: str) -> bool:
        updated = replace(self.platform_ids, mlc_work_id=value.strip())
        if updated == self.platform_ids:
            return False
        self.platform_ids = updated
        return True
