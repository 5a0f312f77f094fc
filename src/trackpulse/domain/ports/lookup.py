"""Ports for catalog lookups against external providers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from trackpulse.domain.model import Isrc, LookupOutcome, PlatformId, Provider, Track


@runtime_checkable
class ProviderAdapter(Protocol):
    """One external catalog (Spotify, Apple Music, YouTube).

    Implementations never raise for upstream trouble; they return ``Disabled``,
    ``NotFound`` or ``LookupFailed`` instead. They never touch storage.
    """

    @property
    def provider(self) -> Provider: ...

    @property
    def enabled(self) -> bool: ...

    async def lookup(self, isrc: Isrc, track: Track | None = None) -> LookupOutcome: ...

    async def lookup_by_id(self, platform_id: PlatformId) -> LookupOutcome: ...

    async def aclose(self) -> None: ...


@runtime_checkable
class LookupGovernor(Protocol):
    """Paces outbound calls per provider and bounds each by a deadline."""

    async def call(
        self,
        provider: Provider,
        operation: Callable[[], Awaitable[LookupOutcome]],
        *,
        timeout: float,
    ) -> LookupOutcome: ...


__all__ = ["LookupGovernor", "ProviderAdapter"]
