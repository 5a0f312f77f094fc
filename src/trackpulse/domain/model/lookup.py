"""Outcomes returned by provider adapters.

Adapters report failures as values rather than exceptions so that "disabled",
"not found" and "error" stay distinguishable all the way up to the run counters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from trackpulse.domain.model.enums import LookupStatus

if TYPE_CHECKING:
    from collections.abc import Mapping

    from trackpulse.domain.model.enums import FailureKind, Provider
    from trackpulse.domain.model.stats import ProviderCounters

type CatalogValue = str | int | None


@dataclass(frozen=True, slots=True)
class ProviderResult:
    """A resolved catalog entry: stable id, catalog snapshot and live counters."""

    status: ClassVar[LookupStatus] = LookupStatus.SUCCESS

    provider: Provider
    platform_id: str
    counters: ProviderCounters
    catalog: Mapping[str, CatalogValue] = field(default_factory=dict[str, CatalogValue])


@dataclass(frozen=True, slots=True)
class Disabled:
    status: ClassVar[LookupStatus] = LookupStatus.DISABLED

    provider: Provider
    reason: str = "credentials not configured"


@dataclass(frozen=True, slots=True)
class NotFound:
    status: ClassVar[LookupStatus] = LookupStatus.NOT_FOUND

    provider: Provider
    reference: str = ""


@dataclass(frozen=True, slots=True)
class LookupFailed:
    status: ClassVar[LookupStatus] = LookupStatus.ERROR

    provider: Provider
    kind: FailureKind
    message: str
    status_code: int | None = None


type LookupOutcome = ProviderResult | Disabled | NotFound | LookupFailed
