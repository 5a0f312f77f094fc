"""Per-run tallies."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from trackpulse.domain.model import LookupStatus, Provider, ReconciliationState

if TYPE_CHECKING:
    from .pipeline import TrackOutcome


@dataclass(slots=True)
class ProviderTally:
    success: int = 0
    disabled: int = 0
    not_found: int = 0
    error: int = 0

    def record(self, status: LookupStatus) -> None:
        match status:
            case LookupStatus.SUCCESS:
                self.success += 1
            case LookupStatus.DISABLED:
                self.disabled += 1
            case LookupStatus.NOT_FOUND:
                self.not_found += 1
            case LookupStatus.ERROR:
                self.error += 1

    def as_dict(self) -> dict[str, int]:
        return {
            "success": self.success,
            "disabled": self.disabled,
            "not_found": self.not_found,
            "error": self.error,
        }


def _empty_tallies() -> dict[Provider, ProviderTally]:
    return {provider: ProviderTally() for provider in Provider}


@dataclass(slots=True)
class RunCounters:
    processed: int = 0
    errors: int = 0
    skipped: int = 0
    providers: dict[Provider, ProviderTally] = field(default_factory=_empty_tallies)

    def absorb(self, outcome: TrackOutcome) -> None:
        if outcome.state is ReconciliationState.SKIPPED:
            self.skipped += 1
            return
        self.processed += 1
        self.errors += outcome.errors
        for provider, result in outcome.results.items():
            self.providers[provider].record(result.status)

    def as_dict(self) -> dict[str, object]:
        return {
            "processed": self.processed,
            "errors": self.errors,
            "skipped": self.skipped,
            "providers": {
                provider.value: tally.as_dict() for provider, tally in self.providers.items()
            },
        }
