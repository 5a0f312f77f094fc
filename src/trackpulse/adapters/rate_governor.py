"""Per-provider pacing for outbound catalog calls.

Each provider gets a minimum spacing between call starts (an ``AsyncLimiter``
with a one-call bucket) and a cap on calls in flight. Deadlines wrap the whole
wait-and-call so a saturated gate cannot stall a reconciliation.
"""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from aiolimiter import AsyncLimiter

from trackpulse.domain.model import FailureKind, LookupFailed

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping
    from types import TracebackType

    from trackpulse.config.tracking import RateLimit
    from trackpulse.domain.model import LookupOutcome, Provider
    from trackpulse.domain.ports import LookupGovernor

log = getLogger(__name__)


class ProviderGate:
    def __init__(self, rate: RateLimit) -> None:
        self.rate = rate
        self._limiter = AsyncLimiter(1, rate.min_interval_seconds)
        self._slots = asyncio.Semaphore(rate.concurrency)

    async def __aenter__(self) -> ProviderGate:
        await self._slots.acquire()
        try:
            await self._limiter.acquire()
        except BaseException:
            self._slots.release()
            raise
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._slots.release()


class RateGovernor:
    """Shared by every reconciliation in a process; never persists state."""

    def __init__(self, rates: Mapping[str, RateLimit]) -> None:
        self._gates = {name: ProviderGate(rate) for name, rate in rates.items()}

    def gate_for(self, provider: Provider) -> ProviderGate | None:
        return self._gates.get(provider.value)

    async def call(
        self,
        provider: Provider,
        operation: Callable[[], Awaitable[LookupOutcome]],
        *,
        timeout: float,
    ) -> LookupOutcome:
        gate = self.gate_for(provider)
        try:
            async with asyncio.timeout(timeout):
                if gate is None:
                    return await operation()
                async with gate:
                    return await operation()
        except TimeoutError:
            log.warning("%s lookup exceeded its %.1fs deadline", provider, timeout)
            return LookupFailed(
                provider=provider,
                kind=FailureKind.TIMEOUT,
                message=f"deadline of {timeout:g}s exceeded",
            )


if TYPE_CHECKING:
    _governor_check: LookupGovernor = RateGovernor({})
