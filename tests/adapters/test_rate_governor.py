from __future__ import annotations

import asyncio

from tests.helpers.catalog import spotify_result
from trackpulse.adapters.rate_governor import RateGovernor
from trackpulse.config.tracking import RateLimit
from trackpulse.domain.model import FailureKind, LookupFailed, LookupOutcome, Provider


def test_calls_are_spaced_by_min_interval() -> None:
    governor = RateGovernor({"spotify": RateLimit(qps=20.0, concurrency=5)})
    starts: list[float] = []

    async def operation() -> LookupOutcome:
        starts.append(asyncio.get_running_loop().time())
        return spotify_result()

    async def scenario() -> list[LookupOutcome]:
        return await asyncio.gather(
            *(governor.call(Provider.SPOTIFY, operation, timeout=5.0) for _ in range(3))
        )

    results = asyncio.run(scenario())

    assert all(result == spotify_result() for result in results)
    gaps = [later - earlier for earlier, later in zip(starts, starts[1:], strict=False)]
    assert len(gaps) == 2
    assert all(gap >= 0.03 for gap in gaps)


def test_in_flight_calls_are_bounded() -> None:
    governor = RateGovernor({"apple": RateLimit(qps=1000.0, concurrency=1)})
    in_flight = 0
    peak = 0

    async def operation() -> LookupOutcome:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return spotify_result()

    async def scenario() -> None:
        await asyncio.gather(
            *(governor.call(Provider.APPLE, operation, timeout=5.0) for _ in range(4))
        )

    asyncio.run(scenario())

    assert peak == 1


def test_deadline_turns_into_timeout_outcome() -> None:
    governor = RateGovernor({"youtube": RateLimit(qps=10.0)})

    async def operation() -> LookupOutcome:
        await asyncio.sleep(5)
        return spotify_result()

    outcome = asyncio.run(governor.call(Provider.YOUTUBE, operation, timeout=0.05))

    assert isinstance(outcome, LookupFailed)
    assert outcome.provider is Provider.YOUTUBE
    assert outcome.kind is FailureKind.TIMEOUT


def test_providers_without_limits_are_not_gated() -> None:
    governor = RateGovernor({})

    async def operation() -> LookupOutcome:
        return spotify_result()

    assert governor.gate_for(Provider.SPOTIFY) is None
    assert asyncio.run(governor.call(Provider.SPOTIFY, operation, timeout=1.0)) == spotify_result()
