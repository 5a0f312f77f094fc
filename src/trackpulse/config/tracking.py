"""Scheduling and pacing knobs for the tracking engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .env import env_bool, env_float, env_int
from .errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_INTERVAL_HOURS = 12.0
DEFAULT_PER_TRACK_DELAY_MS = 100
DEFAULT_MAX_CONCURRENT_TRACKS = 1
DEFAULT_ADAPTER_TIMEOUT_SECONDS = 15.0
DEFAULT_PROVIDER_CONCURRENCY = 2
DEFAULT_QPS: dict[str, float] = {"spotify": 5.0, "apple": 5.0, "youtube": 2.0}


@dataclass(slots=True, frozen=True)
class RateLimit:
    """Soft ceiling for one provider: minimum call spacing plus in-flight bound."""

    qps: float
    concurrency: int = DEFAULT_PROVIDER_CONCURRENCY

    def __post_init__(self) -> None:
        if self.qps <= 0:
            raise ConfigurationError(f"Rate limit qps must be positive, got {self.qps}")
        if self.concurrency < 1:
            raise ConfigurationError(
                f"Rate limit concurrency must be >= 1, got {self.concurrency}"
            )

    @property
    def min_interval_seconds(self) -> float:
        return 1.0 / self.qps


def _default_rates() -> dict[str, RateLimit]:
    return {name: RateLimit(qps=qps) for name, qps in DEFAULT_QPS.items()}


@dataclass(frozen=True, slots=True)
class TrackingConfig:
    interval_hours: float = DEFAULT_INTERVAL_HOURS
    run_on_startup: bool = False
    per_track_delay_ms: int = DEFAULT_PER_TRACK_DELAY_MS
    max_concurrent_tracks: int = DEFAULT_MAX_CONCURRENT_TRACKS
    adapter_timeout_seconds: float = DEFAULT_ADAPTER_TIMEOUT_SECONDS
    rates: Mapping[str, RateLimit] = field(default_factory=_default_rates)

    @property
    def interval_seconds(self) -> float:
        return self.interval_hours * 3600

    @property
    def per_track_delay_seconds(self) -> float:
        return self.per_track_delay_ms / 1000


def get_tracking_config() -> TrackingConfig:
    interval_hours = env_float("TRACKING_INTERVAL_HOURS", DEFAULT_INTERVAL_HOURS)
    if interval_hours <= 0:
        raise ConfigurationError(
            f"TRACKING_INTERVAL_HOURS must be positive, got {interval_hours}"
        )
    concurrency = env_int(
        "TRACKING_PROVIDER_CONCURRENCY", DEFAULT_PROVIDER_CONCURRENCY, minimum=1
    )
    rates = {
        name: RateLimit(
            qps=env_float(f"TRACKING_{name.upper()}_QPS", qps),
            concurrency=concurrency,
        )
        for name, qps in DEFAULT_QPS.items()
    }
    return TrackingConfig(
        interval_hours=interval_hours,
        run_on_startup=env_bool("TRACKING_RUN_ON_STARTUP", default=False),
        per_track_delay_ms=env_int(
            "TRACKING_PER_TRACK_DELAY_MS", DEFAULT_PER_TRACK_DELAY_MS, minimum=0
        ),
        max_concurrent_tracks=env_int(
            "TRACKING_MAX_CONCURRENT_TRACKS", DEFAULT_MAX_CONCURRENT_TRACKS, minimum=1
        ),
        adapter_timeout_seconds=env_float(
            "TRACKING_ADAPTER_TIMEOUT_SECONDS", DEFAULT_ADAPTER_TIMEOUT_SECONDS, minimum=0.1
        ),
        rates=rates,
    )
