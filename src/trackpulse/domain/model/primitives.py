"""Domain primitives: scalar aliases + small helpers."""

from __future__ import annotations

type Isrc = str
type TrackId = str
type PlatformId = str
type CreatorId = str


def canonical_isrc(value: str | None) -> Isrc | None:
    """Return the trimmed, upper-cased ISRC or ``None`` when blank."""

    if value is None:
        return None
    normalized = value.strip().upper()
    return normalized or None


def non_negative(value: int | None) -> int:
    if value is None or value < 0:
        return 0
    return value


def clamp_popularity(value: int | None) -> int:
    if value is None:
        return 0
    return max(0, min(100, value))
