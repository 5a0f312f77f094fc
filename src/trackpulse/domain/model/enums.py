"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Provider(StrEnum):
    SPOTIFY = "spotify"
    APPLE = "apple"
    YOUTUBE = "youtube"


class LookupStatus(StrEnum):
    SUCCESS = "success"
    DISABLED = "disabled"
    NOT_FOUND = "not_found"
    ERROR = "error"


class FailureKind(StrEnum):
    AUTH = "auth"
    HTTP = "http"
    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    MALFORMED = "malformed"


class ReconciliationState(StrEnum):
    """Per-track reconciliation states; ``skipped`` and ``failed`` are terminal side states."""

    PENDING = "pending"
    FETCHING = "fetching"
    MERGING = "merging"
    WRITTEN = "written"
    SKIPPED = "skipped"
    FAILED = "failed"
