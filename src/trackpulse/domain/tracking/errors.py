"""Errors raised by tracking operations."""

from __future__ import annotations


class TrackNotFoundError(LookupError):
    def __init__(self, track_id: str) -> None:
        super().__init__(f"Unknown track: {track_id}")
        self.track_id = track_id


class MissingPlatformIdError(LookupError):
    """Raised when a by-id refresh is requested for a provider the track is not linked to."""

    def __init__(self, track_id: str, provider: str) -> None:
        super().__init__(f"Track {track_id} has no {provider} id")
        self.track_id = track_id
        self.provider = provider
