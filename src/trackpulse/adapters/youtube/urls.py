"""Parse the many shapes of YouTube video references."""

from __future__ import annotations

import re
from urllib.parse import parse_qs, urlsplit

VIDEO_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]{11}")

_HOST_PREFIXES = ("www.", "m.", "music.")
_WATCH_HOSTS = frozenset({"youtube.com", "youtube-nocookie.com"})
_PATH_KINDS = frozenset({"shorts", "embed", "live", "v"})


class InvalidVideoReference(ValueError):
    """Raised when a string is neither a video id nor a recognised YouTube URL."""

    def __init__(self, reference: str) -> None:
        super().__init__(f"Not a YouTube video reference: {reference!r}")
        self.reference = reference


def watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


def parse_video_id(reference: str) -> str:
    """Return the 11-character video id from a bare id or a YouTube URL.

    Accepted forms: ``<id>``, ``youtube.com/watch?v=<id>``, ``youtu.be/<id>``,
    and ``youtube.com/{shorts,embed,live,v}/<id>``, with or without scheme.
    """

    candidate = reference.strip()
    if VIDEO_ID_PATTERN.fullmatch(candidate):
        return candidate

    url = candidate if "://" in candidate else f"https://{candidate}"
    parts = urlsplit(url)
    host = (parts.hostname or "").lower()
    for prefix in _HOST_PREFIXES:
        host = host.removeprefix(prefix)
    segments = [segment for segment in parts.path.split("/") if segment]

    video_id = ""
    if host == "youtu.be" and segments:
        video_id = segments[0]
    elif host in _WATCH_HOSTS:
        if segments == ["watch"]:
            video_id = parse_qs(parts.query).get("v", [""])[0]
        elif len(segments) >= 2 and segments[0] in _PATH_KINDS:  # noqa: PLR2004
            video_id = segments[1]

    if not VIDEO_ID_PATTERN.fullmatch(video_id):
        raise InvalidVideoReference(reference)
    return video_id
