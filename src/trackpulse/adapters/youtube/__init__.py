"""YouTube adapter package."""

from __future__ import annotations

from .adapter import YouTubeAdapter
from .client import YouTubeClient
from .schema import SearchResponse, VideoItem, VideosResponse, search_has_results
from .translator import translate_video
from .urls import InvalidVideoReference, parse_video_id, watch_url

__all__ = [
    "InvalidVideoReference",
    "SearchResponse",
    "VideoItem",
    "VideosResponse",
    "YouTubeAdapter",
    "YouTubeClient",
    "parse_video_id",
    "search_has_results",
    "translate_video",
    "watch_url",
]
