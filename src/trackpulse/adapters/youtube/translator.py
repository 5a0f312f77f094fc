"""Translate YouTube payloads into provider results."""

from __future__ import annotations

from typing import TYPE_CHECKING

from trackpulse.domain.model import Provider, ProviderResult, YouTubeBucket, non_negative

from .urls import watch_url

if TYPE_CHECKING:
    from .schema import VideoItem


def translate_video(video: VideoItem) -> ProviderResult:
    stats = video.statistics
    views = non_negative(stats.view_count)
    likes = non_negative(stats.like_count)
    comments = non_negative(stats.comment_count)
    return ProviderResult(
        provider=Provider.YOUTUBE,
        platform_id=video.id,
        counters=YouTubeBucket(views=views, likes=likes, comments=comments),
        catalog={
            "id": video.id,
            "title": video.snippet.title,
            "channel_title": video.snippet.channel_title,
            "published_at": video.snippet.published_at,
            "external_url": watch_url(video.id),
            "views": views,
            "likes": likes,
            "comments": comments,
        },
    )
