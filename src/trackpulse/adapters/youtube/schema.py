"""Pydantic models for the YouTube Data API v3 payloads."""

from __future__ import annotations

from collections.abc import Mapping
from typing import cast

from pydantic import BaseModel, ConfigDict, Field, field_validator


class YouTubeBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Snippet(YouTubeBaseModel):
    title: str = ""
    channel_title: str = Field(default="", alias="channelTitle")
    published_at: str = Field(default="", alias="publishedAt")


class SearchResultId(YouTubeBaseModel):
    kind: str = ""
    video_id: str | None = Field(default=None, alias="videoId")


class SearchItem(YouTubeBaseModel):
    id: SearchResultId
    snippet: Snippet = Field(default_factory=Snippet)


class SearchResponse(YouTubeBaseModel):
    items: list[SearchItem] = Field(default_factory=list[SearchItem])

    def first_video_id(self) -> str | None:
        for item in self.items:
            if item.id.video_id:
                return item.id.video_id
        return None


class Statistics(YouTubeBaseModel):
    # the API sends counts as strings and omits hidden ones
    view_count: int | None = Field(default=None, alias="viewCount")
    like_count: int | None = Field(default=None, alias="likeCount")
    comment_count: int | None = Field(default=None, alias="commentCount")


class VideoItem(YouTubeBaseModel):
    id: str
    snippet: Snippet = Field(default_factory=Snippet)
    statistics: Statistics = Field(default_factory=Statistics)


class VideosResponse(YouTubeBaseModel):
    items: list[VideoItem] = Field(default_factory=list[VideoItem])

    @field_validator("items", mode="before")
    @classmethod
    def _drop_null(cls, value: object) -> object:
        return [] if value is None else value


def search_has_results(payload: object) -> bool:
    """Cache predicate: only non-empty search results are worth keeping."""

    if not isinstance(payload, Mapping):
        return False
    items = cast(Mapping[str, object], payload).get("items")
    return isinstance(items, list) and len(cast(list[object], items)) > 0
