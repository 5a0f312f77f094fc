"""SQLAlchemy mapping metadata for the tracking domain model."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    orm,
)
from sqlalchemy.orm import composite, configure_mappers

from trackpulse.domain.model import (
    AppleBucket,
    AppleEntry,
    DailyTrackingStats,
    PlatformIds,
    Provider,
    SpotifyBucket,
    SpotifyEntry,
    Track,
    TrackRegistry,
    YouTubeBucket,
    YouTubeEntry,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class ProviderSetType(TypeDecorator[frozenset[Provider]]):
    impl = String
    cache_ok = True

    def process_bind_param(
        self, value: frozenset[Provider] | None, dialect: Dialect
    ) -> str | None:
        _ = dialect
        if value is None:
            return None
        payload = sorted(provider.value for provider in value)
        return json.dumps(payload)

    def process_result_value(self, value: str | None, dialect: Dialect) -> frozenset[Provider]:
        _ = dialect
        if value is None:
            return frozenset()
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return frozenset()
        items = cast(list[Any], loaded)
        return frozenset(Provider(item) for item in items if isinstance(item, str))


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def _text(name: str) -> Column[str]:
    return Column(name, String, nullable=False, default="", server_default="")


def _count(name: str) -> Column[int]:
    return Column(name, Integer, nullable=False, default=0, server_default="0")


# Tracks (owned by the upload subsystem; the engine writes platform ids only) --

track_table = Table(
    "track",
    mapper_registry.metadata,
    Column("id", String, primary_key=True),
    Column("title", String, nullable=False),
    Column("artist", String, nullable=False),
    _text("creator_id"),
    Column("isrc", String, nullable=True),
    _text("spotify_id"),
    _text("apple_id"),
    _text("youtube_id"),
    _text("platform_isrc"),
    _text("mlc_work_id"),
    Column("pinned", ProviderSetType, nullable=False, default=frozenset, server_default="[]"),
    Index("ix_track_isrc", "isrc"),
    Index("ix_track_creator_id", "creator_id"),
)

# Registry: one row per track -------------------------------------------------

track_registry_table = Table(
    "track_registry",
    mapper_registry.metadata,
    Column("track_id", String, primary_key=True),
    Column("title", String, nullable=False),
    Column("artist", String, nullable=False),
    _text("isrc"),
    _text("creator_id"),
    _text("mlc_work_id"),
    _text("spotify_id"),
    _text("spotify_name"),
    _text("spotify_album"),
    _count("spotify_popularity"),
    _text("spotify_external_url"),
    Column("spotify_last_updated", UTCDateTime, nullable=True),
    _text("apple_id"),
    _text("apple_name"),
    _text("apple_album_name"),
    _text("apple_album_id"),
    _text("apple_external_url"),
    Column("apple_last_updated", UTCDateTime, nullable=True),
    _text("youtube_id"),
    _text("youtube_title"),
    _text("youtube_channel_title"),
    _text("youtube_published_at"),
    _text("youtube_external_url"),
    _count("youtube_views"),
    _count("youtube_likes"),
    _count("youtube_comments"),
    Column("youtube_last_updated", UTCDateTime, nullable=True),
    Column("created_at", UTCDateTime, nullable=True, default=lambda: datetime.now(UTC)),
    Column("updated_at", UTCDateTime, nullable=True),
)

# Daily snapshots: (track_id, date) is the key --------------------------------

daily_tracking_stats_table = Table(
    "daily_tracking_stats",
    mapper_registry.metadata,
    Column("track_id", String, primary_key=True),
    Column("date", UTCDateTime, primary_key=True),
    _count("spotify_streams"),
    _count("spotify_popularity"),
    _count("spotify_followers"),
    Column("apple_rank", Integer, nullable=True),
    _count("apple_plays"),
    _count("youtube_views"),
    _count("youtube_likes"),
    _count("youtube_comments"),
    Column("updated_at", UTCDateTime, nullable=True),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    tc = track_table.c
    mapper_registry.map_imperatively(
        Track,
        track_table,
        properties={
            "platform_ids": composite(
                PlatformIds,
                tc.spotify_id,
                tc.apple_id,
                tc.youtube_id,
                tc.platform_isrc,
                tc.mlc_work_id,
                tc.pinned,
            ),
        },
    )

    rc = track_registry_table.c
    mapper_registry.map_imperatively(
        TrackRegistry,
        track_registry_table,
        properties={
            "spotify": composite(
                SpotifyEntry,
                rc.spotify_id,
                rc.spotify_name,
                rc.spotify_album,
                rc.spotify_popularity,
                rc.spotify_external_url,
                rc.spotify_last_updated,
            ),
            "apple": composite(
                AppleEntry,
                rc.apple_id,
                rc.apple_name,
                rc.apple_album_name,
                rc.apple_album_id,
                rc.apple_external_url,
                rc.apple_last_updated,
            ),
            "youtube": composite(
                YouTubeEntry,
                rc.youtube_id,
                rc.youtube_title,
                rc.youtube_channel_title,
                rc.youtube_published_at,
                rc.youtube_external_url,
                rc.youtube_views,
                rc.youtube_likes,
                rc.youtube_comments,
                rc.youtube_last_updated,
            ),
        },
    )

    dc = daily_tracking_stats_table.c
    mapper_registry.map_imperatively(
        DailyTrackingStats,
        daily_tracking_stats_table,
        properties={
            "spotify": composite(
                SpotifyBucket, dc.spotify_streams, dc.spotify_popularity, dc.spotify_followers
            ),
            "apple": composite(AppleBucket, dc.apple_rank, dc.apple_plays),
            "youtube": composite(
                YouTubeBucket, dc.youtube_views, dc.youtube_likes, dc.youtube_comments
            ),
        },
    )

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
