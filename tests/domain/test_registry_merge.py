from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from tests.helpers.catalog import apple_result, spotify_result, youtube_result
from trackpulse.domain.model import (
    AppleEntry,
    Provider,
    ProviderResult,
    SpotifyBucket,
    SpotifyEntry,
    Track,
    TrackRegistry,
    YouTubeEntry,
)
from trackpulse.domain.tracking import apply_manual_ids, merge_entry, upsert_registry

NOW = datetime(2026, 3, 14, 12, tzinfo=UTC)


class _RegistryRepo:
    def __init__(self) -> None:
        self.rows: dict[str, TrackRegistry] = {}

    def add(self, entity: TrackRegistry) -> None:
        self.rows[entity.track_id] = entity

    def get(self, track_id: str) -> TrackRegistry | None:
        return self.rows.get(track_id)

    def list_for(self, track_ids: list[str]) -> list[TrackRegistry]:
        return [self.rows[track_id] for track_id in track_ids if track_id in self.rows]


def _track(**kwargs: object) -> Track:
    defaults: dict[str, object] = {
        "id": "track-1",
        "title": "Song",
        "artist": "Artist",
        "creator_id": "creator-1",
        "isrc": "usrc17607839",
    }
    defaults.update(kwargs)
    return Track(**defaults)  # type: ignore[arg-type]


def test_merge_overlays_non_empty_fields_only() -> None:
    previous = SpotifyEntry(
        id="old",
        name="Old Name",
        album="Old Album",
        popularity=10,
        external_url="https://old",
        last_updated=NOW - timedelta(days=1),
    )
    result = ProviderResult(
        provider=Provider.SPOTIFY,
        platform_id="new",
        counters=SpotifyBucket(popularity=55),
        catalog={"name": "New Name", "album": "", "popularity": 55, "external_url": None},
    )

    merged = merge_entry(previous, result, NOW)

    assert merged == SpotifyEntry(
        id="new",
        name="New Name",
        album="Old Album",
        popularity=55,
        external_url="https://old",
        last_updated=NOW,
    )


def test_merge_keeps_last_updated_monotonic() -> None:
    later = NOW + timedelta(hours=1)
    previous = AppleEntry(id="ap-1", last_updated=later)

    merged = merge_entry(previous, apple_result(), NOW)

    assert merged.last_updated == later


def test_upsert_creates_header_from_track() -> None:
    repo = _RegistryRepo()

    registry = upsert_registry(repo, _track(), {Provider.YOUTUBE: youtube_result(views=9)}, NOW)

    assert repo.get("track-1") is registry
    assert (registry.title, registry.artist, registry.isrc, registry.creator_id) == (
        "Song",
        "Artist",
        "USRC17607839",
        "creator-1",
    )
    assert registry.youtube.views == 9
    assert registry.youtube.external_url == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
    assert registry.spotify == SpotifyEntry()
    assert registry.updated_at == NOW


def test_upsert_replaces_only_supplied_providers() -> None:
    repo = _RegistryRepo()
    upsert_registry(
        repo,
        _track(),
        {Provider.SPOTIFY: spotify_result(), Provider.APPLE: apple_result()},
        NOW,
    )

    registry = upsert_registry(
        repo,
        _track(),
        {Provider.SPOTIFY: spotify_result(platform_id="sp-2", popularity=90)},
        NOW + timedelta(hours=12),
    )

    assert registry.spotify.id == "sp-2"
    assert registry.spotify.popularity == 90
    assert registry.apple.id == "ap-1"
    assert registry.apple.last_updated == NOW
    assert registry.youtube == YouTubeEntry()


def test_upsert_twice_with_same_snapshot_is_stable() -> None:
    repo = _RegistryRepo()
    snapshot = {Provider.SPOTIFY: spotify_result(), Provider.YOUTUBE: youtube_result()}

    first = upsert_registry(repo, _track(), snapshot, NOW)
    first_state = (first.spotify, first.apple, first.youtube)
    second = upsert_registry(repo, _track(), snapshot, NOW)

    assert (second.spotify, second.apple, second.youtube) == first_state


def test_manual_id_change_resets_sub_record() -> None:
    repo = _RegistryRepo()
    track = _track()
    upsert_registry(repo, track, {Provider.APPLE: apple_result("ap-1")}, NOW)

    track.set_platform_id(Provider.APPLE, "ap-9", pinned=True)
    track.set_mlc_work_id("MLC-1")
    registry = apply_manual_ids(repo, track, [Provider.APPLE], NOW + timedelta(minutes=5))

    assert registry.apple == AppleEntry(id="ap-9", last_updated=NOW + timedelta(minutes=5))
    assert registry.mlc_work_id == "MLC-1"


def test_manual_id_unchanged_keeps_catalog_fields() -> None:
    repo = _RegistryRepo()
    track = _track()
    upsert_registry(repo, track, {Provider.APPLE: apple_result("ap-1")}, NOW)

    track.set_platform_id(Provider.APPLE, "ap-1", pinned=True)
    registry = apply_manual_ids(repo, track, [Provider.APPLE], NOW)

    assert registry.apple.name == "Song"
    assert registry.apple.album_name == "Album"


def test_replace_entry_rejects_wrong_type() -> None:
    registry = TrackRegistry(
        track_id="t", title="t", artist="a", isrc="USRC17607839", creator_id=""
    )

    with pytest.raises(TypeError):
        registry.replace_entry(Provider.SPOTIFY, AppleEntry())
