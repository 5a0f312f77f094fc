from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from trackpulse.config import (
    ConfigurationError,
    MissingConfigurationError,
    get_apple_music_config,
    get_spotify_config,
    get_tracking_config,
    get_youtube_config,
    load_settings,
    require_env_vars,
)
from trackpulse.config.storage import get_database_config, get_http_cache_path, get_storage_config
from trackpulse.config.tracking import RateLimit

if TYPE_CHECKING:
    from pathlib import Path

_CREDENTIAL_VARS = (
    "SPOTIFY_CLIENT_ID",
    "SPOTIFY_CLIENT_SECRET",
    "APPLE_MUSIC_DEVELOPER_TOKEN",
    "APPLE_MUSIC_STOREFRONT",
    "YOUTUBE_API_KEY",
    "YOUTUBE_SEARCH_CACHE_TTL_HOURS",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _CREDENTIAL_VARS:
        monkeypatch.delenv(name, raising=False)
    for name in (
        "TRACKING_INTERVAL_HOURS",
        "TRACKING_RUN_ON_STARTUP",
        "TRACKING_PER_TRACK_DELAY_MS",
        "TRACKING_MAX_CONCURRENT_TRACKS",
        "TRACKING_ADAPTER_TIMEOUT_SECONDS",
        "TRACKING_PROVIDER_CONCURRENCY",
        "TRACKING_SPOTIFY_QPS",
        "TRACKING_APPLE_QPS",
        "TRACKING_YOUTUBE_QPS",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", " value ")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_raises_when_any_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_VAR", raising=False)
    monkeypatch.setenv("BLANK_VAR", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_VAR", "BLANK_VAR"])

    assert "BLANK_VAR" in str(exc.value)
    assert "MISSING_VAR" in str(exc.value)


def test_missing_credentials_disable_providers(clean_env: pytest.MonkeyPatch) -> None:
    settings = load_settings()

    assert settings.spotify is None
    assert settings.apple is None
    assert settings.youtube is None


def test_partial_spotify_credentials_are_treated_as_absent(
    clean_env: pytest.MonkeyPatch,
) -> None:
    clean_env.setenv("SPOTIFY_CLIENT_ID", "id")

    assert get_spotify_config() is None


def test_credentials_are_read_when_present(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("SPOTIFY_CLIENT_ID", "id")
    clean_env.setenv("SPOTIFY_CLIENT_SECRET", "secret")
    clean_env.setenv("APPLE_MUSIC_DEVELOPER_TOKEN", "token")
    clean_env.setenv("APPLE_MUSIC_STOREFRONT", "DE")
    clean_env.setenv("YOUTUBE_API_KEY", "key")
    clean_env.setenv("YOUTUBE_SEARCH_CACHE_TTL_HOURS", "0")

    spotify = get_spotify_config()
    apple = get_apple_music_config()
    youtube = get_youtube_config()

    assert spotify is not None
    assert (spotify.client_id, spotify.client_secret) == ("id", "secret")
    assert apple is not None
    assert apple.developer_token == "token"
    assert apple.storefront == "de"
    assert youtube is not None
    assert youtube.api_key == "key"
    assert youtube.search_resilience.cache is None


def test_tracking_defaults(clean_env: pytest.MonkeyPatch) -> None:
    config = get_tracking_config()

    assert config.interval_hours == 12.0
    assert config.interval_seconds == 12 * 3600
    assert config.run_on_startup is False
    assert config.per_track_delay_ms == 100
    assert config.per_track_delay_seconds == pytest.approx(0.1)
    assert config.max_concurrent_tracks == 1
    assert set(config.rates) == {"spotify", "apple", "youtube"}


def test_tracking_overrides(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("TRACKING_INTERVAL_HOURS", "6")
    clean_env.setenv("TRACKING_RUN_ON_STARTUP", "yes")
    clean_env.setenv("TRACKING_PER_TRACK_DELAY_MS", "0")
    clean_env.setenv("TRACKING_SPOTIFY_QPS", "10")
    clean_env.setenv("TRACKING_PROVIDER_CONCURRENCY", "3")

    config = get_tracking_config()

    assert config.interval_hours == 6.0
    assert config.run_on_startup is True
    assert config.per_track_delay_ms == 0
    assert config.rates["spotify"] == RateLimit(qps=10.0, concurrency=3)
    assert config.rates["youtube"].concurrency == 3


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("TRACKING_INTERVAL_HOURS", "0"),
        ("TRACKING_INTERVAL_HOURS", "soon"),
        ("TRACKING_RUN_ON_STARTUP", "maybe"),
        ("TRACKING_MAX_CONCURRENT_TRACKS", "0"),
        ("TRACKING_YOUTUBE_QPS", "-1"),
    ],
)
def test_tracking_rejects_invalid_values(
    clean_env: pytest.MonkeyPatch, name: str, value: str
) -> None:
    clean_env.setenv(name, value)

    with pytest.raises(ConfigurationError):
        get_tracking_config()


def test_rate_limit_spacing() -> None:
    assert RateLimit(qps=4.0).min_interval_seconds == pytest.approx(0.25)


def test_storage_paths_follow_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TRACKPULSE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("DATABASE_URI", raising=False)

    assert get_http_cache_path() == (tmp_path / "data" / "http_cache.db").resolve()
    assert get_database_config().uri == (
        f"sqlite+pysqlite:///{(tmp_path / 'data' / 'trackpulse.db').resolve()}"
    )
    assert (tmp_path / "data").is_dir()


def test_storage_defaults_to_xdg_data_home(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("TRACKPULSE_DATA_DIR", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    assert get_storage_config().data_dir == tmp_path / "trackpulse"


def test_database_uri_env_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite+pysqlite:///:memory:")

    assert get_database_config().uri == "sqlite+pysqlite:///:memory:"
