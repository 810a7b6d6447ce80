"""shared.config の既定値と環境変数での上書きを確認するテスト。"""

from __future__ import annotations

import pytest

from six_degrees.shared.config import DEFAULT_TAG_SLICES, get_settings
from six_degrees.shared.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _cleanup_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_settings_defaults_without_env(monkeypatch, tmp_path) -> None:
    """環境変数なしでも起動できる既定値を持つ。"""

    monkeypatch.chdir(tmp_path)

    settings = get_settings()

    assert str(settings.steam.store_base_url).rstrip("/") == "https://store.steampowered.com"
    assert settings.steam.user_agent == "SixDegreesSteam/1.0 (+stream)"
    assert settings.steam.max_attempts == 3
    assert settings.cache.max_entries == 5000
    assert settings.discovery.pool_multiplier == 8
    assert settings.discovery.max_pool_size == 120
    assert settings.discovery.slices == DEFAULT_TAG_SLICES
    assert len(settings.discovery.slices) == 12
    assert settings.server.port == 3000


def test_settings_load_from_nested_env(monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    for key, value in {
        "STEAM__STORE_BASE_URL": "https://store.example.com",
        "STEAM__TIMEOUT_SECONDS": "3.5",
        "STEAM__MAX_ATTEMPTS": "5",
        "CACHE__TTL_SECONDS": "60",
        "DISCOVERY__SHUFFLE_SEED": "42",
        "DISCOVERY__SLICES": '["Roguelike", "Horror"]',
        "SERVER__PORT": "8080",
        "LOG_LEVEL": "DEBUG",
    }.items():
        monkeypatch.setenv(key, value)

    settings = get_settings()

    assert str(settings.steam.store_base_url).startswith("https://store.example.com")
    assert settings.steam.timeout_seconds == 3.5
    assert settings.steam.max_attempts == 5
    assert settings.cache.ttl_seconds == 60
    assert settings.discovery.shuffle_seed == 42
    assert settings.discovery.slices == ("Roguelike", "Horror")
    assert settings.server.port == 8080
    assert settings.log_level == "DEBUG"


def test_settings_fail_on_invalid_value(monkeypatch, tmp_path) -> None:
    """不正な値は ConfigurationError に包まれる。"""

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("STEAM__MAX_ATTEMPTS", "0")

    with pytest.raises(ConfigurationError):
        get_settings()
