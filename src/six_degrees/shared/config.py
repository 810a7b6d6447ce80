"""アプリケーション全体で共有する設定ローダー。"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AnyHttpUrl, BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

EnvName = Literal["local", "test", "staging", "production"]

DEFAULT_TAG_SLICES: tuple[str, ...] = (
    "Farming Sim",
    "City Builder",
    "Roguelike",
    "Puzzle",
    "Horror",
    "Souls-like",
    "VR",
    "Racing",
    "Sports",
    "Strategy",
    "Platformer",
    "Life Sim",
)


class SteamSettings(BaseModel):
    """Steam ストアフロントへの接続設定。"""

    store_base_url: AnyHttpUrl = Field(
        "https://store.steampowered.com", description="ストアフロントのベース URL"
    )
    user_agent: str = Field("SixDegreesSteam/1.0 (+stream)", description="送信する User-Agent")
    language: str = Field("english", description="`l` パラメータに渡す言語")
    country_code: str = Field("US", description="`cc` パラメータに渡す国コード")
    timeout_seconds: float = Field(10.0, gt=0, description="1 リクエストあたりのタイムアウト秒数")
    max_attempts: int = Field(3, ge=1, description="一時的な失敗時の最大試行回数")
    backoff_factor: float = Field(0.5, ge=0, description="リトライ間隔の係数 (秒 x 試行回数)")


class CacheSettings(BaseModel):
    """プロセス内キャッシュの退避ポリシー設定。"""

    max_entries: int | None = Field(5000, ge=1, description="保持件数の上限。None で無制限")
    ttl_seconds: float | None = Field(
        21600.0, gt=0, description="エントリの有効期限 (秒)。None で無期限"
    )


class DiscoverySettings(BaseModel):
    """候補探索とランキングの調整値。"""

    pool_multiplier: int = Field(8, ge=1, description="近傍プールを limit の何倍取得するか")
    max_pool_size: int = Field(120, ge=1, description="1 回の探索で解決する ID の上限")
    shuffle_tag_sections: bool = Field(True, description="タグページ候補をシャッフルするか")
    shuffle_seed: int | None = Field(None, description="シャッフル用乱数シード")
    slices: tuple[str, ...] = Field(DEFAULT_TAG_SLICES, description="UI に提示するタグ一覧")


class ServerSettings(BaseModel):
    """HTTP サーバーの待ち受け設定。"""

    host: str = Field("0.0.0.0", description="バインドするホスト")
    port: int = Field(3000, ge=1, le=65535, description="待ち受けポート")


class AppSettings(BaseSettings):
    """共有設定。`.env` 読み込みと環境変数バリデーションを担う。"""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: EnvName = Field("local", description="実行環境識別子")
    log_level: str = Field("INFO", description="ルートロガーのログレベル")
    json_logs: bool = Field(False, description="JSON 形式でログを出力するか")
    steam: SteamSettings = Field(default_factory=SteamSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    discovery: DiscoverySettings = Field(default_factory=DiscoverySettings)
    server: ServerSettings = Field(default_factory=ServerSettings)


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """設定をロードし、再利用する。

    LRU キャッシュによりプロセス内での重複読み込みを防ぎ、
    `pytest` などから `get_settings.cache_clear()` を呼び出すことで再読込できる。
    """

    try:
        return AppSettings()
    except ValidationError as exc:  # pragma: no cover - ValidationError carries context
        raise ConfigurationError(str(exc)) from exc


__all__ = [
    "AppSettings",
    "CacheSettings",
    "DEFAULT_TAG_SLICES",
    "DiscoverySettings",
    "EnvName",
    "ServerSettings",
    "SteamSettings",
    "get_settings",
]
