"""共有レイヤの公開インターフェース。"""

from .config import AppSettings, get_settings
from .exceptions import (
    BaseAppError,
    ConfigurationError,
    DomainError,
    InvalidInputError,
    Result,
    UpstreamError,
)
from .logging import configure_logging, get_logger
from .types import AppID, normalize_app_id

__all__ = [
    "AppSettings",
    "get_settings",
    "configure_logging",
    "get_logger",
    "BaseAppError",
    "ConfigurationError",
    "DomainError",
    "InvalidInputError",
    "UpstreamError",
    "Result",
    "AppID",
    "normalize_app_id",
]
