"""構造化ロギングのセットアップとヘルパー。"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import structlog

DEFAULT_LOG_LEVEL = "INFO"
NOISY_LOGGERS: tuple[str, ...] = ("httpx", "httpcore")


def _coerce_level(level: str | int) -> int:
    if isinstance(level, int):
        return level

    normalized = level.upper()
    mapping = logging.getLevelNamesMapping()
    if normalized in mapping:
        return mapping[normalized]
    msg = f"Unsupported log level: {level}"
    raise ValueError(msg)


def configure_logging(
    level: str | int = DEFAULT_LOG_LEVEL,
    *,
    json_output: bool = False,
    quiet_loggers: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """structlog を用いたロギング設定を行う。

    Args:
        level: 文字列または数値で表現したログレベル。
        json_output: True の場合 JSON 形式で出力する。サーバー運用時を想定。
        quiet_loggers: WARNING 未満を抑制する標準 logging のロガー名。
    """

    log_level = _coerce_level(level)
    logging.basicConfig(level=log_level, format="%(message)s")
    for name in quiet_loggers:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None, **initial_values: Any) -> structlog.stdlib.BoundLogger:
    """共有ロガーを取得し、必要に応じて初期バインド値を設定。"""

    logger = structlog.stdlib.get_logger(name)
    if initial_values:
        return logger.bind(**initial_values)
    return logger


def bind_request_context(**values: Any) -> None:
    """現在のリクエスト (タスク) 内の全ログに値を付与する。"""

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**values)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


__all__ = [
    "DEFAULT_LOG_LEVEL",
    "NOISY_LOGGERS",
    "bind_request_context",
    "clear_request_context",
    "configure_logging",
    "get_logger",
]
