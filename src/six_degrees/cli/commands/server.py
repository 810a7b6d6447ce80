from __future__ import annotations

from typing import Annotated

import typer
import uvicorn

from six_degrees.api import create_app
from six_degrees.shared.config import get_settings
from six_degrees.shared.logging import configure_logging


def serve(
    host: Annotated[str | None, typer.Option("--host", help="バインドするホスト")] = None,
    port: Annotated[
        int | None, typer.Option("--port", "-p", min=1, max=65535, help="待ち受けポート")
    ] = None,
) -> None:
    """HTTP API サーバーを起動する。"""

    settings = get_settings()
    configure_logging(settings.log_level, json_output=settings.json_logs)
    uvicorn.run(
        create_app(settings=settings),
        host=host or settings.server.host,
        port=port or settings.server.port,
        log_config=None,
    )
