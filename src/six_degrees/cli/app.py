from __future__ import annotations

import typer

from six_degrees.cli.commands import discover, server
from six_degrees.shared.config import get_settings
from six_degrees.shared.logging import configure_logging

app = typer.Typer(help="Six Degrees of Steam の CLI")

app.add_typer(discover.app, name="discover", help="タグ・近傍からの候補探索")
app.command(name="serve")(server.serve)


def main() -> None:
    """エントリポイント。"""

    settings = get_settings()
    configure_logging(settings.log_level, json_output=settings.json_logs)
    app()


if __name__ == "__main__":  # pragma: no cover - CLI エントリ
    main()
