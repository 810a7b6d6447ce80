from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable, Iterable
from enum import Enum
from typing import Annotated, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from six_degrees.bootstrap import SixDegreesServices, build_services
from six_degrees.core.metadata import ItemMetadata
from six_degrees.shared.config import get_settings
from six_degrees.shared.exceptions import InvalidInputError
from six_degrees.shared.logging import get_logger

T = TypeVar("T")


class OutputFormat(str, Enum):
    """出力形式。"""

    TABLE = "table"
    JSON = "json"


app = typer.Typer(help="タグ・近傍からの候補探索コマンド")


def _run(action: Callable[[SixDegreesServices], Awaitable[T]]) -> T:
    async def runner() -> T:
        services = build_services()
        try:
            return await action(services)
        finally:
            await services.aclose()

    return asyncio.run(runner())


def _format_tags(tags: frozenset[str]) -> str:
    return ", ".join(sorted(tags)) if tags else "-"


def _render_table(title: str, items: Iterable[ItemMetadata]) -> None:
    console = Console(force_terminal=False, color_system=None)
    table = Table(title=title)
    table.add_column("App ID", style="cyan", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Year")
    table.add_column("Tags")

    for game in items:
        table.add_row(
            game.id,
            game.title,
            str(game.release_year) if game.release_year else "-",
            _format_tags(game.tags),
        )

    console.print(table)


def _render_json(items: Iterable[ItemMetadata]) -> None:
    payload = {"games": [item.to_payload() for item in items]}
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


def _render(title: str, items: Iterable[ItemMetadata], output: OutputFormat) -> None:
    if output is OutputFormat.JSON:
        _render_json(items)
    else:
        _render_table(title, items)


OutputOption = Annotated[
    OutputFormat,
    typer.Option("--output", "-f", case_sensitive=False, help="出力形式(table/json)"),
]


@app.command()
def slices() -> None:
    """UI に提示するタグ一覧を表示する。"""

    for label in get_settings().discovery.slices:
        typer.echo(label)


@app.command()
def tag(
    tag: Annotated[str, typer.Option("--tag", "-t", help="探索するタグ")],
    limit: Annotated[int, typer.Option("--limit", "-l", min=1, max=50, help="取得件数")] = 10,
    output: OutputOption = OutputFormat.TABLE,
) -> None:
    """タグから候補ゲームを探索する。"""

    logger = get_logger("cli.discover.tag", tag=tag)
    try:
        games = _run(lambda services: services.tag_resolver.find_candidates(tag, limit))
    except InvalidInputError as exc:
        typer.echo(f"入力が不正です: {exc}")
        raise typer.Exit(code=2) from exc

    logger.info("tag_candidates_listed", results=len(games))
    if not games:
        typer.echo("候補が見つかりませんでした")
        return
    _render(f"Tag: {tag}", games, output)


@app.command()
def similar(  # noqa: PLR0913 - CLI のため引数が多い
    appid: Annotated[str, typer.Argument(help="起点ゲームの App ID")],
    exclude: Annotated[
        list[str] | None,
        typer.Option("--exclude", "-x", help="除外する App ID (複数指定可)"),
    ] = None,
    limit: Annotated[int, typer.Option("--limit", "-l", min=1, max=20, help="取得件数")] = 10,
    max_overlap: Annotated[
        float,
        typer.Option("--max-overlap", min=0.0, max=0.99, help="許容するタグ重なりの上限"),
    ] = 0.85,
    prefer_diverse: Annotated[
        bool,
        typer.Option("--prefer-diverse/--keep-order", help="重なりの小さい順に並べるか"),
    ] = True,
    goal: Annotated[str | None, typer.Option("--goal", "-g", help="必ず残すゴールの App ID")] = None,
    output: OutputOption = OutputFormat.TABLE,
) -> None:
    """起点ゲームから多様性優先の候補を選ぶ。"""

    logger = get_logger("cli.discover.similar", appid=appid)
    try:
        result = _run(
            lambda services: services.ranker.select_similar(
                appid,
                exclude=exclude or (),
                limit=limit,
                max_overlap=max_overlap,
                prefer_diverse=prefer_diverse,
                goal_id=goal,
            )
        )
    except InvalidInputError as exc:
        typer.echo(f"入力が不正です: {exc}")
        raise typer.Exit(code=2) from exc

    if result.is_err:
        error = result.unwrap_err()
        logger.error("similar_selection_failed", error=str(error))
        typer.echo(f"類似ゲームの取得に失敗しました: {error}")
        raise typer.Exit(code=1)

    games = result.unwrap()
    logger.info("similar_games_listed", results=len(games))
    _render(f"Similar to {appid}", games, output)
