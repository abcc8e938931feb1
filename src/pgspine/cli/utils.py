"""
CLI utility helpers: running tools and rendering their results.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pgspine.core.config import get_settings
from pgspine.core.logging import configure_logging
from pgspine.ops.database import DatabaseTools

console = Console()
err_console = Console(stderr=True)


# ── Tool runner ──────────────────────────────────────────────────────────


def run_tool(call: Callable[[DatabaseTools], Awaitable[dict[str, Any]]]) -> dict[str, Any]:
    """Build tools from settings, run one call, close pools."""
    settings = get_settings()
    configure_logging(
        level=settings.log_level,
        json_format=settings.log_format == "json",
        service="pgspine-cli",
    )

    async def _main() -> dict[str, Any]:
        tools = DatabaseTools.from_settings(settings)
        try:
            return await call(tools)
        finally:
            await tools.aclose()

    return asyncio.run(_main())


# ── Output helpers ───────────────────────────────────────────────────────


def output_result(result: dict[str, Any], *, as_json: bool = False, title: str = "") -> None:
    """Render a tool result; exits with code 1 when it is a failure."""
    if as_json:
        console.print_json(json.dumps(result, default=str))
        if not result.get("success"):
            raise typer.Exit(code=1)
        return

    if not result.get("success"):
        code = result.get("diagnosticCode") or ("TRANSIENT" if result.get("isTransient") else "PERMANENT")
        err_console.print(f"[bold red]Error[/bold red] ({escape(str(code))}): {escape(str(result.get('error')))}")
        if result.get("suggestion"):
            err_console.print(f"[dim]{escape(str(result['suggestion']))}[/dim]")
        if result.get("attempts"):
            err_console.print(f"[dim]Attempts: {result['attempts']}[/dim]")
        raise typer.Exit(code=1)

    data = result.get("data")
    if isinstance(data, list):
        if not data:
            console.print("[dim]No rows.[/dim]")
        elif isinstance(data[0], dict):
            _print_table(data, title=title)
        else:
            for item in data:
                console.print(f"  {escape(str(item))}")
    elif isinstance(data, dict):
        _print_dict(data, title=title)
    elif data is not None:
        console.print(str(data), markup=False)

    extras = {k: v for k, v in result.items() if k not in ("success", "data")}
    if extras:
        _print_dict(extras)


# ── Private helpers ──────────────────────────────────────────────────────


def _print_table(rows: list[dict[str, Any]], *, title: str = "") -> None:
    table = Table(title=escape(title) if title else None, show_lines=False, pad_edge=False)
    for col in rows[0]:
        table.add_column(escape(str(col)), overflow="fold")
    for row in rows:
        table.add_row(*("" if v is None else escape(str(v)) for v in row.values()))
    console.print(table)


def _print_dict(data: dict[str, Any], *, title: str = "") -> None:
    if title:
        console.print(f"[bold]{escape(title)}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{escape(str(k))}[/cyan]: {escape(str(v))}")
