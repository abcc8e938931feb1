"""
Root Typer application for the pg-spine CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from pgspine.cli.utils import output_result, run_tool

app = Typer(
    name="pgspine",
    help="pg-spine: resilient PostgreSQL access.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from pgspine import __version__

        typer.echo(f"pgspine {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """pg-spine CLI: query databases, test connections, run the MCP server."""


# ── Commands ─────────────────────────────────────────────────────────────


@app.command("databases")
def databases(json_out: bool = typer.Option(False, "--json")) -> None:
    """List configured databases and the resilience settings in effect."""
    result = run_tool(lambda tools: tools.list_available_databases())
    output_result(result, as_json=json_out, title="Databases")


@app.command("check")
def check(
    database: str = typer.Argument(..., help="Database name"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Test the connection to a database."""
    result = run_tool(lambda tools: tools.test_connection(database))
    output_result(result, as_json=json_out, title=f"Connection: {database}")


@app.command("query")
def query(
    database: str = typer.Argument(..., help="Database name"),
    sql: str = typer.Argument(..., help="Query returning rows"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Run a query and print its rows."""
    result = run_tool(lambda tools: tools.execute_query(sql, database))
    output_result(result, as_json=json_out)


@app.command("execute")
def execute(
    database: str = typer.Argument(..., help="Database name"),
    sql: str = typer.Argument(..., help="INSERT, UPDATE, DELETE, DDL ..."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Run a statement and report rows affected."""
    result = run_tool(lambda tools: tools.execute_non_query(sql, database))
    output_result(result, as_json=json_out)


@app.command("serve")
def serve(
    transport: str = typer.Option("stdio", "--transport", "-t", help="stdio or http"),
    port: int = typer.Option(8110, "--port", "-p", help="Port for the http transport"),
) -> None:
    """Start the MCP server."""
    from pgspine.core.transports.mcp import run_pgspine_mcp
    from pgspine.mcp.server import mcp

    try:
        run_pgspine_mcp(mcp, default_port=port, argv=["--transport", transport])
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--transport") from e
