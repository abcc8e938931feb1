"""MCP server scaffold for pg-spine.

The server owns stdout when it runs over stdio, so every log line goes to
stderr through :func:`pgspine.core.logging.configure_logging`.

Usage::

    from pgspine.core.transports.mcp import create_pgspine_mcp, run_pgspine_mcp

    mcp = create_pgspine_mcp(
        name="pgspine",
        instructions="Resilient PostgreSQL tools ...",
        lifespan=app_lifespan,
    )

    @mcp.tool()
    async def execute_query(sql: str, database: str): ...

    def run():
        run_pgspine_mcp(mcp, default_port=8110)
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP

from pgspine.core.config import get_settings
from pgspine.core.logging import configure_logging, get_logger

logger = get_logger(__name__)

TRANSPORTS = ("stdio", "http", "streamable-http")


def create_pgspine_mcp(
    name: str,
    instructions: str,
    lifespan: Callable[..., Any],
) -> FastMCP:
    """Create a FastMCP server instance.

    Parameters
    ----------
    name : str
        MCP server name (e.g. "pgspine").
    instructions : str
        Natural language description of the server's capabilities.
    lifespan : async context manager
        Lifespan factory that yields the application context.
    """
    return FastMCP(
        name,
        instructions=instructions,
        lifespan=lifespan,
    )


def parse_transport_args(argv: Sequence[str], default_port: int = 8000) -> tuple[str, int]:
    """Read ``--transport``/``-t`` and ``--port``/``-p`` from ``argv``.

    Unknown arguments are ignored.

    Raises:
        ValueError: unknown transport or non-integer port
    """
    transport = "stdio"
    port = default_port
    args = list(argv)

    i = 0
    while i < len(args):
        if args[i] in ("--transport", "-t") and i + 1 < len(args):
            transport = args[i + 1]
            i += 2
        elif args[i] in ("--port", "-p") and i + 1 < len(args):
            port = int(args[i + 1])
            i += 2
        else:
            i += 1

    if transport not in TRANSPORTS:
        raise ValueError(f"Unknown transport {transport!r}; expected one of {', '.join(TRANSPORTS)}")
    return transport, port


def run_pgspine_mcp(
    mcp: FastMCP,
    *,
    default_port: int = 8000,
    argv: Sequence[str] | None = None,
    host: str = "0.0.0.0",
) -> None:
    """Console-script entry point: configure logging and start the server.

    Parameters
    ----------
    mcp : FastMCP
        The configured server instance.
    default_port : int
        Port for the HTTP transport when ``--port`` is not given.
    argv : sequence of str, optional
        Arguments to parse instead of ``sys.argv[1:]``.
    """
    transport, port = parse_transport_args(sys.argv[1:] if argv is None else argv, default_port)

    settings = get_settings()
    configure_logging(
        level=settings.log_level,
        json_format=settings.log_format == "json",
        service=mcp.name,
    )

    if transport in ("http", "streamable-http"):
        mcp.settings.host = host
        mcp.settings.port = port
        logger.info("mcp_starting", server=mcp.name, transport="streamable-http", port=port)
        mcp.run(transport="streamable-http")
    else:
        logger.info("mcp_starting", server=mcp.name, transport="stdio")
        mcp.run(transport="stdio")


__all__ = ["create_pgspine_mcp", "parse_transport_args", "run_pgspine_mcp"]
