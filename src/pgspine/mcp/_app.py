"""Shared MCP application state: server instance, lifespan, tool access."""

from __future__ import annotations

import threading
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from pgspine.core.errors import ConfigError
from pgspine.core.logging import get_logger, safe_log
from pgspine.core.transports.mcp import create_pgspine_mcp
from pgspine.ops.database import DatabaseTools

logger = get_logger(__name__)

_tools: DatabaseTools | None = None
_tools_lock = threading.Lock()


@dataclass
class AppContext:
    """Application context for the MCP server."""

    tools: DatabaseTools | None = None
    initialized: bool = False


def get_tools() -> DatabaseTools:
    """The process-wide :class:`DatabaseTools`, built on first use."""
    global _tools
    if _tools is None:
        with _tools_lock:
            if _tools is None:
                _tools = DatabaseTools.from_settings()
    return _tools


def set_tools(tools: DatabaseTools | None) -> None:
    """Replace the process-wide tools (tests, embedding)."""
    global _tools
    with _tools_lock:
        _tools = tools


def _announce_sources(tools: DatabaseTools) -> None:
    describe = getattr(tools.source, "credentials_source", None)
    try:
        names = tools.resolver.available_names()
        source = describe() if callable(describe) else "in-memory"
    except ConfigError as e:
        safe_log(logger, "error", "connection_config_unreadable", error=e.message)
        return
    if not names:
        safe_log(
            logger,
            "warning",
            "no_connection_strings",
            hint="Create ~/.postgres-mcp-server-creds.json with a ConnectionStrings object",
        )
    safe_log(logger, "info", "connection_strings_loaded", source=source, databases=names)


@asynccontextmanager
async def lifespan(server: Any = None) -> AsyncIterator[AppContext]:
    """MCP server lifespan: announce configuration, close pools at shutdown."""
    tools = get_tools()
    _announce_sources(tools)
    try:
        yield AppContext(tools=tools, initialized=True)
    finally:
        await tools.aclose()
        safe_log(logger, "info", "pgspine_mcp_stopped")


mcp = create_pgspine_mcp(
    name="pgspine",
    instructions="""
Resilient PostgreSQL access.

Capabilities:
- Run queries and commands against named databases
- Test connectivity and report server details
- List configured databases and the resilience settings in effect

Transient failures (dropped connections, deadlocks, serialization
conflicts, resource exhaustion) are retried automatically with backoff.
Every result says whether a failure was transient and how many attempts
were made.
""",
    lifespan=lifespan,
)
