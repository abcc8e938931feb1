"""pg-spine MCP server.

Re-export hub: shared state lives in ``pgspine.mcp._app`` and the tool
functions in ``pgspine.mcp.tools.*``.
"""

from __future__ import annotations

from pgspine.core.transports.mcp import run_pgspine_mcp
from pgspine.mcp._app import AppContext, get_tools, lifespan, mcp, set_tools  # noqa: F401

# Import tools to trigger @mcp.tool() registration
from pgspine.mcp.tools.database import (  # noqa: F401
    execute_non_query,
    execute_query,
    list_available_databases,
    test_connection,
)

DEFAULT_PORT = 8110


def create_server():
    """Create and return the MCP server instance."""
    return mcp


def run():
    """Run the MCP server (entry point for console script)."""
    run_pgspine_mcp(mcp, default_port=DEFAULT_PORT)


if __name__ == "__main__":
    run()
