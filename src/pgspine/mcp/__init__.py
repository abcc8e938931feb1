"""pg-spine MCP server.

Usage::

    # stdio mode (default)
    pgspine-mcp

    # HTTP mode
    pgspine-mcp --transport http --port 8110
"""

from pgspine.mcp.server import create_server, mcp, run

__all__ = [
    "create_server",
    "mcp",
    "run",
]
