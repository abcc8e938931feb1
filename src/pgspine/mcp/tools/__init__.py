"""MCP tools package; importing a module registers its tools."""

from pgspine.mcp.tools import database  # noqa: F401
