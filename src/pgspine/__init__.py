"""
pg-spine - resilient PostgreSQL access for tool servers.

- pgspine.resilience: profile enrichment, error classification, retry,
  health validation and structured outcomes
- pgspine.db: asyncpg pool and fault mapping
- pgspine.ops: database tools built on the resilience layer
- pgspine.mcp: MCP server exposing the tools
"""

__version__ = "0.1.0"
