"""Database MCP tools."""

from __future__ import annotations

from typing import Any

from pgspine.mcp import _app

mcp = _app.mcp


@mcp.tool()
async def execute_query(sql: str, database: str) -> dict[str, Any]:
    """Execute a SQL query against the PostgreSQL database.

    Args:
        sql: Query returning rows (SELECT, or DML with RETURNING)
        database: Database name to use (e.g., 'myapp', 'production', 'test')

    Returns:
        Rows as objects, plus rowCount and database
    """
    return await _app.get_tools().execute_query(sql, database)


@mcp.tool()
async def execute_non_query(sql: str, database: str) -> dict[str, Any]:
    """Execute a non-query SQL statement (INSERT, UPDATE, DELETE, CREATE, etc.).

    Args:
        sql: Statement to execute
        database: Database name to use (e.g., 'myapp', 'production', 'test')

    Returns:
        rowsAffected (-1 when the statement reports no count) and a message
    """
    return await _app.get_tools().execute_non_query(sql, database)


@mcp.tool()
async def test_connection(database: str) -> dict[str, Any]:
    """Test the PostgreSQL database connection.

    Args:
        database: Database name to test (e.g., 'myapp', 'production', 'test')
    """
    return await _app.get_tools().test_connection(database)


@mcp.tool()
async def list_available_databases() -> dict[str, Any]:
    """List available databases/connection strings."""
    return await _app.get_tools().list_available_databases()
