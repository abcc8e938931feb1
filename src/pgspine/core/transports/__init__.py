"""MCP transport scaffold.

Modules
-------
mcp     create_pgspine_mcp() + run_pgspine_mcp() factory functions
"""
