"""
Operations layer: transport-agnostic database tools.

- All tool methods return plain ``dict`` results (never raise)
- All database work goes through the retry executor
- Transports (MCP, CLI) only translate arguments and print results

Usage::

    from pgspine.ops import DatabaseTools

    tools = DatabaseTools.from_settings()
    result = await tools.test_connection("reporting")
    assert result["success"]
"""

from pgspine.ops.database import DatabaseTools

__all__ = ["DatabaseTools"]
