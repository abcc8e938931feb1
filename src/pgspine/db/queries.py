"""
Query helpers over an asyncpg connection, with JSON-safe result rows.

Values are converted so tool results serialize without a custom encoder:

=============  =======================
Python value   JSON value
=============  =======================
datetime       ``"YYYY-MM-DD HH:MM:SS"``
date, time     ISO string
Decimal        float
UUID           string
bytes          hex string
timedelta      seconds (float)
list / tuple   list (converted)
dict           dict (converted)
other          ``str(value)``
=============  =======================
"""

from __future__ import annotations

import datetime as dt
import re
from decimal import Decimal
from typing import Any
from uuid import UUID

SERVER_INFO_SQL = """
SELECT
    NOW() AS server_time,
    current_database() AS database_name,
    pg_backend_pid() AS process_id,
    version() AS server_version
"""

SERVER_INFO_TIMEOUT = 10.0

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_TAG_COUNT = re.compile(r"(\d+)\s*$")


def to_json_value(value: Any) -> Any:
    """Convert a value returned by asyncpg into a JSON-safe value."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, dt.datetime):
        return value.strftime(DATETIME_FORMAT)
    if isinstance(value, (dt.date, dt.time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    if isinstance(value, dt.timedelta):
        return value.total_seconds()
    if isinstance(value, (list, tuple)):
        return [to_json_value(v) for v in value]
    if isinstance(value, dict):
        return {str(k): to_json_value(v) for k, v in value.items()}
    return str(value)


def record_to_dict(record: Any) -> dict[str, Any]:
    return {key: to_json_value(value) for key, value in record.items()}


def rows_affected(status: str | None) -> int:
    """Row count from a command tag (``"UPDATE 3"`` → 3, ``"CREATE TABLE"`` → -1)."""
    if not status:
        return -1
    match = _TAG_COUNT.search(status)
    return int(match.group(1)) if match else -1


async def fetch_rows(conn: Any, sql: str) -> list[dict[str, Any]]:
    records = await conn.fetch(sql)
    return [record_to_dict(r) for r in records]


async def execute_statement(conn: Any, sql: str) -> int:
    status = await conn.execute(sql)
    return rows_affected(status)


async def describe_server(conn: Any, timeout: float = SERVER_INFO_TIMEOUT) -> dict[str, Any]:
    """Server time, database name, backend pid and version string."""
    row = await conn.fetchrow(SERVER_INFO_SQL, timeout=timeout)
    return {
        "serverTime": to_json_value(row["server_time"]),
        "databaseName": row["database_name"],
        "processId": row["process_id"],
        "serverVersion": row["server_version"],
    }


__all__ = [
    "DATETIME_FORMAT",
    "SERVER_INFO_SQL",
    "describe_server",
    "execute_statement",
    "fetch_rows",
    "record_to_dict",
    "rows_affected",
    "to_json_value",
]
