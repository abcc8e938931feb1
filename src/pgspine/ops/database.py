"""
Database tool operations.

Every method routes its work through the :class:`RetryExecutor` and renders
the outcome with the :class:`OutcomeReporter`, so callers always get a
plain dict and never an exception::

    tools = DatabaseTools.from_settings()
    result = await tools.execute_query("SELECT * FROM users LIMIT 10", "reporting")
    # {"success": True, "data": [...], "rowCount": 10, "database": "reporting"}
    await tools.aclose()
"""

from __future__ import annotations

from typing import Any

from pgspine.core.config import LayeredConnectionStrings, PgSpineSettings, get_settings
from pgspine.core.errors import ConfigError
from pgspine.core.logging import LogContext, get_logger, safe_log
from pgspine.db.pool import AsyncpgHandle, PoolManager
from pgspine.db.queries import describe_server, execute_statement, fetch_rows
from pgspine.resilience.classifier import ErrorClassification
from pgspine.resilience.health import HealthValidator
from pgspine.resilience.outcome import Failure, Outcome, Success
from pgspine.resilience.profiles import (
    ConnectionProfileResolver,
    ConnectionStringSource,
    ProfileDefaults,
)
from pgspine.resilience.reporter import CONNECTION_TEST_ADVICE, OutcomeReporter
from pgspine.resilience.retry import RetryExecutor, RetryPolicy

logger = get_logger(__name__)

SQL_PREVIEW_CHARS = 200


class DatabaseTools:
    """Resilient query, command and connection-test operations."""

    def __init__(
        self,
        source: ConnectionStringSource,
        *,
        policy: RetryPolicy | None = None,
        defaults: ProfileDefaults | None = None,
        probe_timeout: float = 5.0,
        pools: PoolManager | None = None,
        executor: RetryExecutor | None = None,
        reporter: OutcomeReporter | None = None,
    ) -> None:
        self.source = source
        self.policy = policy or RetryPolicy()
        self.resolver = ConnectionProfileResolver(source, defaults)
        self.pools = pools or PoolManager()
        self.executor = executor or RetryExecutor(
            self.resolver,
            self.pools,
            policy=self.policy,
            validator=HealthValidator(probe_timeout),
        )
        self.reporter = reporter or OutcomeReporter()

    @classmethod
    def from_settings(cls, settings: PgSpineSettings | None = None) -> DatabaseTools:
        settings = settings or get_settings()
        return cls(
            LayeredConnectionStrings.from_settings(settings),
            policy=settings.retry,
            defaults=settings.profile,
            probe_timeout=settings.probe_timeout,
        )

    # ------------------------------------------------------------------ #
    # Tools
    # ------------------------------------------------------------------ #

    async def execute_query(self, sql: str, database: str) -> dict[str, Any]:
        """Run a row-returning statement; rows come back as JSON-safe dicts."""
        if not _has_text(sql):
            return self._rejected("SQL text must be a non-empty string", database)

        async def run_query(handle: AsyncpgHandle) -> list[dict[str, Any]]:
            return await fetch_rows(handle.connection, sql)

        async with LogContext(tool="execute_query", database=database):
            outcome = await self.executor.run(run_query, database, operation_name="execute_query")
        self._log_failure("execute_query", database, outcome, sql)

        details: dict[str, Any] = {"database": database}
        if outcome.is_success():
            details["rowCount"] = len(outcome.value)
        return self.reporter.render(outcome, details=details).to_dict()

    async def execute_non_query(self, sql: str, database: str) -> dict[str, Any]:
        """Run INSERT/UPDATE/DELETE/DDL; reports rows affected (-1 when unknown)."""
        if not _has_text(sql):
            return self._rejected("SQL text must be a non-empty string", database)

        async def run_command(handle: AsyncpgHandle) -> int:
            return await execute_statement(handle.connection, sql)

        async with LogContext(tool="execute_non_query", database=database):
            outcome = await self.executor.run(run_command, database, operation_name="execute_non_query")
        self._log_failure("execute_non_query", database, outcome, sql)

        details: dict[str, Any] = {"database": database}
        if outcome.is_success():
            details["rowsAffected"] = outcome.value
            details["message"] = f"Command executed successfully. {outcome.value} rows affected."
        return self.reporter.render(outcome, details=details).to_dict()

    async def test_connection(self, database: str) -> dict[str, Any]:
        """Round-trip to the server and report what the connection looks like."""

        async def probe_server(handle: AsyncpgHandle) -> dict[str, Any]:
            return await describe_server(handle.connection)

        async with LogContext(tool="test_connection", database=database):
            outcome = await self.executor.run(probe_server, database, operation_name="test_connection")
        self._log_failure("test_connection", database, outcome, "SELECT NOW()")

        details: dict[str, Any] = {"database": database}
        if outcome.is_success():
            profile = self.resolver.resolve(database)
            details.update(
                message="Connection successful",
                poolingEnabled=True,
                connectionTimeout=profile.connect_timeout,
                commandTimeout=profile.operation_timeout,
                keepAlive=profile.keepalive,
            )
            pool = self.pools.stats(profile.name)
            if pool is not None:
                details["pool"] = pool
        return self.reporter.render(
            outcome, details=details, advice=CONNECTION_TEST_ADVICE
        ).to_dict()

    async def list_available_databases(self) -> dict[str, Any]:
        """Configured names, where credentials came from, and resilience settings.

        Reads configuration only; no connection is made.
        """
        try:
            names = self.resolver.available_names()
            credentials_source = _credentials_source(self.source)
        except ConfigError as e:
            safe_log(logger, "error", "list_databases_failed", error=e.message)
            return self.reporter.render(
                Failure(ErrorClassification.permanent(), e.message, attempts=0)
            ).to_dict()

        defaults = self.resolver.defaults
        return self.reporter.render(
            Success(names),
            details={
                "availableDatabases": names,
                "credentialsSource": credentials_source,
                "resilienceSettings": {
                    "maxRetryAttempts": self.policy.max_attempts,
                    "initialDelayMs": self.policy.initial_delay_ms,
                    "delayCapMs": self.policy.delay_cap_ms,
                    "commandTimeoutSeconds": defaults.operation_timeout,
                    "connectionTimeoutSeconds": defaults.connect_timeout,
                    "poolingEnabled": True,
                    "keepAliveSeconds": defaults.keepalive,
                },
            },
        ).to_dict()

    async def aclose(self) -> None:
        await self.pools.aclose()

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _rejected(self, message: str, database: str) -> dict[str, Any]:
        safe_log(logger, "warning", "request_rejected", database=database, error=message)
        outcome: Outcome[Any] = Failure(ErrorClassification.permanent(), message, attempts=0)
        return self.reporter.render(outcome, details={"database": database}).to_dict()

    def _log_failure(self, tool: str, database: str, outcome: Outcome[Any], sql: str) -> None:
        if not outcome.is_failure():
            return
        safe_log(
            logger,
            "error",
            "tool_failed",
            tool=tool,
            database=database,
            error=outcome.message,
            sqlstate=outcome.classification.diagnostic_code,
            transient=outcome.classification.is_transient,
            network_level=outcome.classification.is_network_level,
            attempts=outcome.attempts,
            sql=sql[:SQL_PREVIEW_CHARS],
        )


def _has_text(sql: Any) -> bool:
    return isinstance(sql, str) and bool(sql.strip())


def _credentials_source(source: ConnectionStringSource) -> str:
    describe = getattr(source, "credentials_source", None)
    return describe() if callable(describe) else "in-memory"


__all__ = ["DatabaseTools"]
