"""Tests for the pg-spine CLI."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from pgspine import __version__
from pgspine.cli.app import app

runner = CliRunner()


@pytest.fixture
def tools():
    fake = MagicMock()
    fake.aclose = AsyncMock()
    with (
        patch("pgspine.cli.utils.configure_logging"),
        patch("pgspine.cli.utils.DatabaseTools") as tools_cls,
    ):
        tools_cls.from_settings.return_value = fake
        yield fake


class TestVersion:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"pgspine {__version__}" in result.output


class TestDatabases:
    def test_lists_names(self, tools):
        tools.list_available_databases = AsyncMock(
            return_value={"success": True, "data": ["reporting", "warehouse"], "credentialsSource": "in-memory"}
        )

        result = runner.invoke(app, ["databases"])

        assert result.exit_code == 0
        assert "reporting" in result.output
        assert "warehouse" in result.output
        assert "credentialsSource" in result.output
        tools.aclose.assert_awaited_once()


class TestQuery:
    def test_rows_as_table(self, tools):
        tools.execute_query = AsyncMock(
            return_value={"success": True, "data": [{"id": 1, "name": "alice"}], "rowCount": 1}
        )

        result = runner.invoke(app, ["query", "reporting", "SELECT id, name FROM users"])

        assert result.exit_code == 0
        assert "alice" in result.output
        tools.execute_query.assert_awaited_once_with("SELECT id, name FROM users", "reporting")

    def test_json_output(self, tools):
        payload = {"success": True, "data": [{"id": 1}], "rowCount": 1, "database": "reporting"}
        tools.execute_query = AsyncMock(return_value=payload)

        result = runner.invoke(app, ["query", "reporting", "SELECT 1", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output) == payload

    def test_failure_exits_one(self, tools):
        tools.execute_query = AsyncMock(
            return_value={
                "success": False,
                "error": "duplicate key",
                "diagnosticCode": "23505",
                "isTransient": False,
                "suggestion": "Fix it",
                "attempts": 1,
            }
        )

        result = runner.invoke(app, ["query", "reporting", "SELECT 1"])

        assert result.exit_code == 1
        assert "23505" in result.output
        assert "duplicate key" in result.output

    def test_json_failure_exits_one(self, tools):
        tools.execute_query = AsyncMock(return_value={"success": False, "error": "nope", "isTransient": True})

        result = runner.invoke(app, ["query", "reporting", "SELECT 1", "--json"])

        assert result.exit_code == 1


class TestExecuteAndCheck:
    def test_execute(self, tools):
        tools.execute_non_query = AsyncMock(
            return_value={
                "success": True,
                "data": 3,
                "rowsAffected": 3,
                "message": "Command executed successfully. 3 rows affected.",
            }
        )

        result = runner.invoke(app, ["execute", "reporting", "UPDATE t SET x = 1"])

        assert result.exit_code == 0
        assert "3 rows affected" in result.output
        tools.execute_non_query.assert_awaited_once_with("UPDATE t SET x = 1", "reporting")

    def test_check(self, tools):
        tools.test_connection = AsyncMock(
            return_value={"success": True, "data": {"databaseName": "reports"}, "message": "Connection successful"}
        )

        result = runner.invoke(app, ["check", "reporting"])

        assert result.exit_code == 0
        assert "reports" in result.output
        assert "Connection successful" in result.output
        tools.test_connection.assert_awaited_once_with("reporting")


class TestServe:
    def test_serve_http(self):
        with patch("pgspine.core.transports.mcp.run_pgspine_mcp") as run:
            result = runner.invoke(app, ["serve", "--transport", "http", "--port", "9000"])

        assert result.exit_code == 0
        _, kwargs = run.call_args
        assert kwargs == {"default_port": 9000, "argv": ["--transport", "http"]}

    def test_serve_rejects_unknown_transport(self):
        with patch("pgspine.core.transports.mcp.configure_logging") as configure_logging:
            result = runner.invoke(app, ["serve", "--transport", "carrier-pigeon"])

        assert result.exit_code == 2
        configure_logging.assert_not_called()


class TestBracketText:
    def test_error_with_closing_tag_is_printed(self, tools):
        tools.execute_query = AsyncMock(
            return_value={
                "success": False,
                "error": 'column "[/x]" does not exist',
                "diagnosticCode": "42703",
                "isTransient": False,
                "suggestion": "Check [bold]the[/oops] query",
                "attempts": 1,
            }
        )

        result = runner.invoke(app, ["query", "reporting", 'SELECT "[/x]" FROM t'])

        assert result.exit_code == 1
        assert 'column "[/x]" does not exist' in result.output
        assert "Check [bold]the[/oops] query" in result.output

    def test_row_values_with_tags_are_printed(self, tools):
        tools.execute_query = AsyncMock(
            return_value={"success": True, "data": [{"note": "[/closing]"}], "rowCount": 1}
        )

        result = runner.invoke(app, ["query", "reporting", "SELECT note FROM notes"])

        assert result.exit_code == 0
        assert "[/closing]" in result.output

    def test_scalar_and_dict_values_with_tags_are_printed(self, tools):
        tools.list_available_databases = AsyncMock(
            return_value={"success": True, "data": ["[/weird]"], "credentialsSource": "[red]/tmp/c.json"}
        )

        result = runner.invoke(app, ["databases"])

        assert result.exit_code == 0
        assert "[/weird]" in result.output
        assert "[red]/tmp/c.json" in result.output
