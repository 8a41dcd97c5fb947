"""Unit tests for the Redis Enterprise CLI commands."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from redisctl.cli.enterprise import enterprise
from redisctl.core.errors import TaskFailedError
from redisctl.core.poller import StatusSnapshot


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture
def mock_client():
    client = MagicMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    with patch("redisctl.cli.enterprise._client", return_value=client):
        yield client


class TestDatabaseUpgrade:
    def test_upgrade_builds_request(self, cli_runner, mock_client):
        with patch(
            "redisctl.enterprise.workflows.upgrade_database_and_wait",
            new=AsyncMock(return_value={"uid": 3, "version": "7.4"}),
        ) as mock_wf:
            result = cli_runner.invoke(
                enterprise, ["database", "upgrade", "3", "--version", "7.4", "--preserve-roles"]
            )

        assert result.exit_code == 0, result.output
        assert "Database upgraded" in result.output
        assert mock_wf.call_args.args[1:] == (
            3,
            {"redis_version": "7.4", "preserve_roles": True},
        )

    def test_upgrade_module(self, cli_runner, mock_client):
        with patch(
            "redisctl.enterprise.workflows.upgrade_module_and_wait",
            new=AsyncMock(return_value={"uid": 3}),
        ) as mock_wf:
            result = cli_runner.invoke(
                enterprise, ["database", "upgrade-module", "3", "--module", "search"]
            )

        assert result.exit_code == 0, result.output
        assert mock_wf.call_args.args[1:] == (3, "search", None)

    def test_failed_action(self, cli_runner, mock_client):
        with patch(
            "redisctl.enterprise.workflows.backup_database_and_wait",
            new=AsyncMock(side_effect=TaskFailedError("Action failed")),
        ):
            result = cli_runner.invoke(enterprise, ["database", "backup", "3"])

        assert result.exit_code == 1
        assert "Task failed: Action failed" in result.output


class TestDatabaseImport:
    def test_flush_requires_confirmation(self, cli_runner, mock_client):
        with patch("redisctl.enterprise.workflows.import_database_and_wait", new=AsyncMock()) as mock_wf:
            result = cli_runner.invoke(
                enterprise,
                ["database", "import", "3", "--location", "https://b/db.rdb", "--flush"],
                input="n\n",
            )

        assert result.exit_code != 0
        mock_wf.assert_not_awaited()

    def test_import_without_flush(self, cli_runner, mock_client):
        with patch("redisctl.enterprise.workflows.import_database_and_wait", new=AsyncMock()) as mock_wf:
            result = cli_runner.invoke(
                enterprise, ["database", "import", "3", "--location", "https://b/db.rdb"]
            )

        assert result.exit_code == 0, result.output
        assert mock_wf.call_args.args[1:] == (3, "https://b/db.rdb", False)


class TestActionWait:
    def test_wait_json(self, cli_runner, mock_client):
        snapshot = StatusSnapshot(status="completed", raw={"action_uid": "a-1", "status": "completed"})
        with patch("redisctl.cli.enterprise.poll", new=AsyncMock(return_value=snapshot)):
            result = cli_runner.invoke(enterprise, ["action", "wait", "a-1", "--json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["result"]["action_uid"] == "a-1"

    def test_missing_url(self, cli_runner):
        result = cli_runner.invoke(enterprise, ["action", "wait", "a-1"])

        assert result.exit_code == 1
        assert "REDIS_ENTERPRISE_URL" in result.output
