"""Tests for the redisctl MCP server tools."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from redisctl.core.errors import TaskTimeoutError
from redisctl.core.poller import StatusSnapshot
from redisctl.core.progress import Completed, Polling, Started
from redisctl.mcp_server import server
from redisctl.mcp_server.server import (
    READ_ONLY_MESSAGE,
    cloud_create_database,
    cloud_delete_database,
    cloud_wait_task,
    enterprise_import_database,
    enterprise_upgrade_database,
    enterprise_wait_action,
    mcp,
)


def _async_cm(client):
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client


@pytest.fixture
def writable():
    with patch.object(server.settings, "mcp_read_only", False):
        yield


@pytest.fixture
def cloud_client():
    client = _async_cm(MagicMock())
    with patch("redisctl.mcp_server.server._cloud_client", return_value=client):
        yield client


@pytest.fixture
def enterprise_client():
    client = _async_cm(MagicMock())
    with patch("redisctl.mcp_server.server._enterprise_client", return_value=client):
        yield client


class TestToolRegistration:
    def test_tools_are_registered(self):
        names = {tool.name for tool in mcp._tool_manager.list_tools()}

        assert {
            "cloud_create_database",
            "cloud_update_database",
            "cloud_delete_database",
            "cloud_backup_database",
            "cloud_import_database",
            "cloud_delete_subscription",
            "cloud_wait_task",
            "enterprise_upgrade_database",
            "enterprise_backup_database",
            "enterprise_import_database",
            "enterprise_wait_action",
        } <= names


class TestReadOnlyMode:
    @pytest.mark.asyncio
    async def test_mutating_tool_refused_by_default(self, cloud_client):
        result = await cloud_delete_database(subscription_id=1, database_id=2)

        assert result["status"] == "failed"
        assert result["error"] == {"category": "config", "message": READ_ONLY_MESSAGE}
        cloud_client.__aenter__.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_wait_tool_allowed_in_read_only_mode(self, cloud_client):
        snapshot = StatusSnapshot(status="processing-completed", raw={"taskId": "t-1"})
        with patch("redisctl.mcp_server.server.poll", new=AsyncMock(return_value=snapshot)):
            result = await cloud_wait_task(task_id="t-1")

        assert result["status"] == "success"
        assert result["task"] == {"taskId": "t-1"}


class TestCloudTools:
    @pytest.mark.asyncio
    async def test_create_database_returns_events(self, writable, cloud_client):
        async def fake_workflow(client, subscription_id, params, *, timeout, observer):
            observer(Started(handle="t-1"))
            observer(Completed(handle="t-1", resource_id=7))
            return {"databaseId": 7, "name": params.name}

        with patch.object(
            server.cloud_workflows, "create_database_and_wait", side_effect=fake_workflow
        ):
            result = await cloud_create_database(
                subscription_id=123, name="cache", memory_limit_in_gb=1
            )

        assert result["status"] == "success"
        assert result["database"] == {"databaseId": 7, "name": "cache"}
        assert [e["kind"] for e in result["events"]] == ["started", "completed"]
        assert result["events"][1]["resource_id"] == 7

    @pytest.mark.asyncio
    async def test_validation_error_is_structured(self, writable, cloud_client):
        result = await cloud_create_database(subscription_id=123, name="", memory_limit_in_gb=1)

        assert result["status"] == "failed"
        assert result["error"]["category"] == "validation"
        assert result["events"] == []

    @pytest.mark.asyncio
    async def test_timeout_keeps_events(self, writable, cloud_client):
        async def slow_workflow(client, sub_id, db_id, *, timeout, observer):
            observer(Started(handle="t-9"))
            observer(Polling(handle="t-9", status="processing-in-progress", elapsed=0.0))
            raise TaskTimeoutError(timeout or 600)

        with patch.object(
            server.cloud_workflows, "delete_database_and_wait", side_effect=slow_workflow
        ):
            result = await cloud_delete_database(
                subscription_id=1, database_id=2, timeout_seconds=30
            )

        assert result["status"] == "failed"
        assert result["error"]["category"] == "timeout"
        assert result["error"]["timeout"] == 30
        assert result["events"][0]["handle"] == "t-9"
        assert result["last_status"] == "processing-in-progress"

    @pytest.mark.asyncio
    async def test_missing_credentials_reported(self, writable):
        result = await cloud_delete_database(subscription_id=1, database_id=2)

        assert result["status"] == "failed"
        assert result["error"]["category"] == "error"


class TestEnterpriseTools:
    @pytest.mark.asyncio
    async def test_upgrade_builds_request(self, writable, enterprise_client):
        with patch.object(
            server.enterprise_workflows,
            "upgrade_database_and_wait",
            new=AsyncMock(return_value={"uid": 3}),
        ) as mock_wf:
            result = await enterprise_upgrade_database(bdb_uid=3, redis_version="7.4")

        assert result["status"] == "success"
        assert result["database"] == {"uid": 3}
        assert mock_wf.call_args.args[1:] == (3, {"redis_version": "7.4"})

    @pytest.mark.asyncio
    async def test_import_passes_flush(self, writable, enterprise_client):
        with patch.object(
            server.enterprise_workflows, "import_database_and_wait", new=AsyncMock()
        ) as mock_wf:
            result = await enterprise_import_database(
                bdb_uid=3, import_location="https://b/db.rdb", flush=True
            )

        assert result["status"] == "success"
        assert mock_wf.call_args.args[1:] == (3, "https://b/db.rdb", True)

    @pytest.mark.asyncio
    async def test_wait_action_uses_enterprise_interval(self, enterprise_client):
        snapshot = StatusSnapshot(status="completed", raw={"action_uid": "a-1"})
        with patch(
            "redisctl.mcp_server.server.poll", new=AsyncMock(return_value=snapshot)
        ) as mock_poll:
            result = await enterprise_wait_action(action_uid="a-1")

        assert result["action"] == {"action_uid": "a-1"}
        assert mock_poll.call_args.kwargs["interval"] == 5.0
        assert mock_poll.call_args.kwargs["timeout"] == 600
