"""Tests for the Redis Enterprise workflow bindings."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from redisctl.core.errors import TaskFailedError
from redisctl.core.progress import Polling, RecordingObserver
from redisctl.enterprise import workflows


@pytest.fixture
def enterprise_client():
    client = MagicMock()
    client.upgrade_redis_version = AsyncMock(return_value={"action_uid": "a-1"})
    client.upgrade_module = AsyncMock(return_value={"action_uid": "a-1"})
    client.backup_database = AsyncMock(return_value={"action_uid": "a-1"})
    client.import_database = AsyncMock(return_value={"action_uid": "a-1"})
    client.get_action = AsyncMock(return_value={"status": "completed", "object_name": "bdb:3"})
    client.get_database = AsyncMock(return_value={"uid": 3, "version": "7.4"})
    return client


class TestEnterpriseWorkflows:
    @pytest.mark.asyncio
    async def test_upgrade_database(self, fake_clock, enterprise_client):
        enterprise_client.get_action.side_effect = [
            {"status": "queued"},
            {"status": "running", "progress": 50},
            {"status": "completed", "object_name": "bdb:3"},
        ]
        recorder = RecordingObserver()

        db = await workflows.upgrade_database_and_wait(
            enterprise_client, 3, {"redis_version": "7.4"}, observer=recorder
        )

        assert db == {"uid": 3, "version": "7.4"}
        enterprise_client.upgrade_redis_version.assert_awaited_once_with(3, {"redis_version": "7.4"})
        enterprise_client.get_database.assert_awaited_once_with(3)
        # Default Enterprise interval is 5 seconds
        assert fake_clock.sleep.await_count == 2
        fake_clock.sleep.assert_awaited_with(5)
        polling = [e for e in recorder.events if isinstance(e, Polling)]
        assert polling[1].progress == 50

    @pytest.mark.asyncio
    async def test_upgrade_module(self, fake_clock, enterprise_client):
        await workflows.upgrade_module_and_wait(enterprise_client, 3, "search", "2.8.4", timeout=60)

        enterprise_client.upgrade_module.assert_awaited_once_with(3, "search", "2.8.4")
        enterprise_client.get_database.assert_awaited_once_with(3)

    @pytest.mark.asyncio
    async def test_backup(self, fake_clock, enterprise_client):
        result = await workflows.backup_database_and_wait(enterprise_client, 3, timeout=60)

        assert result is None
        enterprise_client.get_action.assert_awaited_once_with("a-1")
        enterprise_client.get_database.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_backup_without_action_uid_fails(self, enterprise_client):
        enterprise_client.backup_database.return_value = {}

        with pytest.raises(TaskFailedError, match="No action ID returned"):
            await workflows.backup_database_and_wait(enterprise_client, 3, timeout=60)

        enterprise_client.get_action.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_import_with_flush(self, fake_clock, enterprise_client):
        await workflows.import_database_and_wait(
            enterprise_client, 3, "https://backups/db.rdb", flush=True, timeout=60
        )

        enterprise_client.import_database.assert_awaited_once_with(3, "https://backups/db.rdb", True)

    @pytest.mark.asyncio
    async def test_failed_action(self, fake_clock, enterprise_client):
        enterprise_client.get_action.return_value = {"status": "failed"}

        with pytest.raises(TaskFailedError) as exc_info:
            await workflows.upgrade_database_and_wait(enterprise_client, 3, {}, timeout=60)

        assert exc_info.value.message == "Action failed"
        enterprise_client.get_database.assert_not_awaited()
