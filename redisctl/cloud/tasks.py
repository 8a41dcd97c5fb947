"""Redis Cloud task status source.

A Cloud task looks like::

    {
        "taskId": "5c0f...",
        "commandType": "createDatabaseRequest",
        "status": "processing-in-progress",
        "description": "...",
        "response": {"resourceId": 42, "error": {...}}
    }
"""

from typing import Any, Optional

from redisctl.cloud.client import CloudClient
from redisctl.core.poller import StatusSnapshot
from redisctl.core.status import CLOUD_TASK_STATUSES, StatusVocabulary

CLOUD_HANDLE_KEYS = ("taskId", "task_id", "response.id")
CLOUD_MISSING_HANDLE = "No task ID returned"


def _error_text(error: Any) -> Optional[str]:
    """Task errors are either a string or an object with a description."""
    if not error:
        return None
    if isinstance(error, dict):
        text = error.get("description") or error.get("type") or error.get("status")
        return str(text) if text else str(error)
    return str(error)


def task_to_snapshot(task: dict) -> StatusSnapshot:
    response = task.get("response") or {}
    return StatusSnapshot(
        status=str(task.get("status") or ""),
        error=_error_text(response.get("error")),
        resource_id=response.get("resourceId"),
        raw=task,
    )


class CloudTaskSource:
    """Fetches Redis Cloud task snapshots for the poller."""

    vocabulary: StatusVocabulary = CLOUD_TASK_STATUSES

    def __init__(self, client: CloudClient):
        self._client = client

    async def fetch_status(self, handle: str) -> StatusSnapshot:
        return task_to_snapshot(await self._client.get_task(handle))
