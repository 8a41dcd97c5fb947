"""Redis Enterprise action status source."""

from typing import Any, Optional, Union

from redisctl.core.poller import StatusSnapshot
from redisctl.core.status import ENTERPRISE_ACTION_STATUSES, StatusVocabulary
from redisctl.enterprise.client import EnterpriseClient

ENTERPRISE_HANDLE_KEYS = ("action_uid",)
ENTERPRISE_MISSING_HANDLE = "No action ID returned"


def _progress(value: Any) -> Optional[float]:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _object_id(object_name: Any) -> Optional[Union[int, str]]:
    """``"bdb:3"`` -> ``3``."""
    if not object_name or ":" not in str(object_name):
        return None
    _, _, ident = str(object_name).partition(":")
    return int(ident) if ident.isdigit() else ident or None


def action_to_snapshot(action: dict) -> StatusSnapshot:
    error = action.get("error")
    return StatusSnapshot(
        status=str(action.get("status") or ""),
        progress=_progress(action.get("progress")),
        error=str(error) if error else None,
        resource_id=_object_id(action.get("object_name")),
        raw=action,
    )


class EnterpriseActionSource:
    """Fetches Redis Enterprise action snapshots for the poller."""

    vocabulary: StatusVocabulary = ENTERPRISE_ACTION_STATUSES

    def __init__(self, client: EnterpriseClient):
        self._client = client

    async def fetch_status(self, handle: str) -> StatusSnapshot:
        return action_to_snapshot(await self._client.get_action(handle))
