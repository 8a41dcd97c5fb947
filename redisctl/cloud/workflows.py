"""Redis Cloud workflows: mutate, wait for the task, return the result.

Example:
    async with CloudClient() as client:
        db = await create_database_and_wait(
            client,
            subscription_id=123,
            params=CreateDatabaseParams(name="cache", memory_limit_in_gb=1.0),
            observer=CLIObserver(),
        )
"""

import logging
from typing import Any, Dict, Optional

from redisctl.cloud.client import CloudClient
from redisctl.cloud.params import (
    BackupDatabaseParams,
    CreateDatabaseParams,
    ImportDatabaseParams,
    UpdateDatabaseParams,
)
from redisctl.cloud.tasks import CLOUD_HANDLE_KEYS, CLOUD_MISSING_HANDLE, CloudTaskSource
from redisctl.core import workflows
from redisctl.core.config import settings
from redisctl.core.errors import ValidationError
from redisctl.core.progress import ProgressObserver
from redisctl.observability.tracing import trace_workflow

logger = logging.getLogger(__name__)


def _options(
    timeout: Optional[float], interval: Optional[float], default_interval: float
) -> Dict[str, Any]:
    return {
        "timeout": settings.default_timeout if timeout is None else timeout,
        "interval": default_interval if interval is None else interval,
        "handle_keys": CLOUD_HANDLE_KEYS,
        "missing_handle_message": CLOUD_MISSING_HANDLE,
    }


@trace_workflow("cloud", "create_database")
async def create_database_and_wait(
    client: CloudClient,
    subscription_id: int,
    params: CreateDatabaseParams,
    *,
    timeout: Optional[float] = None,
    interval: Optional[float] = None,
    observer: Optional[ProgressObserver] = None,
) -> Dict[str, Any]:
    """Create a database and return it once the task completes."""

    async def fetch(database_id):
        return await client.get_database(subscription_id, int(database_id))

    return await workflows.create_and_wait(
        lambda: client.create_database(subscription_id, params.to_request()),
        CloudTaskSource(client),
        fetch,
        observer=observer,
        **_options(timeout, interval, settings.cloud_poll_interval),
    )


@trace_workflow("cloud", "update_database")
async def update_database_and_wait(
    client: CloudClient,
    subscription_id: int,
    database_id: int,
    params: UpdateDatabaseParams,
    *,
    timeout: Optional[float] = None,
    interval: Optional[float] = None,
    observer: Optional[ProgressObserver] = None,
) -> Dict[str, Any]:
    """Apply ``params`` to a database and return its updated state."""
    if params.is_empty():
        raise ValidationError("No database changes specified")

    async def fetch(db_id):
        return await client.get_database(subscription_id, int(db_id))

    return await workflows.update_and_wait(
        lambda: client.update_database(subscription_id, database_id, params.to_request()),
        CloudTaskSource(client),
        fetch,
        database_id,
        observer=observer,
        **_options(timeout, interval, settings.cloud_poll_interval),
    )


@trace_workflow("cloud", "delete_database")
async def delete_database_and_wait(
    client: CloudClient,
    subscription_id: int,
    database_id: int,
    *,
    timeout: Optional[float] = None,
    interval: Optional[float] = None,
    observer: Optional[ProgressObserver] = None,
) -> None:
    await workflows.delete_and_wait(
        lambda: client.delete_database(subscription_id, database_id),
        CloudTaskSource(client),
        observer=observer,
        **_options(timeout, interval, settings.cloud_poll_interval),
    )


@trace_workflow("cloud", "backup_database")
async def backup_database_and_wait(
    client: CloudClient,
    subscription_id: int,
    database_id: int,
    params: Optional[BackupDatabaseParams] = None,
    *,
    timeout: Optional[float] = None,
    interval: Optional[float] = None,
    observer: Optional[ProgressObserver] = None,
) -> None:
    body = (params or BackupDatabaseParams()).to_request()
    await workflows.backup_and_wait(
        lambda: client.backup_database(subscription_id, database_id, body),
        CloudTaskSource(client),
        observer=observer,
        **_options(timeout, interval, settings.cloud_poll_interval),
    )


@trace_workflow("cloud", "import_database")
async def import_database_and_wait(
    client: CloudClient,
    subscription_id: int,
    database_id: int,
    params: ImportDatabaseParams,
    *,
    timeout: Optional[float] = None,
    interval: Optional[float] = None,
    observer: Optional[ProgressObserver] = None,
) -> None:
    """Import data into a database. Existing data is overwritten."""
    await workflows.import_and_wait(
        lambda: client.import_database(subscription_id, database_id, params.to_request()),
        CloudTaskSource(client),
        observer=observer,
        **_options(timeout, interval, settings.cloud_poll_interval),
    )


@trace_workflow("cloud", "flush_database")
async def flush_database_and_wait(
    client: CloudClient,
    subscription_id: int,
    database_id: int,
    *,
    timeout: Optional[float] = None,
    interval: Optional[float] = None,
    observer: Optional[ProgressObserver] = None,
) -> None:
    """Remove all data from a database."""
    await workflows.flush_and_wait(
        lambda: client.flush_database(subscription_id, database_id),
        CloudTaskSource(client),
        observer=observer,
        **_options(timeout, interval, settings.cloud_poll_interval),
    )


@trace_workflow("cloud", "create_subscription")
async def create_subscription_and_wait(
    client: CloudClient,
    request: Dict[str, Any],
    *,
    timeout: Optional[float] = None,
    interval: Optional[float] = None,
    observer: Optional[ProgressObserver] = None,
) -> Dict[str, Any]:
    """Create a subscription and return it once provisioning completes.

    Subscriptions take longer to provision, so the default interval is
    ``settings.cloud_subscription_poll_interval``.
    """

    async def fetch(subscription_id):
        return await client.get_subscription(int(subscription_id))

    return await workflows.create_and_wait(
        lambda: client.create_subscription(request),
        CloudTaskSource(client),
        fetch,
        observer=observer,
        **_options(timeout, interval, settings.cloud_subscription_poll_interval),
    )


@trace_workflow("cloud", "update_subscription")
async def update_subscription_and_wait(
    client: CloudClient,
    subscription_id: int,
    request: Dict[str, Any],
    *,
    timeout: Optional[float] = None,
    interval: Optional[float] = None,
    observer: Optional[ProgressObserver] = None,
) -> Dict[str, Any]:
    async def fetch(sub_id):
        return await client.get_subscription(int(sub_id))

    return await workflows.update_and_wait(
        lambda: client.update_subscription(subscription_id, request),
        CloudTaskSource(client),
        fetch,
        subscription_id,
        observer=observer,
        **_options(timeout, interval, settings.cloud_poll_interval),
    )


@trace_workflow("cloud", "delete_subscription")
async def delete_subscription_and_wait(
    client: CloudClient,
    subscription_id: int,
    *,
    timeout: Optional[float] = None,
    interval: Optional[float] = None,
    observer: Optional[ProgressObserver] = None,
) -> None:
    """Delete a subscription. All of its databases must be deleted first."""
    await workflows.delete_and_wait(
        lambda: client.delete_subscription(subscription_id),
        CloudTaskSource(client),
        observer=observer,
        **_options(timeout, interval, settings.cloud_poll_interval),
    )
