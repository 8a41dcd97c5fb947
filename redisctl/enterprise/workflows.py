"""Redis Enterprise workflows: submit a BDB operation and wait for its action."""

import logging
from typing import Any, Dict, Optional

from redisctl.core import workflows
from redisctl.core.config import settings
from redisctl.core.progress import ProgressObserver
from redisctl.enterprise.actions import (
    ENTERPRISE_HANDLE_KEYS,
    ENTERPRISE_MISSING_HANDLE,
    EnterpriseActionSource,
)
from redisctl.enterprise.client import EnterpriseClient
from redisctl.observability.tracing import trace_workflow

logger = logging.getLogger(__name__)


def _options(timeout: Optional[float], interval: Optional[float]) -> Dict[str, Any]:
    return {
        "timeout": settings.default_timeout if timeout is None else timeout,
        "interval": settings.enterprise_poll_interval if interval is None else interval,
        "handle_keys": ENTERPRISE_HANDLE_KEYS,
        "missing_handle_message": ENTERPRISE_MISSING_HANDLE,
    }


@trace_workflow("enterprise", "upgrade_database")
async def upgrade_database_and_wait(
    client: EnterpriseClient,
    bdb_uid: int,
    request: Dict[str, Any],
    *,
    timeout: Optional[float] = None,
    interval: Optional[float] = None,
    observer: Optional[ProgressObserver] = None,
) -> Dict[str, Any]:
    """Upgrade a database's Redis version and return the upgraded database.

    ``request`` is the upgrade body, e.g. ``{"redis_version": "7.4"}``.
    """
    return await workflows.upgrade_and_wait(
        lambda: client.upgrade_redis_version(bdb_uid, request),
        EnterpriseActionSource(client),
        client.get_database,
        bdb_uid,
        observer=observer,
        **_options(timeout, interval),
    )


@trace_workflow("enterprise", "upgrade_module")
async def upgrade_module_and_wait(
    client: EnterpriseClient,
    bdb_uid: int,
    module_name: str,
    new_version: Optional[str] = None,
    *,
    timeout: Optional[float] = None,
    interval: Optional[float] = None,
    observer: Optional[ProgressObserver] = None,
) -> Dict[str, Any]:
    """Upgrade a module (e.g. "search", "json") on a database."""
    return await workflows.upgrade_and_wait(
        lambda: client.upgrade_module(bdb_uid, module_name, new_version),
        EnterpriseActionSource(client),
        client.get_database,
        bdb_uid,
        observer=observer,
        **_options(timeout, interval),
    )


@trace_workflow("enterprise", "backup_database")
async def backup_database_and_wait(
    client: EnterpriseClient,
    bdb_uid: int,
    *,
    timeout: Optional[float] = None,
    interval: Optional[float] = None,
    observer: Optional[ProgressObserver] = None,
) -> None:
    await workflows.backup_and_wait(
        lambda: client.backup_database(bdb_uid),
        EnterpriseActionSource(client),
        observer=observer,
        **_options(timeout, interval),
    )


@trace_workflow("enterprise", "import_database")
async def import_database_and_wait(
    client: EnterpriseClient,
    bdb_uid: int,
    import_location: str,
    flush: bool = False,
    *,
    timeout: Optional[float] = None,
    interval: Optional[float] = None,
    observer: Optional[ProgressObserver] = None,
) -> None:
    """Import into a database. With ``flush`` existing data is deleted first."""
    if flush:
        logger.warning(f"Importing into database {bdb_uid} with flush; existing data is deleted")
    await workflows.import_and_wait(
        lambda: client.import_database(bdb_uid, import_location, flush),
        EnterpriseActionSource(client),
        observer=observer,
        **_options(timeout, interval),
    )
