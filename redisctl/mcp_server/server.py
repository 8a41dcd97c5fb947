"""MCP server implementation for redisctl.

Exposes the Redis Cloud and Redis Enterprise wait-for-completion workflows as
MCP tools. Each tool submits the operation, polls it to a terminal status and
returns the outcome together with the progress events observed on the way.

Mutating tools are refused while ``REDISCTL_MCP_READ_ONLY`` is true (the
default); the ``*_wait_*`` tools only read and are always available.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from redisctl.cloud import workflows as cloud_workflows
from redisctl.cloud.client import CloudClient
from redisctl.cloud.params import (
    BackupDatabaseParams,
    CreateDatabaseParams,
    ImportDatabaseParams,
    UpdateDatabaseParams,
    build_params,
)
from redisctl.cloud.tasks import CloudTaskSource
from redisctl.core.config import settings
from redisctl.core.errors import CoreError
from redisctl.core.poller import poll
from redisctl.core.progress import RecordingObserver
from redisctl.enterprise import workflows as enterprise_workflows
from redisctl.enterprise.actions import EnterpriseActionSource
from redisctl.enterprise.client import EnterpriseClient

logger = logging.getLogger(__name__)

READ_ONLY_MESSAGE = (
    "Server is in read-only mode; set REDISCTL_MCP_READ_ONLY=false to allow mutating tools"
)

mcp = FastMCP(
    name="redisctl",
    instructions="""redisctl - run Redis Cloud and Redis Enterprise operations to completion.

Every mutating tool blocks until the remote task (Cloud) or action (Enterprise)
reaches a terminal status, then returns:

- status: "success" or "failed"
- the resulting resource for create/update/upgrade operations
- events: the progress events observed while waiting

If a tool fails with a timeout, the operation may still be running remotely.
Use `cloud_wait_task` / `enterprise_wait_action` with the handle from the
events to keep waiting instead of re-submitting.""",
)


def _cloud_client() -> CloudClient:
    return CloudClient()


def _enterprise_client() -> EnterpriseClient:
    return EnterpriseClient()


async def _tracked(
    operation: str,
    run: Callable[[RecordingObserver], Awaitable[Dict[str, Any]]],
    *,
    mutating: bool = True,
) -> Dict[str, Any]:
    """Run a workflow with a recording observer and shape the tool result."""
    if mutating and settings.mcp_read_only:
        logger.warning(f"Refused {operation}: read-only mode")
        return {"status": "failed", "error": {"category": "config", "message": READ_ONLY_MESSAGE}}

    recorder = RecordingObserver()
    try:
        result = await run(recorder)
    except CoreError as e:
        logger.error(f"{operation} failed: {e}")
        return {
            "status": "failed",
            "error": e.to_error_dict(),
            "last_status": recorder.last_status,
            "events": recorder.as_dicts(),
        }
    except Exception as e:
        # Settings errors from missing vendor credentials land here
        logger.error(f"{operation} failed: {e}")
        return {
            "status": "failed",
            "error": {"category": "error", "message": str(e)},
            "last_status": recorder.last_status,
            "events": recorder.as_dicts(),
        }

    return {"status": "success", **result, "events": recorder.as_dicts()}


# ============================================================================
# Redis Cloud
# ============================================================================


@mcp.tool()
async def cloud_create_database(
    subscription_id: int,
    name: str,
    memory_limit_in_gb: float,
    replication: bool = True,
    data_persistence: str = "none",
    data_eviction_policy: str = "volatile-lru",
    redis_version: Optional[str] = None,
    timeout_seconds: Optional[float] = None,
) -> Dict[str, Any]:
    """Create a Redis Cloud database and wait until it is active.

    Args:
        subscription_id: Subscription to create the database in
        name: Database name
        memory_limit_in_gb: Memory limit in GB (must be > 0)
        replication: Enable replication (default: true)
        data_persistence: e.g. "none", "aof-every-1-second", "snapshot-every-1-hour"
        data_eviction_policy: e.g. "volatile-lru", "allkeys-lru", "noeviction"
        redis_version: Optional Redis version
        timeout_seconds: How long to wait (default: 600)

    Returns:
        status, database (the created database) and events
    """

    async def run(recorder: RecordingObserver) -> Dict[str, Any]:
        params = build_params(
            CreateDatabaseParams,
            name=name,
            memory_limit_in_gb=memory_limit_in_gb,
            replication=replication,
            data_persistence=data_persistence,
            data_eviction_policy=data_eviction_policy,
            redis_version=redis_version,
        )
        async with _cloud_client() as client:
            database = await cloud_workflows.create_database_and_wait(
                client, subscription_id, params, timeout=timeout_seconds, observer=recorder
            )
        return {"database": database}

    return await _tracked("cloud_create_database", run)


@mcp.tool()
async def cloud_update_database(
    subscription_id: int,
    database_id: int,
    name: Optional[str] = None,
    memory_limit_in_gb: Optional[float] = None,
    replication: Optional[bool] = None,
    data_persistence: Optional[str] = None,
    data_eviction_policy: Optional[str] = None,
    timeout_seconds: Optional[float] = None,
) -> Dict[str, Any]:
    """Update a Redis Cloud database and wait for the change to apply.

    Only the fields you pass are changed; at least one is required.
    """

    async def run(recorder: RecordingObserver) -> Dict[str, Any]:
        params = build_params(
            UpdateDatabaseParams,
            name=name,
            memory_limit_in_gb=memory_limit_in_gb,
            replication=replication,
            data_persistence=data_persistence,
            data_eviction_policy=data_eviction_policy,
        )
        async with _cloud_client() as client:
            database = await cloud_workflows.update_database_and_wait(
                client,
                subscription_id,
                database_id,
                params,
                timeout=timeout_seconds,
                observer=recorder,
            )
        return {"database": database}

    return await _tracked("cloud_update_database", run)


@mcp.tool()
async def cloud_delete_database(
    subscription_id: int, database_id: int, timeout_seconds: Optional[float] = None
) -> Dict[str, Any]:
    """Delete a Redis Cloud database and wait until it is gone. This cannot be undone."""

    async def run(recorder: RecordingObserver) -> Dict[str, Any]:
        async with _cloud_client() as client:
            await cloud_workflows.delete_database_and_wait(
                client, subscription_id, database_id, timeout=timeout_seconds, observer=recorder
            )
        return {"message": f"Database {database_id} deleted"}

    return await _tracked("cloud_delete_database", run)


@mcp.tool()
async def cloud_backup_database(
    subscription_id: int,
    database_id: int,
    region_name: Optional[str] = None,
    timeout_seconds: Optional[float] = None,
) -> Dict[str, Any]:
    """Back up a Redis Cloud database and wait for the backup to finish."""

    async def run(recorder: RecordingObserver) -> Dict[str, Any]:
        async with _cloud_client() as client:
            await cloud_workflows.backup_database_and_wait(
                client,
                subscription_id,
                database_id,
                BackupDatabaseParams(region_name=region_name),
                timeout=timeout_seconds,
                observer=recorder,
            )
        return {"message": f"Database {database_id} backed up"}

    return await _tracked("cloud_backup_database", run)


@mcp.tool()
async def cloud_import_database(
    subscription_id: int,
    database_id: int,
    source_type: str,
    import_from_uri: List[str],
    timeout_seconds: Optional[float] = None,
) -> Dict[str, Any]:
    """Import data into a Redis Cloud database. Existing data is overwritten.

    Args:
        source_type: http, redis, ftp, aws-s3, azure-blob-storage or google-blob-storage
        import_from_uri: One or more source URIs
    """

    async def run(recorder: RecordingObserver) -> Dict[str, Any]:
        params = build_params(
            ImportDatabaseParams, source_type=source_type, import_from_uri=import_from_uri
        )
        async with _cloud_client() as client:
            await cloud_workflows.import_database_and_wait(
                client,
                subscription_id,
                database_id,
                params,
                timeout=timeout_seconds,
                observer=recorder,
            )
        return {"message": f"Import into database {database_id} complete"}

    return await _tracked("cloud_import_database", run)


@mcp.tool()
async def cloud_delete_subscription(
    subscription_id: int, timeout_seconds: Optional[float] = None
) -> Dict[str, Any]:
    """Delete a Redis Cloud subscription. All its databases must be deleted first."""

    async def run(recorder: RecordingObserver) -> Dict[str, Any]:
        async with _cloud_client() as client:
            await cloud_workflows.delete_subscription_and_wait(
                client, subscription_id, timeout=timeout_seconds, observer=recorder
            )
        return {"message": f"Subscription {subscription_id} deleted"}

    return await _tracked("cloud_delete_subscription", run)


@mcp.tool()
async def cloud_wait_task(
    task_id: str, timeout_seconds: Optional[float] = None, interval_seconds: Optional[float] = None
) -> Dict[str, Any]:
    """Wait for an existing Redis Cloud task to finish and return its final state."""

    async def run(recorder: RecordingObserver) -> Dict[str, Any]:
        async with _cloud_client() as client:
            snapshot = await poll(
                task_id,
                CloudTaskSource(client),
                timeout=settings.default_timeout if timeout_seconds is None else timeout_seconds,
                interval=(
                    settings.cloud_poll_interval if interval_seconds is None else interval_seconds
                ),
                observer=recorder,
            )
        return {"task": snapshot.raw}

    return await _tracked("cloud_wait_task", run, mutating=False)


# ============================================================================
# Redis Enterprise
# ============================================================================


@mcp.tool()
async def enterprise_upgrade_database(
    bdb_uid: int,
    redis_version: Optional[str] = None,
    preserve_roles: bool = False,
    timeout_seconds: Optional[float] = None,
) -> Dict[str, Any]:
    """Upgrade a Redis Enterprise database's Redis version and wait for the action.

    Leave redis_version empty to upgrade to the cluster's latest version.
    """
    request: Dict[str, Any] = {}
    if redis_version:
        request["redis_version"] = redis_version
    if preserve_roles:
        request["preserve_roles"] = True

    async def run(recorder: RecordingObserver) -> Dict[str, Any]:
        async with _enterprise_client() as client:
            database = await enterprise_workflows.upgrade_database_and_wait(
                client, bdb_uid, request, timeout=timeout_seconds, observer=recorder
            )
        return {"database": database}

    return await _tracked("enterprise_upgrade_database", run)


@mcp.tool()
async def enterprise_backup_database(
    bdb_uid: int, timeout_seconds: Optional[float] = None
) -> Dict[str, Any]:
    """Back up a Redis Enterprise database and wait for the action."""

    async def run(recorder: RecordingObserver) -> Dict[str, Any]:
        async with _enterprise_client() as client:
            await enterprise_workflows.backup_database_and_wait(
                client, bdb_uid, timeout=timeout_seconds, observer=recorder
            )
        return {"message": f"Database {bdb_uid} backed up"}

    return await _tracked("enterprise_backup_database", run)


@mcp.tool()
async def enterprise_import_database(
    bdb_uid: int,
    import_location: str,
    flush: bool = False,
    timeout_seconds: Optional[float] = None,
) -> Dict[str, Any]:
    """Import data into a Redis Enterprise database.

    WARNING: with flush=true existing data is deleted before the import.
    """

    async def run(recorder: RecordingObserver) -> Dict[str, Any]:
        async with _enterprise_client() as client:
            await enterprise_workflows.import_database_and_wait(
                client,
                bdb_uid,
                import_location,
                flush,
                timeout=timeout_seconds,
                observer=recorder,
            )
        return {"message": f"Import into database {bdb_uid} complete"}

    return await _tracked("enterprise_import_database", run)


@mcp.tool()
async def enterprise_wait_action(
    action_uid: str,
    timeout_seconds: Optional[float] = None,
    interval_seconds: Optional[float] = None,
) -> Dict[str, Any]:
    """Wait for an existing Redis Enterprise action to finish and return its final state."""

    async def run(recorder: RecordingObserver) -> Dict[str, Any]:
        async with _enterprise_client() as client:
            snapshot = await poll(
                action_uid,
                EnterpriseActionSource(client),
                timeout=settings.default_timeout if timeout_seconds is None else timeout_seconds,
                interval=(
                    settings.enterprise_poll_interval
                    if interval_seconds is None
                    else interval_seconds
                ),
                observer=recorder,
            )
        return {"action": snapshot.raw}

    return await _tracked("enterprise_wait_action", run, mutating=False)


# ============================================================================
# Server runners
# ============================================================================


def run_stdio():
    """Run the MCP server in stdio mode."""
    mcp.run(transport="stdio")


def run_http(host: str = "127.0.0.1", port: int = 8081):
    """Run the MCP server in HTTP mode (Streamable HTTP).

    Args:
        host: Host to bind to
        port: Port to listen on (default 8081)
    """
    import asyncio

    mcp.settings.host = host
    mcp.settings.port = port
    asyncio.run(mcp.run_streamable_http_async())
