"""Redis Cloud CLI commands.

Every mutating command submits the request, then waits for the Redis Cloud
task to finish while printing progress to stderr.
"""

from __future__ import annotations

from typing import Optional, Tuple

import click
from pydantic import ValidationError as PydanticValidationError

from redisctl.cli._common import (
    load_json_body,
    progress_observer,
    resolve_wait,
    run_command,
    wait_options,
)
from redisctl.cloud import workflows
from redisctl.cloud.client import CloudClient, RedisCloudConfig
from redisctl.cloud.params import (
    BackupDatabaseParams,
    CreateDatabaseParams,
    ImportDatabaseParams,
    UpdateDatabaseParams,
    build_params,
)
from redisctl.cloud.tasks import CloudTaskSource
from redisctl.core.errors import ConfigError
from redisctl.core.poller import poll


def _client() -> CloudClient:
    try:
        return CloudClient(RedisCloudConfig())
    except PydanticValidationError as e:
        raise ConfigError(
            "Redis Cloud credentials missing; set REDIS_CLOUD_API_KEY and "
            f"REDIS_CLOUD_API_SECRET_KEY ({e.error_count()} invalid field(s))"
        ) from e


def _confirm(yes: bool, message: str) -> None:
    if not yes:
        click.confirm(message, abort=True)


@click.group()
def cloud():
    """Redis Cloud operations"""
    pass


@cloud.group()
def database():
    """Create, change and maintain Redis Cloud databases"""
    pass


@cloud.group()
def subscription():
    """Create, change and delete Redis Cloud subscriptions"""
    pass


@cloud.group()
def task():
    """Inspect Redis Cloud tasks"""
    pass


# ---------------------------- database ---------------------------- #


@database.command("create")
@click.argument("subscription_id", type=int)
@click.option("--name", required=True, help="Database name")
@click.option("--memory", "memory_gb", type=float, required=True, help="Memory limit in GB")
@click.option("--replication/--no-replication", default=True, help="Enable replication")
@click.option("--protocol", default="redis", help="redis or memcached")
@click.option("--persistence", default="none", help="Data persistence (e.g. none, aof-every-1-second)")
@click.option("--eviction-policy", default="volatile-lru", help="Data eviction policy")
@click.option("--redis-version", default=None, help="Redis version")
@click.option("--oss-cluster/--no-oss-cluster", default=None, help="OSS Cluster API support")
@click.option("--port", type=int, default=None, help="Port (10000-19999)")
@wait_options
def database_create(
    subscription_id: int,
    name: str,
    memory_gb: float,
    replication: bool,
    protocol: str,
    persistence: str,
    eviction_policy: str,
    redis_version: Optional[str],
    oss_cluster: Optional[bool],
    port: Optional[int],
    timeout: Optional[float],
    interval: Optional[float],
    as_json: bool,
    no_color: bool,
):
    """Create a database and wait until it is active."""

    async def _create():
        params = build_params(
            CreateDatabaseParams,
            name=name,
            memory_limit_in_gb=memory_gb,
            replication=replication,
            protocol=protocol,
            data_persistence=persistence,
            data_eviction_policy=eviction_policy,
            redis_version=redis_version,
            support_oss_cluster_api=oss_cluster,
            port=port,
        )
        async with _client() as client:
            return await workflows.create_database_and_wait(
                client,
                subscription_id,
                params,
                observer=progress_observer(as_json, no_color),
                **resolve_wait(timeout, interval),
            )

    run_command(_create, as_json=as_json, success_message="Database created", title="Database")


@database.command("update")
@click.argument("subscription_id", type=int)
@click.argument("database_id", type=int)
@click.option("--name", default=None, help="New database name")
@click.option("--memory", "memory_gb", type=float, default=None, help="Memory limit in GB")
@click.option("--replication/--no-replication", default=None, help="Enable replication")
@click.option("--persistence", default=None, help="Data persistence")
@click.option("--eviction-policy", default=None, help="Data eviction policy")
@click.option("--oss-cluster/--no-oss-cluster", default=None, help="OSS Cluster API support")
@wait_options
def database_update(
    subscription_id: int,
    database_id: int,
    name: Optional[str],
    memory_gb: Optional[float],
    replication: Optional[bool],
    persistence: Optional[str],
    eviction_policy: Optional[str],
    oss_cluster: Optional[bool],
    timeout: Optional[float],
    interval: Optional[float],
    as_json: bool,
    no_color: bool,
):
    """Update a database and wait for the change to apply."""

    async def _update():
        params = build_params(
            UpdateDatabaseParams,
            name=name,
            memory_limit_in_gb=memory_gb,
            replication=replication,
            data_persistence=persistence,
            data_eviction_policy=eviction_policy,
            support_oss_cluster_api=oss_cluster,
        )
        async with _client() as client:
            return await workflows.update_database_and_wait(
                client,
                subscription_id,
                database_id,
                params,
                observer=progress_observer(as_json, no_color),
                **resolve_wait(timeout, interval),
            )

    run_command(_update, as_json=as_json, success_message="Database updated", title="Database")


@database.command("delete")
@click.argument("subscription_id", type=int)
@click.argument("database_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@wait_options
def database_delete(
    subscription_id: int,
    database_id: int,
    yes: bool,
    timeout: Optional[float],
    interval: Optional[float],
    as_json: bool,
    no_color: bool,
):
    """Delete a database and wait until it is gone."""
    _confirm(yes, f"Delete database {database_id} in subscription {subscription_id}?")

    async def _delete():
        async with _client() as client:
            await workflows.delete_database_and_wait(
                client,
                subscription_id,
                database_id,
                observer=progress_observer(as_json, no_color),
                **resolve_wait(timeout, interval),
            )

    run_command(_delete, as_json=as_json, success_message=f"Database {database_id} deleted")


@database.command("backup")
@click.argument("subscription_id", type=int)
@click.argument("database_id", type=int)
@click.option("--region", default=None, help="Region to back up (Active-Active only)")
@wait_options
def database_backup(
    subscription_id: int,
    database_id: int,
    region: Optional[str],
    timeout: Optional[float],
    interval: Optional[float],
    as_json: bool,
    no_color: bool,
):
    """Back up a database and wait for the backup to finish."""

    async def _backup():
        async with _client() as client:
            await workflows.backup_database_and_wait(
                client,
                subscription_id,
                database_id,
                BackupDatabaseParams(region_name=region),
                observer=progress_observer(as_json, no_color),
                **resolve_wait(timeout, interval),
            )

    run_command(_backup, as_json=as_json, success_message=f"Database {database_id} backed up")


@database.command("import")
@click.argument("subscription_id", type=int)
@click.argument("database_id", type=int)
@click.option("--source-type", required=True, help="http, redis, ftp, aws-s3, ...")
@click.option("--uri", "uris", multiple=True, required=True, help="Source URI (repeatable)")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@wait_options
def database_import(
    subscription_id: int,
    database_id: int,
    source_type: str,
    uris: Tuple[str, ...],
    yes: bool,
    timeout: Optional[float],
    interval: Optional[float],
    as_json: bool,
    no_color: bool,
):
    """Import data into a database. Existing data is overwritten."""
    _confirm(yes, f"Import into database {database_id}? Existing data will be overwritten")

    async def _import():
        params = build_params(
            ImportDatabaseParams, source_type=source_type, import_from_uri=list(uris)
        )
        async with _client() as client:
            await workflows.import_database_and_wait(
                client,
                subscription_id,
                database_id,
                params,
                observer=progress_observer(as_json, no_color),
                **resolve_wait(timeout, interval),
            )

    run_command(_import, as_json=as_json, success_message=f"Import into {database_id} complete")


@database.command("flush")
@click.argument("subscription_id", type=int)
@click.argument("database_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@wait_options
def database_flush(
    subscription_id: int,
    database_id: int,
    yes: bool,
    timeout: Optional[float],
    interval: Optional[float],
    as_json: bool,
    no_color: bool,
):
    """Remove all data from a database."""
    _confirm(yes, f"Flush all data from database {database_id}?")

    async def _flush():
        async with _client() as client:
            await workflows.flush_database_and_wait(
                client,
                subscription_id,
                database_id,
                observer=progress_observer(as_json, no_color),
                **resolve_wait(timeout, interval),
            )

    run_command(_flush, as_json=as_json, success_message=f"Database {database_id} flushed")


# ---------------------------- subscription ---------------------------- #


@subscription.command("create")
@click.option("--data", required=True, help="Request body as JSON or @file.json")
@wait_options
def subscription_create(
    data: str,
    timeout: Optional[float],
    interval: Optional[float],
    as_json: bool,
    no_color: bool,
):
    """Create a subscription and wait until it is provisioned."""

    async def _create():
        body = load_json_body(data)
        async with _client() as client:
            return await workflows.create_subscription_and_wait(
                client,
                body,
                observer=progress_observer(as_json, no_color),
                **resolve_wait(timeout, interval),
            )

    run_command(
        _create, as_json=as_json, success_message="Subscription created", title="Subscription"
    )


@subscription.command("update")
@click.argument("subscription_id", type=int)
@click.option("--data", required=True, help="Request body as JSON or @file.json")
@wait_options
def subscription_update(
    subscription_id: int,
    data: str,
    timeout: Optional[float],
    interval: Optional[float],
    as_json: bool,
    no_color: bool,
):
    """Update a subscription and wait for the change to apply."""

    async def _update():
        body = load_json_body(data)
        async with _client() as client:
            return await workflows.update_subscription_and_wait(
                client,
                subscription_id,
                body,
                observer=progress_observer(as_json, no_color),
                **resolve_wait(timeout, interval),
            )

    run_command(
        _update, as_json=as_json, success_message="Subscription updated", title="Subscription"
    )


@subscription.command("delete")
@click.argument("subscription_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@wait_options
def subscription_delete(
    subscription_id: int,
    yes: bool,
    timeout: Optional[float],
    interval: Optional[float],
    as_json: bool,
    no_color: bool,
):
    """Delete a subscription (its databases must be deleted first)."""
    _confirm(yes, f"Delete subscription {subscription_id}?")

    async def _delete():
        async with _client() as client:
            await workflows.delete_subscription_and_wait(
                client,
                subscription_id,
                observer=progress_observer(as_json, no_color),
                **resolve_wait(timeout, interval),
            )

    run_command(
        _delete, as_json=as_json, success_message=f"Subscription {subscription_id} deleted"
    )


# ---------------------------- task ---------------------------- #


@task.command("wait")
@click.argument("task_id")
@wait_options
def task_wait(
    task_id: str,
    timeout: Optional[float],
    interval: Optional[float],
    as_json: bool,
    no_color: bool,
):
    """Wait for an existing task to reach a terminal status."""

    async def _wait():
        async with _client() as client:
            snapshot = await poll(
                task_id,
                CloudTaskSource(client),
                observer=progress_observer(as_json, no_color),
                **resolve_wait(timeout, interval),
            )
        return snapshot.raw

    run_command(_wait, as_json=as_json, success_message=f"Task {task_id} completed", title="Task")
