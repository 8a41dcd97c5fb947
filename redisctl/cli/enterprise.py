"""Redis Enterprise CLI commands."""

from __future__ import annotations

from typing import Optional

import click
from pydantic import ValidationError as PydanticValidationError

from redisctl.cli._common import progress_observer, resolve_wait, run_command, wait_options
from redisctl.core.errors import ConfigError
from redisctl.core.poller import poll
from redisctl.enterprise import workflows
from redisctl.enterprise.actions import EnterpriseActionSource
from redisctl.enterprise.client import EnterpriseClient, RedisEnterpriseConfig


def _client() -> EnterpriseClient:
    try:
        return EnterpriseClient(RedisEnterpriseConfig())
    except PydanticValidationError as e:
        raise ConfigError(
            f"Redis Enterprise cluster URL missing; set REDIS_ENTERPRISE_URL ({e.error_count()} invalid field(s))"
        ) from e


@click.group()
def enterprise():
    """Redis Enterprise cluster operations"""
    pass


@enterprise.group()
def database():
    """Upgrade, back up and import Redis Enterprise databases"""
    pass


@enterprise.group()
def action():
    """Inspect Redis Enterprise actions"""
    pass


@database.command("upgrade")
@click.argument("bdb_uid", type=int)
@click.option("--version", "redis_version", default=None, help="Target Redis version (default: latest)")
@click.option("--preserve-roles", is_flag=True, help="Preserve master/replica roles")
@click.option("--force-restart", is_flag=True, help="Restart shards even if no upgrade is needed")
@wait_options
def database_upgrade(
    bdb_uid: int,
    redis_version: Optional[str],
    preserve_roles: bool,
    force_restart: bool,
    timeout: Optional[float],
    interval: Optional[float],
    as_json: bool,
    no_color: bool,
):
    """Upgrade a database's Redis version and wait for the action."""
    request = {}
    if redis_version:
        request["redis_version"] = redis_version
    if preserve_roles:
        request["preserve_roles"] = True
    if force_restart:
        request["force_restart"] = True

    async def _upgrade():
        async with _client() as client:
            return await workflows.upgrade_database_and_wait(
                client,
                bdb_uid,
                request,
                observer=progress_observer(as_json, no_color),
                **resolve_wait(timeout, interval),
            )

    run_command(_upgrade, as_json=as_json, success_message="Database upgraded", title="Database")


@database.command("upgrade-module")
@click.argument("bdb_uid", type=int)
@click.option("--module", "module_name", required=True, help="Module name (e.g. search, json)")
@click.option("--version", "new_version", default=None, help="Target module version")
@wait_options
def database_upgrade_module(
    bdb_uid: int,
    module_name: str,
    new_version: Optional[str],
    timeout: Optional[float],
    interval: Optional[float],
    as_json: bool,
    no_color: bool,
):
    """Upgrade a module on a database and wait for the action."""

    async def _upgrade():
        async with _client() as client:
            return await workflows.upgrade_module_and_wait(
                client,
                bdb_uid,
                module_name,
                new_version,
                observer=progress_observer(as_json, no_color),
                **resolve_wait(timeout, interval),
            )

    run_command(
        _upgrade, as_json=as_json, success_message=f"Module {module_name} upgraded", title="Database"
    )


@database.command("backup")
@click.argument("bdb_uid", type=int)
@wait_options
def database_backup(
    bdb_uid: int,
    timeout: Optional[float],
    interval: Optional[float],
    as_json: bool,
    no_color: bool,
):
    """Back up a database and wait for the action."""

    async def _backup():
        async with _client() as client:
            await workflows.backup_database_and_wait(
                client,
                bdb_uid,
                observer=progress_observer(as_json, no_color),
                **resolve_wait(timeout, interval),
            )

    run_command(_backup, as_json=as_json, success_message=f"Database {bdb_uid} backed up")


@database.command("import")
@click.argument("bdb_uid", type=int)
@click.option("--location", required=True, help="Import source URL")
@click.option("--flush", is_flag=True, help="Delete existing data before importing")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@wait_options
def database_import(
    bdb_uid: int,
    location: str,
    flush: bool,
    yes: bool,
    timeout: Optional[float],
    interval: Optional[float],
    as_json: bool,
    no_color: bool,
):
    """Import data into a database and wait for the action."""
    if flush and not yes:
        click.confirm(f"Flush database {bdb_uid} before import?", abort=True)

    async def _import():
        async with _client() as client:
            await workflows.import_database_and_wait(
                client,
                bdb_uid,
                location,
                flush,
                observer=progress_observer(as_json, no_color),
                **resolve_wait(timeout, interval),
            )

    run_command(_import, as_json=as_json, success_message=f"Import into {bdb_uid} complete")


@action.command("wait")
@click.argument("action_uid")
@wait_options
def action_wait(
    action_uid: str,
    timeout: Optional[float],
    interval: Optional[float],
    as_json: bool,
    no_color: bool,
):
    """Wait for an existing action to reach a terminal status."""

    async def _wait():
        async with _client() as client:
            snapshot = await poll(
                action_uid,
                EnterpriseActionSource(client),
                observer=progress_observer(as_json, no_color),
                **resolve_wait(timeout, interval),
            )
        return snapshot.raw

    run_command(
        _wait, as_json=as_json, success_message=f"Action {action_uid} completed", title="Action"
    )
