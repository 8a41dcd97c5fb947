"""Submit -> poll -> finalize workflows for asynchronous remote operations.

Every mutating Redis Cloud / Redis Enterprise call that answers with a task or
action handle goes through ``run_workflow``:

1. **Submit** - perform the mutating call and extract the handle. A response
   without a handle is a contract violation and fails the workflow; note the
   remote mutation may already be underway at that point.
2. **Poll** - ``poll()`` until a terminal phase or the deadline. Polling errors
   are returned unchanged and nothing else runs.
3. **Finalize** - for create/update/upgrade, fetch the resulting resource by
   id and return it. For create the id comes from the completed snapshot; a
   success without one is an error. If this fetch fails, the workflow fails
   with that error even though the remote operation already succeeded.

Delete, backup, import and flush skip step 3 and return ``None``.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence, TypeVar, Union, cast

from redisctl.core.errors import ApiError, CoreError, TaskFailedError, TaskTimeoutError
from redisctl.core.poller import StatusSource, poll
from redisctl.core.progress import ProgressObserver
from redisctl.observability.metrics import record_workflow_outcome
from redisctl.observability.tracing import ATTR_HANDLE, add_span_attributes

logger = logging.getLogger(__name__)

T = TypeVar("T")
ResourceId = Union[int, str]
Submit = Callable[[], Awaitable[Dict[str, Any]]]
FetchResource = Callable[[ResourceId], Awaitable[T]]

DEFAULT_HANDLE_KEYS: Sequence[str] = ("taskId", "task_id", "action_uid")
MISSING_HANDLE_MESSAGE = "No task ID returned"
MISSING_RESOURCE_MESSAGE = "No resource ID in completed task"


class WorkflowKind(str, Enum):
    """Kinds of mutating operation a workflow can track."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    BACKUP = "backup"
    IMPORT = "import"
    UPGRADE = "upgrade"
    FLUSH = "flush"

    @property
    def fetches_result(self) -> bool:
        """Whether the workflow returns the finalized resource."""
        return self in (WorkflowKind.CREATE, WorkflowKind.UPDATE, WorkflowKind.UPGRADE)


def extract_handle(response: Any, keys: Sequence[str] = DEFAULT_HANDLE_KEYS) -> Optional[str]:
    """Return the first non-empty handle found under ``keys``.

    Dotted keys address nested objects, e.g. ``"response.id"``.
    """
    if not isinstance(response, dict):
        return None
    for key in keys:
        value: Any = response
        for part in key.split("."):
            value = value.get(part) if isinstance(value, dict) else None
            if value is None:
                break
        if value is not None and str(value):
            return str(value)
    return None


async def submit_operation(
    submit: Submit,
    *,
    handle_keys: Sequence[str] = DEFAULT_HANDLE_KEYS,
    missing_handle_message: str = MISSING_HANDLE_MESSAGE,
) -> str:
    """Run the mutating call and return the handle it produced."""
    response = await submit()
    handle = extract_handle(response, handle_keys)
    if handle is None:
        logger.error(f"Mutating call returned no handle (looked for {list(handle_keys)})")
        raise TaskFailedError(missing_handle_message)
    return handle


def _outcome(error: BaseException) -> str:
    if isinstance(error, TaskTimeoutError):
        return "timeout"
    if isinstance(error, TaskFailedError):
        return "failed"
    if isinstance(error, ApiError):
        return "api_error"
    return "error"


async def run_workflow(
    kind: WorkflowKind,
    submit: Submit,
    source: StatusSource,
    *,
    timeout: float,
    interval: float,
    observer: Optional[ProgressObserver] = None,
    fetch_resource: Optional[FetchResource] = None,
    resource_id: Optional[ResourceId] = None,
    handle_keys: Sequence[str] = DEFAULT_HANDLE_KEYS,
    missing_handle_message: str = MISSING_HANDLE_MESSAGE,
) -> Any:
    """Submit an operation, wait for it, and optionally fetch the result.

    Args:
        kind: The kind of operation; decides whether a finalize fetch runs.
        submit: Zero-argument coroutine factory performing the mutating call.
        source: Status source for the vendor that issues the handle.
        timeout: Seconds to wait for a terminal status.
        interval: Fixed seconds between status fetches.
        observer: Optional progress observer.
        fetch_resource: Coroutine fetching the finalized resource by id.
            Required when ``kind.fetches_result``.
        resource_id: Id of the resource being changed, for update/upgrade.
            Create takes the id from the completed snapshot instead.
        handle_keys: Response keys that may hold the handle.
        missing_handle_message: Error message when no handle is returned.

    Returns:
        The finalized resource for create/update/upgrade, otherwise ``None``.
    """
    platform = source.vocabulary.name
    if kind.fetches_result and fetch_resource is None:
        raise ValueError(f"{kind.value} workflow requires fetch_resource")
    if kind in (WorkflowKind.UPDATE, WorkflowKind.UPGRADE) and resource_id is None:
        raise ValueError(f"{kind.value} workflow requires resource_id")

    try:
        handle = await submit_operation(
            submit, handle_keys=handle_keys, missing_handle_message=missing_handle_message
        )
        logger.info(f"Submitted {platform} {kind.value} operation, handle {handle}")
        add_span_attributes({ATTR_HANDLE: handle})

        snapshot = await poll(
            handle, source, timeout=timeout, interval=interval, observer=observer
        )

        if not kind.fetches_result:
            record_workflow_outcome(platform, kind.value, "success")
            return None

        target = resource_id
        if kind is WorkflowKind.CREATE:
            target = snapshot.resource_id
            if target is None:
                raise TaskFailedError(MISSING_RESOURCE_MESSAGE, last_snapshot=snapshot)

        try:
            resource = await cast(FetchResource, fetch_resource)(cast(ResourceId, target))
        except CoreError:
            logger.error(
                f"{platform} {kind.value} operation {handle} succeeded remotely "
                f"but fetching resource {target} failed"
            )
            raise
        record_workflow_outcome(platform, kind.value, "success")
        return resource
    except CoreError as e:
        record_workflow_outcome(platform, kind.value, _outcome(e))
        raise


async def create_and_wait(
    submit: Submit,
    source: StatusSource,
    fetch_resource: FetchResource,
    *,
    timeout: float,
    interval: float,
    observer: Optional[ProgressObserver] = None,
    **options: Any,
) -> Any:
    """Create a resource and return it once the remote task completes."""
    return await run_workflow(
        WorkflowKind.CREATE,
        submit,
        source,
        timeout=timeout,
        interval=interval,
        observer=observer,
        fetch_resource=fetch_resource,
        **options,
    )


async def update_and_wait(
    submit: Submit,
    source: StatusSource,
    fetch_resource: FetchResource,
    resource_id: ResourceId,
    *,
    timeout: float,
    interval: float,
    observer: Optional[ProgressObserver] = None,
    **options: Any,
) -> Any:
    """Update ``resource_id`` and return its state once the task completes."""
    return await run_workflow(
        WorkflowKind.UPDATE,
        submit,
        source,
        timeout=timeout,
        interval=interval,
        observer=observer,
        fetch_resource=fetch_resource,
        resource_id=resource_id,
        **options,
    )


async def upgrade_and_wait(
    submit: Submit,
    source: StatusSource,
    fetch_resource: FetchResource,
    resource_id: ResourceId,
    *,
    timeout: float,
    interval: float,
    observer: Optional[ProgressObserver] = None,
    **options: Any,
) -> Any:
    """Upgrade ``resource_id`` and return its state once the action completes."""
    return await run_workflow(
        WorkflowKind.UPGRADE,
        submit,
        source,
        timeout=timeout,
        interval=interval,
        observer=observer,
        fetch_resource=fetch_resource,
        resource_id=resource_id,
        **options,
    )


async def delete_and_wait(
    submit: Submit,
    source: StatusSource,
    *,
    timeout: float,
    interval: float,
    observer: Optional[ProgressObserver] = None,
    **options: Any,
) -> None:
    await run_workflow(
        WorkflowKind.DELETE,
        submit,
        source,
        timeout=timeout,
        interval=interval,
        observer=observer,
        **options,
    )


async def backup_and_wait(
    submit: Submit,
    source: StatusSource,
    *,
    timeout: float,
    interval: float,
    observer: Optional[ProgressObserver] = None,
    **options: Any,
) -> None:
    await run_workflow(
        WorkflowKind.BACKUP,
        submit,
        source,
        timeout=timeout,
        interval=interval,
        observer=observer,
        **options,
    )


async def import_and_wait(
    submit: Submit,
    source: StatusSource,
    *,
    timeout: float,
    interval: float,
    observer: Optional[ProgressObserver] = None,
    **options: Any,
) -> None:
    await run_workflow(
        WorkflowKind.IMPORT,
        submit,
        source,
        timeout=timeout,
        interval=interval,
        observer=observer,
        **options,
    )


async def flush_and_wait(
    submit: Submit,
    source: StatusSource,
    *,
    timeout: float,
    interval: float,
    observer: Optional[ProgressObserver] = None,
    **options: Any,
) -> None:
    await run_workflow(
        WorkflowKind.FLUSH,
        submit,
        source,
        timeout=timeout,
        interval=interval,
        observer=observer,
        **options,
    )
