"""Operation-tracking core shared by the Redis Cloud and Redis Enterprise layers.

Example usage:
    from redisctl.core import poll, CLIObserver
    from redisctl.cloud import CloudClient, CloudTaskSource

    async with CloudClient() as client:
        task = await client.create_database(subscription_id, request)
        snapshot = await poll(
            task["taskId"],
            CloudTaskSource(client),
            timeout=600,
            interval=10,
            observer=CLIObserver(),
        )
"""

from .errors import (
    ApiError,
    ConfigError,
    CoreError,
    TaskFailedError,
    TaskTimeoutError,
    ValidationError,
)
from .poller import StatusSnapshot, StatusSource, poll
from .progress import (
    CLIObserver,
    Completed,
    CompositeObserver,
    Failed,
    LoggingObserver,
    Polling,
    ProgressEmitter,
    ProgressEvent,
    ProgressObserver,
    RecordingObserver,
    Started,
    create_observer,
)
from .status import (
    CLOUD_TASK_STATUSES,
    ENTERPRISE_ACTION_STATUSES,
    Phase,
    StatusVocabulary,
    classify,
)
from .workflows import WorkflowKind, extract_handle, run_workflow, submit_operation

__all__ = [
    "ApiError",
    "CLIObserver",
    "CLOUD_TASK_STATUSES",
    "Completed",
    "CompositeObserver",
    "ConfigError",
    "CoreError",
    "ENTERPRISE_ACTION_STATUSES",
    "Failed",
    "LoggingObserver",
    "Phase",
    "Polling",
    "ProgressEmitter",
    "ProgressEvent",
    "ProgressObserver",
    "RecordingObserver",
    "Started",
    "StatusSnapshot",
    "StatusSource",
    "StatusVocabulary",
    "TaskFailedError",
    "TaskTimeoutError",
    "ValidationError",
    "WorkflowKind",
    "classify",
    "create_observer",
    "extract_handle",
    "poll",
    "run_workflow",
    "submit_operation",
]
