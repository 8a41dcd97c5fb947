"""Polling engine for asynchronous remote operations.

A mutating call against Redis Cloud or Redis Enterprise returns a handle (a
Cloud task id or an Enterprise action uid). ``poll()`` fetches the status of
that handle at a fixed interval until the vendor reports a terminal status or
the deadline passes:

    NotStarted -> Polling -> Succeeded | Failed | TimedOut

Ordering within each iteration:

1. The deadline is checked *before* fetching. Once elapsed time exceeds the
   timeout no further fetch is issued, so a poll can overrun its deadline by at
   most one fetch plus one interval.
2. Exactly one status fetch. Errors from the fetch propagate unchanged; there
   is no retry here.
3. The status is classified with the source's vocabulary. Only a pending
   status sleeps before the next iteration.

Both suspension points (the fetch and the sleep) are ordinary awaits, so
cancelling the surrounding task stops the poll immediately.
"""

from __future__ import annotations

import asyncio
import logging
from time import monotonic
from typing import Any, Dict, Optional, Protocol, Union, runtime_checkable

from pydantic import BaseModel, Field

from redisctl.core.errors import TaskFailedError, TaskTimeoutError, ValidationError
from redisctl.core.progress import ProgressEmitter, ProgressObserver
from redisctl.core.status import Phase, StatusVocabulary, classify
from redisctl.observability.metrics import observe_poll_duration, record_poll_fetch
from redisctl.observability.tracing import (
    ATTR_FETCHES,
    ATTR_STATUS,
    add_span_attributes,
    poll_span,
)

logger = logging.getLogger(__name__)


class StatusSnapshot(BaseModel):
    """One read of a remote operation's status resource."""

    status: str = ""
    progress: Optional[float] = None
    error: Optional[str] = None
    resource_id: Optional[Union[int, str]] = None
    raw: Dict[str, Any] = Field(default_factory=dict)


@runtime_checkable
class StatusSource(Protocol):
    """Capability the poller needs: fetch a snapshot and classify its status."""

    vocabulary: StatusVocabulary

    async def fetch_status(self, handle: str) -> StatusSnapshot: ...


async def poll(
    handle: str,
    source: StatusSource,
    *,
    timeout: float,
    interval: float,
    observer: Optional[ProgressObserver] = None,
) -> StatusSnapshot:
    """Poll ``handle`` until it reaches a terminal phase.

    Args:
        handle: Task id / action uid returned by the submitting call.
        source: Status source for the vendor that issued the handle.
        timeout: Seconds to wait before giving up.
        interval: Fixed seconds between pending fetches.
        observer: Optional callable receiving progress events.

    Returns:
        The succeeded snapshot.

    Raises:
        TaskTimeoutError: The deadline passed while the operation was pending.
        TaskFailedError: The operation failed or was cancelled.
        ValidationError: Invalid handle, timeout, or interval.
        Any exception raised by ``source.fetch_status`` is propagated as-is.
    """
    if not handle:
        raise ValidationError("Operation handle must not be empty")
    if timeout < 0:
        raise ValidationError(f"timeout must be >= 0, got {timeout}")
    if interval < 0:
        raise ValidationError(f"interval must be >= 0, got {interval}")

    vocabulary = source.vocabulary
    platform = vocabulary.name
    emitter = ProgressEmitter(handle, observer)
    last: Optional[StatusSnapshot] = None
    fetches = 0
    start = monotonic()

    emitter.started()
    logger.debug(f"Polling {platform} operation {handle} (timeout={timeout}s, interval={interval}s)")

    with poll_span(platform, handle):
        while True:
            elapsed = monotonic() - start
            if elapsed > timeout:
                logger.warning(
                    f"{platform} operation {handle} timed out after {timeout}s "
                    f"(last status: {last.status if last else 'unknown'})"
                )
                add_span_attributes({ATTR_FETCHES: fetches, ATTR_STATUS: "timeout"})
                observe_poll_duration(platform, "timeout", elapsed)
                raise TaskTimeoutError(timeout, last_snapshot=last)

            snapshot = await source.fetch_status(handle)
            fetches += 1
            record_poll_fetch(platform)
            last = snapshot
            phase = classify(snapshot.status, vocabulary)

            if phase is Phase.PENDING:
                logger.debug(
                    f"{platform} operation {handle}: {snapshot.status or 'unknown'} ({elapsed:.0f}s)"
                )
                emitter.polling(snapshot.status, elapsed, snapshot.progress)
                await asyncio.sleep(interval)
                continue

            add_span_attributes({ATTR_FETCHES: fetches, ATTR_STATUS: snapshot.status})

            if phase is Phase.SUCCEEDED:
                logger.info(
                    f"{platform} operation {handle} completed"
                    + (
                        f" (resource {snapshot.resource_id})"
                        if snapshot.resource_id is not None
                        else ""
                    )
                )
                emitter.completed(snapshot.resource_id)
                observe_poll_duration(platform, "success", monotonic() - start)
                return snapshot

            message = snapshot.error or vocabulary.describe_failure(snapshot.status, phase)
            logger.warning(f"{platform} operation {handle} {phase.value}: {message}")
            emitter.failed(message)
            observe_poll_duration(platform, phase.value, monotonic() - start)
            raise TaskFailedError(message, last_snapshot=snapshot)
