"""Progress events and observers for tracked remote operations.

A poll emits a strictly ordered stream of events to at most one observer:

- ``Started``    - always first, exactly once.
- ``Polling``    - once per fetch that is still pending.
- ``Completed``  - terminal, the operation succeeded.
- ``Failed``     - terminal, the operation failed or was cancelled.

Nothing follows a terminal event. A poll that times out ends without one.

Observers are plain synchronous callables ``(event) -> None`` run on the
poller's own task. They must be fast and must not raise; an exception from an
observer propagates out of the poll unchanged.

Observers:
    - LoggingObserver: Logs each event. Useful for workers and debugging.
    - CLIObserver: Prints events to the terminal with rich.
    - RecordingObserver: Keeps events in memory (MCP tool results, tests).
    - CompositeObserver: Fans one event out to several observers.

Example:
    observer = CompositeObserver([CLIObserver(), LoggingObserver()])
    snapshot = await poll(task_id, source, timeout=600, interval=10, observer=observer)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal, Optional, Protocol, Union, runtime_checkable

from pydantic import BaseModel, ConfigDict
from rich.console import Console

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)

    handle: str


class Started(_Event):
    """Polling has begun for ``handle``."""

    kind: Literal["started"] = "started"


class Polling(_Event):
    """One pending fetch: raw status, seconds since start, optional percentage."""

    kind: Literal["polling"] = "polling"
    status: str
    elapsed: float
    progress: Optional[float] = None


class Completed(_Event):
    """The operation succeeded; ``resource_id`` identifies what it produced, if known."""

    kind: Literal["completed"] = "completed"
    resource_id: Optional[Union[int, str]] = None


class Failed(_Event):
    """The operation failed or was cancelled."""

    kind: Literal["failed"] = "failed"
    error: str


ProgressEvent = Union[Started, Polling, Completed, Failed]


@runtime_checkable
class ProgressObserver(Protocol):
    """Receives progress events. Any ``(event) -> None`` callable qualifies."""

    def __call__(self, event: ProgressEvent) -> None: ...


# ---------------------------------------------------------------------------
# Emitter
# ---------------------------------------------------------------------------


class ProgressEmitter:
    """Turns poller transitions into events for zero-or-one observer.

    With no observer every method returns immediately. Once a terminal event
    has been emitted the emitter is closed and refuses further events.
    """

    def __init__(self, handle: str, observer: Optional[ProgressObserver] = None):
        self._handle = handle
        self._observer = observer
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError(f"Progress for {self._handle} already reached a terminal event")

    def started(self) -> None:
        self._check_open()
        if self._observer is not None:
            self._observer(Started(handle=self._handle))

    def polling(self, status: str, elapsed: float, progress: Optional[float] = None) -> None:
        self._check_open()
        if self._observer is not None:
            self._observer(
                Polling(handle=self._handle, status=status, elapsed=elapsed, progress=progress)
            )

    def completed(self, resource_id: Optional[Union[int, str]] = None) -> None:
        self._check_open()
        self._closed = True
        if self._observer is not None:
            self._observer(Completed(handle=self._handle, resource_id=resource_id))

    def failed(self, error: str) -> None:
        self._check_open()
        self._closed = True
        if self._observer is not None:
            self._observer(Failed(handle=self._handle, error=error))


# ---------------------------------------------------------------------------
# Observers
# ---------------------------------------------------------------------------


def describe_event(event: ProgressEvent) -> str:
    """Render an event as a single human-readable line."""
    if isinstance(event, Started):
        return f"Task {event.handle} started"
    if isinstance(event, Polling):
        line = f"Task {event.handle}: {event.status} ({event.elapsed:.0f}s)"
        if event.progress is not None:
            line += f" {event.progress:.0f}%"
        return line
    if isinstance(event, Completed):
        if event.resource_id is not None:
            return f"Task {event.handle} completed (resource {event.resource_id})"
        return f"Task {event.handle} completed"
    return f"Task {event.handle} failed: {event.error}"


class LoggingObserver:
    """Observer that logs events."""

    def __init__(self, logger_name: str = __name__, level: int = logging.INFO):
        self._logger = logging.getLogger(logger_name)
        self._level = level

    def __call__(self, event: ProgressEvent) -> None:
        level = logging.WARNING if isinstance(event, Failed) else self._level
        self._logger.log(level, f"[{event.kind}] {describe_event(event)}")


class CLIObserver:
    """Observer that prints events to the terminal.

    Status strings are decorated with a symbol for their family (done, failed,
    cancelled, running) so long polls are easy to follow.
    """

    EVENT_STYLES = {
        "started": ("📋", "blue"),
        "polling": ("↻", "dim"),
        "completed": ("✅", "green"),
        "failed": ("❌", "red"),
    }

    STATUS_SYMBOLS = {
        "completed": "✓",
        "complete": "✓",
        "succeeded": "✓",
        "success": "✓",
        "processing-completed": "✓",
        "failed": "✗",
        "error": "✗",
        "processing-error": "✗",
        "cancelled": "⊘",
        "processing": "↻",
        "running": "↻",
        "in_progress": "↻",
    }

    def __init__(self, console: Optional[Console] = None, use_colors: bool = True):
        self._console = console or Console(stderr=True, highlight=False)
        self._use_colors = use_colors

    @classmethod
    def format_status(cls, status: str) -> str:
        """Prefix a status with its family symbol, if it has one."""
        symbol = cls.STATUS_SYMBOLS.get(status.lower())
        return f"{symbol} {status}" if symbol else status

    def __call__(self, event: ProgressEvent) -> None:
        symbol, color = self.EVENT_STYLES[event.kind]
        if isinstance(event, Polling):
            text = f"Task {event.handle}: {self.format_status(event.status)} ({event.elapsed:.0f}s)"
            if event.progress is not None:
                text += f" {event.progress:.0f}%"
        else:
            text = describe_event(event)
        if self._use_colors:
            self._console.print(f"{symbol} [{color}]{text}[/{color}]")
        else:
            self._console.print(f"{symbol} {text}", markup=False)


class RecordingObserver:
    """Observer that keeps every event it sees, in order."""

    def __init__(self) -> None:
        self.events: List[ProgressEvent] = []

    def __call__(self, event: ProgressEvent) -> None:
        self.events.append(event)

    @property
    def last_status(self) -> Optional[str]:
        """Most recent raw status seen in a ``Polling`` event."""
        for event in reversed(self.events):
            if isinstance(event, Polling):
                return event.status
        return None

    def as_dicts(self) -> List[Dict[str, Any]]:
        return [event.model_dump() for event in self.events]


class CompositeObserver:
    """Observer that forwards each event to several child observers in order."""

    def __init__(self, observers: List[ProgressObserver]):
        self._observers = list(observers)

    def __call__(self, event: ProgressEvent) -> None:
        for observer in self._observers:
            observer(event)


def create_observer(
    *,
    cli: bool = False,
    cli_colors: bool = True,
    log: bool = False,
    additional_observers: Optional[List[ProgressObserver]] = None,
) -> Optional[ProgressObserver]:
    """Build the observer for the current context.

    Returns ``None`` when nothing was requested, so the poller runs with no
    observer at all; a single observer is returned as-is and several are
    combined with ``CompositeObserver``.
    """
    observers: List[ProgressObserver] = []

    if cli:
        observers.append(CLIObserver(use_colors=cli_colors))

    if log:
        observers.append(LoggingObserver())

    if additional_observers:
        observers.extend(additional_observers)

    if not observers:
        return None
    elif len(observers) == 1:
        return observers[0]
    else:
        return CompositeObserver(observers)
