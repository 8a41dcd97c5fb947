"""Classification of vendor status strings into canonical phases.

Redis Cloud tasks and Redis Enterprise actions report their progress with
different status vocabularies. Each vocabulary maps its terminal strings onto
a ``Phase``; anything it does not recognise is ``PENDING`` so that a new vendor
status never terminates a poll by accident.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional


class Phase(str, Enum):
    """Canonical phase of a remote operation."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not Phase.PENDING


@dataclass(frozen=True)
class StatusVocabulary:
    """Terminal status strings for one vendor surface.

    Attributes:
        name: Short identifier used in logs and metrics (``"cloud"``).
        succeeded: Lower-case statuses meaning the operation completed.
        failed: Lower-case statuses meaning the operation failed.
        cancelled: Lower-case statuses meaning the operation was cancelled.
        failure_message: Format string used when a failed snapshot carries no
            error text; ``{status}`` is the raw status.
        cancelled_message: Same, for cancelled snapshots.
    """

    name: str
    succeeded: FrozenSet[str]
    failed: FrozenSet[str]
    cancelled: FrozenSet[str]
    failure_message: str = "Task failed with status: {status}"
    cancelled_message: str = "Task was cancelled"

    def classify(self, status: Optional[str]) -> Phase:
        """Map a raw status string to a phase. Never raises."""
        if not status:
            return Phase.PENDING
        key = status.strip().lower()
        if key in self.succeeded:
            return Phase.SUCCEEDED
        if key in self.failed:
            return Phase.FAILED
        if key in self.cancelled:
            return Phase.CANCELLED
        return Phase.PENDING

    def describe_failure(self, status: str, phase: Phase) -> str:
        """Synthesize an error message for a failed or cancelled status."""
        template = self.cancelled_message if phase is Phase.CANCELLED else self.failure_message
        return template.format(status=status)


CLOUD_TASK_STATUSES = StatusVocabulary(
    name="cloud",
    succeeded=frozenset({"processing-completed", "completed", "complete", "succeeded", "success"}),
    failed=frozenset({"processing-error", "failed", "error"}),
    cancelled=frozenset({"cancelled"}),
    failure_message="Task failed with status: {status}",
    cancelled_message="Task was cancelled",
)

# 'queued', 'starting', 'running', 'cancelling' are all still in progress
ENTERPRISE_ACTION_STATUSES = StatusVocabulary(
    name="enterprise",
    succeeded=frozenset({"completed"}),
    failed=frozenset({"failed"}),
    cancelled=frozenset({"cancelled"}),
    failure_message="Action {status}",
    cancelled_message="Action {status}",
)


def classify(status: Optional[str], vocabulary: StatusVocabulary) -> Phase:
    """Classify ``status`` against ``vocabulary``."""
    return vocabulary.classify(status)
