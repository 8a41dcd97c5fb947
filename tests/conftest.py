"""
Test configuration and fixtures for redisctl.
"""

import os
from typing import Any, Dict, List, Union
from unittest.mock import AsyncMock, patch

import pytest

from redisctl.core.poller import StatusSnapshot
from redisctl.core.status import CLOUD_TASK_STATUSES, StatusVocabulary

ScriptStep = Union[StatusSnapshot, Dict[str, Any], BaseException]


class FakeClock:
    """Manually advanced replacement for ``time.monotonic``."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedSource:
    """Status source replaying a fixed script of snapshots.

    Each step is a ``StatusSnapshot``, a dict of snapshot fields, or an
    exception to raise from that fetch. The last step repeats once the
    script is exhausted.
    """

    def __init__(self, steps: List[ScriptStep], vocabulary: StatusVocabulary = CLOUD_TASK_STATUSES):
        self.vocabulary = vocabulary
        self._steps = list(steps)
        self.calls: List[str] = []

    async def fetch_status(self, handle: str) -> StatusSnapshot:
        self.calls.append(handle)
        index = min(len(self.calls), len(self._steps)) - 1
        step = self._steps[index]
        if isinstance(step, BaseException):
            raise step
        if isinstance(step, dict):
            return StatusSnapshot(**step)
        return step


@pytest.fixture
def fake_clock():
    """Patch the poller's clock and sleep; each sleep advances the clock."""
    clock = FakeClock()

    async def _sleep(seconds):
        clock.advance(seconds)

    sleep = AsyncMock(side_effect=_sleep)
    with (
        patch("redisctl.core.poller.monotonic", clock),
        patch("redisctl.core.poller.asyncio.sleep", sleep),
    ):
        clock.sleep = sleep
        yield clock


@pytest.fixture
def scripted_source():
    """Factory for ``ScriptedSource`` instances."""
    return ScriptedSource


@pytest.fixture(autouse=True)
def _isolate_env():
    """Keep developer credentials out of unit tests."""
    keys = [k for k in os.environ if k.startswith(("REDIS_CLOUD_", "REDIS_ENTERPRISE_"))]
    with patch.dict(os.environ, {}, clear=False):
        for key in keys:
            os.environ.pop(key, None)
        yield
