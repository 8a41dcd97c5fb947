"""Unified error taxonomy for redisctl.

Every failure surfaced by the operation-tracking engine is a ``CoreError``:

- ``ApiError``          - transport/API failure from a vendor client, passed
                          through the engine unmodified.
- ``TaskTimeoutError``  - the deadline was reached while the operation was
                          still pending.
- ``TaskFailedError``   - the remote operation failed or was cancelled, or the
                          remote API broke its contract (missing handle,
                          missing resource id on success).
- ``ValidationError``   - caller input rejected before any remote call.
- ``ConfigError``       - configuration or credential problems.

Each exception exposes boolean helpers (``is_not_found``, ``is_retryable``,
...) and ``to_error_dict()`` for a stable structured payload used by the CLI
``--json`` output and the MCP tools.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

import httpx

if TYPE_CHECKING:
    from redisctl.core.poller import StatusSnapshot


class CoreError(Exception):
    """Base exception for all redisctl errors."""

    #: Machine-readable category used in structured error payloads.
    category: str = "core"

    def __init__(self, message: str = "") -> None:
        self.message = message
        super().__init__(message)

    @property
    def is_not_found(self) -> bool:
        return False

    @property
    def is_unauthorized(self) -> bool:
        return False

    @property
    def is_server_error(self) -> bool:
        return False

    @property
    def is_timeout(self) -> bool:
        return False

    @property
    def is_rate_limited(self) -> bool:
        return False

    @property
    def is_conflict(self) -> bool:
        return False

    @property
    def is_bad_request(self) -> bool:
        return False

    @property
    def is_retryable(self) -> bool:
        return False

    def to_error_dict(self) -> Dict[str, Any]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "message": self.message,
            "retryable": self.is_retryable,
        }


class ApiError(CoreError):
    """Error returned by the Redis Cloud or Redis Enterprise REST API.

    Attributes:
        platform: ``"cloud"`` or ``"enterprise"``.
        status_code: HTTP status code, or ``None`` for network-level failures.
        body: Raw response body text when available.
        timed_out: Whether the underlying transport timed out.
    """

    category = "api"

    def __init__(
        self,
        message: str,
        *,
        platform: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        timed_out: bool = False,
    ) -> None:
        self.platform = platform
        self.status_code = status_code
        self.body = body
        self.timed_out = timed_out
        label = "Cloud" if platform == "cloud" else "Enterprise"
        if status_code is not None:
            text = f"{label} API error (HTTP {status_code}): {message}"
        else:
            text = f"{label} API error: {message}"
        super().__init__(text)

    @classmethod
    def from_httpx(cls, exc: httpx.HTTPError, platform: str) -> "ApiError":
        """Build an ApiError from an httpx exception."""
        if isinstance(exc, httpx.HTTPStatusError):
            response = exc.response
            body = response.text
            return cls(
                _extract_api_message(response) or response.reason_phrase or "request failed",
                platform=platform,
                status_code=response.status_code,
                body=body,
            )
        return cls(
            str(exc) or exc.__class__.__name__,
            platform=platform,
            timed_out=isinstance(exc, httpx.TimeoutException),
        )

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code in (401, 403)

    @property
    def is_server_error(self) -> bool:
        return self.status_code is not None and 500 <= self.status_code < 600

    @property
    def is_timeout(self) -> bool:
        return self.timed_out or self.status_code in (408, 504)

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429

    @property
    def is_conflict(self) -> bool:
        return self.status_code in (409, 412)

    @property
    def is_bad_request(self) -> bool:
        return self.status_code == 400

    @property
    def is_retryable(self) -> bool:
        # Network failures carry no status code and may succeed on retry
        if self.status_code is None:
            return True
        return self.is_server_error or self.is_rate_limited or self.is_timeout

    def to_error_dict(self) -> Dict[str, Any]:
        payload = super().to_error_dict()
        payload.update({"platform": self.platform, "status_code": self.status_code})
        return payload


class TaskTimeoutError(CoreError):
    """The poll deadline passed while the remote operation was still pending."""

    category = "timeout"

    def __init__(
        self, timeout: float, *, last_snapshot: Optional["StatusSnapshot"] = None
    ) -> None:
        self.timeout = timeout
        self.last_snapshot = last_snapshot
        super().__init__(f"Task timed out after {timeout:g}s")

    @property
    def is_timeout(self) -> bool:
        return True

    @property
    def is_retryable(self) -> bool:
        return True

    def to_error_dict(self) -> Dict[str, Any]:
        payload = super().to_error_dict()
        payload["timeout"] = self.timeout
        payload["last_status"] = self.last_snapshot.status if self.last_snapshot else None
        return payload


class TaskFailedError(CoreError):
    """The remote operation reached a failed/cancelled state or broke its contract.

    Resubmitting the whole operation may succeed, so this is retryable at the
    workflow level; redisctl itself never resubmits.
    """

    category = "task_failed"

    def __init__(
        self, message: str, *, last_snapshot: Optional["StatusSnapshot"] = None
    ) -> None:
        self.last_snapshot = last_snapshot
        super().__init__(message)

    def __str__(self) -> str:
        return f"Task failed: {self.message}"

    @property
    def is_retryable(self) -> bool:
        return True

    def to_error_dict(self) -> Dict[str, Any]:
        payload = super().to_error_dict()
        payload["last_status"] = self.last_snapshot.status if self.last_snapshot else None
        return payload


class ValidationError(CoreError):
    """Caller input rejected before any remote call was made."""

    category = "validation"

    def __str__(self) -> str:
        return f"Validation error: {self.message}"

    @property
    def is_bad_request(self) -> bool:
        return True


class ConfigError(CoreError):
    """Configuration or credential resolution failure."""

    category = "config"

    def __str__(self) -> str:
        return f"Configuration error: {self.message}"


def _extract_api_message(response: httpx.Response) -> Optional[str]:
    """Pull a human-readable message out of a vendor error body."""
    try:
        data = response.json()
    except ValueError:
        return response.text or None
    if isinstance(data, dict):
        for key in ("description", "message", "error", "error_code"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
            if isinstance(value, dict):
                nested = value.get("description") or value.get("message")
                if nested:
                    return str(nested)
    return response.text or None
