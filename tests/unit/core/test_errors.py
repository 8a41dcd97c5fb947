"""Unit tests for the error taxonomy."""

import httpx
import pytest

from redisctl.core.errors import (
    ApiError,
    ConfigError,
    CoreError,
    TaskFailedError,
    TaskTimeoutError,
    ValidationError,
)
from redisctl.core.poller import StatusSnapshot


def _status_error(status_code: int, json=None, text=None) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://api.redislabs.com/v1/tasks/t-1")
    if json is not None:
        response = httpx.Response(status_code, json=json, request=request)
    else:
        response = httpx.Response(status_code, text=text or "", request=request)
    return httpx.HTTPStatusError("error", request=request, response=response)


class TestApiError:
    """Test ApiError classification."""

    @pytest.mark.parametrize(
        "status_code, attribute",
        [
            (404, "is_not_found"),
            (401, "is_unauthorized"),
            (403, "is_unauthorized"),
            (500, "is_server_error"),
            (503, "is_server_error"),
            (429, "is_rate_limited"),
            (408, "is_timeout"),
            (409, "is_conflict"),
            (412, "is_conflict"),
            (400, "is_bad_request"),
        ],
    )
    def test_status_code_helpers(self, status_code, attribute):
        error = ApiError("x", platform="cloud", status_code=status_code)
        assert getattr(error, attribute) is True

    @pytest.mark.parametrize(
        "status_code, retryable",
        [(500, True), (502, True), (429, True), (504, True), (400, False), (404, False)],
    )
    def test_retryable(self, status_code, retryable):
        error = ApiError("x", platform="enterprise", status_code=status_code)
        assert error.is_retryable is retryable

    def test_network_error_is_retryable(self):
        error = ApiError("connection refused", platform="cloud")
        assert error.status_code is None
        assert error.is_retryable

    def test_message_format(self):
        error = ApiError("Database not found", platform="cloud", status_code=404)
        assert str(error) == "Cloud API error (HTTP 404): Database not found"
        error = ApiError("timeout", platform="enterprise")
        assert str(error) == "Enterprise API error: timeout"

    def test_from_httpx_status_error_uses_body_description(self):
        exc = _status_error(404, json={"description": "Subscription 12 not found"})
        error = ApiError.from_httpx(exc, "cloud")
        assert error.status_code == 404
        assert "Subscription 12 not found" in str(error)
        assert error.is_not_found

    def test_from_httpx_nested_error_object(self):
        exc = _status_error(400, json={"error": {"description": "Invalid memory"}})
        error = ApiError.from_httpx(exc, "cloud")
        assert "Invalid memory" in str(error)

    def test_from_httpx_plain_text_body(self):
        exc = _status_error(502, text="Bad Gateway from proxy")
        error = ApiError.from_httpx(exc, "enterprise")
        assert "Bad Gateway from proxy" in str(error)
        assert error.is_server_error

    def test_from_httpx_transport_timeout(self):
        exc = httpx.ReadTimeout("read timed out")
        error = ApiError.from_httpx(exc, "cloud")
        assert error.timed_out
        assert error.is_timeout
        assert error.is_retryable

    def test_error_dict(self):
        error = ApiError("x", platform="cloud", status_code=429)
        payload = error.to_error_dict()
        assert payload["category"] == "api"
        assert payload["platform"] == "cloud"
        assert payload["status_code"] == 429
        assert payload["retryable"] is True


class TestTaskErrors:
    """Test task-level errors."""

    def test_timeout(self):
        snapshot = StatusSnapshot(status="processing-in-progress")
        error = TaskTimeoutError(600, last_snapshot=snapshot)
        assert str(error) == "Task timed out after 600s"
        assert error.is_timeout
        assert error.is_retryable
        payload = error.to_error_dict()
        assert payload["timeout"] == 600
        assert payload["last_status"] == "processing-in-progress"

    def test_failed(self):
        error = TaskFailedError("quota exceeded")
        assert str(error) == "Task failed: quota exceeded"
        assert error.message == "quota exceeded"
        assert error.is_retryable
        assert not error.is_timeout
        assert error.to_error_dict()["last_status"] is None

    def test_validation_and_config(self):
        assert str(ValidationError("bad port")) == "Validation error: bad port"
        assert ValidationError("bad port").is_bad_request
        assert not ValidationError("bad port").is_retryable
        assert str(ConfigError("no key")) == "Configuration error: no key"

    def test_hierarchy(self):
        for error in (
            ApiError("x", platform="cloud"),
            TaskTimeoutError(1),
            TaskFailedError("x"),
            ValidationError("x"),
            ConfigError("x"),
        ):
            assert isinstance(error, CoreError)
