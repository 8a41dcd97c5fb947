"""Tests for application settings."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from redisctl.core.config import Settings


class TestSettings:
    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings()
        assert settings.default_timeout == 600
        assert settings.cloud_poll_interval == 10
        assert settings.cloud_subscription_poll_interval == 15
        assert settings.enterprise_poll_interval == 5
        assert settings.cli_wait_timeout == 300
        assert settings.cli_wait_interval == 5
        assert settings.mcp_read_only is True

    def test_env_prefix(self):
        env = {
            "REDISCTL_DEFAULT_TIMEOUT": "1800",
            "REDISCTL_CLOUD_POLL_INTERVAL": "2.5",
            "REDISCTL_MCP_READ_ONLY": "false",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings()
        assert settings.default_timeout == 1800
        assert settings.cloud_poll_interval == 2.5
        assert settings.mcp_read_only is False

    def test_timeout_must_be_positive(self):
        with patch.dict(os.environ, {"REDISCTL_DEFAULT_TIMEOUT": "0"}, clear=True):
            with pytest.raises(ValidationError):
                Settings()
