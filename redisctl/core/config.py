"""Configuration management using Pydantic Settings."""

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE_OPT: str | None = None
TEN_MINUTES_IN_SECONDS = 600

# Only load .env if it exists (for local development)
_env_path = Path(".env")
if _env_path.exists():
    load_dotenv(dotenv_path=_env_path)
    ENV_FILE_OPT = str(_env_path)


class Settings(BaseSettings):
    """Application configuration.

    Loads settings from ``REDISCTL_``-prefixed environment variables. In local
    development these can be provided via a .env file. Vendor credentials are
    configured separately (see ``RedisCloudConfig`` and
    ``RedisEnterpriseConfig``).
    """

    model_config = SettingsConfigDict(
        env_prefix="redisctl_",
        env_file=ENV_FILE_OPT,
        env_file_encoding="utf-8",
        extra="ignore",
        env_ignore_empty=True,
    )

    log_level: str = Field(default="INFO", description="Logging level")

    # Operation tracking
    default_timeout: float = Field(
        default=TEN_MINUTES_IN_SECONDS,
        gt=0,
        description="Default seconds to wait for a remote operation",
    )
    cloud_poll_interval: float = Field(
        default=10.0, ge=0, description="Seconds between Redis Cloud task polls"
    )
    cloud_subscription_poll_interval: float = Field(
        default=15.0,
        ge=0,
        description="Seconds between polls while a Redis Cloud subscription is created",
    )
    enterprise_poll_interval: float = Field(
        default=5.0, ge=0, description="Seconds between Redis Enterprise action polls"
    )

    # CLI --wait defaults
    cli_wait_timeout: float = Field(
        default=300.0, gt=0, description="Default CLI wait timeout in seconds"
    )
    cli_wait_interval: float = Field(
        default=5.0, ge=0, description="Default CLI polling interval in seconds"
    )

    # MCP
    mcp_read_only: bool = Field(
        default=True,
        description="Refuse mutating MCP tool calls unless explicitly disabled",
    )


# Global settings instance
settings = Settings()
