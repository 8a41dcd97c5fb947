"""Redis Cloud Management API client.

Thin async wrapper over the Redis Cloud REST API covering the calls the
operation-tracking workflows need: mutating database/subscription endpoints
(which answer with a task), task status, and resource reads. Every non-2xx
response or network failure raises ``ApiError(platform="cloud")``; there is
no retry at this layer.
"""

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from redisctl.core.credentials import CredentialResolver, CredentialStore
from redisctl.core.errors import ApiError

logger = logging.getLogger(__name__)


class RedisCloudConfig(BaseSettings):
    """Configuration for the Redis Cloud Management API.

    Automatically loads from environment variables with REDIS_CLOUD_ prefix:
    - REDIS_CLOUD_API_KEY: Redis Cloud API key
    - REDIS_CLOUD_API_SECRET_KEY: Redis Cloud API secret key
    - REDIS_CLOUD_BASE_URL: Base URL (default: https://api.redislabs.com/v1)

    Secrets may be plaintext or ``encrypted:`` references.

    Example:
        # Loads from environment automatically
        config = RedisCloudConfig()

        # Or override with explicit values
        config = RedisCloudConfig(api_key="your-key", api_secret_key="your-secret")
    """

    model_config = SettingsConfigDict(env_prefix="redis_cloud_")

    api_key: SecretStr = Field(description="Redis Cloud API key (x-api-key header)")
    api_secret_key: SecretStr = Field(
        description="Redis Cloud API secret key (x-api-secret-key header)"
    )
    base_url: str = Field(
        default="https://api.redislabs.com/v1", description="Base URL for Redis Cloud API"
    )
    timeout: float = Field(default=30.0, description="Request timeout in seconds")


class CloudClient:
    """Async Redis Cloud API client.

    The underlying ``httpx.AsyncClient`` is created lazily and closed when the
    client is used as an async context manager.
    """

    platform = "cloud"

    def __init__(
        self,
        config: Optional[RedisCloudConfig] = None,
        credentials: Optional[CredentialResolver] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if config is None:
            config = RedisCloudConfig()
        self.config = config
        self._credentials = credentials or CredentialStore()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client (lazy initialization)."""
        if self._client is None:
            headers = {
                "x-api-key": self._credentials.resolve(self.config.api_key.get_secret_value()),
                "x-api-secret-key": self._credentials.resolve(
                    self.config.api_secret_key.get_secret_value()
                ),
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                headers=headers,
                timeout=self.config.timeout,
                transport=self._transport,
            )
            logger.info(f"Connected to Redis Cloud API at {self.config.base_url}")
        return self._client

    async def __aenter__(self):
        return self

    async def __aexit__(self, _exc_type, _exc_val, _exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
        self._client = None

    async def _request(
        self, method: str, path: str, body: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        client = self.get_client()
        try:
            response = await client.request(method, path, json=body)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Redis Cloud {method} {path} failed: {e}")
            raise ApiError.from_httpx(e, self.platform) from e
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            logger.error(
                f"Redis Cloud {method} {path} returned a non-JSON body "
                f"(HTTP {response.status_code})"
            )
            raise ApiError(
                f"Invalid JSON response: {e}",
                platform=self.platform,
                status_code=response.status_code,
                body=response.text,
            ) from e

    # Tasks

    async def get_task(self, task_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/tasks/{task_id}")

    # Databases

    async def get_database(self, subscription_id: int, database_id: int) -> Dict[str, Any]:
        return await self._request(
            "GET", f"/subscriptions/{subscription_id}/databases/{database_id}"
        )

    async def create_database(
        self, subscription_id: int, request: Dict[str, Any]
    ) -> Dict[str, Any]:
        return await self._request("POST", f"/subscriptions/{subscription_id}/databases", request)

    async def update_database(
        self, subscription_id: int, database_id: int, request: Dict[str, Any]
    ) -> Dict[str, Any]:
        return await self._request(
            "PUT", f"/subscriptions/{subscription_id}/databases/{database_id}", request
        )

    async def delete_database(self, subscription_id: int, database_id: int) -> Dict[str, Any]:
        return await self._request(
            "DELETE", f"/subscriptions/{subscription_id}/databases/{database_id}"
        )

    async def backup_database(
        self, subscription_id: int, database_id: int, request: Dict[str, Any]
    ) -> Dict[str, Any]:
        return await self._request(
            "POST", f"/subscriptions/{subscription_id}/databases/{database_id}/backup", request
        )

    async def import_database(
        self, subscription_id: int, database_id: int, request: Dict[str, Any]
    ) -> Dict[str, Any]:
        return await self._request(
            "POST", f"/subscriptions/{subscription_id}/databases/{database_id}/import", request
        )

    async def flush_database(self, subscription_id: int, database_id: int) -> Dict[str, Any]:
        return await self._request(
            "PUT", f"/subscriptions/{subscription_id}/databases/{database_id}/flush"
        )

    # Subscriptions

    async def get_subscription(self, subscription_id: int) -> Dict[str, Any]:
        return await self._request("GET", f"/subscriptions/{subscription_id}")

    async def create_subscription(self, request: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/subscriptions", request)

    async def update_subscription(
        self, subscription_id: int, request: Dict[str, Any]
    ) -> Dict[str, Any]:
        return await self._request("PUT", f"/subscriptions/{subscription_id}", request)

    async def delete_subscription(self, subscription_id: int) -> Dict[str, Any]:
        return await self._request("DELETE", f"/subscriptions/{subscription_id}")
