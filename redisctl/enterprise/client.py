"""Redis Enterprise cluster REST API client.

Covers the database (BDB) operations that answer with an action and the
``/v2/actions`` endpoint used to track them.
"""

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from redisctl.core.credentials import CredentialResolver, CredentialStore
from redisctl.core.errors import ApiError

logger = logging.getLogger(__name__)


class RedisEnterpriseConfig(BaseSettings):
    """Configuration for the Redis Enterprise cluster API.

    Automatically loads from environment variables with REDIS_ENTERPRISE_ prefix:
    - REDIS_ENTERPRISE_URL: Cluster API URL (e.g., https://cluster.example.com:9443)
    - REDIS_ENTERPRISE_USERNAME / REDIS_ENTERPRISE_PASSWORD: Admin credentials
    - REDIS_ENTERPRISE_VERIFY_SSL

    Example:
        config = RedisEnterpriseConfig(url="https://localhost:9443", username="admin@redis.com")
    """

    model_config = SettingsConfigDict(env_prefix="redis_enterprise_")

    url: str = Field(description="Cluster REST API URL")
    username: str = Field(default="", description="Admin username")
    password: SecretStr = Field(default=SecretStr(""), description="Admin password")
    verify_ssl: bool = Field(
        default=False,
        description="Verify SSL certificates (default: False, clusters often use self-signed certs)",
    )
    timeout: float = Field(default=30.0, description="Request timeout in seconds")


class EnterpriseClient:
    """Async Redis Enterprise cluster API client."""

    platform = "enterprise"

    def __init__(
        self,
        config: Optional[RedisEnterpriseConfig] = None,
        credentials: Optional[CredentialResolver] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if config is None:
            config = RedisEnterpriseConfig()
        self.config = config
        self._credentials = credentials or CredentialStore()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client (lazy initialization)."""
        if self._client is None:
            auth = None
            if self.config.username:
                password = self._credentials.resolve(self.config.password.get_secret_value())
                auth = (self.config.username, password)
            else:
                logger.warning("No admin credentials provided - API calls will likely fail with 401")

            self._client = httpx.AsyncClient(
                base_url=self.config.url,
                auth=auth,
                verify=self.config.verify_ssl,
                timeout=self.config.timeout,
                headers={"Accept": "application/json"},
                transport=self._transport,
            )
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
            logger.error(f"Redis Enterprise {method} {path} failed: {e}")
            raise ApiError.from_httpx(e, self.platform) from e
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            logger.error(
                f"Redis Enterprise {method} {path} returned a non-JSON body "
                f"(HTTP {response.status_code})"
            )
            raise ApiError(
                f"Invalid JSON response: {e}",
                platform=self.platform,
                status_code=response.status_code,
                body=response.text,
            ) from e

    async def get_action(self, action_uid: str) -> Dict[str, Any]:
        return await self._request("GET", f"/v2/actions/{action_uid}")

    async def get_database(self, uid: int) -> Dict[str, Any]:
        return await self._request("GET", f"/v1/bdbs/{uid}")

    async def upgrade_redis_version(self, uid: int, request: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", f"/v1/bdbs/{uid}/upgrade", request)

    async def upgrade_module(
        self, uid: int, module_name: str, new_version: Optional[str] = None
    ) -> Dict[str, Any]:
        module: Dict[str, Any] = {"module_name": module_name}
        if new_version:
            module["new_version"] = new_version
        return await self._request("POST", f"/v1/bdbs/{uid}/upgrade", {"modules": [module]})

    async def backup_database(self, uid: int) -> Dict[str, Any]:
        return await self._request("POST", f"/v1/bdbs/{uid}/actions/backup")

    async def import_database(
        self, uid: int, import_location: str, flush: bool = False
    ) -> Dict[str, Any]:
        """Start an import. With ``flush`` the database is emptied first."""
        body = {
            "dataset_import_sources": [{"type": "url", "uri": import_location}],
            "email_notification": False,
            "flush": flush,
        }
        return await self._request("POST", f"/v1/bdbs/{uid}/actions/import", body)
