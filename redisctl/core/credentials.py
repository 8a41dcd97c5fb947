"""Credential resolution for vendor API clients.

Configured credential values may be:

- plaintext                - returned unchanged
- ``encrypted:<token>``    - decrypted with the envelope key (see ``encryption``)
- ``keyring:<name>``       - an OS keyring reference; no keyring backend is
                             shipped, so these fail with ``ConfigError``

An environment variable, when named and set, always wins over the configured
value.
"""

from __future__ import annotations

import logging
import os
from typing import Optional, Protocol, runtime_checkable

from redisctl.core.encryption import decrypt_secret, encrypt_secret
from redisctl.core.errors import ConfigError

logger = logging.getLogger(__name__)

ENCRYPTED_PREFIX = "encrypted:"
KEYRING_PREFIX = "keyring:"


@runtime_checkable
class CredentialResolver(Protocol):
    def resolve(self, value: str, env_var: Optional[str] = None) -> str: ...


class CredentialStore:
    """Default ``CredentialResolver``."""

    def resolve(self, value: str, env_var: Optional[str] = None) -> str:
        if env_var:
            env_value = os.environ.get(env_var)
            if env_value:
                logger.debug(f"Using credential from environment variable {env_var}")
                return env_value

        if value.startswith(ENCRYPTED_PREFIX):
            return decrypt_secret(value[len(ENCRYPTED_PREFIX) :])

        if value.startswith(KEYRING_PREFIX):
            key = value[len(KEYRING_PREFIX) :]
            raise ConfigError(
                f"Credential '{key}' references the OS keyring, which is not supported; "
                f"store it as an '{ENCRYPTED_PREFIX}' value or set it via the environment"
            )

        return value

    @staticmethod
    def protect(value: str) -> str:
        """Return an ``encrypted:`` reference for ``value``."""
        return f"{ENCRYPTED_PREFIX}{encrypt_secret(value)}"

    @staticmethod
    def is_secure_reference(value: str) -> bool:
        return value.startswith((ENCRYPTED_PREFIX, KEYRING_PREFIX))
