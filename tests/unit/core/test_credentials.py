"""Tests for credential resolution."""

import os
from unittest.mock import patch

import pytest

from redisctl.core.credentials import CredentialResolver, CredentialStore
from redisctl.core.encryption import MASTER_KEY_ENV, generate_master_key
from redisctl.core.errors import ConfigError


@pytest.fixture
def store():
    return CredentialStore()


class TestCredentialStore:
    def test_plaintext_passthrough(self, store):
        assert store.resolve("my-api-key") == "my-api-key"

    def test_env_var_wins(self, store):
        with patch.dict(os.environ, {"MY_KEY": "from-env"}):
            assert store.resolve("configured", env_var="MY_KEY") == "from-env"

    def test_empty_env_var_falls_back(self, store):
        with patch.dict(os.environ, {"MY_KEY": ""}):
            assert store.resolve("configured", env_var="MY_KEY") == "configured"

    def test_encrypted_reference(self, store):
        with patch.dict(os.environ, {MASTER_KEY_ENV: generate_master_key()}):
            reference = CredentialStore.protect("s3cret")
            assert reference.startswith("encrypted:")
            assert store.resolve(reference) == "s3cret"

    def test_keyring_reference_unsupported(self, store):
        with pytest.raises(ConfigError, match="keyring"):
            store.resolve("keyring:cloud-api-key")

    def test_is_secure_reference(self):
        assert CredentialStore.is_secure_reference("encrypted:abc")
        assert CredentialStore.is_secure_reference("keyring:abc")
        assert not CredentialStore.is_secure_reference("plain")

    def test_satisfies_protocol(self, store):
        assert isinstance(store, CredentialResolver)
