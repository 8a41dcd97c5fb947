"""Tests for credential encryption utilities."""

import base64
import os
from unittest.mock import patch

import pytest

from redisctl.core.encryption import (
    MASTER_KEY_ENV,
    EncryptionError,
    decrypt_secret,
    encrypt_secret,
    generate_master_key,
    is_encrypted,
)


@pytest.fixture
def master_key():
    """Generate a test master key."""
    key = generate_master_key()
    with patch.dict(os.environ, {MASTER_KEY_ENV: key}):
        yield key


class TestEncryption:
    """Test encryption/decryption functionality."""

    def test_encrypt_decrypt_roundtrip(self, master_key):
        encrypted = encrypt_secret("api-secret-123")
        assert encrypted != "api-secret-123"
        assert decrypt_secret(encrypted) == "api-secret-123"

    def test_encrypt_different_each_time(self, master_key):
        """Random nonces make every token unique."""
        assert encrypt_secret("same") != encrypt_secret("same")

    def test_is_encrypted(self, master_key):
        assert is_encrypted(encrypt_secret("x"))
        assert not is_encrypted("plain-text-secret")
        assert not is_encrypted(base64.b64encode(b'{"version": "v1"}').decode())

    def test_generated_key_is_32_bytes(self):
        assert len(base64.b64decode(generate_master_key())) == 32


class TestEncryptionErrors:
    """Test failure modes."""

    def test_missing_master_key(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(EncryptionError, match="redisctl profile generate-key"):
                encrypt_secret("x")

    def test_wrong_key_length(self):
        short = base64.b64encode(b"too-short").decode()
        with patch.dict(os.environ, {MASTER_KEY_ENV: short}):
            with pytest.raises(EncryptionError, match="32 bytes"):
                encrypt_secret("x")

    def test_decrypt_with_other_key_fails(self, master_key):
        token = encrypt_secret("secret")
        with patch.dict(os.environ, {MASTER_KEY_ENV: generate_master_key()}):
            with pytest.raises(EncryptionError, match="Decryption failed"):
                decrypt_secret(token)

    def test_malformed_token(self, master_key):
        with pytest.raises(EncryptionError, match="Malformed"):
            decrypt_secret("not-base64-json!!")
