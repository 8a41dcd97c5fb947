"""Envelope encryption for credentials kept in configuration.

Profiles may hold ``encrypted:<token>`` values instead of plaintext API
secrets or admin passwords. Each token is produced by ``encrypt_secret``:

- A fresh data encryption key (DEK) encrypts the secret with AES-GCM.
- The master key from ``REDISCTL_MASTER_KEY`` (base64, 32 bytes) wraps the DEK.
- Token = base64(JSON{version, ciphertext, nonce, wrapped_dek, dek_nonce}).

A leaked config file alone is not enough to recover the secret.
"""

import base64
import json
import logging
import os
from typing import Dict

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from redisctl.core.errors import ConfigError

logger = logging.getLogger(__name__)

MASTER_KEY_ENV = "REDISCTL_MASTER_KEY"
CURRENT_VERSION = "v1"
_ENVELOPE_FIELDS = ("ciphertext", "nonce", "wrapped_dek", "dek_nonce")


class EncryptionError(ConfigError):
    """Raised when a secret cannot be encrypted or decrypted."""


def generate_master_key() -> str:
    """Return a new base64-encoded 32-byte master key."""
    return base64.b64encode(os.urandom(32)).decode("ascii")


def _master_key() -> bytes:
    encoded = os.getenv(MASTER_KEY_ENV)
    if not encoded:
        raise EncryptionError(
            f"{MASTER_KEY_ENV} environment variable not set. "
            "Generate one with: redisctl profile generate-key"
        )
    try:
        key = base64.b64decode(encoded, validate=True)
    except ValueError as e:
        raise EncryptionError(f"Invalid master key format: {e}") from e
    if len(key) != 32:
        raise EncryptionError(f"Master key must be 32 bytes, got {len(key)} bytes")
    return key


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _decode_envelope(token: str) -> Dict[str, str]:
    envelope = json.loads(base64.b64decode(token).decode("utf-8"))
    if not isinstance(envelope, dict):
        raise ValueError("envelope is not an object")
    return envelope


def encrypt_secret(plaintext: str) -> str:
    """Encrypt ``plaintext`` and return an opaque token."""
    master_key = _master_key()

    dek = AESGCM.generate_key(bit_length=256)
    nonce = os.urandom(12)
    ciphertext = AESGCM(dek).encrypt(nonce, plaintext.encode("utf-8"), None)

    dek_nonce = os.urandom(12)
    wrapped_dek = AESGCM(master_key).encrypt(dek_nonce, dek, None)

    envelope = {
        "version": CURRENT_VERSION,
        "ciphertext": _b64(ciphertext),
        "nonce": _b64(nonce),
        "wrapped_dek": _b64(wrapped_dek),
        "dek_nonce": _b64(dek_nonce),
    }
    return _b64(json.dumps(envelope).encode("utf-8"))


def decrypt_secret(token: str) -> str:
    """Decrypt a token produced by ``encrypt_secret``.

    Raises:
        EncryptionError: Missing/invalid master key, unsupported version, or a
            token that fails authentication.
    """
    master_key = _master_key()

    try:
        envelope = _decode_envelope(token)
    except ValueError as e:
        raise EncryptionError(f"Malformed encrypted secret: {e}") from e

    version = envelope.get("version")
    if version != CURRENT_VERSION:
        raise EncryptionError(
            f"Unsupported encryption version: {version} (expected {CURRENT_VERSION})"
        )

    try:
        parts = {name: base64.b64decode(envelope[name]) for name in _ENVELOPE_FIELDS}
        dek = AESGCM(master_key).decrypt(parts["dek_nonce"], parts["wrapped_dek"], None)
        plaintext = AESGCM(dek).decrypt(parts["nonce"], parts["ciphertext"], None)
    except Exception as e:
        logger.error(f"Failed to decrypt secret: {e.__class__.__name__}")
        raise EncryptionError(f"Decryption failed: {e.__class__.__name__}") from e

    return plaintext.decode("utf-8")


def is_encrypted(token: str) -> bool:
    """Check whether ``token`` looks like an envelope from this module."""
    try:
        envelope = _decode_envelope(token)
    except ValueError:
        return False
    return "version" in envelope and all(name in envelope for name in _ENVELOPE_FIELDS)
