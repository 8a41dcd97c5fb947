"""Credential helper commands."""

import click

from redisctl.core.credentials import CredentialStore
from redisctl.core.encryption import MASTER_KEY_ENV, generate_master_key, is_encrypted
from redisctl.core.errors import ConfigError


@click.group()
def profile():
    """Manage credentials for Redis Cloud and Redis Enterprise"""
    pass


@profile.command("generate-key")
def generate_key():
    """Generate a master key for encrypted credentials."""
    key = generate_master_key()
    click.echo(key)
    click.echo(f"\nExport it before using encrypted credentials:\n  export {MASTER_KEY_ENV}={key}", err=True)


@profile.command("encrypt")
@click.option(
    "--value",
    prompt=True,
    hide_input=True,
    help="Secret to encrypt (prompted when omitted)",
)
def encrypt(value: str):
    """Encrypt a secret for use as an API key, secret or password.

    \b
    Example:
      export REDIS_CLOUD_API_SECRET_KEY="$(redisctl profile encrypt --value s3cret)"
    """
    if CredentialStore.is_secure_reference(value) or is_encrypted(value):
        click.echo("❌ Error: value is already an encrypted or keyring reference", err=True)
        raise SystemExit(1)

    try:
        click.echo(CredentialStore.protect(value))
    except ConfigError as e:
        click.echo(f"❌ Error: {e}", err=True)
        raise SystemExit(1)
