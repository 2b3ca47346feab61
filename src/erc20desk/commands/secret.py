"""
Secret commands - encrypt / decrypt short credentials under a secret.

The secret has no default: pass --secret or set ERC20DESK_SECRET.
"""

from __future__ import annotations

import sys

import click

from ..config import ENV_SECRET
from ..keys.secret import CryptoError, decrypt_password, encrypt_password

_secret_option = click.option(
    "--secret",
    envvar=ENV_SECRET,
    required=True,
    help="Encryption secret (or set ERC20DESK_SECRET)",
)


@click.command()
@_secret_option
@click.option("--password", prompt=True, hide_input=True, help="Value to encrypt")
def encrypt(secret: str, password: str) -> None:
    """Encrypt a password and print the token."""
    try:
        token = encrypt_password(password, secret)
    except CryptoError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(1)
    click.echo(token)


@click.command()
@_secret_option
@click.argument("token")
def decrypt(secret: str, token: str) -> None:
    """Decrypt a token produced by 'encrypt'."""
    try:
        password = decrypt_password(token, secret)
    except CryptoError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(1)
    click.echo(password)
