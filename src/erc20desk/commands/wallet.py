"""
Wallet command - generate a fresh signing identity.

The key is printed once and not stored anywhere; keeping it safe is up to
the user.
"""

from __future__ import annotations

import click

from ..keys.eth import generate_eoa


@click.command("create-wallet")
def create_wallet() -> None:
    """Create a new wallet and print its address and private key."""
    private_key, address = generate_eoa()

    click.secho("Account wallet created successfully!", fg="green")
    click.echo()
    click.echo(click.style("  Public Address: ", dim=True) + address)
    click.echo(click.style("  Private Key:    ", dim=True) + private_key)
    click.echo()
    click.secho("  Store the private key securely; it is not saved.", fg="yellow")
