"""
erc20desk CLI

Query an ERC-20 token balance and send token transfers through any
JSON-RPC endpoint. Keys are used for signing only and never stored.

Commands:
  balance        - Show the holder's token balance
  send           - Transfer tokens to a destination address
  session        - Interactive connect / send form
  create-wallet  - Generate a new address and private key
  encrypt        - Encrypt a credential under a secret
  decrypt        - Decrypt a credential token
"""

from __future__ import annotations

import logging
import sys

import click

from .config import load_env


# ============ Constants ============

VERSION = "1.0.0"


# ============ Main CLI Group ============


@click.group()
@click.version_option(version=VERSION, prog_name="erc20desk")
@click.option("-v", "--verbose", is_flag=True, help="Log RPC and transaction details")
def cli(verbose: bool) -> None:
    """erc20desk - ERC-20 balance and transfer tool."""
    load_env()
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


# ============ Commands ============

from .commands.token import balance, send
from .commands.session import session
from .commands.wallet import create_wallet
from .commands.secret import decrypt, encrypt

cli.add_command(balance)
cli.add_command(send)
cli.add_command(session)
cli.add_command(create_wallet)
cli.add_command(encrypt)
cli.add_command(decrypt)


# ============ Entry Points ============


def main() -> None:
    """erc20desk CLI entry point."""
    # Ensure UTF-8 output on Windows (for box-drawing characters)
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
            sys.stderr.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        except (AttributeError, OSError):
            pass  # Fallback: non-tty
    cli()


if __name__ == "__main__":
    main()
