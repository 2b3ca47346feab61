"""
Token commands - one-shot balance query and transfer.

Commands:
- balance: Connect to the RPC endpoint and show the holder's balance
- send:    Validate and submit a transfer, then show the refreshed balance
"""

from __future__ import annotations

import functools
import sys
from typing import Callable, Optional

import click

from ..chain.errors import InvalidEndpoint, QueryError
from ..chain.rpc import ChainClient
from ..config import (
    DEFAULT_POLL_INTERVAL,
    DEFAULT_RECEIPT_TIMEOUT,
    ENV_EXPLORER_TX_URL,
    ENV_GAS_LIMIT,
    ENV_HOLDER,
    ENV_POLL_INTERVAL,
    ENV_PRIVATE_KEY,
    ENV_RECEIPT_TIMEOUT,
    ENV_RPC_URL,
    ENV_TOKEN,
    Settings,
)
from ..chain.tx import DEFAULT_GAS_LIMIT
from ..flow.controller import DEFAULT_EXPLORER_TX_URL, TokenFlow
from ..flow.state import AMOUNT_INVALID_MESSAGE
from ..render import render_view


def connection_options(func: Callable) -> Callable:
    """Shared --rpc-url / --token / --holder options plus tuning knobs."""

    @click.option("--rpc-url", envvar=ENV_RPC_URL, default="", help="JSON-RPC endpoint URL")
    @click.option("--token", "token_contract", envvar=ENV_TOKEN, default="",
                  help="ERC-20 token contract address")
    @click.option("--holder", "token_holder", envvar=ENV_HOLDER, default="",
                  help="Token holder address")
    @click.option("--explorer-url", envvar=ENV_EXPLORER_TX_URL, default=DEFAULT_EXPLORER_TX_URL,
                  show_default=True, help="Transaction link template ({tx_hash})")
    @click.option("--gas-limit", envvar=ENV_GAS_LIMIT, default=DEFAULT_GAS_LIMIT, type=int,
                  show_default=True, help="Gas limit")
    @click.option("--receipt-timeout", envvar=ENV_RECEIPT_TIMEOUT, default=DEFAULT_RECEIPT_TIMEOUT,
                  type=float, help="Seconds to wait for the receipt")
    @click.option("--poll-interval", envvar=ENV_POLL_INTERVAL, default=DEFAULT_POLL_INTERVAL,
                  type=float, help="Receipt polling interval in seconds")
    @functools.wraps(func)
    def wrapper(
        rpc_url: str,
        token_contract: str,
        token_holder: str,
        explorer_url: str,
        gas_limit: int,
        receipt_timeout: float,
        poll_interval: float,
        **kwargs,
    ):
        settings = Settings(
            rpc_url=rpc_url,
            token_contract=token_contract,
            token_holder=token_holder,
            explorer_tx_url=explorer_url,
            gas_limit=gas_limit,
            receipt_timeout=receipt_timeout,
            poll_interval=poll_interval,
            wait_for_receipt=kwargs.pop("wait", True),
        )
        return func(settings=settings, **kwargs)

    return wrapper


def build_flow(settings: Settings) -> TokenFlow:
    return settings.build_flow(client_factory=ChainClient)


def _connect(settings: Settings) -> TokenFlow:
    """Build the flow and require a usable client; exits otherwise."""
    flow = build_flow(settings)
    if flow.client is None:
        message = flow.view.error_message or "RPC URL not set. Use --rpc-url or set ERC20DESK_RPC_URL."
        click.secho(f"ERROR: {message}", fg="red")
        sys.exit(InvalidEndpoint.exit_code)
    if not settings.token_contract or not settings.token_holder:
        click.secho("ERROR: Both --token and --holder are required.", fg="red")
        sys.exit(1)
    return flow


def _print_hash(tx_hash: str, tx_url: str) -> None:
    click.echo("  Mining transaction ...")
    click.echo(click.style("  TX: ", dim=True) + tx_url)


# ---------------------------------------------------------------------------
# balance
# ---------------------------------------------------------------------------


@click.command()
@connection_options
def balance(settings: Settings) -> None:
    """Show the ERC-20 token balance of the holder."""
    flow = _connect(settings)

    click.echo("=== Token Balance ===")
    click.echo()
    loaded = flow.query_balance()
    render_view(flow.view)
    click.echo()

    if not loaded:
        sys.exit(QueryError.exit_code)


# ---------------------------------------------------------------------------
# send
# ---------------------------------------------------------------------------


@click.command()
@connection_options
@click.option("--to", "destination", required=True, help="Destination address (0x...)")
@click.option("--amount", required=True, help="Amount in token units (e.g. 1.5)")
@click.option("--private-key", envvar=ENV_PRIVATE_KEY, default=None,
              help="Holder's private key (prompted with hidden input if omitted)")
@click.option("--wait/--no-wait", default=True, help="Wait for the transaction to be mined")
def send(
    settings: Settings,
    destination: str,
    amount: str,
    private_key: Optional[str],
) -> None:
    """
    Transfer ERC-20 tokens from the holder to a destination address.

    The holder's key signs the transaction and pays gas. The transaction
    link is printed as soon as the node accepts it.

    \b
    Examples:
      erc20desk send --token 0xAbC... --holder 0x123... --to 0xDef... --amount 10
      erc20desk send --to 0xDef... --amount 2.5 --no-wait
    """
    flow = _connect(settings)

    click.echo("=== Token Transfer ===")
    click.echo()

    if not flow.query_balance():
        render_view(flow.view)
        sys.exit(QueryError.exit_code)

    if not flow.open_transfer_modal():
        render_view(flow.view)
        click.secho("  Nothing to send: balance is zero.", fg="yellow")
        sys.exit(1)

    view = flow.edit_transfer(destination=destination, amount=amount)
    if not view.amount_valid:
        render_view(view)
        click.secho(f"  {AMOUNT_INVALID_MESSAGE}", fg="red")
        flow.cancel_transfer()
        sys.exit(1)

    if not private_key:
        private_key = click.prompt("Wallet secret key", hide_input=True)
    flow.edit_transfer(private_key=private_key)
    private_key = None

    click.echo(click.style("  From:   ", dim=True) + settings.token_holder)
    click.echo(click.style("  To:     ", dim=True) + destination)
    click.echo(click.style("  Amount: ", dim=True) + amount)
    click.echo()
    click.echo("  Sending transaction...")

    outcome = flow.submit_transfer(on_hash=_print_hash)
    click.echo()
    render_view(flow.view)
    click.echo()

    if outcome is None or not outcome.success:
        sys.exit(1)
