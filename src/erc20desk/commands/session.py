"""
Session command - interactive form for connecting and sending.

Mirrors a single-page form: edit the connection fields, connect to load
the balance, then open the send dialog. The view is re-rendered after
every action.
"""

from __future__ import annotations

import click

from ..config import Settings
from ..flow.controller import TokenFlow
from ..render import render_view
from .token import build_flow, connection_options

_ACTIONS = {
    "c": "Connect (load balance)",
    "s": "Send transaction",
    "e": "Edit connection",
    "w": "Create wallet",
    "q": "Quit",
}


def _edit_connection(flow: TokenFlow) -> None:
    config = flow.state.config
    rpc_url = click.prompt("RPC Provider", default=config.rpc_url, show_default=bool(config.rpc_url))
    token_contract = click.prompt(
        "Token Contract", default=config.token_contract, show_default=bool(config.token_contract)
    )
    token_holder = click.prompt(
        "Token Holder", default=config.token_holder, show_default=bool(config.token_holder)
    )
    flow.configure(rpc_url=rpc_url, token_contract=token_contract, token_holder=token_holder)


def _compose_and_send(flow: TokenFlow) -> None:
    if not flow.open_transfer_modal():
        click.secho("  Connect with a positive balance first.", fg="yellow")
        return

    destination = click.prompt("Destination Address")
    flow.edit_transfer(destination=destination)

    while True:
        amount = click.prompt("Amount to Send")
        view = flow.edit_transfer(amount=amount)
        if view.amount_valid:
            break
        click.secho(f"  {view.validation_message}", fg="red")
        if not click.confirm("Try another amount?", default=True):
            flow.cancel_transfer()
            return

    private_key = click.prompt("Wallet Secret Key", hide_input=True)
    flow.edit_transfer(private_key=private_key)
    del private_key

    if not click.confirm(f"Send {amount} to {destination}?", default=True):
        flow.cancel_transfer()
        click.echo("  Cancelled.")
        return

    click.echo("  Mining...")
    flow.submit_transfer(
        on_hash=lambda tx_hash, tx_url: click.echo(click.style("  TX: ", dim=True) + tx_url)
    )


@click.command()
@connection_options
def session(settings: Settings) -> None:
    """Interactive balance / transfer session."""
    flow = build_flow(settings)

    click.echo("=== ERC-20 Token ===")
    click.echo("Create Wallet, Get Balance & Send Transactions")

    while True:
        click.echo()
        render_view(flow.view)
        click.echo()
        for key, label in _ACTIONS.items():
            click.echo(click.style(f"  [{key}] ", fg="cyan") + label)

        action = click.prompt("Action", type=click.Choice(list(_ACTIONS)), default="c")

        if action == "q":
            break
        if action == "c":
            if flow.client is None:
                click.secho("  Please ensure you have a valid RPC provider, and try again.", fg="yellow")
                continue
            flow.query_balance()
        elif action == "s":
            _compose_and_send(flow)
        elif action == "e":
            _edit_connection(flow)
        elif action == "w":
            private_key, address = flow.create_wallet()
            click.secho("  Account wallet created successfully!", fg="green")
            click.echo(click.style("  Public Address: ", dim=True) + address)
            click.echo(click.style("  Private Key:    ", dim=True) + private_key)
