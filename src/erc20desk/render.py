"""
Terminal rendering of the flow view-model.
"""

from __future__ import annotations

import click

from .flow.state import FlowView


def _short(address: str) -> str:
    if len(address) > 14:
        return address[:10] + "..." + address[-4:]
    return address or "-"


def render_view(view: FlowView) -> None:
    """Print the current view: connection, balance, modal, messages."""
    config = view.config
    click.echo(click.style("  RPC:      ", dim=True) + (config.rpc_url or "-"))
    click.echo(click.style("  Token:    ", dim=True) + (config.token_contract or "-"))
    click.echo(click.style("  Holder:   ", dim=True) + _short(config.token_holder))
    click.echo(
        click.style("  Balance:  ", dim=True)
        + click.style(view.balance_display, fg="bright_white", bold=True)
    )

    if view.modal_open:
        click.echo()
        click.secho("  Send Transaction ───────────────────────", fg="cyan")
        click.echo(click.style("  To:       ", dim=True) + (view.destination or "-"))
        click.echo(click.style("  Amount:   ", dim=True) + (view.amount or "-"))
        if view.validation_message:
            click.secho(f"  {view.validation_message}", fg="red")

    if view.busy:
        click.secho(f"  {view.button_label}", fg="yellow")
    if view.error_message:
        click.secho(f"  {view.error_message}", fg="red")
    if view.success_message:
        click.secho(f"  {view.success_message}", fg="green")
    if view.transaction_url:
        click.echo(click.style("  View Transaction: ", dim=True) + view.transaction_url)
