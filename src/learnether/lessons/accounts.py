"""
Lesson 1 - Accounts.

Reads an account's balance.  Balances come back from the node in wei
and are shown both in wei and converted to ETH.
"""

from __future__ import annotations

from typing import Optional

import click

from ..config import mainnet_rpc_url
from ..units import format_ether, format_units
from . import RPC_URL_HELP, connect

ADDRESS = "0x396343362be2A4dA1cE0C1C210945346fb82Aa49"


@click.command()
@click.option("--address", default=ADDRESS, show_default=True, help="Account to look up")
@click.option("--rpc-url", default=None, help=RPC_URL_HELP)
@click.pass_context
def accounts(ctx: click.Context, address: str, rpc_url: Optional[str]) -> None:
    """Show the ETH balance of an account."""
    with connect(ctx, rpc_url, mainnet_rpc_url) as provider:
        balance = provider.get_balance(address)

    click.echo(f"Balance of address {address} is: {format_ether(balance)} ETH")
    click.echo(f"Balance is: {format_units(balance, 'wei')} wei")
    click.echo(f"Balance is: {format_units(balance, 18)} ETH")
