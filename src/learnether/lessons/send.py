"""
Lesson 2 - Send a signed transaction.

Signs a native ETH transfer with a key entered at the prompt, waits for
it to be mined, and compares both balances before and after.  Meant to
run against a forked network (TENDERLY_RPC_URL).
"""

from __future__ import annotations

from typing import Optional

import click

from ..config import fork_rpc_url, tx_timeout
from ..node.tx import transfer
from ..units import format_units, parse_ether
from ..wallet.keys import signing_key
from . import RPC_URL_HELP, connect
from .display import echo_receipt, echo_transaction

RECEIVER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


def _parse_amount(ctx: click.Context, param: click.Parameter, value: str) -> int:
    try:
        amount = parse_ether(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc
    if amount <= 0:
        raise click.BadParameter("amount must be positive")
    return amount


@click.command()
@click.option("--to", "receiver", default=RECEIVER, show_default=True, help="Receiver address")
@click.option(
    "--amount",
    default="1",
    show_default=True,
    callback=_parse_amount,
    help="Amount in ETH",
)
@click.option("--rpc-url", default=None, help=RPC_URL_HELP)
@click.pass_context
def send(ctx: click.Context, receiver: str, amount: int, rpc_url: Optional[str]) -> None:
    """Send ETH in a signed transaction and compare balances."""
    timeout = tx_timeout()

    with connect(ctx, rpc_url, fork_rpc_url) as provider, signing_key() as wallet:
        sender_before = provider.get_balance(wallet.address)
        receiver_before = provider.get_balance(receiver)

        click.echo(f"Sender balance before: {format_units(sender_before, 18)} ETH")
        click.echo(f"Receiver balance before: {format_units(receiver_before, 18)} ETH")

        result = transfer(provider, wallet, receiver, amount, timeout=timeout)

        echo_transaction(result)
        echo_receipt(result)
        click.secho(f"Transaction successful with hash: {result.confirmed_hash}", fg="green")

        sender_after = provider.get_balance(wallet.address)
        receiver_after = provider.get_balance(receiver)

    click.echo(f"Sender balance after: {format_units(sender_after, 18)} ETH")
    click.echo(f"Receiver balance after: {format_units(receiver_after, 18)} ETH")
