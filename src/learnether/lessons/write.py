"""
Lesson 4 - Write smart contracts.

Sends an ERC-20 ``transfer`` signed with a key entered at the prompt.
The human amount is scaled by the token's own ``decimals()`` before it
is encoded.
"""

from __future__ import annotations

from typing import Optional

import click

from ..config import fork_rpc_url, tx_timeout
from ..node.contract import Contract
from ..units import parse_units
from ..wallet.keys import signing_key
from . import RPC_URL_HELP, USDC_ADDRESS, connect
from .display import echo_transaction

ERC20_ABI = [
    "function decimals() view returns (uint8)",
    "function balanceOf(address) view returns (uint256)",
    "function transfer(address to, uint amount) returns (bool)",
]

RECEIVER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


@click.command()
@click.option("--token", default=USDC_ADDRESS, show_default=True, help="ERC-20 contract address")
@click.option("--to", "receiver", default=RECEIVER, show_default=True, help="Receiver address")
@click.option("--amount", default="2", show_default=True, help="Amount in whole tokens")
@click.option("--rpc-url", default=None, help=RPC_URL_HELP)
@click.pass_context
def write(ctx: click.Context, token: str, receiver: str, amount: str, rpc_url: Optional[str]) -> None:
    """Transfer ERC-20 tokens and compare balances."""
    timeout = tx_timeout()

    with connect(ctx, rpc_url, fork_rpc_url) as provider, signing_key() as wallet:
        contract = Contract.at(token, ERC20_ABI, provider)

        sender_before = contract.call("balanceOf", wallet.address)
        receiver_before = contract.call("balanceOf", receiver)

        click.echo(f"\nReading from {contract.address}\n")
        click.echo(f"Sender balance before: {sender_before}\n")
        click.echo(f"Receiver balance before: {receiver_before}\n")

        decimals = contract.call("decimals")
        try:
            raw_amount = parse_units(amount, decimals)
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="'--amount'") from exc
        if raw_amount <= 0:
            raise click.BadParameter("amount must be positive", param_hint="'--amount'")

        result = contract.transact(wallet, "transfer", receiver, raw_amount, timeout=timeout)
        echo_transaction(result)

        sender_after = contract.call("balanceOf", wallet.address)
        receiver_after = contract.call("balanceOf", receiver)

    click.echo(f"\nBalance of sender: {sender_after}")
    click.echo(f"Balance of receiver: {receiver_after}\n")
