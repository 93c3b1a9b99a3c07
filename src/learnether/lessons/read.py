"""
Lesson 3 - Read smart contracts.

Calls the view functions of an ERC-20 token through a human-readable ABI.
"""

from __future__ import annotations

from typing import Optional

import click

from ..config import mainnet_rpc_url
from ..node.contract import Contract
from ..units import format_units
from . import RPC_URL_HELP, USDC_ADDRESS, connect

ERC20_ABI = [
    "function name() view returns (string)",
    "function symbol() view returns (string)",
    "function decimals() view returns (uint8)",
    "function totalSupply() view returns (uint256)",
    "function balanceOf(address) view returns (uint)",
]

HOLDER_ADDRESS = "0x38AAEF3782910bdd9eA3566C839788Af6FF9B200"


@click.command()
@click.option("--token", default=USDC_ADDRESS, show_default=True, help="ERC-20 contract address")
@click.option("--holder", default=HOLDER_ADDRESS, show_default=True, help="Address whose balance to read")
@click.option("--rpc-url", default=None, help=RPC_URL_HELP)
@click.pass_context
def read(ctx: click.Context, token: str, holder: str, rpc_url: Optional[str]) -> None:
    """Read ERC-20 token details and a holder's balance."""
    with connect(ctx, rpc_url, mainnet_rpc_url) as provider:
        contract = Contract.at(token, ERC20_ABI, provider)

        name = contract.call("name")
        symbol = contract.call("symbol")
        decimals = contract.call("decimals")
        total_supply = contract.call("totalSupply")

        click.echo(f"Token Name: {name}")
        click.echo(f"Token Symbol: {symbol}")
        click.echo(f"Token Decimals: {decimals}")
        click.echo(f"Token Total Supply: {format_units(total_supply, decimals)} {symbol}")

        balance = contract.call("balanceOf", holder)

    click.echo(f"Balance of Holder ({holder}): {format_units(balance, decimals)} {symbol}")
