"""
Lesson 5 - Contract events.

Queries the logs an ERC-20 contract emitted over the last blocks and
decodes them.  ``Transfer`` has two indexed parameters, which the node
stores as topics next to topic0, the Keccak hash of the event signature.
"""

from __future__ import annotations

from typing import Optional

import click

from ..config import mainnet_rpc_url
from ..node.contract import Contract
from . import RPC_URL_HELP, USDC_ADDRESS, connect
from .display import echo_event

ERC20_ABI = [
    "function name() view returns (string)",
    "function symbol() view returns (string)",
    "function totalSupply() view returns (uint256)",
    "function balanceOf(address) view returns (uint256)",
    "event Transfer(address indexed from, address indexed to, uint amount)",
]


@click.command()
@click.option("--token", default=USDC_ADDRESS, show_default=True, help="ERC-20 contract address")
@click.option("--event", "event_name", default="Transfer", show_default=True, help="Event to query")
@click.option(
    "--blocks",
    default=1,
    show_default=True,
    type=click.IntRange(min=0),
    help="How many blocks before the latest to include",
)
@click.option("--rpc-url", default=None, help=RPC_URL_HELP)
@click.pass_context
def events(
    ctx: click.Context,
    token: str,
    event_name: str,
    blocks: int,
    rpc_url: Optional[str],
) -> None:
    """Query recent events emitted by an ERC-20 contract."""
    with connect(ctx, rpc_url, mainnet_rpc_url) as provider:
        contract = Contract.at(token, ERC20_ABI, provider)

        block = provider.get_block_number()
        click.echo(f"Current block number: {block}")

        from_block = max(block - blocks, 0)
        found = contract.query_filter(event_name, from_block, block)

    click.echo(f"Found {len(found)} {event_name} events in blocks {from_block}-{block}:")
    if found:
        echo_event(found[0])
