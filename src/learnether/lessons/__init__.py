"""
Lessons - one CLI command per walkthrough.

- accounts: Read an account's ETH balance
- send:     Sign and send an ETH transfer, then re-read balances
- read:     Read ERC-20 token metadata and a holder's balance
- write:    Send an ERC-20 transfer, then re-read balances
- events:   Query and decode recent ERC-20 Transfer events
"""

from __future__ import annotations

from typing import Callable, Optional

import click

from ..config import validate_rpc_url
from ..node.rpc import Provider

# Mainnet USDC, used by the token lessons
USDC_ADDRESS = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"

RPC_URL_HELP = "RPC endpoint URL (overrides the environment)"


def connect(ctx: click.Context, rpc_url: Optional[str], default_url: Callable[[], str]) -> Provider:
    """
    Open the lesson's provider.

    ``default_url`` is a zero-argument callable from ``config`` so the
    environment is only consulted when ``--rpc-url`` is absent.  A
    transport stored on the context object (tests) is passed through.
    """
    url = validate_rpc_url(rpc_url) if rpc_url else default_url()
    obj = ctx.find_object(dict) or {}
    return Provider(url, transport=obj.get("transport"))
