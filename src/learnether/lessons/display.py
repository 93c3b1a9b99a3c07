"""Console rendering shared by the lessons."""

from __future__ import annotations

from typing import Any

import click

from ..node.events import EventLog
from ..node.tx import TransactionResult
from ..units import format_units


def _field(label: str, value: Any) -> None:
    click.echo(click.style(f"  {label:<22}", dim=True) + str(value))


def echo_transaction(result: TransactionResult) -> None:
    tx = result.transaction
    click.echo("Transaction:")
    _field("hash", result.tx_hash)
    _field("type", tx.get("type", 0))
    _field("from", tx.get("from"))
    _field("to", tx.get("to"))
    _field("nonce", tx.get("nonce"))
    _field("gasLimit", tx.get("gas"))
    if "maxFeePerGas" in tx:
        _field("maxPriorityFeePerGas", tx["maxPriorityFeePerGas"])
        _field("maxFeePerGas", tx["maxFeePerGas"])
    else:
        _field("gasPrice", tx.get("gasPrice"))
    _field("data", tx.get("data", "0x"))
    _field("value", tx.get("value", 0))
    _field("chainId", tx.get("chainId"))


def echo_receipt(result: TransactionResult) -> None:
    click.echo("Receipt:")
    _field("hash", result.confirmed_hash)
    _field("blockNumber", result.block_number)
    _field("status", result.status)
    _field("gasUsed", result.gas_used)
    _field("effectiveGasPrice", result.effective_gas_price)
    _field("fee", f"{format_units(result.fee, 18)} ETH")


def echo_event(log: EventLog) -> None:
    click.echo(f"{log.event} event:")
    _field("transactionHash", log.transaction_hash)
    _field("blockHash", log.block_hash)
    _field("blockNumber", log.block_number)
    _field("address", log.address)
    _field("index", log.log_index)
    _field("transactionIndex", log.transaction_index)
    _field("removed", log.removed)
    _field("data", log.data)
    click.echo(click.style("  topics", dim=True))
    for topic in log.topics:
        click.echo(f"    {topic}")
    click.echo(click.style("  args", dim=True))
    for name, value in log.args.items():
        click.echo(f"    {name}: {value}")
