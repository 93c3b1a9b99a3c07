"""
Event logs - query ``eth_getLogs`` and decode entries against an event ABI.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from eth_utils import to_checksum_address

from ..errors import AbiError
from .abi import AbiEntry, AbiSource, decode_log, event_topic, find_event, load_abi
from .rpc import Provider, to_int

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventLog:
    """A decoded log entry.  Immutable once read from the chain."""

    event: str
    args: dict[str, Any]
    address: str
    block_number: int
    block_hash: str
    transaction_hash: str
    transaction_index: int
    log_index: int
    removed: bool
    data: str
    topics: tuple[str, ...]

    @classmethod
    def from_rpc(cls, event: AbiEntry, raw: dict[str, Any]) -> "EventLog":
        topics = tuple(raw.get("topics", []))
        return cls(
            event=event["name"],
            args=decode_log(event, topics, raw.get("data", "0x")),
            address=to_checksum_address(raw["address"]),
            block_number=to_int(raw.get("blockNumber")),
            block_hash=raw.get("blockHash", ""),
            transaction_hash=raw.get("transactionHash", ""),
            transaction_index=to_int(raw.get("transactionIndex")),
            log_index=to_int(raw.get("logIndex")),
            removed=bool(raw.get("removed", False)),
            data=raw.get("data", "0x"),
            topics=topics,
        )


def query_events(
    provider: Provider,
    address: str,
    abi: AbiSource,
    event_name: str,
    from_block: int,
    to_block: int,
) -> list[EventLog]:
    """
    Fetch and decode every ``event_name`` log emitted by ``address``.

    Args:
        provider: Provider to query
        address: Emitting contract address
        abi: Contract ABI (any form ``load_abi`` accepts)
        event_name: Event name or full signature
        from_block: First block, inclusive
        to_block: Last block, inclusive

    Returns:
        Decoded logs in node order, restricted to ``[from_block, to_block]``.
        Logs sharing the event topic but not its layout (an ERC-721
        ``Transfer`` against an ERC-20 ABI) are skipped.
    """
    if from_block > to_block:
        raise ValueError(f"from_block {from_block} is after to_block {to_block}")

    event = find_event(load_abi(abi), event_name)
    topics = [] if event.get("anonymous") else [event_topic(event)]
    raw_logs = provider.get_logs(address, topics, from_block, to_block)

    found = []
    for raw in _within(raw_logs, from_block, to_block):
        try:
            found.append(EventLog.from_rpc(event, raw))
        except AbiError as exc:
            logger.debug("Skipping log %s: %s", raw.get("transactionHash"), exc)
    return found


def _within(raw_logs: Iterable[dict[str, Any]], from_block: int, to_block: int) -> Iterable[dict[str, Any]]:
    for raw in raw_logs:
        if from_block <= to_int(raw.get("blockNumber")) <= to_block:
            yield raw
