"""
Contract - a deployed contract address bound to its ABI and a provider.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address

from .abi import AbiEntry, AbiSource, decode_result, encode_call, load_abi
from .events import EventLog, query_events
from .rpc import BlockId, Provider
from .tx import DEFAULT_RECEIPT_TIMEOUT, TransactionResult, send_transaction


@dataclass(frozen=True)
class Contract:
    address: str
    abi: list[AbiEntry]
    provider: Provider

    @classmethod
    def at(cls, address: str, abi: AbiSource, provider: Provider) -> "Contract":
        """Bind ``address`` to an ABI given in any form ``load_abi`` accepts."""
        return cls(address=to_checksum_address(address), abi=load_abi(abi), provider=provider)

    def encode(self, function_name: str, *args: Any) -> str:
        return encode_call(self.abi, function_name, args)

    def call(self, function_name: str, *args: Any, block: BlockId = "latest") -> Any:
        """Read from the contract (eth_call) and decode the return value(s)."""
        data = self.encode(function_name, *args)
        result = self.provider.call({"to": self.address, "data": data}, block)
        return decode_result(self.abi, function_name, result or "0x")

    def transact(
        self,
        account: LocalAccount,
        function_name: str,
        *args: Any,
        value: int = 0,
        gas: Optional[int] = None,
        wait: bool = True,
        timeout: float = DEFAULT_RECEIPT_TIMEOUT,
        poll_interval: float = 2.0,
    ) -> TransactionResult:
        """Send a state-changing call signed by ``account``."""
        tx: dict[str, Any] = {
            "to": self.address,
            "data": self.encode(function_name, *args),
            "value": value,
        }
        if gas is not None:
            tx["gas"] = gas
        return send_transaction(
            self.provider,
            account,
            tx,
            wait=wait,
            timeout=timeout,
            poll_interval=poll_interval,
        )

    def query_filter(self, event_name: str, from_block: int, to_block: int) -> list[EventLog]:
        return query_events(self.provider, self.address, self.abi, event_name, from_block, to_block)
