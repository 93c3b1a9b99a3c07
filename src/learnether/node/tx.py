"""
Transaction Builder - Populate, sign, and send Ethereum transactions.

Uses eth-account for signing and the httpx-based Provider for sending.
Fees follow EIP-1559 when the chain reports a base fee, legacy gas
pricing otherwise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address

from ..errors import RpcError, TransactionFailedError
from .rpc import Provider, to_int

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY_FEE = 1_000_000_000  # 1 gwei
DEFAULT_RECEIPT_TIMEOUT = 120.0


@dataclass(frozen=True)
class TransactionResult:
    """A broadcast transaction and, once confirmed, its receipt."""

    tx_hash: str
    transaction: dict[str, Any]
    receipt: Optional[dict[str, Any]] = field(default=None)

    @property
    def confirmed(self) -> bool:
        return self.receipt is not None

    @property
    def status(self) -> Optional[int]:
        if self.receipt is None:
            return None
        return to_int(self.receipt.get("status"))

    @property
    def block_number(self) -> Optional[int]:
        if self.receipt is None:
            return None
        return to_int(self.receipt.get("blockNumber"))

    @property
    def gas_used(self) -> int:
        return to_int((self.receipt or {}).get("gasUsed"))

    @property
    def effective_gas_price(self) -> int:
        return to_int((self.receipt or {}).get("effectiveGasPrice"))

    @property
    def fee(self) -> int:
        """Wei paid for gas (``gasUsed * effectiveGasPrice``)."""
        return self.gas_used * self.effective_gas_price

    @property
    def confirmed_hash(self) -> str:
        """Hash as reported by the receipt, falling back to the broadcast hash."""
        if self.receipt and self.receipt.get("transactionHash"):
            return self.receipt["transactionHash"]
        return self.tx_hash


def _fee_fields(provider: Provider) -> dict[str, int]:
    block = provider.get_block("latest")
    base_fee = block.get("baseFeePerGas")
    if base_fee is None:
        return {"gasPrice": provider.get_gas_price()}

    try:
        priority_fee = provider.get_max_priority_fee()
    except RpcError:
        # Nodes without eth_maxPriorityFeePerGas
        priority_fee = DEFAULT_PRIORITY_FEE

    return {
        "type": 2,
        "maxPriorityFeePerGas": priority_fee,
        "maxFeePerGas": 2 * to_int(base_fee) + priority_fee,
    }


def populate_transaction(provider: Provider, sender: str, tx: dict[str, Any]) -> dict[str, Any]:
    """
    Fill in the fields a signer needs that the caller left out.

    Args:
        provider: Provider to query chain id, nonce, gas and fees
        sender: Address that will sign the transaction
        tx: Partial transaction (at least ``to`` or ``data``)

    Returns:
        A new transaction dict ready for ``sign_transaction``
    """
    populated: dict[str, Any] = {"value": 0, "data": "0x", **tx}
    if populated.get("to"):
        populated["to"] = to_checksum_address(populated["to"])

    if "chainId" not in populated:
        populated["chainId"] = provider.get_chain_id()
    if "nonce" not in populated:
        populated["nonce"] = provider.get_transaction_count(sender, "pending")
    if "gas" not in populated:
        populated["gas"] = provider.estimate_gas(
            {
                "from": sender,
                "to": populated.get("to"),
                "value": populated["value"],
                "data": populated["data"],
            }
        )
    if "gasPrice" not in populated and "maxFeePerGas" not in populated:
        populated.update(_fee_fields(provider))

    return populated


def sign_transaction(account: LocalAccount, tx: dict[str, Any]) -> str:
    """Sign a populated transaction.  Returns 0x-prefixed raw hex."""
    signed = account.sign_transaction(tx)
    return "0x" + bytes(signed.raw_transaction).hex()


def send_transaction(
    provider: Provider,
    account: LocalAccount,
    tx: dict[str, Any],
    wait: bool = True,
    timeout: float = DEFAULT_RECEIPT_TIMEOUT,
    confirmations: int = 1,
    poll_interval: float = 2.0,
) -> TransactionResult:
    """
    Populate, sign and broadcast a transaction, optionally waiting for it.

    Raises:
        TransactionFailedError: If the transaction is mined but reverted
        ConfirmationTimeoutError: If it is not confirmed within timeout
    """
    populated = populate_transaction(provider, account.address, tx)
    raw_tx = sign_transaction(account, populated)

    tx_hash = provider.send_raw_transaction(raw_tx)
    logger.info("Sent transaction %s (nonce %s)", tx_hash, populated["nonce"])

    sent = {"from": account.address, "hash": tx_hash, **populated}
    if not wait:
        return TransactionResult(tx_hash=tx_hash, transaction=sent)

    receipt = provider.wait_for_transaction(
        tx_hash,
        timeout=timeout,
        poll_interval=poll_interval,
        confirmations=confirmations,
    )
    result = TransactionResult(tx_hash=tx_hash, transaction=sent, receipt=receipt)
    if result.status != 1:
        raise TransactionFailedError(tx_hash, receipt)

    logger.info("Transaction %s confirmed in block %s", tx_hash, result.block_number)
    return result


def transfer(
    provider: Provider,
    account: LocalAccount,
    to: str,
    value: int,
    wait: bool = True,
    timeout: float = DEFAULT_RECEIPT_TIMEOUT,
    poll_interval: float = 2.0,
) -> TransactionResult:
    """Send ``value`` wei of the native currency to ``to``."""
    return send_transaction(
        provider,
        account,
        {"to": to, "value": value},
        wait=wait,
        timeout=timeout,
        poll_interval=poll_interval,
    )
