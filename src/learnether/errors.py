"""
Error taxonomy for learnether.

Every error carries the process exit code the CLI uses when it reaches
the top level.  Nothing in the library layers catches these.
"""

from __future__ import annotations

from typing import Any, Optional


class LearnEtherError(RuntimeError):
    exit_code: int = 1


class ConfigError(LearnEtherError):
    exit_code = 3


class InvalidKeyError(LearnEtherError):
    exit_code = 3


class RpcConnectionError(LearnEtherError):
    exit_code = 4


class RpcError(LearnEtherError):
    exit_code = 5

    def __init__(self, method: str, code: Optional[int], message: str, data: Any = None) -> None:
        self.method = method
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"{method} failed (code={code}): {message}")


class AbiError(LearnEtherError):
    exit_code = 5


class TransactionFailedError(LearnEtherError):
    exit_code = 6

    def __init__(self, tx_hash: str, receipt: dict[str, Any]) -> None:
        self.tx_hash = tx_hash
        self.receipt = receipt
        super().__init__(f"Transaction {tx_hash} reverted")


class ConfirmationTimeoutError(LearnEtherError):
    exit_code = 7

    def __init__(self, tx_hash: str, timeout: float) -> None:
        self.tx_hash = tx_hash
        self.timeout = timeout
        super().__init__(f"Transaction {tx_hash} not confirmed within {timeout}s")
