__version__ = "1.0.0"

__all__ = [
    # Errors
    "LearnEtherError",
    "ConfigError",
    "InvalidKeyError",
    "RpcConnectionError",
    "RpcError",
    "AbiError",
    "TransactionFailedError",
    "ConfirmationTimeoutError",
    # Units
    "format_units",
    "parse_units",
    "format_ether",
    "parse_ether",
    # Node
    "Provider",
    "Contract",
    "EventLog",
    "TransactionResult",
    "load_abi",
    "parse_signature",
    "query_events",
    "send_transaction",
    "transfer",
    # Keys
    "signing_key",
]

from .errors import (
    AbiError,
    ConfigError,
    ConfirmationTimeoutError,
    InvalidKeyError,
    LearnEtherError,
    RpcConnectionError,
    RpcError,
    TransactionFailedError,
)
from .units import format_ether, format_units, parse_ether, parse_units
from .node.rpc import Provider
from .node.abi import load_abi, parse_signature
from .node.contract import Contract
from .node.events import EventLog, query_events
from .node.tx import TransactionResult, send_transaction, transfer
from .wallet.keys import signing_key
