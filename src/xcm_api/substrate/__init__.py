"""Substrate connection layer: runtime adapter, pool, keys, nonces and tracking."""

from .config import XCMClientConfig
from .connections import ChainConnection, ConnectionPool
from .keys import AccountProvider, decode_address
from .nonces import NonceManager
from .runtime import ChainRuntime, ExtrinsicResult, ExtrinsicSubscription, SubstrateRuntime
from .transactions import TransactionRequest, TransactionTracker, await_finality

__all__ = [
    "AccountProvider",
    "ChainConnection",
    "ChainRuntime",
    "ConnectionPool",
    "ExtrinsicResult",
    "ExtrinsicSubscription",
    "NonceManager",
    "SubstrateRuntime",
    "TransactionRequest",
    "TransactionTracker",
    "XCMClientConfig",
    "await_finality",
    "decode_address",
]
