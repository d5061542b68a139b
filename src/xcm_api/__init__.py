"""XCM API - orchestrate HRMP channels, XCM transfers and balances.

This library drives a relay chain and its parachains through
``substrate-interface``: it manages one connection per chain, tracks
extrinsics to finality and composes cross-chain protocols on top.
"""

from .base import XCMProtocolBase
from .client import XCMProtocol
from .exceptions import (
    ChainConnectionError,
    CryptoNotReadyError,
    OpaqueTransactionError,
    QueryError,
    RuntimeExecutionError,
    TransactionError,
    TransactionTimeoutError,
    UnsupportedChainError,
    ValidationError,
    XCMError,
)
from .results import enveloped, failure_envelope, outcome_summary, success_envelope
from .substrate.config import XCMClientConfig
from .types import (
    AccountBalance,
    AccountIdentity,
    BalanceRecord,
    ChainEndpoint,
    ChainEvent,
    ChannelConfig,
    ClassifiedEvents,
    Envelope,
    ErrorDescriptor,
    ForeignAsset,
    LocalAsset,
    LocationDescriptor,
    TransactionOutcome,
    TransactionStatus,
    TransferReceipt,
)
from .utils import (
    estimate_xcm_fee,
    format_balance,
    from_planck,
    is_valid_parachain_id,
    to_planck,
    validate_transfer,
)
from .xcm.descriptors import build_asset, build_location
from .xcm.events import classify_events

__version__ = "0.1.0"

__all__ = [
    # Clients
    "XCMProtocolBase",
    "XCMProtocol",
    "XCMClientConfig",
    # Types
    "AccountBalance",
    "AccountIdentity",
    "BalanceRecord",
    "ChainEndpoint",
    "ChainEvent",
    "ChannelConfig",
    "ClassifiedEvents",
    "Envelope",
    "ErrorDescriptor",
    "ForeignAsset",
    "LocalAsset",
    "LocationDescriptor",
    "TransactionOutcome",
    "TransactionStatus",
    "TransferReceipt",
    # Exceptions
    "XCMError",
    "ChainConnectionError",
    "CryptoNotReadyError",
    "UnsupportedChainError",
    "ValidationError",
    "QueryError",
    "TransactionError",
    "RuntimeExecutionError",
    "OpaqueTransactionError",
    "TransactionTimeoutError",
    # Builders and formatting
    "build_location",
    "build_asset",
    "classify_events",
    "outcome_summary",
    "success_envelope",
    "failure_envelope",
    "enveloped",
    # Utility functions
    "to_planck",
    "from_planck",
    "format_balance",
    "is_valid_parachain_id",
    "validate_transfer",
    "estimate_xcm_fee",
]
