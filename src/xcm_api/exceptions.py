"""Exception hierarchy for the XCM orchestration API."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .types import ErrorDescriptor


class XCMError(Exception):
    """Base exception for all XCM orchestration errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ChainConnectionError(XCMError):
    """Raised when a chain endpoint cannot be reached or the handshake times out."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        chain_id: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
        self.chain_id = chain_id


class CryptoNotReadyError(XCMError):
    """Raised when identities are requested before the crypto backend is warmed up."""

    pass


class UnsupportedChainError(XCMError):
    """Raised when an operation targets a chain outside its allow-list."""

    def __init__(self, chain_id: Any, details: dict | None = None):
        super().__init__(f"Unsupported parachain ID: {chain_id}", details)
        self.chain_id = chain_id


class ValidationError(XCMError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class QueryError(XCMError):
    """Raised when a storage read against a chain fails."""

    pass


class TransactionError(XCMError):
    """Base class for failures of a submitted transaction."""

    def __init__(
        self,
        message: str,
        tx_hash: str | None = None,
        descriptor: ErrorDescriptor | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.tx_hash = tx_hash
        self.descriptor = descriptor


class RuntimeExecutionError(TransactionError):
    """Raised when a finalized extrinsic failed with a decodable module error."""

    pass


class OpaqueTransactionError(TransactionError):
    """Raised when a transaction failed and the cause could not be decoded."""

    pass


class TransactionTimeoutError(TransactionError):
    """Raised when a transaction does not reach finality within the timeout."""

    def __init__(
        self,
        message: str,
        tx_hash: str | None = None,
        timeout: float | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, tx_hash=tx_hash, details=details)
        self.timeout = timeout
