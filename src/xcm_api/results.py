"""Uniform result envelopes for callers of the XCM API."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Mapping
from datetime import datetime, timezone
from typing import Any

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
from .types import Envelope, TransactionOutcome
from .xcm.events import classify_events, event_names

logger = logging.getLogger(__name__)

_STATUS_CODES: tuple[tuple[type[Exception], int], ...] = (
    (ValidationError, 400),
    (UnsupportedChainError, 400),
    (RuntimeExecutionError, 422),
    (CryptoNotReadyError, 503),
    (ChainConnectionError, 503),
    (TransactionTimeoutError, 504),
    (OpaqueTransactionError, 502),
    (QueryError, 502),
)


def _now_utc() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S+00:00")


def outcome_summary(
    outcome: TransactionOutcome, message: str | None = None, **extra: Any
) -> dict[str, Any]:
    """Summarise a finalized transaction: block, event names and classified events."""

    summary: dict[str, Any] = {
        "success": outcome.success,
        "blockHash": outcome.block_hash,
        "txHash": outcome.tx_hash,
        "events": event_names(outcome.events),
        "xcmEvents": classify_events(outcome.events).as_dict(),
        "timestamp": _now_utc(),
    }
    if message is not None:
        summary["message"] = message
    summary.update(extra)
    return summary


def to_payload(value: Any) -> Any:
    """Convert result objects into plain JSON-compatible structures."""

    if isinstance(value, TransactionOutcome):
        return outcome_summary(value)
    if hasattr(value, "as_dict"):
        return value.as_dict()
    if isinstance(value, Mapping):
        return {str(key): to_payload(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [to_payload(item) for item in value]
    return value


def status_code_for(exc: BaseException) -> int:
    for error_type, code in _STATUS_CODES:
        if isinstance(exc, error_type):
            return code
    return 500


def success_envelope(data: Any) -> Envelope:
    return Envelope(success=True, data=to_payload(data))


def failure_envelope(exc: Exception) -> Envelope:
    details: dict[str, Any] = {}
    if isinstance(exc, XCMError):
        details = {key: to_payload(item) for key, item in exc.details.items()}
        if isinstance(exc, TransactionError):
            if exc.tx_hash:
                details["txHash"] = exc.tx_hash
            if exc.descriptor is not None:
                details["descriptor"] = exc.descriptor.as_dict()
        message = exc.message
    else:
        message = str(exc) or type(exc).__name__

    return Envelope(
        success=False,
        error=message,
        status_code=status_code_for(exc),
        error_details=details or None,
    )


async def enveloped(operation: Awaitable[Any]) -> Envelope:
    """Await ``operation`` and wrap its result or failure in an Envelope."""

    try:
        result = await operation
    except XCMError as exc:
        logger.error("Operation failed: %s", exc.message)
        return failure_envelope(exc)
    except Exception as exc:
        logger.exception("Unexpected failure")
        return failure_envelope(exc)
    return success_envelope(result)
