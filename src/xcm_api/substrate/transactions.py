"""Transaction submission and finality tracking."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..exceptions import (
    OpaqueTransactionError,
    RuntimeExecutionError,
    TransactionError,
    TransactionTimeoutError,
    XCMError,
)
from ..types import (
    AccountIdentity,
    ErrorDescriptor,
    StatusUpdate,
    TransactionOutcome,
    TransactionStatus,
)
from .config import DEFAULT_FINALIZATION_TIMEOUT
from .connections import ChainConnection
from .nonces import NonceManager
from .runtime import ChainRuntime, ExtrinsicSubscription

logger = logging.getLogger(__name__)

_FAILED_STATUSES = frozenset({"dropped", "invalid", "usurped", "finalityTimeout"})

_UNSET: Any = object()


@dataclass(frozen=True)
class TransactionRequest:
    """A runtime call to sign with ``signer`` and submit on ``connection``."""

    connection: ChainConnection
    signer: AccountIdentity
    call: Any
    label: str = "extrinsic"


async def await_finality(
    subscription: ExtrinsicSubscription, *, label: str = "extrinsic"
) -> StatusUpdate:
    """Consume a status stream until the transaction reaches a final status.

    Updates addressed to other transaction hashes are ignored. Returns the
    ``finalized`` update; raises ``OpaqueTransactionError`` when the node
    reports the transaction dropped, invalid or usurped, or the stream ends
    first.
    """

    tx_hash = subscription.tx_hash
    state = TransactionStatus.PENDING

    async for update in subscription:
        if update.tx_hash != tx_hash:
            logger.debug("Ignoring status %s for foreign tx %s", update.status, update.tx_hash)
            continue

        if update.status == "inBlock":
            state = TransactionStatus.IN_BLOCK
            logger.info("%s included in block %s (tx=%s)", label, update.block_hash, tx_hash)
            continue

        if update.status == "finalized":
            logger.info("%s finalized in block %s (tx=%s)", label, update.block_hash, tx_hash)
            return update

        if update.status in _FAILED_STATUSES:
            message = f"Transaction {update.status}: {label}"
            raise OpaqueTransactionError(
                message,
                tx_hash=tx_hash,
                descriptor=ErrorDescriptor.opaque(message),
                details={"status": update.status, "block_hash": update.block_hash},
            )

        if update.status == "retracted":
            logger.warning(
                "%s block %s retracted; waiting (tx=%s)", label, update.block_hash, tx_hash
            )
        else:
            logger.debug(
                "%s status %s while %s (tx=%s)", label, update.status, state.value, tx_hash
            )

    message = f"Status stream closed before {label} was finalized"
    raise OpaqueTransactionError(
        message,
        tx_hash=tx_hash,
        descriptor=ErrorDescriptor.opaque(message),
        details={"last_state": state.value},
    )


def module_error_indices(dispatch_error: Any) -> tuple[int, int] | None:
    """Extract the (pallet index, error index) pair of a ``Module`` dispatch error."""

    if not isinstance(dispatch_error, Mapping):
        return None
    module = dispatch_error.get("Module")
    if not isinstance(module, Mapping):
        return None

    index = module.get("index")
    error = module.get("error")

    error_index: int | None
    if isinstance(error, bool):
        error_index = None
    elif isinstance(error, int):
        error_index = error
    elif isinstance(error, str):
        try:
            raw = bytes.fromhex(error.removeprefix("0x"))
        except ValueError:
            return None
        error_index = raw[0] if raw else None
    elif isinstance(error, bytes | bytearray | list | tuple):
        try:
            raw = bytes(error)
        except (TypeError, ValueError):
            return None
        error_index = raw[0] if raw else None
    else:
        error_index = None

    if not isinstance(index, int) or isinstance(index, bool) or error_index is None:
        return None
    return index, error_index


class TransactionTracker:
    """Sign, submit and follow extrinsics until finality."""

    def __init__(
        self,
        nonces: NonceManager | None = None,
        *,
        timeout: float | None = DEFAULT_FINALIZATION_TIMEOUT,
    ) -> None:
        self._nonces = nonces or NonceManager()
        self._timeout = timeout

    @property
    def nonces(self) -> NonceManager:
        return self._nonces

    async def submit_and_track(
        self, request: TransactionRequest, *, timeout: float | None = _UNSET
    ) -> TransactionOutcome:
        """Submit ``request`` and wait for its finalized outcome.

        Args:
            request: Call, signer and target connection.
            timeout: Seconds to wait for finality; ``None`` waits indefinitely.
                Defaults to the tracker's timeout.

        Returns:
            A FINALIZED TransactionOutcome with the block hash and every event.

        Raises:
            RuntimeExecutionError: The extrinsic failed with a decoded module error.
            OpaqueTransactionError: Submission failed or the failure is undecodable.
            TransactionTimeoutError: Finality was not reached in time.
        """

        wait_timeout = self._timeout if timeout is _UNSET else timeout
        connection = request.connection
        runtime = connection.runtime
        chain_id = connection.chain_id
        address = request.signer.address
        label = request.label

        nonce = await self._nonces.acquire(connection, address)
        try:
            subscription = await runtime.submit(request.call, request.signer.keypair, nonce=nonce)
        except XCMError:
            await self._nonces.release(chain_id, address, nonce)
            raise
        except Exception as exc:
            await self._nonces.release(chain_id, address, nonce)
            logger.error("Failed to submit %s on %s: %s", label, connection.endpoint.label, exc)
            raise OpaqueTransactionError(
                f"Failed to submit {label}: {exc}",
                descriptor=ErrorDescriptor.opaque(str(exc)),
                details={"chain_id": chain_id, "nonce": nonce},
            ) from exc

        tx_hash = subscription.tx_hash
        logger.info(
            "Submitted %s on %s (tx=%s, nonce=%s)", label, connection.endpoint.label, tx_hash, nonce
        )

        try:
            final = await asyncio.wait_for(
                await_finality(subscription, label=label), timeout=wait_timeout
            )
        except asyncio.TimeoutError as exc:
            self._nonces.reset(chain_id, address)
            raise TransactionTimeoutError(
                f"Timed out after {wait_timeout}s waiting for {label} to finalize",
                tx_hash=tx_hash,
                timeout=wait_timeout,
            ) from exc
        except XCMError:
            self._nonces.reset(chain_id, address)
            raise
        except Exception as exc:
            self._nonces.reset(chain_id, address)
            raise OpaqueTransactionError(
                str(exc), tx_hash=tx_hash, descriptor=ErrorDescriptor.opaque(str(exc))
            ) from exc
        finally:
            await subscription.unsubscribe()

        await self._nonces.confirm(chain_id, address, nonce)
        block_hash = final.block_hash

        try:
            result = await runtime.fetch_result(tx_hash, block_hash)
        except Exception as exc:
            raise OpaqueTransactionError(
                f"Unable to read outcome of {label}: {exc}",
                tx_hash=tx_hash,
                descriptor=ErrorDescriptor.opaque(str(exc)),
                details={"block_hash": block_hash},
            ) from exc

        if result.dispatch_error is not None:
            error = await self._decode_failure(runtime, tx_hash, result.dispatch_error)
            error.details.update({"label": label, "block_hash": block_hash})
            logger.error("%s failed in block %s: %s", label, block_hash, error.message)
            raise error

        return TransactionOutcome(
            status=TransactionStatus.FINALIZED,
            tx_hash=tx_hash,
            block_hash=block_hash,
            events=result.events,
        )

    async def _decode_failure(
        self, runtime: ChainRuntime, tx_hash: str, dispatch_error: Any
    ) -> TransactionError:
        indices = module_error_indices(dispatch_error)
        if indices is not None:
            try:
                section, name, documentation = await runtime.lookup_module_error(*indices)
            except LookupError as exc:
                logger.debug("Module error %s not in metadata: %s", indices, exc)
            else:
                descriptor = ErrorDescriptor.module_error(section, name, documentation)
                return RuntimeExecutionError(
                    descriptor.message, tx_hash=tx_hash, descriptor=descriptor
                )

        message = str(dispatch_error)
        return OpaqueTransactionError(
            message, tx_hash=tx_hash, descriptor=ErrorDescriptor.opaque(message)
        )
