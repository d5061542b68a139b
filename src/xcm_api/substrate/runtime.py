"""Chain client runtime used by the connection layer.

``ChainRuntime`` is the narrow surface the orchestration code depends on:
compose a call, sign and submit it, stream its status, read back the events
of the block it landed in, and run storage reads. ``SubstrateRuntime``
implements it on top of ``substrate-interface``; tests provide in-memory
doubles with the same methods.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from substrateinterface import ExtrinsicReceipt, Keypair, SubstrateInterface

from ..types import ChainEndpoint, ChainEvent, StatusUpdate

logger = logging.getLogger(__name__)

# Statuses after which the node sends no further updates for an extrinsic.
FINAL_STATUSES = frozenset({"finalized", "dropped", "invalid", "usurped", "finalityTimeout"})


@dataclass(frozen=True)
class ExtrinsicResult:
    """Events of an applied extrinsic plus its dispatch error, if any."""

    events: tuple[ChainEvent, ...]
    dispatch_error: Any = None


class ExtrinsicSubscription:
    """Status stream of a single submitted extrinsic."""

    def __init__(
        self,
        tx_hash: str,
        updates: AsyncIterator[StatusUpdate],
        on_unsubscribe: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        self.tx_hash = tx_hash
        self._updates = updates
        self._on_unsubscribe = on_unsubscribe
        self._closed = False

    def __aiter__(self) -> AsyncIterator[StatusUpdate]:
        return self._updates

    @property
    def closed(self) -> bool:
        return self._closed

    async def unsubscribe(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._on_unsubscribe is not None:
            await self._on_unsubscribe()


class ChainRuntime(Protocol):
    """Submit / subscribe / query primitives of one chain."""

    endpoint: ChainEndpoint

    async def compose_call(self, module: str, function: str, params: Mapping[str, Any]) -> Any: ...

    async def account_nonce(self, address: str) -> int: ...

    async def submit(self, call: Any, keypair: Any, *, nonce: int) -> ExtrinsicSubscription: ...

    async def fetch_result(self, tx_hash: str, block_hash: str) -> ExtrinsicResult: ...

    async def lookup_module_error(
        self, module_index: int, error_index: int
    ) -> tuple[str, str, str]: ...

    async def query_account(self, address: str) -> Mapping[str, Any]: ...

    async def close(self) -> None: ...


# ---------------------------------------------------------------------------
# Wire helpers
# ---------------------------------------------------------------------------


def section_name(pallet: str) -> str:
    """Return the camelCase section name of a pallet (``XTokens`` -> ``xTokens``)."""

    return pallet[:1].lower() + pallet[1:] if pallet else pallet


def parse_status(tx_hash: str, result: Any) -> StatusUpdate:
    """Translate an ``author_extrinsicUpdate`` payload into a StatusUpdate."""

    if isinstance(result, str):
        return StatusUpdate(tx_hash=tx_hash, status=result)

    if isinstance(result, Mapping) and result:
        status, payload = next(iter(result.items()))
        block_hash = payload if isinstance(payload, str) else None
        return StatusUpdate(tx_hash=tx_hash, status=str(status), block_hash=block_hash)

    return StatusUpdate(tx_hash=tx_hash, status="unknown")


def event_from_record(record: Mapping[str, Any]) -> ChainEvent:
    """Build a ChainEvent from a decoded event record."""

    event = record.get("event", record)
    module = event.get("module_id") or event.get("section") or ""
    method = event.get("event_id") or event.get("method") or ""
    data = event.get("attributes", event.get("params"))
    return ChainEvent(module=section_name(str(module)), method=str(method), data=data)


def dispatch_error_of(events: tuple[ChainEvent, ...]) -> Any:
    """Return the dispatch error carried by an ``ExtrinsicFailed`` event."""

    for event in events:
        if event.module != "system" or event.method != "ExtrinsicFailed":
            continue
        data = event.data
        if isinstance(data, Mapping):
            return data.get("dispatch_error", data)
        if isinstance(data, list | tuple) and data:
            return data[0]
        return data if data is not None else "ExtrinsicFailed"
    return None


# ---------------------------------------------------------------------------
# substrate-interface implementation
# ---------------------------------------------------------------------------

# Seconds to wait for a closed watch socket to release its worker thread.
UNWATCH_GRACE = 5.0

WatchFactory = Callable[[], SubstrateInterface]


class SubstrateRuntime:
    """ChainRuntime backed by a blocking ``SubstrateInterface`` websocket client.

    Every call runs in a worker thread. ``SubstrateInterface`` is not
    re-entrant, so access to the shared client is serialised with an asyncio
    lock. Status subscriptions never use the shared client: each submission
    is watched over its own websocket, which is closed once the extrinsic
    reaches a final status or the caller unsubscribes.
    """

    def __init__(
        self,
        endpoint: ChainEndpoint,
        substrate: SubstrateInterface,
        *,
        ss58_format: int = 42,
        watch_factory: WatchFactory | None = None,
    ) -> None:
        self.endpoint = endpoint
        self._substrate = substrate
        self._lock = asyncio.Lock()
        self._watch_factory = watch_factory or (
            lambda: SubstrateInterface(url=endpoint.url, ss58_format=ss58_format)
        )

    @classmethod
    async def connect(cls, endpoint: ChainEndpoint, *, ss58_format: int = 42) -> SubstrateRuntime:
        """Open the websocket and complete the metadata handshake."""

        def _open() -> tuple[SubstrateInterface, str]:
            substrate = SubstrateInterface(url=endpoint.url, ss58_format=ss58_format)
            substrate.init_runtime()
            return substrate, str(substrate.chain)

        substrate, chain_name = await asyncio.to_thread(_open)
        logger.info("Connected to %s at %s (chain=%s)", endpoint.label, endpoint.url, chain_name)
        return cls(endpoint, substrate, ss58_format=ss58_format)

    async def _call(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        async with self._lock:
            return await asyncio.to_thread(func, *args, **kwargs)

    async def compose_call(self, module: str, function: str, params: Mapping[str, Any]) -> Any:
        return await self._call(
            self._substrate.compose_call,
            call_module=module,
            call_function=function,
            call_params=dict(params),
        )

    async def account_nonce(self, address: str) -> int:
        return int(await self._call(self._substrate.get_account_nonce, address))

    async def submit(self, call: Any, keypair: Keypair, *, nonce: int) -> ExtrinsicSubscription:
        extrinsic = await self._call(
            self._substrate.create_signed_extrinsic, call=call, keypair=keypair, nonce=nonce
        )
        tx_hash = "0x" + bytes(extrinsic.extrinsic_hash).hex()
        watch = await asyncio.to_thread(self._watch_factory)

        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[StatusUpdate | None] = asyncio.Queue()
        stopped = False

        def _handler(message: Mapping[str, Any], update_nr: int, subscription_id: str) -> Any:
            update = parse_status(tx_hash, message["params"]["result"])
            loop.call_soon_threadsafe(queue.put_nowait, update)
            if update.status in FINAL_STATUSES:
                return update
            return None

        async def _watch() -> None:
            try:
                await asyncio.to_thread(
                    watch.rpc_request,
                    "author_submitAndWatchExtrinsic",
                    [str(extrinsic.data)],
                    result_handler=_handler,
                )
            except Exception as exc:
                if not stopped:
                    raise
                logger.debug("Watch of %s ended after unsubscribe: %s", tx_hash, exc)
            finally:
                queue.put_nowait(None)
                await asyncio.to_thread(watch.close)

        watcher = asyncio.create_task(_watch())

        async def _updates() -> AsyncIterator[StatusUpdate]:
            while True:
                update = await queue.get()
                if update is None:
                    # Surfaces submission errors raised by the node.
                    await watcher
                    return
                yield update

        async def _unsubscribe() -> None:
            nonlocal stopped
            if watcher.done():
                return
            stopped = True
            # Closing the socket unblocks the worker thread reading from it.
            await asyncio.to_thread(watch.close)
            await asyncio.wait({watcher}, timeout=UNWATCH_GRACE)

        logger.debug("Submitted extrinsic %s to %s", tx_hash, self.endpoint.label)
        return ExtrinsicSubscription(tx_hash, _updates(), _unsubscribe)

    async def fetch_result(self, tx_hash: str, block_hash: str) -> ExtrinsicResult:
        def _load() -> list[Mapping[str, Any]]:
            receipt = ExtrinsicReceipt(
                substrate=self._substrate, extrinsic_hash=tx_hash, block_hash=block_hash
            )
            return [record.value for record in receipt.triggered_events]

        records = await self._call(_load)
        events = tuple(event_from_record(record) for record in records)
        return ExtrinsicResult(events=events, dispatch_error=dispatch_error_of(events))

    async def lookup_module_error(
        self, module_index: int, error_index: int
    ) -> tuple[str, str, str]:
        def _lookup() -> tuple[str, str, str]:
            metadata = self._substrate.metadata
            module_error = metadata.get_module_error(
                module_index=module_index, error_index=error_index
            )
            if module_error is None:
                raise LookupError(f"No module error {module_index}:{error_index} in metadata")

            section = str(module_index)
            for pallet in metadata.pallets:
                if pallet.value.get("index") == module_index:
                    section = section_name(pallet.name)
                    break

            docs = module_error.docs
            documentation = " ".join(docs) if isinstance(docs, list | tuple) else str(docs or "")
            return section, module_error.name, documentation

        return await self._call(_lookup)

    async def query_account(self, address: str) -> Mapping[str, Any]:
        result = await self._call(self._substrate.query, "System", "Account", [address])
        return dict(result.value["data"])

    async def close(self) -> None:
        await self._call(self._substrate.close)
        logger.info("Closed connection to %s", self.endpoint.label)
