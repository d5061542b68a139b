from __future__ import annotations

import asyncio
import threading
from types import SimpleNamespace
from typing import Any, cast

import pytest
from fakes import FakeKeypair
from substrateinterface import SubstrateInterface
from substrateinterface.exceptions import SubstrateRequestException

from xcm_api.exceptions import OpaqueTransactionError, TransactionTimeoutError
from xcm_api.substrate.connections import ChainConnection
from xcm_api.substrate.runtime import (
    ExtrinsicSubscription,
    SubstrateRuntime,
    dispatch_error_of,
    event_from_record,
    parse_status,
    section_name,
)
from xcm_api.substrate.transactions import TransactionRequest, TransactionTracker, await_finality
from xcm_api.types import AccountIdentity, ChainEndpoint, ChainEvent, StatusUpdate


def test_section_name() -> None:
    assert section_name("XTokens") == "xTokens"
    assert section_name("System") == "system"
    assert section_name("") == ""


@pytest.mark.parametrize(
    ("result", "expected"),
    [
        ("ready", StatusUpdate("0x01", "ready")),
        ({"inBlock": "0xb1"}, StatusUpdate("0x01", "inBlock", "0xb1")),
        ({"finalized": "0xb2"}, StatusUpdate("0x01", "finalized", "0xb2")),
        ({"broadcast": ["peer"]}, StatusUpdate("0x01", "broadcast")),
        (None, StatusUpdate("0x01", "unknown")),
    ],
)
def test_parse_status(result: object, expected: StatusUpdate) -> None:
    assert parse_status("0x01", result) == expected


def test_event_from_decoded_record() -> None:
    record = {
        "phase": "ApplyExtrinsic",
        "event": {
            "module_id": "XTokens",
            "event_id": "TransferredMultiAssets",
            "attributes": {"sender": "5Alice"},
        },
    }

    event = event_from_record(record)

    assert event == ChainEvent("xTokens", "TransferredMultiAssets", {"sender": "5Alice"})


def test_dispatch_error_of() -> None:
    failed = ChainEvent(
        "system",
        "ExtrinsicFailed",
        {"dispatch_error": {"Module": {"index": 60, "error": "0x03000000"}}, "dispatch_info": {}},
    )

    assert dispatch_error_of((ChainEvent("system", "ExtrinsicSuccess"),)) is None
    assert dispatch_error_of((failed,)) == {"Module": {"index": 60, "error": "0x03000000"}}
    assert dispatch_error_of((ChainEvent("system", "ExtrinsicFailed"),)) == "ExtrinsicFailed"


@pytest.mark.asyncio
async def test_unsubscribe_is_idempotent() -> None:
    calls: list[str] = []

    async def updates():
        yield StatusUpdate("0x01", "ready")

    async def on_unsubscribe() -> None:
        calls.append("unsubscribe")

    subscription = ExtrinsicSubscription("0x01", updates(), on_unsubscribe)
    await subscription.unsubscribe()
    await subscription.unsubscribe()

    assert subscription.closed
    assert calls == ["unsubscribe"]


# ---------------------------------------------------------------------------
# SubstrateRuntime against a stub node
# ---------------------------------------------------------------------------

ENDPOINT = ChainEndpoint(1000, "ws://stub:9946", "parachain1000")
EXTRINSIC_HASH = "0x" + "11" * 32


class StubSubstrate:
    """Shared client: signs extrinsics and answers storage reads."""

    def __init__(self) -> None:
        self.queries: list[str] = []

    def get_account_nonce(self, address: str) -> int:
        return 0

    def create_signed_extrinsic(self, call: Any, keypair: Any, nonce: int) -> Any:
        return SimpleNamespace(extrinsic_hash=bytes.fromhex("11" * 32), data="0xdead")

    def query(self, module: str, storage_function: str, params: list[str]) -> Any:
        self.queries.append(params[0])
        return SimpleNamespace(value={"data": {"free": 7, "reserved": 0}})

    def close(self) -> None:
        pass


class StubWatch:
    """Dedicated watch client replaying ``statuses`` to the result handler.

    With ``hang`` set it goes silent afterwards until the socket is closed.
    """

    def __init__(
        self, statuses: list[Any], *, hang: bool = False, error: Exception | None = None
    ) -> None:
        self.statuses = statuses
        self.hang = hang
        self.error = error
        self.methods: list[str] = []
        self.closed = threading.Event()

    def rpc_request(self, method: str, params: list[Any], result_handler: Any = None) -> Any:
        self.methods.append(method)
        if self.error is not None:
            raise self.error
        for update_nr, status in enumerate(self.statuses):
            message = {"params": {"result": status, "subscription": "sub-1"}}
            result = result_handler(message, update_nr, "sub-1")
            if result is not None:
                return result
        if self.hang:
            self.closed.wait(5)
            raise ConnectionError("websocket closed")
        return None

    def close(self) -> None:
        self.closed.set()


def _runtime(watch: StubWatch, substrate: StubSubstrate | None = None) -> SubstrateRuntime:
    return SubstrateRuntime(
        ENDPOINT,
        cast(SubstrateInterface, substrate or StubSubstrate()),
        watch_factory=lambda: cast(SubstrateInterface, watch),
    )


def _request(runtime: SubstrateRuntime) -> TransactionRequest:
    signer = AccountIdentity(
        name="Alice", seed="//Alice", address="5Alice", keypair=FakeKeypair("//Alice")
    )
    return TransactionRequest(
        connection=ChainConnection(endpoint=ENDPOINT, runtime=runtime),
        signer=signer,
        call={"module": "XTokens"},
        label="XCM transfer 1000->1001",
    )


class TestSubstrateRuntimeSubmit:
    @pytest.mark.asyncio
    async def test_finalized_stream_closes_watch(self) -> None:
        watch = StubWatch(["ready", {"inBlock": "0xb1"}, {"finalized": "0xb1"}])
        runtime = _runtime(watch)

        subscription = await runtime.submit({"call": 1}, None, nonce=0)
        final = await await_finality(subscription)
        await subscription.unsubscribe()

        assert subscription.tx_hash == EXTRINSIC_HASH
        assert final == StatusUpdate(EXTRINSIC_HASH, "finalized", "0xb1")
        assert watch.methods == ["author_submitAndWatchExtrinsic"]
        assert watch.closed.is_set()

    @pytest.mark.asyncio
    async def test_dropped_status_ends_stream(self) -> None:
        runtime = _runtime(StubWatch(["ready", "dropped"]))

        subscription = await runtime.submit({"call": 1}, None, nonce=0)

        with pytest.raises(OpaqueTransactionError) as exc_info:
            await await_finality(subscription, label="HRMP accept 1000")
        assert exc_info.value.message == "Transaction dropped: HRMP accept 1000"

    @pytest.mark.asyncio
    async def test_node_rejection_becomes_opaque_error(self) -> None:
        error = SubstrateRequestException({"code": 1010, "message": "Invalid Transaction"})
        watch = StubWatch([], error=error)
        runtime = _runtime(watch)

        with pytest.raises(OpaqueTransactionError) as exc_info:
            await TransactionTracker(timeout=1.0).submit_and_track(_request(runtime))

        assert "1010" in exc_info.value.message
        assert exc_info.value.tx_hash == EXTRINSIC_HASH
        assert watch.closed.is_set()

    @pytest.mark.asyncio
    async def test_timeout_leaves_connection_usable(self) -> None:
        watch = StubWatch(["ready", {"inBlock": "0xb1"}], hang=True)
        substrate = StubSubstrate()
        runtime = _runtime(watch, substrate)

        with pytest.raises(TransactionTimeoutError):
            await TransactionTracker(timeout=0.1).submit_and_track(_request(runtime))

        assert watch.closed.is_set()
        data = await asyncio.wait_for(runtime.query_account("5abc"), 1.0)
        assert data == {"free": 7, "reserved": 0}
        assert await asyncio.wait_for(runtime.account_nonce("5abc"), 1.0) == 0

    @pytest.mark.asyncio
    async def test_reads_do_not_wait_for_pending_finality(self) -> None:
        watch = StubWatch(["ready"], hang=True)
        runtime = _runtime(watch)

        subscription = await runtime.submit({"call": 1}, None, nonce=0)
        try:
            data = await asyncio.wait_for(runtime.query_account("5abc"), 1.0)
        finally:
            await subscription.unsubscribe()

        assert data["free"] == 7
        assert subscription.closed
        assert watch.closed.is_set()
