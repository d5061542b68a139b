from __future__ import annotations

import pytest
from fakes import FakeKeypair, FakeNetwork

from xcm_api import XCMProtocol, enveloped
from xcm_api.exceptions import UnsupportedChainError
from xcm_api.substrate.config import XCMClientConfig
from xcm_api.substrate.keys import AccountProvider
from xcm_api.substrate.runtime import ExtrinsicResult
from xcm_api.types import ChainEvent


@pytest.fixture
def client(config: XCMClientConfig, network: FakeNetwork) -> XCMProtocol:
    return XCMProtocol(
        config, connector=network.connect, accounts=AccountProvider(deriver=FakeKeypair)
    )


@pytest.mark.asyncio
async def test_initialize_connections(client: XCMProtocol, network: FakeNetwork) -> None:
    result = await client.initialize_connections()

    assert result == {
        "relayEndpoint": "ws://127.0.0.1:9944",
        "parachainEndpoints": [
            {"paraId": 1000, "url": "ws://127.0.0.1:9946"},
            {"paraId": 1001, "url": "ws://127.0.0.1:9947"},
        ],
    }
    assert dict(network.handshakes) == {0: 1, 1000: 1, 1001: 1}


@pytest.mark.asyncio
async def test_context_manager_connects_and_disconnects(
    client: XCMProtocol, network: FakeNetwork
) -> None:
    async with client as connected:
        assert connected.pool.is_open(1001)

    assert all(runtime.closed for runtime in network.runtimes.values())
    assert not client.pool.is_open(1001)


@pytest.mark.asyncio
async def test_context_manager_disconnects_on_failure(
    client: XCMProtocol, network: FakeNetwork
) -> None:
    with pytest.raises(UnsupportedChainError):
        async with client:
            await client.balances_for_well_known_accounts(9999)

    assert all(runtime.closed for runtime in network.runtimes.values())
    assert not client.pool.is_open(1000)


@pytest.mark.asyncio
async def test_open_and_accept_channel(client: XCMProtocol) -> None:
    opened = await client.open_channel(1000, 1001)
    accepted = await client.accept_channel(1000)

    assert opened["success"] is True
    assert opened["message"] == "HRMP channel initiated from 1000 to 1001"
    assert accepted["message"] == "HRMP channel accepted from 1000"


@pytest.mark.asyncio
async def test_setup_bidirectional_channels(client: XCMProtocol) -> None:
    result = await client.setup_bidirectional_channels(1000, 1001, max_capacity=4)

    assert list(result["channels"]) == ["1000to1001", "1001to1000", "accept1000", "accept1001"]
    assert result["message"] == "Bidirectional HRMP channels established between 1000 and 1001"


@pytest.mark.asyncio
async def test_transfer_receipt_payload(client: XCMProtocol, network: FakeNetwork) -> None:
    network.runtime(1000).results.append(
        ExtrinsicResult(
            events=(ChainEvent("xTokens", "Transferred"), ChainEvent("system", "ExtrinsicSuccess"))
        )
    )

    envelope = await enveloped(client.transfer(1000, 1001, "1000000000000"))

    data = envelope.as_dict()["data"]
    assert data["amount"] == "1000000000000"
    assert data["symbol"] == "UNIT"
    assert data["xcmEvents"]["sent"] == ["xTokens.Transferred"]


@pytest.mark.asyncio
async def test_balance_of_unknown_chain(client: XCMProtocol, network: FakeNetwork) -> None:
    with pytest.raises(UnsupportedChainError):
        await client.balance_of(9999, "5Alice")

    assert sum(network.handshakes.values()) == 0


@pytest.mark.asyncio
async def test_well_known_balances(client: XCMProtocol) -> None:
    balances = await client.balances_for_well_known_accounts(1000)

    assert len(balances) == 6
    assert balances[0].as_dict()["name"] == "Alice"
