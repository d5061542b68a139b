from __future__ import annotations

import asyncio

import pytest
from fakes import FakeNetwork

from xcm_api.exceptions import ChainConnectionError, UnsupportedChainError
from xcm_api.substrate.config import XCMClientConfig
from xcm_api.substrate.connections import ConnectionPool


@pytest.mark.asyncio
async def test_connection_is_opened_once_and_cached(pool: ConnectionPool, network: FakeNetwork) -> None:
    first = await pool.get(1000)
    second = await pool.get(1000)

    assert first is second
    assert first.runtime is network.runtimes[1000]
    assert network.handshakes[1000] == 1
    assert pool.is_open(1000)


@pytest.mark.asyncio
async def test_concurrent_first_use_shares_one_handshake(
    pool: ConnectionPool, network: FakeNetwork
) -> None:
    network.delay = 0.01

    results = await asyncio.gather(*(pool.get(1001) for _ in range(5)))

    assert all(connection is results[0] for connection in results)
    assert network.handshakes[1001] == 1


@pytest.mark.asyncio
async def test_unknown_chain_is_rejected_without_connecting(
    pool: ConnectionPool, network: FakeNetwork
) -> None:
    with pytest.raises(UnsupportedChainError):
        await pool.get(9999)

    assert sum(network.handshakes.values()) == 0


@pytest.mark.asyncio
async def test_failed_handshake_is_not_cached(pool: ConnectionPool, network: FakeNetwork) -> None:
    network.failures[1000] = 1

    with pytest.raises(ChainConnectionError) as exc_info:
        await pool.get(1000)

    assert exc_info.value.chain_id == 1000
    assert exc_info.value.endpoint == "ws://127.0.0.1:9946"
    assert "connection refused" in exc_info.value.details["error"]
    assert not pool.is_open(1000)

    connection = await pool.get(1000)
    assert connection.chain_id == 1000
    assert network.handshakes[1000] == 2


@pytest.mark.asyncio
async def test_handshake_timeout() -> None:
    config = XCMClientConfig(connect_timeout=0.01)
    network = FakeNetwork(config)
    network.delay = 1.0
    pool = ConnectionPool(config, network.connect)

    with pytest.raises(ChainConnectionError) as exc_info:
        await pool.relay()

    assert exc_info.value.details == {"timeout": 0.01}
    assert not pool.is_open(0)


@pytest.mark.asyncio
async def test_initialize_all_and_close(pool: ConnectionPool, network: FakeNetwork) -> None:
    connections = await pool.initialize_all()

    assert sorted(connections) == [0, 1000, 1001]

    await pool.close()

    assert all(runtime.closed for runtime in network.runtimes.values())
    assert not pool.is_open(0)
