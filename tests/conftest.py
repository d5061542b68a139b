"""Shared pytest fixtures."""

from __future__ import annotations

import pytest
import pytest_asyncio
from fakes import FakeKeypair, FakeNetwork

from xcm_api.substrate.config import XCMClientConfig
from xcm_api.substrate.connections import ConnectionPool
from xcm_api.substrate.keys import AccountProvider
from xcm_api.substrate.nonces import NonceManager
from xcm_api.substrate.transactions import TransactionTracker


@pytest.fixture
def config() -> XCMClientConfig:
    return XCMClientConfig(connect_timeout=1.0, finalization_timeout=1.0)


@pytest.fixture
def network(config: XCMClientConfig) -> FakeNetwork:
    return FakeNetwork(config)


@pytest.fixture
def pool(config: XCMClientConfig, network: FakeNetwork) -> ConnectionPool:
    return ConnectionPool(config, network.connect)


@pytest.fixture
def accounts() -> AccountProvider:
    return AccountProvider(deriver=FakeKeypair)


@pytest_asyncio.fixture
async def ready_accounts(accounts: AccountProvider) -> AccountProvider:
    await accounts.warm_up()
    return accounts


@pytest.fixture
def tracker() -> TransactionTracker:
    return TransactionTracker(NonceManager(), timeout=1.0)
