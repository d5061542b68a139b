"""XCM client composing connections, tracking and the protocol orchestrators."""

from __future__ import annotations

import logging
from typing import Any

from .base import XCMProtocolBase
from .constants import DEFAULT_SIGNER_SEED, DEFAULT_TOKEN_SYMBOL
from .results import outcome_summary
from .substrate.config import XCMClientConfig
from .substrate.connections import ConnectionPool, Connector
from .substrate.keys import AccountProvider
from .substrate.nonces import NonceManager
from .substrate.transactions import TransactionTracker
from .types import AccountBalance, BalanceRecord, ChannelConfig, TransferReceipt
from .xcm.balances import BalanceReader
from .xcm.hrmp import HrmpChannels
from .xcm.transfer import XcmTransfers

logger = logging.getLogger(__name__)


class XCMProtocol(XCMProtocolBase):
    """Drive HRMP channels, XCM transfers and balance reads across a relay network."""

    def __init__(
        self,
        config: XCMClientConfig | None = None,
        *,
        connector: Connector | None = None,
        accounts: AccountProvider | None = None,
        nonces: NonceManager | None = None,
    ) -> None:
        config = config or XCMClientConfig()
        self._config = config
        self._pool = ConnectionPool(config, connector)
        self._accounts = accounts or AccountProvider(ss58_format=config.ss58_format)
        self._tracker = TransactionTracker(nonces, timeout=config.finalization_timeout)

        self._channels = HrmpChannels(
            self._pool, self._accounts, self._tracker, sudo_seed=config.sudo_seed
        )
        self._transfers = XcmTransfers(
            self._pool, self._accounts, self._tracker, allowed_chains=config.transfer_chains
        )
        self._balances = BalanceReader(
            self._pool, self._accounts, allowed_chains=config.transfer_chains
        )

    # ------------------------------------------------------------------
    # Connection management
    # ------------------------------------------------------------------
    @property
    def config(self) -> XCMClientConfig:
        return self._config

    @property
    def pool(self) -> ConnectionPool:
        return self._pool

    @property
    def tracker(self) -> TransactionTracker:
        return self._tracker

    async def connect(self) -> None:
        await self._accounts.warm_up()
        await self._pool.initialize_all()

    async def disconnect(self) -> None:
        await self._pool.close()
        logger.info("Disconnected from all chains")

    async def __aenter__(self) -> XCMProtocol:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.disconnect()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    async def initialize_connections(self) -> dict[str, Any]:
        await self._pool.initialize_all()
        return {
            "relayEndpoint": self._config.relay.url,
            "parachainEndpoints": [
                {"paraId": endpoint.chain_id, "url": endpoint.url}
                for endpoint in self._config.parachains
            ],
        }

    async def open_channel(
        self,
        src_para_id: int,
        dest_para_id: int,
        max_capacity: int = 8,
        max_message_size: int = 1024,
    ) -> dict[str, Any]:
        config = ChannelConfig(max_capacity=max_capacity, max_message_size=max_message_size)
        outcome = await self._channels.open_channel(src_para_id, dest_para_id, config)
        return outcome_summary(
            outcome, message=f"HRMP channel initiated from {src_para_id} to {dest_para_id}"
        )

    async def accept_channel(self, src_para_id: int) -> dict[str, Any]:
        outcome = await self._channels.accept_channel(src_para_id)
        return outcome_summary(outcome, message=f"HRMP channel accepted from {src_para_id}")

    async def setup_bidirectional_channels(
        self,
        para_id_a: int,
        para_id_b: int,
        max_capacity: int = 8,
        max_message_size: int = 1024,
    ) -> dict[str, Any]:
        config = ChannelConfig(max_capacity=max_capacity, max_message_size=max_message_size)
        outcomes = await self._channels.setup_bidirectional(para_id_a, para_id_b, config)
        return {
            "channels": {key: outcome_summary(outcome) for key, outcome in outcomes.items()},
            "message": (
                f"Bidirectional HRMP channels established between {para_id_a} and {para_id_b}"
            ),
        }

    async def transfer(
        self,
        src_para_id: int,
        dest_para_id: int,
        amount: str | int,
        symbol: str = DEFAULT_TOKEN_SYMBOL,
        signer_seed: str = DEFAULT_SIGNER_SEED,
        recipient: str | None = None,
    ) -> TransferReceipt:
        return await self._transfers.transfer(
            src_para_id,
            dest_para_id,
            amount,
            symbol=symbol,
            signer_seed=signer_seed,
            recipient=recipient,
        )

    async def balance_of(self, para_id: int, address: str) -> BalanceRecord:
        return await self._balances.balance_of(para_id, address)

    async def balances_for_well_known_accounts(self, para_id: int) -> list[AccountBalance]:
        return await self._balances.balances_for_well_known_accounts(para_id)
