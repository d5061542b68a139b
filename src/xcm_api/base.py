"""XCM protocol base interface."""

from abc import ABC, abstractmethod
from typing import Any

from .types import AccountBalance, BalanceRecord, TransferReceipt


class XCMProtocolBase(ABC):
    """Operations exposed to HTTP / CLI front-ends."""

    @abstractmethod
    async def initialize_connections(self) -> dict[str, Any]:
        pass

    @abstractmethod
    async def open_channel(
        self,
        src_para_id: int,
        dest_para_id: int,
        max_capacity: int = 8,
        max_message_size: int = 1024,
    ) -> dict[str, Any]:
        pass

    @abstractmethod
    async def accept_channel(self, src_para_id: int) -> dict[str, Any]:
        pass

    @abstractmethod
    async def setup_bidirectional_channels(
        self,
        para_id_a: int,
        para_id_b: int,
        max_capacity: int = 8,
        max_message_size: int = 1024,
    ) -> dict[str, Any]:
        pass

    @abstractmethod
    async def transfer(
        self,
        src_para_id: int,
        dest_para_id: int,
        amount: str | int,
        symbol: str = "UNIT",
        signer_seed: str = "//Alice",
        recipient: str | None = None,
    ) -> TransferReceipt:
        pass

    @abstractmethod
    async def balance_of(self, para_id: int, address: str) -> BalanceRecord:
        pass

    @abstractmethod
    async def balances_for_well_known_accounts(self, para_id: int) -> list[AccountBalance]:
        pass
