"""Account balance reads on parachains."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Collection, Mapping
from typing import Any

from ..exceptions import QueryError, UnsupportedChainError, XCMError
from ..substrate.connections import ConnectionPool
from ..substrate.keys import AccountProvider
from ..types import AccountBalance, BalanceRecord

logger = logging.getLogger(__name__)


def _amount(data: Mapping[str, Any], *keys: str) -> int:
    for key in keys:
        if key in data and data[key] is not None:
            return int(data[key])
    return 0


def balance_record(chain_id: int, address: str, data: Mapping[str, Any]) -> BalanceRecord:
    """Build a BalanceRecord from ``System.Account`` data.

    Runtimes that replaced ``misc_frozen``/``fee_frozen`` with a single
    ``frozen`` field report that value for both.
    """

    return BalanceRecord(
        chain_id=chain_id,
        address=address,
        free=_amount(data, "free"),
        reserved=_amount(data, "reserved"),
        misc_frozen=_amount(data, "misc_frozen", "miscFrozen", "frozen"),
        fee_frozen=_amount(data, "fee_frozen", "feeFrozen", "frozen"),
    )


class BalanceReader:
    """Read balances from allow-listed parachains."""

    def __init__(
        self,
        pool: ConnectionPool,
        accounts: AccountProvider,
        *,
        allowed_chains: Collection[int],
    ) -> None:
        self._pool = pool
        self._accounts = accounts
        self._allowed_chains = frozenset(allowed_chains)

    def _check_chain(self, chain_id: int) -> None:
        if chain_id not in self._allowed_chains:
            raise UnsupportedChainError(chain_id, details={"allowed": sorted(self._allowed_chains)})

    async def balance_of(self, chain_id: int, address: str) -> BalanceRecord:
        self._check_chain(chain_id)
        connection = await self._pool.get(chain_id)

        try:
            data = await connection.runtime.query_account(address)
        except XCMError:
            raise
        except Exception as exc:
            logger.error("Balance read for %s on chain %s failed: %s", address, chain_id, exc)
            raise QueryError(
                f"Failed to get account balance: {exc}",
                details={"chain_id": chain_id, "address": address, "error": str(exc)},
            ) from exc

        return balance_record(chain_id, address, data)

    async def balances_for_well_known_accounts(self, chain_id: int) -> list[AccountBalance]:
        """Read the balances of Alice through Ferdie concurrently."""

        self._check_chain(chain_id)
        await self._accounts.warm_up()
        identities = self._accounts.well_known()

        records = await asyncio.gather(
            *(self.balance_of(chain_id, identity.address) for identity in identities)
        )
        return [
            AccountBalance(name=identity.name, address=identity.address, balance=record)
            for identity, record in zip(identities, records)
        ]
