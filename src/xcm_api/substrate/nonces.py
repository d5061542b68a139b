"""Nonce management for concurrent extrinsics from one account.

Nonces are reserved locally so that several transactions signed by the same
identity on the same chain can be in flight at once without racing for the
on-chain account nonce.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from .connections import ChainConnection

logger = logging.getLogger(__name__)


@dataclass
class NonceState:
    """Tracks nonce state for an address on a chain."""

    address: str
    chain_id: int
    confirmed_nonce: int  # Next nonce according to the chain
    pending_nonce: int  # Next nonce available locally
    reserved_nonces: set[int] = field(default_factory=set)


class NonceManager:
    """Hand out nonces per (chain, address), syncing from the chain on first use."""

    def __init__(self) -> None:
        self._states: dict[tuple[int, str], NonceState] = {}
        self._locks: dict[tuple[int, str], asyncio.Lock] = {}

    def _lock_for(self, key: tuple[int, str]) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    def state(self, chain_id: int, address: str) -> NonceState | None:
        return self._states.get((chain_id, address))

    async def acquire(
        self, connection: ChainConnection, address: str, *, sync: bool = False
    ) -> int:
        """Reserve and return the next nonce for ``address`` on ``connection``."""

        key = (connection.chain_id, address)
        async with self._lock_for(key):
            state = self._states.get(key)
            if state is None or sync:
                on_chain = await connection.runtime.account_nonce(address)
                if state is None:
                    state = NonceState(
                        address=address,
                        chain_id=connection.chain_id,
                        confirmed_nonce=on_chain,
                        pending_nonce=on_chain,
                    )
                    self._states[key] = state
                else:
                    state.confirmed_nonce = on_chain
                    if on_chain > state.pending_nonce:
                        state.pending_nonce = on_chain

            nonce = state.pending_nonce
            while nonce in state.reserved_nonces:
                nonce += 1

            state.reserved_nonces.add(nonce)
            state.pending_nonce = nonce + 1
            logger.debug("Reserved nonce %s for %s on chain %s", nonce, address, key[0])
            return nonce

    async def release(self, chain_id: int, address: str, nonce: int) -> None:
        """Give back a nonce whose transaction never reached the node."""

        key = (chain_id, address)
        async with self._lock_for(key):
            state = self._states.get(key)
            if state is None:
                return
            state.reserved_nonces.discard(nonce)
            if nonce == state.pending_nonce - 1:
                state.pending_nonce = nonce
            logger.warning("Released nonce %s for %s on chain %s", nonce, address, chain_id)

    async def confirm(self, chain_id: int, address: str, nonce: int) -> None:
        """Mark a nonce as consumed by an included transaction."""

        key = (chain_id, address)
        async with self._lock_for(key):
            state = self._states.get(key)
            if state is None:
                return
            state.reserved_nonces.discard(nonce)
            state.confirmed_nonce = max(state.confirmed_nonce, nonce + 1)

    def reset(self, chain_id: int, address: str) -> None:
        """Forget local state so the next acquire re-syncs from the chain."""

        self._states.pop((chain_id, address), None)
