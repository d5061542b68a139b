"""Connection pool for the relay chain and its parachains."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from ..exceptions import ChainConnectionError, XCMError
from ..types import ChainEndpoint
from .config import XCMClientConfig
from .runtime import ChainRuntime, SubstrateRuntime

logger = logging.getLogger(__name__)

Connector = Callable[[ChainEndpoint], Awaitable[ChainRuntime]]


@dataclass
class ChainConnection:
    """Long-lived handle bound to one chain endpoint."""

    endpoint: ChainEndpoint
    runtime: ChainRuntime
    opened_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def chain_id(self) -> int:
        return self.endpoint.chain_id


class ConnectionPool:
    """Open each configured chain once and share the handle process-wide."""

    def __init__(self, config: XCMClientConfig, connector: Connector | None = None) -> None:
        self._config = config
        if connector is None:

            async def connector(endpoint: ChainEndpoint) -> ChainRuntime:
                return await SubstrateRuntime.connect(endpoint, ss58_format=config.ss58_format)

        self._connector = connector
        self._connections: dict[int, ChainConnection] = {}
        self._pending: dict[int, asyncio.Task[ChainConnection]] = {}

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    @property
    def config(self) -> XCMClientConfig:
        return self._config

    def is_open(self, chain_id: int) -> bool:
        return chain_id in self._connections

    async def get(self, chain_id: int) -> ChainConnection:
        """Return the connection for ``chain_id``, opening it on first use.

        Concurrent first callers share one handshake. A failed handshake is
        not cached, so a later call retries.
        """

        connection = self._connections.get(chain_id)
        if connection is not None:
            return connection

        endpoint = self._config.endpoint_for(chain_id)

        task = self._pending.get(chain_id)
        if task is None:
            task = asyncio.create_task(self._open(endpoint))
            self._pending[chain_id] = task
            task.add_done_callback(lambda _: self._pending.pop(chain_id, None))

        # Shielded so one cancelled waiter does not abort the shared handshake.
        return await asyncio.shield(task)

    async def relay(self) -> ChainConnection:
        return await self.get(self._config.relay.chain_id)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def initialize_all(self) -> dict[int, ChainConnection]:
        """Open the relay chain and every parachain concurrently."""

        endpoints = self._config.endpoints()
        connections = await asyncio.gather(*(self.get(ep.chain_id) for ep in endpoints))
        logger.info("All %s chain connections initialised", len(connections))
        return {connection.chain_id: connection for connection in connections}

    async def close(self) -> None:
        connections = list(self._connections.values())
        self._connections.clear()
        for connection in connections:
            try:
                await connection.runtime.close()
            except Exception:  # pragma: no cover - best effort teardown
                logger.exception("Failed to close connection to %s", connection.endpoint.label)

    # ------------------------------------------------------------------
    # Internal wiring
    # ------------------------------------------------------------------
    async def _open(self, endpoint: ChainEndpoint) -> ChainConnection:
        logger.debug("Opening connection to %s at %s", endpoint.label, endpoint.url)
        try:
            runtime = await asyncio.wait_for(
                self._connector(endpoint), timeout=self._config.connect_timeout
            )
        except asyncio.TimeoutError as exc:
            raise ChainConnectionError(
                f"Timed out connecting to {endpoint.label}",
                endpoint=endpoint.url,
                chain_id=endpoint.chain_id,
                details={"timeout": self._config.connect_timeout},
            ) from exc
        except XCMError:
            raise
        except Exception as exc:
            raise ChainConnectionError(
                f"Unable to connect to {endpoint.label}",
                endpoint=endpoint.url,
                chain_id=endpoint.chain_id,
                details={"error": str(exc)},
            ) from exc

        connection = ChainConnection(endpoint=endpoint, runtime=runtime)
        self._connections[endpoint.chain_id] = connection
        return connection
