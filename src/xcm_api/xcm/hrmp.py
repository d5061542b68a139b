"""HRMP channel establishment between parachains via the relay chain."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from ..exceptions import ValidationError, XCMError
from ..substrate.connections import ConnectionPool
from ..substrate.keys import AccountProvider
from ..substrate.transactions import TransactionRequest, TransactionTracker
from ..types import ChannelConfig, TransactionOutcome

logger = logging.getLogger(__name__)

HRMP_PALLET = "Hrmp"


def _check_para_id(para_id: object, field: str) -> int:
    if not isinstance(para_id, int) or isinstance(para_id, bool) or para_id < 0:
        raise ValidationError(
            "Parachain id must be a non-negative integer", field=field, value=para_id
        )
    return para_id


class HrmpChannels:
    """Open and accept HRMP channels with relay chain extrinsics."""

    def __init__(
        self,
        pool: ConnectionPool,
        accounts: AccountProvider,
        tracker: TransactionTracker,
        *,
        sudo_seed: str,
    ) -> None:
        self._pool = pool
        self._accounts = accounts
        self._tracker = tracker
        self._sudo_seed = sudo_seed

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------
    async def open_channel(
        self, src_para_id: int, dest_para_id: int, config: ChannelConfig | None = None
    ) -> TransactionOutcome:
        """Request a channel from ``src_para_id`` to ``dest_para_id``."""

        _check_para_id(src_para_id, "src_para_id")
        _check_para_id(dest_para_id, "dest_para_id")
        if src_para_id == dest_para_id:
            raise ValidationError(
                "Cannot open a channel from a parachain to itself",
                field="dest_para_id",
                value=dest_para_id,
            )
        config = config or ChannelConfig()

        logger.debug(
            "Stage HRMP [%s->%s]: init open channel (%s)",
            src_para_id,
            dest_para_id,
            config.description,
        )
        return await self._submit(
            "hrmp_init_open_channel",
            {
                "recipient": dest_para_id,
                "proposed_max_capacity": config.max_capacity,
                "proposed_max_message_size": config.max_message_size,
            },
            label=f"HRMP open {src_para_id}->{dest_para_id}",
        )

    async def accept_channel(self, src_para_id: int) -> TransactionOutcome:
        """Accept the pending channel request opened by ``src_para_id``."""

        _check_para_id(src_para_id, "src_para_id")
        logger.debug("Stage HRMP [%s]: accept open channel", src_para_id)
        return await self._submit(
            "hrmp_accept_open_channel",
            {"sender": src_para_id},
            label=f"HRMP accept {src_para_id}",
        )

    async def setup_bidirectional(
        self, para_a: int, para_b: int, config: ChannelConfig | None = None
    ) -> dict[str, TransactionOutcome]:
        """Open and accept channels in both directions, one step at a time.

        The four steps run strictly in order and each waits for finality.
        The first failing step's error is re-raised with the outcomes of the
        steps that already finalized under ``details["completed"]``; those
        are not rolled back.
        """

        config = config or ChannelConfig()
        steps: list[tuple[str, Callable[[], Awaitable[TransactionOutcome]]]] = [
            (f"{para_a}to{para_b}", lambda: self.open_channel(para_a, para_b, config)),
            (f"{para_b}to{para_a}", lambda: self.open_channel(para_b, para_a, config)),
            (f"accept{para_a}", lambda: self.accept_channel(para_a)),
            (f"accept{para_b}", lambda: self.accept_channel(para_b)),
        ]

        completed: dict[str, TransactionOutcome] = {}
        for key, step in steps:
            try:
                completed[key] = await step()
            except XCMError as exc:
                exc.details["failed_step"] = key
                exc.details["completed"] = dict(completed)
                logger.error(
                    "Stage HRMP [%s<->%s]: setup aborted at %s (reason=%s)",
                    para_a,
                    para_b,
                    key,
                    exc.message,
                )
                raise

        logger.info("Bidirectional HRMP channels established between %s and %s", para_a, para_b)
        return completed

    # ------------------------------------------------------------------
    # Internal workflow
    # ------------------------------------------------------------------
    async def _submit(
        self, function: str, params: Mapping[str, Any], *, label: str
    ) -> TransactionOutcome:
        relay = await self._pool.relay()
        await self._accounts.warm_up()
        signer = self._accounts.identity(self._sudo_seed)
        call = await relay.runtime.compose_call(HRMP_PALLET, function, params)
        return await self._tracker.submit_and_track(
            TransactionRequest(connection=relay, signer=signer, call=call, label=label)
        )
