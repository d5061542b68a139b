"""Cross-chain token transfers through the xTokens pallet."""

from __future__ import annotations

import logging
from collections.abc import Collection

from ..constants import DEFAULT_SIGNER_SEED, DEFAULT_TOKEN_SYMBOL
from ..exceptions import UnsupportedChainError, ValidationError
from ..substrate.connections import ConnectionPool
from ..substrate.keys import AccountProvider, decode_address
from ..substrate.transactions import TransactionRequest, TransactionTracker
from ..types import TransferReceipt
from ..utils import validate_transfer
from .descriptors import build_asset, build_location
from .events import classify_events, event_names

logger = logging.getLogger(__name__)

XTOKENS_PALLET = "XTokens"

# Let the destination buy as much execution weight as the fee allows.
UNLIMITED_WEIGHT = "Unlimited"


class XcmTransfers:
    """Send tokens from an allow-listed parachain to a sibling parachain."""

    def __init__(
        self,
        pool: ConnectionPool,
        accounts: AccountProvider,
        tracker: TransactionTracker,
        *,
        allowed_chains: Collection[int],
    ) -> None:
        self._pool = pool
        self._accounts = accounts
        self._tracker = tracker
        self._allowed_chains = frozenset(allowed_chains)

    async def transfer(
        self,
        src_para_id: int,
        dest_para_id: int,
        amount: str | int,
        symbol: str = DEFAULT_TOKEN_SYMBOL,
        signer_seed: str = DEFAULT_SIGNER_SEED,
        recipient: str | None = None,
    ) -> TransferReceipt:
        """Transfer ``amount`` (smallest unit) of ``symbol`` to ``dest_para_id``.

        The token is assumed to be registered on the destination under the
        same symbol. When ``recipient`` is omitted the funds land on the
        destination's view of the sender.
        """

        if src_para_id not in self._allowed_chains:
            raise UnsupportedChainError(
                src_para_id, details={"allowed": sorted(self._allowed_chains)}
            )

        errors = validate_transfer(src_para_id, dest_para_id, amount, symbol)
        if errors:
            raise ValidationError(
                "; ".join(errors),
                field="transfer",
                value={"src": src_para_id, "dest": dest_para_id, "amount": amount},
                details={"errors": errors},
            )

        account = decode_address(recipient) if recipient else None
        destination = build_location(dest_para_id, account)
        asset = build_asset(symbol)

        source = await self._pool.get(src_para_id)
        await self._accounts.warm_up()
        sender = self._accounts.identity(signer_seed)

        logger.debug(
            "Stage XCM [%s->%s]: compose transfer (amount=%s, symbol=%s, sender=%s)",
            src_para_id,
            dest_para_id,
            amount,
            symbol,
            sender.address,
        )
        call = await source.runtime.compose_call(
            XTOKENS_PALLET,
            "transfer",
            {
                "currency_id": asset.to_runtime(),
                "amount": int(amount),
                "dest": destination.to_runtime(),
                "dest_weight_limit": UNLIMITED_WEIGHT,
            },
        )

        outcome = await self._tracker.submit_and_track(
            TransactionRequest(
                connection=source,
                signer=sender,
                call=call,
                label=f"XCM transfer {src_para_id}->{dest_para_id}",
            )
        )

        classified = classify_events(outcome.events)
        logger.info(
            "XCM transfer %s->%s finalized (block=%s, sent=%s, failed=%s)",
            src_para_id,
            dest_para_id,
            outcome.block_hash,
            len(classified.sent),
            len(classified.failed),
        )
        return TransferReceipt(
            from_chain=src_para_id,
            to_chain=dest_para_id,
            amount=amount,
            symbol=symbol,
            sender_address=sender.address,
            block_hash=outcome.block_hash,
            tx_hash=outcome.tx_hash,
            events=classified,
            event_names=tuple(event_names(outcome.events)),
            recipient=recipient,
        )
