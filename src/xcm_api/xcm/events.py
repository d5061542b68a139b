"""Classification of finalized ledger events into cross-chain buckets."""

from __future__ import annotations

from collections.abc import Iterable

from ..types import ChainEvent, ClassifiedEvents

SENT = "sent"
EXECUTED = "executed"
FAILED = "failed"
RECEIVED = "received"

EVENT_BUCKETS: dict[tuple[str, str], str] = {
    ("messageQueue", "MessageSent"): SENT,
    ("messageQueue", "Success"): EXECUTED,
    ("messageQueue", "Fail"): FAILED,
    ("tokens", "Transferred"): SENT,
    ("balances", "Transfer"): RECEIVED,
    ("system", "ExtrinsicSuccess"): EXECUTED,
    ("system", "ExtrinsicFailed"): FAILED,
    # Pallet names used by XCMP-queue / orml-xtokens runtimes.
    ("xcmpQueue", "XcmpMessageSent"): SENT,
    ("xcmpQueue", "Success"): EXECUTED,
    ("xcmpQueue", "Fail"): FAILED,
    ("xTokens", "Transferred"): SENT,
}


def bucket_of(event: ChainEvent) -> str | None:
    return EVENT_BUCKETS.get((event.module, event.method))


def classify_events(events: Iterable[ChainEvent]) -> ClassifiedEvents:
    """Split ``events`` into sent / executed / failed / received, keeping order."""

    buckets: dict[str, list[ChainEvent]] = {SENT: [], EXECUTED: [], FAILED: [], RECEIVED: []}
    for event in events:
        bucket = bucket_of(event)
        if bucket is not None:
            buckets[bucket].append(event)

    return ClassifiedEvents(
        sent=tuple(buckets[SENT]),
        executed=tuple(buckets[EXECUTED]),
        failed=tuple(buckets[FAILED]),
        received=tuple(buckets[RECEIVED]),
    )


def event_names(events: Iterable[ChainEvent]) -> list[str]:
    return [event.name for event in events]
