"""Type definitions and data models for the XCM orchestration API."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .exceptions import ValidationError

XCM_VERSION = 3


@dataclass(frozen=True)
class ChainEndpoint:
    """Static connection details for one chain."""

    chain_id: int
    url: str
    name: str = ""

    @property
    def label(self) -> str:
        return self.name or f"chain-{self.chain_id}"


@dataclass(frozen=True)
class AccountIdentity:
    """A named signing identity derived from a seed phrase."""

    name: str
    seed: str
    address: str
    keypair: Any = field(default=None, repr=False, compare=False)

    @property
    def public_key(self) -> bytes:
        key = getattr(self.keypair, "public_key", None)
        if key is None:
            raise ValidationError(
                "Identity has no public key", field="keypair", value=self.name
            )
        return bytes(key)


# ---------------------------------------------------------------------------
# Location / asset descriptors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Parachain:
    """Interior junction addressing a sibling chain."""

    id: int

    def to_runtime(self) -> dict[str, Any]:
        return {"Parachain": self.id}


@dataclass(frozen=True)
class AccountId32:
    """Interior junction addressing a 32-byte account."""

    key: bytes
    network: str | None = None

    def to_runtime(self) -> dict[str, Any]:
        return {"AccountId32": {"network": self.network, "id": "0x" + self.key.hex()}}


Junction = Parachain | AccountId32


@dataclass(frozen=True)
class LocationDescriptor:
    """Hop-counted location relative to the sending chain."""

    parents: int
    interior: tuple[Junction, ...]
    version: int = XCM_VERSION

    def to_runtime(self) -> dict[str, Any]:
        """Render the versioned multilocation structure the runtime decodes."""

        if not self.interior:
            interior: Any = "Here"
        elif len(self.interior) == 1:
            interior = {"X1": self.interior[0].to_runtime()}
        else:
            interior = {
                f"X{len(self.interior)}": [junction.to_runtime() for junction in self.interior]
            }
        return {f"V{self.version}": {"parents": self.parents, "interior": interior}}


@dataclass(frozen=True)
class LocalAsset:
    """Token native to (or already registered on) the sending chain."""

    symbol: str

    def to_runtime(self) -> dict[str, Any]:
        return {"Token": self.symbol}


@dataclass(frozen=True)
class ForeignAsset:
    """Token identified by the chain it originates from."""

    origin_chain_id: int
    symbol: str

    def to_runtime(self) -> dict[str, Any]:
        return {
            "Foreign": {
                "parents": 1,
                "interior": {
                    "X2": [
                        {"Parachain": self.origin_chain_id},
                        {"GeneralKey": self.symbol},
                    ]
                },
            }
        }


AssetDescriptor = LocalAsset | ForeignAsset


@dataclass(frozen=True)
class ChannelConfig:
    """Proposed HRMP channel limits."""

    max_capacity: int = 8
    max_message_size: int = 1024

    def __post_init__(self) -> None:
        if not isinstance(self.max_capacity, int) or self.max_capacity < 1:
            raise ValidationError(
                "max_capacity must be a positive integer",
                field="max_capacity",
                value=self.max_capacity,
            )
        if not isinstance(self.max_message_size, int) or self.max_message_size < 1:
            raise ValidationError(
                "max_message_size must be a positive integer",
                field="max_message_size",
                value=self.max_message_size,
            )

    @property
    def description(self) -> str:
        return (
            f"Channel allows {self.max_capacity} messages in queue, "
            f"max {self.max_message_size} bytes per message"
        )


# ---------------------------------------------------------------------------
# Transaction lifecycle
# ---------------------------------------------------------------------------


class TransactionStatus(Enum):
    """Lifecycle state of a submitted extrinsic."""

    PENDING = "pending"
    IN_BLOCK = "in_block"
    FINALIZED = "finalized"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TransactionStatus.FINALIZED, TransactionStatus.FAILED)


@dataclass(frozen=True)
class StatusUpdate:
    """One push notification from an extrinsic status subscription."""

    tx_hash: str
    status: str
    block_hash: str | None = None


@dataclass(frozen=True)
class ChainEvent:
    """A ledger event emitted while applying an extrinsic."""

    module: str
    method: str
    data: Any = None

    @property
    def name(self) -> str:
        return f"{self.module}.{self.method}"


@dataclass(frozen=True)
class ErrorDescriptor:
    """Decoded (or opaque) description of a transaction failure."""

    message: str
    is_runtime_error: bool = False
    section: str | None = None
    name: str | None = None
    documentation: str | None = None

    @classmethod
    def module_error(cls, section: str, name: str, documentation: str) -> ErrorDescriptor:
        return cls(
            message=f"{section}.{name}: {documentation}",
            is_runtime_error=True,
            section=section,
            name=name,
            documentation=documentation,
        )

    @classmethod
    def opaque(cls, message: str) -> ErrorDescriptor:
        return cls(message=message)

    def as_dict(self) -> dict[str, Any]:
        if not self.is_runtime_error:
            return {"message": self.message}
        return {
            "isRuntimeError": True,
            "section": self.section,
            "name": self.name,
            "documentation": self.documentation,
        }


@dataclass(frozen=True)
class TransactionOutcome:
    """Terminal (or intermediate) result of a tracked transaction."""

    status: TransactionStatus
    tx_hash: str
    block_hash: str | None = None
    events: tuple[ChainEvent, ...] = ()
    error: ErrorDescriptor | None = None

    @property
    def success(self) -> bool:
        return self.status is TransactionStatus.FINALIZED and self.error is None


@dataclass(frozen=True)
class ClassifiedEvents:
    """Events bucketed by their cross-chain meaning."""

    sent: tuple[ChainEvent, ...] = ()
    executed: tuple[ChainEvent, ...] = ()
    failed: tuple[ChainEvent, ...] = ()
    received: tuple[ChainEvent, ...] = ()

    def as_dict(self) -> dict[str, list[str]]:
        return {
            "sent": [event.name for event in self.sent],
            "executed": [event.name for event in self.executed],
            "failed": [event.name for event in self.failed],
            "received": [event.name for event in self.received],
        }


# ---------------------------------------------------------------------------
# Protocol results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TransferReceipt:
    """Result of a finalized cross-chain transfer."""

    from_chain: int
    to_chain: int
    amount: str | int
    symbol: str
    sender_address: str
    block_hash: str | None
    tx_hash: str
    events: ClassifiedEvents
    event_names: tuple[str, ...] = ()
    recipient: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "from": self.from_chain,
            "to": self.to_chain,
            "amount": self.amount,
            "symbol": self.symbol,
            "sender": self.sender_address,
            "recipient": self.recipient,
            "blockHash": self.block_hash,
            "txHash": self.tx_hash,
            "events": list(self.event_names),
            "xcmEvents": self.events.as_dict(),
        }


@dataclass(frozen=True)
class BalanceRecord:
    """Balance snapshot of one account on one chain."""

    chain_id: int
    address: str
    free: int
    reserved: int
    misc_frozen: int
    fee_frozen: int

    def as_dict(self) -> dict[str, Any]:
        return {
            "paraId": self.chain_id,
            "address": self.address,
            "free": str(self.free),
            "reserved": str(self.reserved),
            "miscFrozen": str(self.misc_frozen),
            "feeFrozen": str(self.fee_frozen),
        }


@dataclass(frozen=True)
class AccountBalance:
    """Balance of a named well-known account."""

    name: str
    address: str
    balance: BalanceRecord

    def as_dict(self) -> dict[str, Any]:
        return {"name": self.name, **self.balance.as_dict()}


@dataclass
class Envelope:
    """Uniform success/failure response handed to front-ends."""

    success: bool
    data: Any = None
    error: str | None = None
    status_code: int = 200
    error_details: dict[str, Any] | None = None

    def as_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data}
        payload: dict[str, Any] = {"success": False, "error": self.error}
        if self.error_details:
            payload["details"] = self.error_details
        return payload
