"""Builders for cross-chain location and asset descriptors.

Only sibling parachains reachable through the common relay chain are
addressed, so every location is built with ``parents=1``.
"""

from __future__ import annotations

from ..exceptions import ValidationError
from ..types import (
    AccountId32,
    AssetDescriptor,
    ForeignAsset,
    Junction,
    LocalAsset,
    LocationDescriptor,
    Parachain,
)

SIBLING_PARENTS = 1


def _check_chain_id(chain_id: object, field: str) -> int:
    if not isinstance(chain_id, int) or isinstance(chain_id, bool) or chain_id < 0:
        raise ValidationError(
            "Chain id must be a non-negative integer", field=field, value=chain_id
        )
    return chain_id


def build_location(
    dest_chain_id: int,
    account: bytes | None = None,
    *,
    network: str | None = None,
) -> LocationDescriptor:
    """Locate ``dest_chain_id`` (and optionally an account on it) from a sibling chain."""

    interior: list[Junction] = [Parachain(_check_chain_id(dest_chain_id, "dest_chain_id"))]
    if account is not None:
        if len(account) != 32:
            raise ValidationError(
                "Account id must be 32 bytes", field="account", value=account.hex()
            )
        interior.append(AccountId32(key=bytes(account), network=network))
    return LocationDescriptor(parents=SIBLING_PARENTS, interior=tuple(interior))


def build_asset(symbol: str, origin_chain_id: int | None = None) -> AssetDescriptor:
    """Describe ``symbol`` as a local token, or as a foreign one from ``origin_chain_id``."""

    if not symbol or not isinstance(symbol, str):
        raise ValidationError(
            "Token symbol must be a non-empty string", field="symbol", value=symbol
        )
    if origin_chain_id is None:
        return LocalAsset(symbol=symbol)
    return ForeignAsset(
        origin_chain_id=_check_chain_id(origin_chain_id, "origin_chain_id"), symbol=symbol
    )
