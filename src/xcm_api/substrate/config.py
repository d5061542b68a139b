"""Configuration containers for the Substrate connection layer."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from ..constants import (
    DEFAULT_PARACHAIN_WS,
    DEFAULT_RELAY_WS,
    DEFAULT_SIGNER_SEED,
    DEFAULT_SS58_FORMAT,
    DEFAULT_TRANSFER_CHAINS,
    RELAY_CHAIN_ID,
)
from ..exceptions import UnsupportedChainError, ValidationError
from ..types import ChainEndpoint, ChannelConfig

DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_FINALIZATION_TIMEOUT = 300.0


def _default_parachains() -> tuple[ChainEndpoint, ...]:
    return tuple(
        ChainEndpoint(chain_id=para_id, url=url, name=f"parachain{para_id}")
        for para_id, url in DEFAULT_PARACHAIN_WS.items()
    )


@dataclass(frozen=True)
class XCMClientConfig:
    """Aggregated configuration used to construct the XCM protocol client."""

    relay: ChainEndpoint = ChainEndpoint(RELAY_CHAIN_ID, DEFAULT_RELAY_WS, "relayChain")
    parachains: tuple[ChainEndpoint, ...] = field(default_factory=_default_parachains)
    transfer_chains: tuple[int, ...] = DEFAULT_TRANSFER_CHAINS
    sudo_seed: str = DEFAULT_SIGNER_SEED
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    finalization_timeout: float | None = DEFAULT_FINALIZATION_TIMEOUT
    ss58_format: int = DEFAULT_SS58_FORMAT
    channel: ChannelConfig = ChannelConfig()

    def __post_init__(self) -> None:
        seen = {self.relay.chain_id}
        for endpoint in self.parachains:
            if endpoint.chain_id in seen:
                raise ValidationError(
                    "Duplicate chain id in endpoint configuration",
                    field="parachains",
                    value=endpoint.chain_id,
                )
            seen.add(endpoint.chain_id)

    def endpoints(self) -> tuple[ChainEndpoint, ...]:
        """Return the relay endpoint followed by every parachain endpoint."""

        return (self.relay, *self.parachains)

    def endpoint_for(self, chain_id: int) -> ChainEndpoint:
        for endpoint in self.endpoints():
            if endpoint.chain_id == chain_id:
                return endpoint
        raise UnsupportedChainError(chain_id)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> XCMClientConfig:
        """Build a configuration from ``XCM_*`` environment variables.

        ``XCM_PARACHAIN_WS`` lists parachains as ``1000=ws://host:9946,1001=ws://host:9947``.
        Unset variables fall back to the local test network defaults.
        """

        env = os.environ if environ is None else environ
        defaults = cls()

        relay_url = env.get("XCM_RELAY_WS") or defaults.relay.url
        relay = ChainEndpoint(RELAY_CHAIN_ID, relay_url, "relayChain")

        raw_parachains = env.get("XCM_PARACHAIN_WS")
        parachains = (
            _parse_parachains(raw_parachains) if raw_parachains else defaults.parachains
        )

        raw_allow_list = env.get("XCM_TRANSFER_CHAINS")
        transfer_chains = (
            tuple(_parse_int(item, "XCM_TRANSFER_CHAINS") for item in raw_allow_list.split(","))
            if raw_allow_list
            else tuple(endpoint.chain_id for endpoint in parachains)
        )

        raw_timeout = env.get("XCM_FINALIZATION_TIMEOUT")
        if raw_timeout is None:
            finalization_timeout: float | None = defaults.finalization_timeout
        elif raw_timeout.strip().lower() in ("", "none", "0"):
            finalization_timeout = None
        else:
            finalization_timeout = _parse_float(raw_timeout, "XCM_FINALIZATION_TIMEOUT")

        raw_connect = env.get("XCM_CONNECT_TIMEOUT")
        connect_timeout = (
            _parse_float(raw_connect, "XCM_CONNECT_TIMEOUT")
            if raw_connect
            else defaults.connect_timeout
        )

        return cls(
            relay=relay,
            parachains=parachains,
            transfer_chains=transfer_chains,
            sudo_seed=env.get("XCM_SUDO_SEED") or defaults.sudo_seed,
            connect_timeout=connect_timeout,
            finalization_timeout=finalization_timeout,
        )


def _parse_parachains(raw: str) -> tuple[ChainEndpoint, ...]:
    endpoints = []
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        para_id, sep, url = entry.partition("=")
        if not sep or not url.strip():
            raise ValidationError(
                "Parachain endpoints must look like '<id>=<ws url>'",
                field="XCM_PARACHAIN_WS",
                value=entry,
            )
        chain_id = _parse_int(para_id, "XCM_PARACHAIN_WS")
        endpoints.append(ChainEndpoint(chain_id, url.strip(), f"parachain{chain_id}"))
    return tuple(endpoints)


def _parse_int(raw: str, field_name: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ValidationError(
            f"{field_name} must contain integers", field=field_name, value=raw
        ) from exc


def _parse_float(raw: str, field_name: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise ValidationError(
            f"{field_name} must be a number", field=field_name, value=raw
        ) from exc
