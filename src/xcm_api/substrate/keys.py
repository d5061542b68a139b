"""Account identities derived from seed phrases."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from substrateinterface import Keypair
from substrateinterface.utils.ss58 import ss58_decode

from ..constants import DEFAULT_SS58_FORMAT, WELL_KNOWN_SEEDS
from ..exceptions import CryptoNotReadyError, ValidationError
from ..types import AccountIdentity
from ..utils import seed_name

logger = logging.getLogger(__name__)

KeyDeriver = Callable[[str], Any]

_PROBE_SEED = "//Alice"


class AccountProvider:
    """Derive and memoise sr25519 identities from seed phrases or dev URIs."""

    def __init__(
        self,
        *,
        ss58_format: int = DEFAULT_SS58_FORMAT,
        deriver: KeyDeriver | None = None,
    ) -> None:
        self._ss58_format = ss58_format
        self._deriver = deriver or self._derive_keypair
        self._identities: dict[str, AccountIdentity] = {}
        self._ready = False
        self._warm_up_lock = asyncio.Lock()

    @property
    def ready(self) -> bool:
        return self._ready

    async def warm_up(self) -> None:
        """Load the crypto backend once; later calls return immediately."""

        if self._ready:
            return
        async with self._warm_up_lock:
            if self._ready:
                return
            await asyncio.to_thread(self._deriver, _PROBE_SEED)
            self._ready = True
            logger.debug("Crypto backend ready")

    def identity(self, seed: str) -> AccountIdentity:
        if not self._ready:
            raise CryptoNotReadyError("Crypto backend is not ready; await warm_up() first")
        if not seed:
            raise ValidationError("Seed must be non-empty", field="seed", value=seed)

        cached = self._identities.get(seed)
        if cached is not None:
            return cached

        try:
            keypair = self._deriver(seed)
        except ValueError as exc:
            raise ValidationError(
                "Unable to derive account from seed", field="seed", details={"error": str(exc)}
            ) from exc

        identity = AccountIdentity(
            name=seed_name(seed),
            seed=seed,
            address=keypair.ss58_address,
            keypair=keypair,
        )
        self._identities[seed] = identity
        return identity

    def well_known(self) -> list[AccountIdentity]:
        """Return the development accounts Alice through Ferdie, in order."""

        return [self.identity(seed) for seed in WELL_KNOWN_SEEDS.values()]

    def _derive_keypair(self, seed: str) -> Keypair:
        # Accepts dev URIs ("//Alice"), mnemonics and mnemonics with derivation paths.
        return Keypair.create_from_uri(seed, ss58_format=self._ss58_format)


def decode_address(address: str) -> bytes:
    """Return the 32-byte public key encoded in an SS58 address."""

    try:
        return bytes.fromhex(ss58_decode(address))
    except ValueError as exc:
        raise ValidationError(
            "Invalid SS58 address", field="address", value=address, details={"error": str(exc)}
        ) from exc
