"""Example: Send tokens from one parachain to a sibling over XCM."""

from __future__ import annotations

import asyncio
import json
import logging
import os

from dotenv import load_dotenv

from xcm_api import XCMClientConfig, XCMProtocol, enveloped, to_planck

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger("xcm_transfer")


async def main() -> None:
    src = int(os.getenv("XCM_SOURCE", "1000"))
    dest = int(os.getenv("XCM_DEST", "1001"))
    symbol = os.getenv("XCM_SYMBOL", "UNIT")
    amount = to_planck(os.getenv("XCM_AMOUNT", "1"))
    signer = os.getenv("XCM_SIGNER_SEED", "//Alice")
    recipient = os.getenv("XCM_RECIPIENT") or None

    async with XCMProtocol(XCMClientConfig.from_env()) as client:
        before = await client.balances_for_well_known_accounts(dest)
        logger.info("Destination balances before: %s", [b.as_dict() for b in before])

        envelope = await enveloped(
            client.transfer(src, dest, str(amount), symbol, signer_seed=signer, recipient=recipient)
        )
        if not envelope.success:
            logger.error("Transfer failed (%s): %s", envelope.status_code, envelope.error)
            logger.debug("  details: %s", envelope.error_details)
            return

        print(json.dumps(envelope.as_dict(), indent=2))


if __name__ == "__main__":
    asyncio.run(main())
