"""Example: Open HRMP channels in both directions between two parachains."""

from __future__ import annotations

import asyncio
import logging
import os

from dotenv import load_dotenv

from xcm_api import XCMClientConfig, XCMError, XCMProtocol

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger("setup_hrmp_channels")


async def main() -> None:
    para_a = int(os.getenv("HRMP_PARA_A", "1000"))
    para_b = int(os.getenv("HRMP_PARA_B", "1001"))
    max_capacity = int(os.getenv("HRMP_MAX_CAPACITY", "8"))
    max_message_size = int(os.getenv("HRMP_MAX_MESSAGE_SIZE", "1024"))

    async with XCMProtocol(XCMClientConfig.from_env()) as client:
        try:
            result = await client.setup_bidirectional_channels(
                para_a, para_b, max_capacity=max_capacity, max_message_size=max_message_size
            )
        except XCMError as exc:
            logger.error("Channel setup failed: %s", exc.message)
            logger.error("  failed step: %s", exc.details.get("failed_step"))
            for key in exc.details.get("completed", {}):
                logger.error("  already finalized: %s", key)
            return

        logger.info(result["message"])
        for key, summary in result["channels"].items():
            logger.info("  %s finalized in block %s", key, summary["blockHash"])


if __name__ == "__main__":
    asyncio.run(main())
