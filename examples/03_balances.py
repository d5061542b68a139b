"""Example: Print the balances of the development accounts on a parachain."""

import asyncio
import os

from dotenv import load_dotenv

from xcm_api import XCMClientConfig, XCMProtocol, format_balance

load_dotenv()


async def main():
    para_id = int(os.getenv("XCM_BALANCE_CHAIN", "1000"))
    symbol = os.getenv("XCM_SYMBOL", "UNIT")

    async with XCMProtocol(XCMClientConfig.from_env()) as client:
        print("=" * 50)
        print(f"Balances on parachain {para_id}")
        print("=" * 50)

        for account in await client.balances_for_well_known_accounts(para_id):
            print(f"{account.name:<8} {account.address}")
            print(f"         free:     {format_balance(account.balance.free, symbol=symbol)}")
            print(f"         reserved: {format_balance(account.balance.reserved, symbol=symbol)}")


if __name__ == "__main__":
    asyncio.run(main())
