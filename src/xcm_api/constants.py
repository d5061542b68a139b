"""Constants and mappings for the XCM orchestration API."""

from dataclasses import dataclass

# Relay chain is addressed as chain 0 throughout the API.
RELAY_CHAIN_ID = 0

DEFAULT_RELAY_WS = "ws://127.0.0.1:9944"
DEFAULT_PARACHAIN_WS = {
    1000: "ws://127.0.0.1:9946",
    1001: "ws://127.0.0.1:9947",
}

# Parachain ids accepted as transfer / balance sources.
DEFAULT_TRANSFER_CHAINS = (1000, 1001)

MIN_PARACHAIN_ID = 1000
MAX_PARACHAIN_ID = 4999

DEFAULT_SS58_FORMAT = 42
DEFAULT_SIGNER_SEED = "//Alice"
DEFAULT_TOKEN_SYMBOL = "UNIT"

# Development accounts present on every local test network.
WELL_KNOWN_SEEDS = {
    "Alice": "//Alice",
    "Bob": "//Bob",
    "Charlie": "//Charlie",
    "Dave": "//Dave",
    "Eve": "//Eve",
    "Ferdie": "//Ferdie",
}


@dataclass(frozen=True)
class TokenConfig:
    symbol: str
    decimals: int
    name: str


TOKEN_CONFIGS = {
    "UNIT": TokenConfig(symbol="UNIT", decimals=12, name="Unit Token"),
    "DOT": TokenConfig(symbol="DOT", decimals=10, name="Polkadot"),
    "KSM": TokenConfig(symbol="KSM", decimals=12, name="Kusama"),
}


def get_token_decimals(symbol: str, default: int = 12) -> int:
    """Get token decimals from symbol.

    Args:
        symbol: Token symbol (e.g., "UNIT", "DOT")
        default: Decimals used for unknown symbols

    Returns:
        Number of decimals
    """
    config = TOKEN_CONFIGS.get(symbol.upper())
    return config.decimals if config is not None else default
