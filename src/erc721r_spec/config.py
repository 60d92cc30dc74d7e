"""ERC721R Python spec configuration constants.

Keep the contract parameters aligned with the deployed `ERC721RExample`
(`mintPrice`, `maxMintSupply`, `maxUserMintAmount`, `refundPeriod`).
"""

from __future__ import annotations

import decimal
import os
from dataclasses import dataclass

from eth_utils import to_wei

# Units
ETHER_DECIMALS = 18
WEI_PER_ETHER = 10**ETHER_DECIMALS

# Time
SECONDS_PER_DAY = 86_400

# Contract parameters
MINT_PRICE = WEI_PER_ETHER // 10  # 0.1 ether
PRESALE_PRICE = MINT_PRICE
MAX_MINT_SUPPLY = 8000
MAX_USER_MINT_AMOUNT = 5
REFUND_PERIOD = 45 * SECONDS_PER_DAY

# Encoding sizes
ADDRESS_SIZE = 20
HASH_SIZE = 32
ZERO_ADDRESS = bytes(ADDRESS_SIZE)
ZERO_HASH = bytes(HASH_SIZE)

# Simulator defaults (hardhat network defaults)
DEFAULT_GENESIS_TIMESTAMP = 1_700_000_000
DEFAULT_INITIAL_BALANCE = 10_000 * WEI_PER_ETHER
BLOCK_TIME = 1


def parse_ether(amount: str) -> int:
    """Convert a decimal ether string (e.g. "0.1") to wei.

    Raises ValueError for negative or malformed amounts.
    """
    try:
        return to_wei(amount.strip(), "ether")
    except decimal.InvalidOperation:
        raise ValueError(f"invalid ether amount: {amount!r}") from None


@dataclass
class SimulatorConfig:
    """Runtime settings for the chain simulator."""
    genesis_timestamp: int = DEFAULT_GENESIS_TIMESTAMP
    initial_balance: int = DEFAULT_INITIAL_BALANCE
    block_time: int = BLOCK_TIME
    verbose: bool = False

    @classmethod
    def from_env(cls) -> "SimulatorConfig":
        """Load configuration from environment variables."""
        config = cls()

        genesis = os.environ.get("ERC721R_GENESIS_TIMESTAMP")
        if genesis:
            config.genesis_timestamp = int(genesis)

        balance = os.environ.get("ERC721R_INITIAL_BALANCE")
        if balance:
            config.initial_balance = parse_ether(balance)

        config.verbose = os.environ.get("ERC721R_VERBOSE", "").lower() in ("true", "1", "yes")

        return config
