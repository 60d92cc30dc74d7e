"""Core types for the ERC721R Python spec.

The surface tracked here is the `ERC721RExample` contract: public/presale/owner
mints, the refund guarantee window, owner-only toggles and setters, and
withdrawal. Addresses are 20-byte canonical values, amounts are wei.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .config import (
    MAX_MINT_SUPPLY,
    MAX_USER_MINT_AMOUNT,
    MINT_PRICE,
    PRESALE_PRICE,
    REFUND_PERIOD,
    ZERO_ADDRESS,
    ZERO_HASH,
)


class TransactionType(Enum):
    DEPLOY = "deploy"
    PUBLIC_SALE_MINT = "publicSaleMint"
    PRE_SALE_MINT = "preSaleMint"
    OWNER_MINT = "ownerMint"
    REFUND = "refund"
    WITHDRAW = "withdraw"
    TOGGLE_REFUND_COUNTDOWN = "toggleRefundCountdown"
    TOGGLE_PUBLIC_SALE_STATUS = "togglePublicSaleStatus"
    TOGGLE_PRESALE_STATUS = "togglePresaleStatus"
    SET_REFUND_ADDRESS = "setRefundAddress"
    SET_MERKLE_ROOT = "setMerkleRoot"
    TRANSFER_FROM = "transferFrom"


# Functions that accept ether with the call.
PAYABLE_TYPES = frozenset({
    TransactionType.PUBLIC_SALE_MINT,
    TransactionType.PRE_SALE_MINT,
})


@dataclass
class Transaction:
    source: bytes
    tx_type: TransactionType
    payload: dict = field(default_factory=dict)
    value: int = 0


@dataclass
class AccountState:
    address: bytes
    balance: int = 0
    nonce: int = 0


@dataclass
class GlobalState:
    block_number: int = 0
    timestamp: int = 0


@dataclass
class ContractState:
    address: bytes
    owner: bytes
    refund_address: bytes
    refund_end_time: int
    merkle_root: bytes = ZERO_HASH
    public_sale_active: bool = False
    presale_active: bool = False

    # Deploy-time parameters
    mint_price: int = MINT_PRICE
    presale_price: int = PRESALE_PRICE
    max_mint_supply: int = MAX_MINT_SUPPLY
    max_user_mint_amount: int = MAX_USER_MINT_AMOUNT
    refund_period: int = REFUND_PERIOD

    # Token ledger
    next_token_id: int = 0
    token_owners: dict[int, bytes] = field(default_factory=dict)
    number_minted: dict[bytes, int] = field(default_factory=dict)
    # Set once, never cleared.
    has_refunded: dict[int, bool] = field(default_factory=dict)
    is_owner_mint: dict[int, bool] = field(default_factory=dict)


@dataclass
class ChainState:
    accounts: dict[bytes, AccountState] = field(default_factory=dict)
    global_state: GlobalState = field(default_factory=GlobalState)
    contract: Optional[ContractState] = None

    def balance(self, address: bytes) -> int:
        acct = self.accounts.get(address)
        return acct.balance if acct is not None else 0

    def account(self, address: bytes) -> AccountState:
        """Return the account at `address`, creating an empty one if missing."""
        acct = self.accounts.get(address)
        if acct is None:
            acct = AccountState(address=address)
            self.accounts[address] = acct
        return acct


def is_zero_address(address: bytes) -> bool:
    return address == ZERO_ADDRESS
