"""Read-only contract views (the `view` functions of ERC721RExample)."""

from __future__ import annotations

from .crypto.hash_algorithms import address_leaf
from .errors import ErrorCode, SpecError
from .merkle import verify_proof
from .tx.common import require_contract, require_token
from .types import ChainState, is_zero_address


def balance_of(state: ChainState, owner: bytes) -> int:
    if is_zero_address(owner):
        raise SpecError(ErrorCode.INVALID_ADDRESS, "balance query for the zero address")
    contract = require_contract(state)
    return sum(1 for holder in contract.token_owners.values() if holder == owner)


def owner_of(state: ChainState, token_id: int) -> bytes:
    return require_token(require_contract(state), token_id)


def total_supply(state: ChainState) -> int:
    return require_contract(state).next_token_id


def number_minted(state: ChainState, owner: bytes) -> int:
    return require_contract(state).number_minted.get(owner, 0)


def is_owner_mint(state: ChainState, token_id: int) -> bool:
    return require_contract(state).is_owner_mint.get(token_id, False)


def has_refunded(state: ChainState, token_id: int) -> bool:
    return require_contract(state).has_refunded.get(token_id, False)


def get_refund_guarantee_end_time(state: ChainState) -> int:
    return require_contract(state).refund_end_time


def is_refund_guarantee_active(state: ChainState) -> bool:
    return state.global_state.timestamp <= require_contract(state).refund_end_time


def is_allow_listed(state: ChainState, account: bytes, proof: list[bytes]) -> bool:
    contract = require_contract(state)
    return verify_proof(proof, contract.merkle_root, address_leaf(account))


def public_sale_active(state: ChainState) -> bool:
    return require_contract(state).public_sale_active


def presale_active(state: ChainState) -> bool:
    return require_contract(state).presale_active


def contract_balance(state: ChainState) -> int:
    return state.balance(require_contract(state).address)


VIEWS = {
    "balanceOf": balance_of,
    "ownerOf": owner_of,
    "totalSupply": total_supply,
    "numberMinted": number_minted,
    "isOwnerMint": is_owner_mint,
    "hasRefunded": has_refunded,
    "getRefundGuaranteeEndTime": get_refund_guarantee_end_time,
    "isRefundGuaranteeActive": is_refund_guarantee_active,
    "isAllowListed": is_allow_listed,
    "publicSaleActive": public_sale_active,
    "presaleActive": presale_active,
}
