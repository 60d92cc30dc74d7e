"""Mint transaction specs (publicSaleMint, preSaleMint, ownerMint)."""

from __future__ import annotations

from ..crypto.hash_algorithms import address_leaf
from ..errors import ErrorCode, SpecError, err
from ..merkle import verify_proof
from ..types import ChainState, ContractState, Transaction, TransactionType
from .common import payload_dict, payload_uint, require_contract, require_owner


def verify(state: ChainState, tx: Transaction) -> None:
    contract = require_contract(state)
    p = payload_dict(tx)
    quantity = payload_uint(p, "quantity")

    tt = tx.tx_type
    if tt == TransactionType.PUBLIC_SALE_MINT:
        _verify_public(contract, tx, quantity)
    elif tt == TransactionType.PRE_SALE_MINT:
        _verify_presale(contract, tx, p, quantity)
    elif tt == TransactionType.OWNER_MINT:
        _verify_owner(contract, tx, quantity)
    else:
        raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported mint tx type: {tt}")

    # ERC721A rejects empty mints only once the contract's own checks pass.
    if quantity == 0:
        raise err(ErrorCode.INVALID_AMOUNT)


def apply(state: ChainState, tx: Transaction) -> ChainState:
    contract = require_contract(state)
    quantity = tx.payload["quantity"]
    owner_mint = tx.tx_type == TransactionType.OWNER_MINT
    _mint(contract, tx.source, quantity, owner_mint=owner_mint)
    return state


def _require_supply(contract: ContractState, quantity: int) -> None:
    if contract.next_token_id + quantity > contract.max_mint_supply:
        raise err(ErrorCode.MAX_SUPPLY_REACHED)


def _require_user_limit(contract: ContractState, minter: bytes, quantity: int) -> None:
    if contract.number_minted.get(minter, 0) + quantity > contract.max_user_mint_amount:
        raise err(ErrorCode.MINT_LIMIT_EXCEEDED)


# --- publicSaleMint ---

def _verify_public(contract: ContractState, tx: Transaction, quantity: int) -> None:
    if not contract.public_sale_active:
        raise err(ErrorCode.PUBLIC_SALE_INACTIVE)
    if tx.value < quantity * contract.mint_price:
        raise err(ErrorCode.INSUFFICIENT_VALUE)
    _require_supply(contract, quantity)
    _require_user_limit(contract, tx.source, quantity)


# --- preSaleMint ---

def _verify_presale(contract: ContractState, tx: Transaction, p: dict, quantity: int) -> None:
    if not contract.presale_active:
        raise err(ErrorCode.PRESALE_INACTIVE)

    proof = p.get("proof", [])
    if not isinstance(proof, (list, tuple)) or not all(isinstance(s, bytes) for s in proof):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "proof must be a list of bytes32")
    if not verify_proof(proof, contract.merkle_root, address_leaf(tx.source)):
        raise err(ErrorCode.NOT_ON_ALLOW_LIST)

    if tx.value < quantity * contract.presale_price:
        raise err(ErrorCode.INSUFFICIENT_VALUE)
    _require_user_limit(contract, tx.source, quantity)
    _require_supply(contract, quantity)


# --- ownerMint ---

def _verify_owner(contract: ContractState, tx: Transaction, quantity: int) -> None:
    require_owner(contract, tx)
    _require_supply(contract, quantity)


def _mint(contract: ContractState, to: bytes, quantity: int, *, owner_mint: bool) -> list[int]:
    start = contract.next_token_id
    token_ids = list(range(start, start + quantity))
    for token_id in token_ids:
        contract.token_owners[token_id] = to
        if owner_mint:
            contract.is_owner_mint[token_id] = True
    contract.next_token_id += quantity
    contract.number_minted[to] = contract.number_minted.get(to, 0) + quantity
    return token_ids
