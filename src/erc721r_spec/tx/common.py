"""Shared checks and ledger helpers for the contract transaction specs."""

from __future__ import annotations

from ..config import ADDRESS_SIZE
from ..errors import ErrorCode, SpecError, err
from ..types import ChainState, ContractState, Transaction


def require_contract(state: ChainState) -> ContractState:
    if state.contract is None:
        raise err(ErrorCode.CONTRACT_NOT_DEPLOYED)
    return state.contract


def require_owner(contract: ContractState, tx: Transaction) -> None:
    # Ownable.onlyOwner
    if tx.source != contract.owner:
        raise err(ErrorCode.UNAUTHORIZED)


def payload_dict(tx: Transaction) -> dict:
    if not isinstance(tx.payload, dict):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, f"{tx.tx_type.value} payload must be dict")
    return tx.payload


def payload_uint(p: dict, key: str) -> int:
    value = p.get(key)
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise SpecError(ErrorCode.INVALID_PAYLOAD, f"{key} must be a non-negative integer")
    return value


def payload_address(p: dict, key: str) -> bytes:
    value = p.get(key)
    if not isinstance(value, (bytes, bytearray)) or len(value) != ADDRESS_SIZE:
        raise SpecError(ErrorCode.INVALID_ADDRESS, f"{key} must be a {ADDRESS_SIZE}-byte address")
    return bytes(value)


def require_token(contract: ContractState, token_id: int) -> bytes:
    """ownerOf: the current owner, or TOKEN_NOT_FOUND for unminted ids."""
    owner = contract.token_owners.get(token_id)
    if owner is None:
        raise err(ErrorCode.TOKEN_NOT_FOUND)
    return owner


def transfer_value(state: ChainState, source: bytes, destination: bytes, amount: int) -> None:
    """Move wei between accounts (Address.sendValue)."""
    sender = state.account(source)
    if sender.balance < amount:
        raise err(ErrorCode.CONTRACT_INSUFFICIENT_BALANCE)
    sender.balance -= amount
    state.account(destination).balance += amount
