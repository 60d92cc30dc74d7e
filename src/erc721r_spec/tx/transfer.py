"""Token transfer spec (transferFrom by the holder, no approvals)."""

from __future__ import annotations

from ..errors import ErrorCode, err
from ..types import ChainState, Transaction, is_zero_address
from .common import payload_address, payload_dict, payload_uint, require_contract, require_token


def verify(state: ChainState, tx: Transaction) -> None:
    contract = require_contract(state)
    p = payload_dict(tx)
    source = payload_address(p, "from")
    to = payload_address(p, "to")
    token_id = payload_uint(p, "token_id")

    owner = require_token(contract, token_id)
    if owner != source:
        raise err(ErrorCode.INCORRECT_TOKEN_OWNER)
    if tx.source != owner:
        raise err(ErrorCode.NOT_TOKEN_OWNER)
    if is_zero_address(to):
        raise err(ErrorCode.INVALID_ADDRESS, "Transfer to zero address")


def apply(state: ChainState, tx: Transaction) -> ChainState:
    contract = require_contract(state)
    contract.token_owners[tx.payload["token_id"]] = bytes(tx.payload["to"])
    return state
