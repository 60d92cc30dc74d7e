"""Refund transaction spec.

The refund guarantee window is checked once for the whole call. Each token id
is then checked and moved to the refund address in order, so a repeated id in
one call sees the effects of its earlier occurrence. The caller is paid the
mint price per refunded token after all transfers.
"""

from __future__ import annotations

from ..errors import ErrorCode, SpecError, err
from ..types import ChainState, Transaction
from .common import payload_dict, require_contract, require_token, transfer_value


def _token_ids(tx: Transaction) -> list[int]:
    p = payload_dict(tx)
    ids = p.get("token_ids")
    if not isinstance(ids, (list, tuple)):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "token_ids must be a list")
    for token_id in ids:
        if not isinstance(token_id, int) or isinstance(token_id, bool) or token_id < 0:
            raise SpecError(ErrorCode.INVALID_PAYLOAD, "token id must be a non-negative integer")
    return list(ids)


def verify(state: ChainState, tx: Transaction) -> None:
    contract = require_contract(state)
    _token_ids(tx)
    if state.global_state.timestamp > contract.refund_end_time:
        raise err(ErrorCode.REFUND_EXPIRED)


def apply(state: ChainState, tx: Transaction) -> ChainState:
    contract = require_contract(state)
    token_ids = _token_ids(tx)

    for token_id in token_ids:
        owner = require_token(contract, token_id)
        if owner != tx.source:
            raise err(ErrorCode.NOT_TOKEN_OWNER)
        if contract.is_owner_mint.get(token_id, False):
            raise err(ErrorCode.OWNER_MINT_NOT_REFUNDABLE)
        if contract.has_refunded.get(token_id, False):
            raise err(ErrorCode.ALREADY_REFUNDED)

        contract.has_refunded[token_id] = True
        contract.token_owners[token_id] = contract.refund_address

    refund_amount = contract.mint_price * len(token_ids)
    transfer_value(state, contract.address, tx.source, refund_amount)
    return state
