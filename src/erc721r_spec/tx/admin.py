"""Owner-only transaction specs: sale toggles, setters, countdown, withdraw."""

from __future__ import annotations

from ..config import HASH_SIZE
from ..errors import ErrorCode, SpecError, err
from ..types import ChainState, Transaction, TransactionType
from .common import payload_address, payload_dict, require_contract, require_owner, transfer_value

ADMIN_TYPES = frozenset({
    TransactionType.WITHDRAW,
    TransactionType.TOGGLE_REFUND_COUNTDOWN,
    TransactionType.TOGGLE_PUBLIC_SALE_STATUS,
    TransactionType.TOGGLE_PRESALE_STATUS,
    TransactionType.SET_REFUND_ADDRESS,
    TransactionType.SET_MERKLE_ROOT,
})


def verify(state: ChainState, tx: Transaction) -> None:
    contract = require_contract(state)
    tt = tx.tx_type
    if tt not in ADMIN_TYPES:
        raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported admin tx type: {tt}")

    require_owner(contract, tx)

    if tt == TransactionType.WITHDRAW:
        if state.global_state.timestamp <= contract.refund_end_time:
            raise err(ErrorCode.REFUND_PERIOD_ACTIVE)
    elif tt == TransactionType.SET_REFUND_ADDRESS:
        payload_address(payload_dict(tx), "address")
    elif tt == TransactionType.SET_MERKLE_ROOT:
        root = payload_dict(tx).get("root")
        if not isinstance(root, bytes) or len(root) != HASH_SIZE:
            raise SpecError(ErrorCode.INVALID_PAYLOAD, "root must be bytes32")


def apply(state: ChainState, tx: Transaction) -> ChainState:
    contract = require_contract(state)
    tt = tx.tx_type
    now = state.global_state.timestamp

    if tt == TransactionType.WITHDRAW:
        transfer_value(state, contract.address, tx.source, state.balance(contract.address))
    elif tt == TransactionType.TOGGLE_REFUND_COUNTDOWN:
        contract.refund_end_time = now + contract.refund_period
    elif tt == TransactionType.TOGGLE_PUBLIC_SALE_STATUS:
        contract.public_sale_active = not contract.public_sale_active
    elif tt == TransactionType.TOGGLE_PRESALE_STATUS:
        contract.presale_active = not contract.presale_active
    elif tt == TransactionType.SET_REFUND_ADDRESS:
        contract.refund_address = bytes(tx.payload["address"])
    elif tt == TransactionType.SET_MERKLE_ROOT:
        contract.merkle_root = tx.payload["root"]
    else:
        raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported admin tx type: {tt}")
    return state
