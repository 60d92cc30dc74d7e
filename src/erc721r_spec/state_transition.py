"""State transition entrypoints for the ERC721R Python spec."""

from __future__ import annotations

from copy import deepcopy
from typing import Optional

from .config import ADDRESS_SIZE
from .errors import ErrorCode, SpecError, err
from .types import PAYABLE_TYPES, ChainState, Transaction, TransactionType
from .tx import admin as tx_admin
from .tx import deploy as tx_deploy
from .tx import mint as tx_mint
from .tx import refund as tx_refund
from .tx import transfer as tx_transfer
from .tx.common import require_contract

_MINT_TYPES = frozenset({
    TransactionType.PUBLIC_SALE_MINT,
    TransactionType.PRE_SALE_MINT,
    TransactionType.OWNER_MINT,
})


class TransitionResult:
    """Thin wrapper for verify/apply results."""

    def __init__(self, ok: bool, error: Optional[SpecError] = None):
        self.ok = ok
        self.error = error

    @classmethod
    def success(cls) -> "TransitionResult":
        return cls(True, None)

    @classmethod
    def failure(cls, error: SpecError) -> "TransitionResult":
        return cls(False, error)

    @property
    def reason(self) -> Optional[str]:
        return self.error.reason if self.error else None

    def __repr__(self) -> str:
        if self.ok:
            return "TransitionResult(ok)"
        return f"TransitionResult(reverted: {self.reason!r})"


def _dispatch_verify(state: ChainState, tx: Transaction) -> None:
    tt = tx.tx_type
    if tt == TransactionType.DEPLOY:
        return tx_deploy.verify(state, tx)
    if tt in _MINT_TYPES:
        return tx_mint.verify(state, tx)
    if tt == TransactionType.REFUND:
        return tx_refund.verify(state, tx)
    if tt in tx_admin.ADMIN_TYPES:
        return tx_admin.verify(state, tx)
    if tt == TransactionType.TRANSFER_FROM:
        return tx_transfer.verify(state, tx)

    raise SpecError(ErrorCode.NOT_IMPLEMENTED, f"verify not implemented for {tx.tx_type}")


def _dispatch_apply(state: ChainState, tx: Transaction) -> ChainState:
    tt = tx.tx_type
    if tt == TransactionType.DEPLOY:
        return tx_deploy.apply(state, tx)
    if tt in _MINT_TYPES:
        return tx_mint.apply(state, tx)
    if tt == TransactionType.REFUND:
        return tx_refund.apply(state, tx)
    if tt in tx_admin.ADMIN_TYPES:
        return tx_admin.apply(state, tx)
    if tt == TransactionType.TRANSFER_FROM:
        return tx_transfer.apply(state, tx)

    raise SpecError(ErrorCode.NOT_IMPLEMENTED, f"apply not implemented for {tx.tx_type}")


def _verify_common(state: ChainState, tx: Transaction) -> None:
    if not isinstance(tx.tx_type, TransactionType):
        raise SpecError(ErrorCode.INVALID_TYPE, f"unknown tx type: {tx.tx_type!r}")

    if len(tx.source) != ADDRESS_SIZE:
        raise SpecError(ErrorCode.INVALID_ADDRESS, "sender must be a 20-byte address")

    sender = state.accounts.get(tx.source)
    if sender is None:
        raise SpecError(ErrorCode.ACCOUNT_NOT_FOUND, "sender not found")

    if tx.value < 0:
        raise SpecError(ErrorCode.INVALID_AMOUNT, "value negative")

    # Solidity rejects ether sent to a non-payable function before its body runs.
    if tx.value > 0 and tx.tx_type not in PAYABLE_TYPES:
        raise err(ErrorCode.NOT_PAYABLE)

    if sender.balance < tx.value:
        raise err(ErrorCode.INSUFFICIENT_BALANCE)


def apply_tx(state: ChainState, tx: Transaction) -> tuple[ChainState, TransitionResult]:
    """Apply tx to state after verification.

    The block timestamp is `state.global_state.timestamp`; callers stamp the
    block before applying. Failed-tx semantics: on any failure the original
    state object is returned untouched. Module `apply` functions mutate the
    private working copy they are handed.
    """
    try:
        _verify_common(state, tx)
        _dispatch_verify(state, tx)
    except SpecError as exc:
        return state, TransitionResult.failure(exc)

    working = deepcopy(state)

    try:
        if tx.value:
            contract = require_contract(working)
            working.account(tx.source).balance -= tx.value
            working.account(contract.address).balance += tx.value
        working = _dispatch_apply(working, tx)
    except SpecError as exc:
        return state, TransitionResult.failure(exc)

    working.accounts[tx.source].nonce += 1
    return working, TransitionResult.success()
