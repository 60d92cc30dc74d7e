"""Deterministic chain simulator driving the ERC721R spec.

Behaves like an auto-mining local node: every transaction is mined in its own
block, reverted transactions included. Time only moves when a block is mined.
A block's timestamp is the pending timestamp set through
`set_next_block_timestamp`/`increase_time`, or the previous block's timestamp
plus the configured block time.
"""

from __future__ import annotations

import logging
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from .config import SimulatorConfig
from .errors import ErrorCode, SpecError
from .queries import VIEWS
from .state_transition import TransitionResult, apply_tx
from .test_accounts import ALL_ACCOUNTS, DEPLOYER, NAME_MAP
from .tx.common import require_contract
from .types import AccountState, ChainState, ContractState, Transaction, TransactionType

logger = logging.getLogger(__name__)


def _label(address: bytes) -> str:
    return NAME_MAP.get(address, "0x" + address.hex())


@dataclass
class Receipt:
    tx: Transaction
    block_number: int
    timestamp: int
    result: TransitionResult

    @property
    def ok(self) -> bool:
        return self.result.ok

    @property
    def error(self) -> Optional[SpecError]:
        return self.result.error

    @property
    def reason(self) -> Optional[str]:
        return self.result.reason

    def reverted_with(self, reason: str) -> bool:
        """True if the tx reverted with a reason containing `reason`."""
        return not self.ok and self.reason is not None and reason in self.reason

    def raise_for_revert(self) -> "Receipt":
        if self.error is not None:
            raise self.error
        return self


class ChainSimulator:
    """Single-ledger chain with explicit, caller-controlled time."""

    def __init__(
        self,
        config: Optional[SimulatorConfig] = None,
        accounts: Iterable[bytes] = ALL_ACCOUNTS,
    ):
        self.config = config or SimulatorConfig()
        self.state = ChainState()
        self.state.global_state.timestamp = self.config.genesis_timestamp
        for address in accounts:
            self.state.accounts[address] = AccountState(
                address=address, balance=self.config.initial_balance
            )
        self.receipts: list[Receipt] = []
        self._next_timestamp: Optional[int] = None
        self._snapshots: dict[int, tuple[ChainState, Optional[int], int]] = {}
        self._snapshot_seq = 0
        if self.config.verbose:
            logger.setLevel(logging.DEBUG)

    # --- blocks and time ---

    @property
    def block_number(self) -> int:
        return self.state.global_state.block_number

    @property
    def timestamp(self) -> int:
        """Timestamp of the latest mined block."""
        return self.state.global_state.timestamp

    def set_next_block_timestamp(self, timestamp: int) -> None:
        if timestamp <= self.timestamp:
            raise SpecError(
                ErrorCode.TIMESTAMP_TOO_OLD,
                f"timestamp {timestamp} is not after the latest block timestamp {self.timestamp}",
            )
        self._next_timestamp = timestamp

    def increase_time(self, seconds: int) -> None:
        if seconds <= 0:
            raise SpecError(ErrorCode.INVALID_AMOUNT, "time increase must be positive")
        base = self._next_timestamp if self._next_timestamp is not None else self.timestamp
        self._next_timestamp = base + seconds

    def _mine_block(self) -> None:
        gs = self.state.global_state
        if self._next_timestamp is not None:
            gs.timestamp = self._next_timestamp
            self._next_timestamp = None
        else:
            gs.timestamp += self.config.block_time
        gs.block_number += 1
        logger.debug("mined block %d at %d", gs.block_number, gs.timestamp)

    def mine(self, blocks: int = 1) -> None:
        for _ in range(blocks):
            self._mine_block()

    # --- snapshots ---

    def snapshot(self) -> int:
        self._snapshot_seq += 1
        self._snapshots[self._snapshot_seq] = (
            deepcopy(self.state),
            self._next_timestamp,
            len(self.receipts),
        )
        return self._snapshot_seq

    def revert(self, snapshot_id: int) -> None:
        """Restore a snapshot; it and every later snapshot are discarded."""
        if snapshot_id not in self._snapshots:
            raise SpecError(ErrorCode.SNAPSHOT_NOT_FOUND, f"unknown snapshot {snapshot_id}")
        state, next_timestamp, receipt_count = self._snapshots[snapshot_id]
        self.state = state
        self._next_timestamp = next_timestamp
        del self.receipts[receipt_count:]
        for sid in [s for s in self._snapshots if s >= snapshot_id]:
            del self._snapshots[sid]

    # --- transactions ---

    def send(self, tx: Transaction) -> Receipt:
        self._mine_block()
        self.state, result = apply_tx(self.state, tx)
        receipt = Receipt(
            tx=tx,
            block_number=self.block_number,
            timestamp=self.timestamp,
            result=result,
        )
        self.receipts.append(receipt)
        if result.ok:
            logger.debug("%s %s ok (block %d)", _label(tx.source), tx.tx_type.value, self.block_number)
        else:
            logger.debug(
                "%s %s reverted: %s (block %d)",
                _label(tx.source),
                tx.tx_type.value,
                result.reason,
                self.block_number,
            )
        return receipt

    def transact(self, source: bytes, tx_type: TransactionType, value: int = 0, **payload: Any) -> Receipt:
        return self.send(Transaction(source=source, tx_type=tx_type, payload=payload, value=value))

    def deploy(self, deployer: bytes = DEPLOYER, **params: int) -> Receipt:
        receipt = self.transact(deployer, TransactionType.DEPLOY, **params)
        if receipt.ok:
            logger.info(
                "deployed ERC721RExample at 0x%s (refund window ends %d)",
                self.contract.address.hex(),
                self.contract.refund_end_time,
            )
        return receipt

    # --- queries ---

    @property
    def contract(self) -> ContractState:
        return require_contract(self.state)

    def call(self, view: str, *args: Any) -> Any:
        try:
            fn = VIEWS[view]
        except KeyError:
            raise SpecError(ErrorCode.NOT_IMPLEMENTED, f"unknown view: {view}") from None
        return fn(self.state, *args)

    def get_balance(self, address: bytes) -> int:
        return self.state.balance(address)

    # --- contract operations ---

    def public_sale_mint(self, sender: bytes, quantity: int, value: Optional[int] = None) -> Receipt:
        if value is None:
            value = quantity * self.contract.mint_price
        return self.transact(sender, TransactionType.PUBLIC_SALE_MINT, value=value, quantity=quantity)

    def pre_sale_mint(
        self, sender: bytes, quantity: int, proof: list[bytes], value: Optional[int] = None
    ) -> Receipt:
        if value is None:
            value = quantity * self.contract.presale_price
        return self.transact(
            sender, TransactionType.PRE_SALE_MINT, value=value, quantity=quantity, proof=list(proof)
        )

    def owner_mint(self, sender: bytes, quantity: int) -> Receipt:
        return self.transact(sender, TransactionType.OWNER_MINT, quantity=quantity)

    def refund(self, sender: bytes, token_ids: list[int]) -> Receipt:
        return self.transact(sender, TransactionType.REFUND, token_ids=list(token_ids))

    def withdraw(self, sender: bytes) -> Receipt:
        return self.transact(sender, TransactionType.WITHDRAW)

    def toggle_refund_countdown(self, sender: bytes) -> Receipt:
        return self.transact(sender, TransactionType.TOGGLE_REFUND_COUNTDOWN)

    def toggle_public_sale_status(self, sender: bytes) -> Receipt:
        return self.transact(sender, TransactionType.TOGGLE_PUBLIC_SALE_STATUS)

    def toggle_presale_status(self, sender: bytes) -> Receipt:
        return self.transact(sender, TransactionType.TOGGLE_PRESALE_STATUS)

    def set_refund_address(self, sender: bytes, address: bytes) -> Receipt:
        return self.transact(sender, TransactionType.SET_REFUND_ADDRESS, address=address)

    def set_merkle_root(self, sender: bytes, root: bytes) -> Receipt:
        return self.transact(sender, TransactionType.SET_MERKLE_ROOT, root=root)

    def transfer_from(self, sender: bytes, source: bytes, to: bytes, token_id: int) -> Receipt:
        return self.send(
            Transaction(
                source=sender,
                tx_type=TransactionType.TRANSFER_FROM,
                payload={"from": source, "to": to, "token_id": token_id},
            )
        )
