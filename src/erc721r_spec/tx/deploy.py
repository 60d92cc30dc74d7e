"""Contract deployment spec (the ERC721RExample constructor).

The payload may override the deploy-time parameters; anything omitted takes
the value from `config`.
"""

from __future__ import annotations

from ..crypto.hash_algorithms import compute_contract_address
from ..errors import ErrorCode, SpecError, err
from ..types import ChainState, ContractState, Transaction
from .common import payload_dict

PARAMETERS = (
    "mint_price",
    "presale_price",
    "max_mint_supply",
    "max_user_mint_amount",
    "refund_period",
)


def verify(state: ChainState, tx: Transaction) -> None:
    if state.contract is not None:
        raise err(ErrorCode.CONTRACT_EXISTS)

    p = payload_dict(tx)
    unknown = set(p) - set(PARAMETERS)
    if unknown:
        raise SpecError(ErrorCode.INVALID_PAYLOAD, f"unknown deploy parameters: {sorted(unknown)}")
    for name in PARAMETERS:
        if name not in p:
            continue
        value = p[name]
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise SpecError(ErrorCode.INVALID_PAYLOAD, f"{name} must be a non-negative integer")


def apply(state: ChainState, tx: Transaction) -> ChainState:
    deployer = state.account(tx.source)
    address = compute_contract_address(tx.source, deployer.nonce)
    now = state.global_state.timestamp

    contract = ContractState(
        address=address,
        owner=tx.source,
        refund_address=tx.source,
        refund_end_time=0,
        **{k: v for k, v in tx.payload.items() if k in PARAMETERS},
    )
    contract.refund_end_time = now + contract.refund_period
    state.contract = contract
    state.account(address)
    return state
