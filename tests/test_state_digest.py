"""State digest and fixture (de)serialization checks."""

from __future__ import annotations

import json

import yaml

from erc721r_spec.config import MINT_PRICE, WEI_PER_ETHER
from erc721r_spec.errors import ErrorCode
from erc721r_spec.merkle import build_allow_list
from erc721r_spec.state_digest import compute_state_digest
from erc721r_spec.state_transition import apply_tx
from erc721r_spec.test_accounts import ALICE, BOB, DEPLOYER, funded_state
from erc721r_spec.types import AccountState, ChainState, ContractState, Transaction, TransactionType
from tools.consume import check_state_cases
from tools.fixtures_io import state_from_json, state_to_json, tx_from_json, tx_to_json
from tools.fixtures_to_vectors import case_to_vector, dump_vectors

CONTRACT = bytes([0xCC]) * 20


def _state() -> ChainState:
    state = funded_state(5 * WEI_PER_ETHER, timestamp=1_700_000_100)
    state.global_state.block_number = 7
    contract = ContractState(
        address=CONTRACT,
        owner=DEPLOYER,
        refund_address=BOB,
        refund_end_time=1_700_003_000,
        merkle_root=build_allow_list([ALICE, BOB]).root,
        public_sale_active=True,
    )
    contract.token_owners = {0: ALICE, 1: BOB, 2: DEPLOYER}
    contract.has_refunded = {1: True}
    contract.is_owner_mint = {2: True}
    contract.next_token_id = 3
    contract.number_minted = {ALICE: 2, DEPLOYER: 1}
    state.contract = contract
    state.accounts[CONTRACT] = AccountState(address=CONTRACT, balance=MINT_PRICE)
    return state


def test_state_json_round_trip() -> None:
    state = _state()
    assert state_from_json(state_to_json(state)) == state
    assert state_from_json(json.loads(json.dumps(state_to_json(state)))) == state


def test_tx_json_round_trip() -> None:
    tree = build_allow_list([ALICE, BOB])
    tx = Transaction(
        source=ALICE,
        tx_type=TransactionType.PRE_SALE_MINT,
        payload={"quantity": 1, "proof": tree.proof(tree.leaves[0])},
        value=MINT_PRICE,
    )
    encoded = tx_to_json(tx)
    assert encoded["tx_type"] == "preSaleMint"
    assert all(s.startswith("0x") for s in encoded["payload"]["proof"])
    assert tx_from_json(encoded) == tx


def test_digest_is_hex_blake3() -> None:
    digest = compute_state_digest(state_to_json(_state()))
    assert len(digest) == 64
    int(digest, 16)


def test_digest_ignores_listing_order() -> None:
    data = state_to_json(_state())
    shuffled = dict(data)
    shuffled["accounts"] = list(reversed(data["accounts"]))
    shuffled["contract"] = dict(data["contract"], tokens=list(reversed(data["contract"]["tokens"])))
    assert compute_state_digest(shuffled) == compute_state_digest(data)


def test_digest_tracks_token_flags() -> None:
    base = _state()
    refunded = _state()
    refunded.contract.has_refunded[0] = True
    assert compute_state_digest(state_to_json(base)) != compute_state_digest(state_to_json(refunded))


def test_digest_without_contract() -> None:
    state = funded_state(WEI_PER_ETHER)
    with_contract = _state()
    assert compute_state_digest(state_to_json(state)) != compute_state_digest(state_to_json(with_contract))
    assert compute_state_digest({}) == compute_state_digest({"global_state": {}, "accounts": []})


def test_consume_replays_cases(tmp_path) -> None:
    pre = _state()
    tx = Transaction(
        source=ALICE,
        tx_type=TransactionType.PUBLIC_SALE_MINT,
        payload={"quantity": 1},
        value=MINT_PRICE,
    )
    post, result = apply_tx(pre, tx)
    assert result.ok
    case = {
        "name": "mint",
        "pre_state": state_to_json(pre),
        "tx": tx_to_json(tx),
        "expected": {
            "ok": True,
            "error": None,
            "reason": None,
            "state_digest": compute_state_digest(state_to_json(post)),
        },
    }
    path = tmp_path / "mint.json"
    path.write_text(json.dumps({"cases": [case]}))
    assert check_state_cases(path) == []

    case["expected"]["state_digest"] = "00" * 32
    path.write_text(json.dumps({"cases": [case]}))
    assert check_state_cases(path) == ["mint: state_digest_mismatch"]


def test_case_to_vector_yaml() -> None:
    pre = _state()
    tx = Transaction(source=BOB, tx_type=TransactionType.WITHDRAW)
    post, result = apply_tx(pre, tx)
    case = {
        "name": "withdraw_not_owner",
        "pre_state": state_to_json(pre),
        "tx": tx_to_json(tx),
        "expected": {
            "ok": result.ok,
            "error": result.error.code.name,
            "reason": result.reason,
            "post_state": state_to_json(post),
        },
    }
    vector = case_to_vector(case)
    assert vector["expected"]["success"] is False
    assert vector["expected"]["error_code"] == int(ErrorCode.UNAUTHORIZED)
    assert vector["expected"]["reason"] == "Ownable: caller is not the owner"

    text = dump_vectors({"test_vectors": [vector]})
    assert yaml.safe_load(text)["test_vectors"][0]["name"] == "withdraw_not_owner"
