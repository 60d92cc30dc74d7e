"""End-to-end ERC721RExample scenarios driven through the chain simulator."""

from __future__ import annotations

import pytest

from erc721r_spec.config import MINT_PRICE, REFUND_PERIOD, SECONDS_PER_DAY, SimulatorConfig, parse_ether
from erc721r_spec.errors import ErrorCode, SpecError
from erc721r_spec.merkle import build_allow_list, proof_for_address
from erc721r_spec.simulator import ChainSimulator
from erc721r_spec.test_accounts import ALICE, BOB, CAROL, DAVE, DEPLOYER


def _simulate_next_block_time(chain: ChainSimulator, base_time: int, change_by: int) -> None:
    chain.set_next_block_timestamp(base_time + change_by)
    chain.mine()


# --- refund guarantee ---


def test_mint_and_refund(deployed) -> None:
    receipt = deployed.public_sale_mint(ALICE, 1, value=parse_ether("0.1"))
    assert receipt.ok
    assert deployed.call("balanceOf", ALICE) == 1

    end = deployed.call("getRefundGuaranteeEndTime")
    _simulate_next_block_time(deployed, end, -10)

    assert deployed.refund(ALICE, [0]).ok
    assert deployed.call("balanceOf", ALICE) == 0
    assert deployed.call("balanceOf", DEPLOYER) == 1
    assert deployed.call("hasRefunded", 0) is True


def test_refund_disabled_after_expiry(deployed) -> None:
    assert deployed.public_sale_mint(BOB, 1).ok
    assert deployed.call("balanceOf", BOB) == 1

    end = deployed.call("getRefundGuaranteeEndTime")
    _simulate_next_block_time(deployed, end, +10)

    receipt = deployed.refund(BOB, [0])
    assert receipt.reverted_with("expired")
    assert deployed.call("isRefundGuaranteeActive") is False


def test_refund_boundary(deployed) -> None:
    assert deployed.public_sale_mint(ALICE, 2).ok
    end = deployed.call("getRefundGuaranteeEndTime")

    snap = deployed.snapshot()
    deployed.set_next_block_timestamp(end)
    receipt = deployed.refund(ALICE, [0])
    assert receipt.ok
    assert receipt.timestamp == end

    deployed.revert(snap)
    deployed.set_next_block_timestamp(end + 1)
    receipt = deployed.refund(ALICE, [0])
    assert receipt.reason == "Refund expired"


def test_owner_minted_not_refundable(deployed) -> None:
    assert deployed.owner_mint(DEPLOYER, 1).ok
    assert deployed.call("isOwnerMint", 0) is True

    receipt = deployed.refund(DEPLOYER, [0])
    assert receipt.reason == "Freely minted NFTs cannot be refunded"


def test_cannot_refund_twice(deployed) -> None:
    # Refunded tokens go back to the refund address, so make it the minter.
    assert deployed.set_refund_address(DEPLOYER, BOB).ok
    assert deployed.public_sale_mint(BOB, 1, value=parse_ether("0.1")).ok
    assert deployed.public_sale_mint(ALICE, 3, value=parse_ether("0.3")).ok
    assert deployed.get_balance(deployed.contract.address) == parse_ether("0.4")

    assert deployed.refund(BOB, [0]).ok
    assert deployed.get_balance(deployed.contract.address) == parse_ether("0.3")
    assert deployed.call("ownerOf", 0) == BOB

    receipt = deployed.refund(BOB, [0])
    assert receipt.reason == "Already refunded"


def test_refund_returns_mint_price(deployed) -> None:
    before = deployed.get_balance(CAROL)
    assert deployed.public_sale_mint(CAROL, 2).ok
    assert deployed.get_balance(CAROL) == before - 2 * MINT_PRICE

    assert deployed.refund(CAROL, [0, 1]).ok
    assert deployed.get_balance(CAROL) == before


def test_refund_by_secondary_holder(deployed) -> None:
    assert deployed.public_sale_mint(ALICE, 1).ok
    assert deployed.transfer_from(ALICE, ALICE, DAVE, 0).ok

    assert deployed.refund(ALICE, [0]).reason == "Not token owner"
    assert deployed.refund(DAVE, [0]).ok
    assert deployed.call("ownerOf", 0) == DEPLOYER


# --- mint limits ---


def test_over_mint_limit(deployed) -> None:
    assert deployed.public_sale_mint(ALICE, 5, value=parse_ether("0.5")).ok
    assert deployed.call("numberMinted", ALICE) == 5

    receipt = deployed.public_sale_mint(ALICE, 1)
    assert receipt.reason == "Over mint limit"
    assert deployed.call("balanceOf", ALICE) == 5


def test_max_supply(chain) -> None:
    chain.deploy(DEPLOYER, max_mint_supply=6).raise_for_revert()
    chain.toggle_public_sale_status(DEPLOYER).raise_for_revert()
    assert chain.public_sale_mint(ALICE, 5).ok

    assert chain.public_sale_mint(BOB, 2).reason == "Max mint supply reached"
    assert chain.public_sale_mint(BOB, 1).ok
    assert chain.call("totalSupply") == 6
    assert chain.owner_mint(DEPLOYER, 1).reason == "Max mint supply reached"


def test_public_sale_off_by_default(chain) -> None:
    chain.deploy(DEPLOYER).raise_for_revert()
    assert chain.public_sale_mint(ALICE, 1).reason == "Public sale is not active"


# --- presale ---


def test_presale_with_allow_list(deployed) -> None:
    tree = build_allow_list([ALICE, CAROL])
    assert deployed.set_merkle_root(DEPLOYER, tree.root).ok

    proof = proof_for_address(tree, CAROL)
    assert deployed.pre_sale_mint(CAROL, 1, proof).reason == "Presale is not active"

    assert deployed.toggle_presale_status(DEPLOYER).ok
    assert deployed.call("isAllowListed", CAROL, proof) is True
    assert deployed.pre_sale_mint(CAROL, 1, proof).ok
    assert deployed.call("ownerOf", 0) == CAROL

    assert deployed.pre_sale_mint(DAVE, 1, proof).reason == "Not on allow list"
    assert deployed.pre_sale_mint(DAVE, 1, []).reason == "Not on allow list"


# --- withdraw and countdown ---


def test_withdraw_after_deadline(deployed) -> None:
    assert deployed.public_sale_mint(ALICE, 3).ok
    assert deployed.withdraw(DEPLOYER).reason == "Refund period not over"

    contract_balance = deployed.get_balance(deployed.contract.address)
    owner_before = deployed.get_balance(DEPLOYER)
    end = deployed.call("getRefundGuaranteeEndTime")
    _simulate_next_block_time(deployed, end, +1)

    assert deployed.withdraw(BOB).reason == "Ownable: caller is not the owner"
    assert deployed.withdraw(DEPLOYER).ok
    assert deployed.get_balance(deployed.contract.address) == 0
    assert deployed.get_balance(DEPLOYER) == owner_before + contract_balance


def test_toggle_refund_countdown_at_deadline(deployed) -> None:
    end = deployed.call("getRefundGuaranteeEndTime")
    deployed.set_next_block_timestamp(end)

    assert deployed.toggle_refund_countdown(DEPLOYER).ok
    assert deployed.call("getRefundGuaranteeEndTime") == end + 45 * SECONDS_PER_DAY


def test_countdown_reopens_refunds(deployed) -> None:
    assert deployed.public_sale_mint(ALICE, 1).ok
    end = deployed.call("getRefundGuaranteeEndTime")
    _simulate_next_block_time(deployed, end, +100)
    assert deployed.refund(ALICE, [0]).reason == "Refund expired"

    assert deployed.toggle_refund_countdown(DEPLOYER).ok
    assert deployed.refund(ALICE, [0]).ok


# --- simulator behavior ---


def test_deploy_sets_refund_window(chain) -> None:
    receipt = chain.deploy(DEPLOYER)
    assert receipt.ok
    assert chain.call("getRefundGuaranteeEndTime") == receipt.timestamp + REFUND_PERIOD
    assert chain.deploy(DEPLOYER).error.code == ErrorCode.CONTRACT_EXISTS


def test_each_tx_mines_a_block(chain) -> None:
    start_block, start_time = chain.block_number, chain.timestamp
    chain.deploy(DEPLOYER)
    reverted = chain.public_sale_mint(ALICE, 1)

    assert not reverted.ok
    assert chain.block_number == start_block + 2
    assert chain.timestamp == start_time + 2
    assert [r.block_number for r in chain.receipts] == [start_block + 1, start_block + 2]


def test_reverted_tx_leaves_balances(deployed) -> None:
    before = deployed.get_balance(ALICE)
    receipt = deployed.public_sale_mint(ALICE, 1, value=MINT_PRICE - 1)
    assert receipt.reason == "Not enough eth sent"
    assert deployed.get_balance(ALICE) == before
    with pytest.raises(SpecError):
        receipt.raise_for_revert()


def test_timestamp_must_advance(chain) -> None:
    with pytest.raises(SpecError) as exc:
        chain.set_next_block_timestamp(chain.timestamp)
    assert exc.value.code == ErrorCode.TIMESTAMP_TOO_OLD


def test_increase_time(chain) -> None:
    start = chain.timestamp
    chain.increase_time(3600)
    chain.mine()
    assert chain.timestamp == start + 3600


def test_snapshot_revert(deployed) -> None:
    snap = deployed.snapshot()
    assert deployed.public_sale_mint(ALICE, 2).ok
    assert deployed.call("totalSupply") == 2

    deployed.revert(snap)
    assert deployed.call("totalSupply") == 0
    with pytest.raises(SpecError) as exc:
        deployed.revert(snap)
    assert exc.value.code == ErrorCode.SNAPSHOT_NOT_FOUND


def test_unknown_view(deployed) -> None:
    with pytest.raises(SpecError):
        deployed.call("tokenURI", 0)


def test_custom_genesis() -> None:
    chain = ChainSimulator(SimulatorConfig(genesis_timestamp=42, initial_balance=parse_ether("1")))
    assert chain.timestamp == 42
    assert chain.get_balance(ALICE) == parse_ether("1")
    with pytest.raises(SpecError):
        chain.contract
