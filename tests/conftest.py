"""Pytest hooks to generate fixtures (EEST-style) and shared chain fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from erc721r_spec.config import SimulatorConfig
from erc721r_spec.simulator import ChainSimulator
from erc721r_spec.state_digest import compute_state_digest
from erc721r_spec.state_transition import TransitionResult, apply_tx
from erc721r_spec.test_accounts import DEPLOYER
from erc721r_spec.types import ChainState, Transaction
from tools.fixtures_io import state_to_json, tx_to_json

_STATE_CASES: dict[str, list[dict[str, Any]]] = {}
_VECTOR_CASES: dict[str, list[dict[str, Any]]] = {}


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--output",
        action="store",
        default=None,
        help="Output directory for generated fixtures",
    )


@pytest.fixture
def state_test_group() -> Callable[
    [str, str, ChainState, Transaction], tuple[ChainState, TransitionResult]
]:
    """Run a state transition case, record it under a fixture path, return the outcome."""

    def _state_test_group(
        rel_path: str, name: str, pre_state: ChainState, tx: Transaction
    ) -> tuple[ChainState, TransitionResult]:
        pre_json = state_to_json(pre_state)
        post_state, result = apply_tx(pre_state, tx)
        post_json = state_to_json(post_state)
        _STATE_CASES.setdefault(rel_path, []).append(
            {
                "name": name,
                "pre_state": pre_json,
                "tx": tx_to_json(tx),
                "expected": {
                    "ok": result.ok,
                    "error": result.error.code.name if result.error else None,
                    "reason": result.reason,
                    "state_digest": compute_state_digest(post_json),
                    "post_state": post_json,
                },
            }
        )
        return post_state, result

    return _state_test_group


@pytest.fixture
def vector_test_group() -> Callable[[str, dict[str, Any]], None]:
    """Collect pre-built test_vectors under a specific fixture path."""

    def _vector_test_group(rel_path: str, vector: dict[str, Any]) -> None:
        _VECTOR_CASES.setdefault(rel_path, []).append(vector)

    return _vector_test_group


@pytest.fixture
def chain() -> ChainSimulator:
    """A fresh simulator with funded test accounts and nothing deployed."""
    return ChainSimulator(SimulatorConfig())


@pytest.fixture
def deployed(chain: ChainSimulator) -> ChainSimulator:
    """Contract deployed by DEPLOYER with the public sale switched on."""
    chain.deploy(DEPLOYER).raise_for_revert()
    assert chain.call("publicSaleActive") is False
    chain.toggle_public_sale_status(DEPLOYER).raise_for_revert()
    assert chain.call("publicSaleActive") is True
    return chain


def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:
    output_dir = session.config.getoption("--output")
    if not output_dir:
        return

    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    for rel_path, cases in _STATE_CASES.items():
        if not cases:
            continue
        target = out / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps({"cases": cases}, indent=2))

    for rel_path, vectors in _VECTOR_CASES.items():
        if not vectors:
            continue
        target = out / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps({"test_vectors": vectors}, indent=2))
