"""Consume fixtures and validate against Python specs."""

from __future__ import annotations

import json
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "src"))
sys.path.insert(0, str(ROOT / "tools"))

from erc721r_spec.state_digest import compute_state_digest  # noqa: E402
from erc721r_spec.state_transition import apply_tx  # noqa: E402
from fixtures_io import state_from_json, state_to_json, tx_from_json  # noqa: E402


def check_state_cases(path: Path) -> list[str]:
    failures: list[str] = []
    data = json.loads(path.read_text())

    for case in data.get("cases", []):
        pre_state = state_from_json(case["pre_state"])
        tx = tx_from_json(case["tx"])
        post_state, result = apply_tx(pre_state, tx)

        expected = case["expected"]
        if result.ok != expected["ok"]:
            failures.append(f"{case['name']}: ok_mismatch")
            continue

        actual_err = result.error.code.name if result.error else None
        if actual_err != expected["error"]:
            failures.append(f"{case['name']}: error_mismatch")
            continue

        if result.reason != expected.get("reason"):
            failures.append(f"{case['name']}: reason_mismatch")
            continue

        digest = compute_state_digest(state_to_json(post_state))
        if digest != expected["state_digest"]:
            failures.append(f"{case['name']}: state_digest_mismatch")

    return failures


def main() -> None:
    fixtures = ROOT / "fixtures"
    if len(sys.argv) > 1:
        fixtures = Path(sys.argv[1])

    failures: list[str] = []
    checked = 0
    for path in sorted(fixtures.rglob("*.json")):
        data = json.loads(path.read_text())
        if "cases" not in data:
            continue
        checked += len(data["cases"])
        failures.extend(check_state_cases(path))

    if failures:
        for f in failures:
            print("FAIL", f)
        raise SystemExit(1)

    print(f"All fixtures passed ({checked} cases)")


if __name__ == "__main__":
    main()
