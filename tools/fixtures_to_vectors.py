#!/usr/bin/env python3
"""Convert spec fixtures into client-consumable YAML vectors.

State cases become runnable vectors carrying the expected revert reason,
numeric error code and post-state digest. Plain `test_vectors` files are
re-emitted as YAML unchanged.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

import yaml

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "src"))

from erc721r_spec.errors import ErrorCode  # noqa: E402
from erc721r_spec.state_digest import compute_state_digest  # noqa: E402


class VectorDumper(yaml.SafeDumper):
    """Safe dumper that keeps long hex values on one line."""


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    return dumper.represent_scalar("tag:yaml.org,2002:str", data, style=None)


VectorDumper.add_representer(str, _represent_str)


def dump_vectors(data: dict[str, Any]) -> str:
    # Keep field order: name, pre_state, input, expected.
    return yaml.dump(data, Dumper=VectorDumper, sort_keys=False, width=4096)


def _map_error_code(name: str | None) -> int:
    if not name:
        return int(ErrorCode.SUCCESS)
    try:
        return int(ErrorCode[name])
    except KeyError:
        return int(ErrorCode.UNKNOWN)


def case_to_vector(case: dict[str, Any]) -> dict[str, Any]:
    expected = case.get("expected", {})
    post_state = expected.get("post_state")
    return {
        "name": case.get("name", ""),
        "description": case.get("description", ""),
        "pre_state": case.get("pre_state"),
        "input": {"kind": "tx", "tx": case.get("tx")},
        "expected": {
            "success": bool(expected.get("ok", False)),
            "error_code": _map_error_code(expected.get("error")),
            "reason": expected.get("reason"),
            "state_digest": compute_state_digest(post_state) if post_state else "",
            "post_state": post_state,
        },
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Convert fixtures to vectors")
    parser.add_argument("--fixtures", default=str(ROOT / "fixtures"))
    parser.add_argument("--vectors", default=str(ROOT / "vectors"))
    args = parser.parse_args()

    fixtures = Path(args.fixtures).resolve()
    vectors = Path(args.vectors).resolve()

    if not fixtures.exists():
        raise SystemExit(f"fixtures dir not found: {fixtures}")

    count = 0
    for path in sorted(fixtures.rglob("*.json")):
        rel = path.relative_to(fixtures)
        dest = (vectors / rel).with_suffix(".yaml")
        dest.parent.mkdir(parents=True, exist_ok=True)

        data = json.loads(path.read_text())
        if isinstance(data, dict) and isinstance(data.get("cases"), list):
            data = {"test_vectors": [case_to_vector(c) for c in data["cases"]]}
        dest.write_text(dump_vectors(data))
        count += 1

    print(f"Written {count} vector files into {vectors}")


if __name__ == "__main__":
    main()
