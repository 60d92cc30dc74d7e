#!/usr/bin/env python3
"""Fill fixtures: run the spec test suite with fixture output switched on.

    python tools/fill.py [OUTPUT_DIR] [-- PYTEST_ARGS...]

OUTPUT_DIR defaults to fixtures/. Arguments after `--` go to pytest, e.g.
`-- -k refund` to fill only the refund cases.
"""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent


def split_args(argv: list[str]) -> tuple[Path, list[str]]:
    """Split argv into the output directory and the pass-through pytest args."""
    if "--" in argv:
        idx = argv.index("--")
        own, extra = argv[:idx], argv[idx + 1:]
    else:
        own, extra = argv, []
    if len(own) > 1:
        raise SystemExit("usage: fill.py [OUTPUT_DIR] [-- PYTEST_ARGS...]")
    output = Path(own[0]) if own else ROOT / "fixtures"
    return output.resolve(), extra


def build_command(output: Path, extra: list[str]) -> list[str]:
    return [
        sys.executable,
        "-m",
        "pytest",
        str(ROOT / "tests"),
        "-q",
        "--output",
        str(output),
        *extra,
    ]


def main(argv: list[str] | None = None) -> int:
    output, extra = split_args(sys.argv[1:] if argv is None else argv)

    env = dict(os.environ)
    paths = [str(ROOT / "src"), str(ROOT)]
    if env.get("PYTHONPATH"):
        paths.append(env["PYTHONPATH"])
    env["PYTHONPATH"] = os.pathsep.join(paths)

    cmd = build_command(output, extra)
    print(f"Filling {output}:", " ".join(cmd))
    return subprocess.call(cmd, env=env, cwd=str(ROOT))


if __name__ == "__main__":
    raise SystemExit(main())
