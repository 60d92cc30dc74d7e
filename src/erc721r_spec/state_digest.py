"""Canonical state digest implementation (v1)."""
from __future__ import annotations

from typing import Any

from blake3 import blake3


def _hex_to_bytes(value: str | None) -> bytes:
    if value is None:
        return b""
    if not isinstance(value, str):
        raise TypeError("hex value must be string")
    v = value[2:] if value.startswith(("0x", "0X")) else value
    if v == "":
        return b""
    return bytes.fromhex(v)


def _u64_be(value: int) -> bytes:
    if value < 0:
        raise ValueError("u64 must be non-negative")
    return int(value).to_bytes(8, "big", signed=False)


def _u256_be(value: int) -> bytes:
    if value < 0:
        raise ValueError("u256 must be non-negative")
    return int(value).to_bytes(32, "big", signed=False)


def _address(value: str) -> bytes:
    addr = _hex_to_bytes(value)
    if len(addr) != 20:
        raise ValueError(f"address must be 20 bytes, got {len(addr)}")
    return addr


def compute_state_digest(post_state: dict[str, Any]) -> str:
    """Compute state digest v1 from post_state.

    Fields are encoded in canonical order and hashed with BLAKE3-256.
    Balances are u256, counters and timestamps u64.
    """
    gs = post_state.get("global_state", {}) if isinstance(post_state, dict) else {}
    buf = bytearray()
    for field in ("block_number", "timestamp"):
        buf += _u64_be(int(gs.get(field, 0)))

    accounts = post_state.get("accounts", []) if isinstance(post_state, dict) else []
    sortable = sorted(((_address(acc.get("address", "")), acc) for acc in accounts), key=lambda x: x[0])
    buf += _u64_be(len(sortable))
    for addr, acc in sortable:
        buf += addr
        buf += _u256_be(int(acc.get("balance", 0)))
        buf += _u64_be(int(acc.get("nonce", 0)))

    contract = post_state.get("contract") if isinstance(post_state, dict) else None
    if not contract:
        buf += b"\x00"
        return blake3(buf).hexdigest()

    buf += b"\x01"
    for field in ("address", "owner", "refund_address"):
        buf += _address(contract[field])
    root = _hex_to_bytes(contract.get("merkle_root"))
    buf += root.rjust(32, b"\x00")
    flags = (1 if contract.get("public_sale_active") else 0) | (2 if contract.get("presale_active") else 0)
    buf += bytes([flags])
    buf += _u64_be(int(contract.get("refund_end_time", 0)))
    for field in ("mint_price", "presale_price"):
        buf += _u256_be(int(contract.get(field, 0)))
    for field in ("max_mint_supply", "max_user_mint_amount", "refund_period", "next_token_id"):
        buf += _u64_be(int(contract.get(field, 0)))

    tokens = sorted(contract.get("tokens", []), key=lambda t: int(t["id"]))
    buf += _u64_be(len(tokens))
    for tok in tokens:
        buf += _u64_be(int(tok["id"]))
        buf += _address(tok["owner"])
        tok_flags = (1 if tok.get("refunded") else 0) | (2 if tok.get("owner_mint") else 0)
        buf += bytes([tok_flags])

    minted = sorted(((_address(m["address"]), int(m["count"])) for m in contract.get("number_minted", [])))
    buf += _u64_be(len(minted))
    for addr, count in minted:
        buf += addr
        buf += _u64_be(count)

    return blake3(buf).hexdigest()
