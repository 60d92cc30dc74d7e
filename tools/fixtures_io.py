"""Helpers to serialize/deserialize minimal fixtures for ERC721R specs."""

from __future__ import annotations

from typing import Any

from erc721r_spec.types import (
    AccountState,
    ChainState,
    ContractState,
    Transaction,
    TransactionType,
)


def _hex_to_bytes(v: str) -> bytes:
    return bytes.fromhex(v[2:] if v.startswith(("0x", "0X")) else v)


def _bytes_to_hex(v: bytes) -> str:
    return "0x" + v.hex()


_CONTRACT_SCALARS = (
    "public_sale_active",
    "presale_active",
    "refund_end_time",
    "mint_price",
    "presale_price",
    "max_mint_supply",
    "max_user_mint_amount",
    "refund_period",
    "next_token_id",
)


def _contract_to_json(c: ContractState) -> dict[str, Any]:
    out: dict[str, Any] = {
        "address": _bytes_to_hex(c.address),
        "owner": _bytes_to_hex(c.owner),
        "refund_address": _bytes_to_hex(c.refund_address),
        "merkle_root": _bytes_to_hex(c.merkle_root),
    }
    for name in _CONTRACT_SCALARS:
        out[name] = getattr(c, name)
    out["tokens"] = [
        {
            "id": token_id,
            "owner": _bytes_to_hex(owner),
            "refunded": c.has_refunded.get(token_id, False),
            "owner_mint": c.is_owner_mint.get(token_id, False),
        }
        for token_id, owner in sorted(c.token_owners.items())
    ]
    out["number_minted"] = [
        {"address": _bytes_to_hex(addr), "count": count}
        for addr, count in sorted(c.number_minted.items())
    ]
    return out


def state_to_json(state: ChainState) -> dict[str, Any]:
    result: dict[str, Any] = {
        "global_state": {
            "block_number": state.global_state.block_number,
            "timestamp": state.global_state.timestamp,
        },
        "accounts": [
            {
                "address": _bytes_to_hex(a.address),
                "balance": a.balance,
                "nonce": a.nonce,
            }
            for a in state.accounts.values()
        ],
    }
    if state.contract is not None:
        result["contract"] = _contract_to_json(state.contract)
    return result


def _contract_from_json(data: dict[str, Any]) -> ContractState:
    c = ContractState(
        address=_hex_to_bytes(data["address"]),
        owner=_hex_to_bytes(data["owner"]),
        refund_address=_hex_to_bytes(data["refund_address"]),
        refund_end_time=data.get("refund_end_time", 0),
        merkle_root=_hex_to_bytes(data.get("merkle_root", "00" * 32)),
    )
    for name in _CONTRACT_SCALARS:
        if name in data:
            setattr(c, name, data[name])
    for tok in data.get("tokens", []):
        token_id = tok["id"]
        c.token_owners[token_id] = _hex_to_bytes(tok["owner"])
        if tok.get("refunded"):
            c.has_refunded[token_id] = True
        if tok.get("owner_mint"):
            c.is_owner_mint[token_id] = True
    for m in data.get("number_minted", []):
        c.number_minted[_hex_to_bytes(m["address"])] = m["count"]
    return c


def state_from_json(data: dict[str, Any]) -> ChainState:
    state = ChainState()
    gs = data.get("global_state", {})
    state.global_state.block_number = gs.get("block_number", 0)
    state.global_state.timestamp = gs.get("timestamp", 0)

    for a in data.get("accounts", []):
        acct = AccountState(
            address=_hex_to_bytes(a["address"]),
            balance=a.get("balance", 0),
            nonce=a.get("nonce", 0),
        )
        state.accounts[acct.address] = acct

    if data.get("contract"):
        state.contract = _contract_from_json(data["contract"])
    return state


def _payload_to_json(payload: Any) -> Any:
    """Recursively convert a payload value, turning bytes into hex strings."""
    if payload is None:
        return None
    if isinstance(payload, (bytes, bytearray)):
        return _bytes_to_hex(bytes(payload))
    if isinstance(payload, dict):
        return {k: _payload_to_json(v) for k, v in payload.items()}
    if isinstance(payload, (list, tuple)):
        return [_payload_to_json(item) for item in payload]
    return payload


def tx_to_json(tx: Transaction) -> dict[str, Any]:
    return {
        "source": _bytes_to_hex(tx.source),
        "tx_type": tx.tx_type.value,
        "payload": _payload_to_json(tx.payload),
        "value": tx.value,
    }


_BYTES_FIELDS: set[str] = {
    "address", "from", "to", "root", "proof",
}


def _json_to_bytes_payload(payload: Any, key: str = "") -> Any:
    """Recursively convert hex string fields to bytes in a JSON payload."""
    if payload is None:
        return None
    if isinstance(payload, dict):
        return {k: _json_to_bytes_payload(v, k) for k, v in payload.items()}
    if isinstance(payload, list):
        return [_json_to_bytes_payload(item, key) for item in payload]
    if key in _BYTES_FIELDS and isinstance(payload, str):
        return _hex_to_bytes(payload)
    return payload


def tx_from_json(data: dict[str, Any]) -> Transaction:
    return Transaction(
        source=_hex_to_bytes(data["source"]),
        tx_type=TransactionType(data["tx_type"]),
        payload=_json_to_bytes_payload(data.get("payload") or {}),
        value=data.get("value", 0),
    )
