"""Hash algorithm assignments for the ERC721R spec."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from eth_utils import is_address, keccak, to_canonical_address, to_checksum_address

from ..config import ADDRESS_SIZE, HASH_SIZE
from ..errors import ErrorCode, SpecError

AddressLike = Union[bytes, str]


@dataclass(frozen=True)
class HashAssignment:
    purpose: str
    algorithm: str
    output_size: int
    input_spec: str


ASSIGNMENTS = [
    HashAssignment("allow_list_leaf", "KECCAK-256", 32, "20-byte address (abi.encodePacked)"),
    HashAssignment("merkle_node", "KECCAK-256", 32, "min(a, b) || max(a, b)"),
    HashAssignment("contract_address", "KECCAK-256", 20, "deployer || nonce_u64_be, last 20 bytes"),
    HashAssignment("state_digest", "BLAKE3", 32, "canonical post_state encoding"),
]


def keccak256(data: bytes) -> bytes:
    return keccak(data)


def to_address(value: AddressLike) -> bytes:
    """Normalize a hex string or raw bytes to a 20-byte canonical address."""
    if isinstance(value, (bytes, bytearray)):
        if len(value) != ADDRESS_SIZE:
            raise SpecError(ErrorCode.INVALID_ADDRESS, f"address must be {ADDRESS_SIZE} bytes, got {len(value)}")
        return bytes(value)
    if not is_address(value):
        raise SpecError(ErrorCode.INVALID_ADDRESS, f"invalid address: {value!r}")
    return to_canonical_address(value)


def checksum(address: bytes) -> str:
    return to_checksum_address(address)


def address_leaf(address: AddressLike) -> bytes:
    """Allow-list leaf: keccak256(abi.encodePacked(address))."""
    return keccak256(to_address(address))


def hash_pair(a: bytes, b: bytes) -> bytes:
    """Order-independent parent hash (sorted pair)."""
    if len(a) != HASH_SIZE or len(b) != HASH_SIZE:
        raise SpecError(ErrorCode.INVALID_FORMAT, "merkle nodes must be 32 bytes")
    return keccak256(a + b) if a <= b else keccak256(b + a)


def compute_contract_address(deployer: bytes, nonce: int) -> bytes:
    return keccak256(deployer + nonce.to_bytes(8, "big"))[-ADDRESS_SIZE:]
