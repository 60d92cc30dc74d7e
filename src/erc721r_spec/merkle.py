"""Allow-list Merkle tree (sorted-pair keccak).

Canonical rules, matching `merkletreejs` with `sortPairs: true` and the
OpenZeppelin `MerkleProof.verify` the contract runs:

1. Leaves are used as given (already hashed), order preserved.
2. Parent = keccak256(min(a, b) || max(a, b)).
3. Odd layer: the last node is promoted unchanged, it is not duplicated.
4. Single leaf: root = leaf, proof = [].
5. Empty leaf set: no root, building raises EMPTY_TREE.

Proofs carry no left/right markers; sorting each pair makes them unnecessary.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from eth_utils import decode_hex, encode_hex

from .config import HASH_SIZE
from .crypto.hash_algorithms import AddressLike, address_leaf, hash_pair
from .errors import ErrorCode, SpecError


class MerkleTree:
    """Immutable Merkle tree over pre-hashed 32-byte leaves."""

    def __init__(self, leaves: Sequence[bytes]):
        if len(leaves) == 0:
            raise SpecError(ErrorCode.EMPTY_TREE, "cannot build a tree from an empty leaf set")
        for leaf in leaves:
            if len(leaf) != HASH_SIZE:
                raise SpecError(ErrorCode.INVALID_FORMAT, f"leaf must be {HASH_SIZE} bytes, got {len(leaf)}")

        self._layers: list[list[bytes]] = [list(leaves)]
        while len(self._layers[-1]) > 1:
            nodes = self._layers[-1]
            parents: list[bytes] = []
            for i in range(0, len(nodes), 2):
                if i + 1 == len(nodes):
                    parents.append(nodes[i])
                else:
                    parents.append(hash_pair(nodes[i], nodes[i + 1]))
            self._layers.append(parents)

    @property
    def leaves(self) -> list[bytes]:
        return list(self._layers[0])

    @property
    def root(self) -> bytes:
        return self._layers[-1][0]

    @property
    def depth(self) -> int:
        return len(self._layers) - 1

    def hex_root(self) -> str:
        return encode_hex(self.root)

    def proof(self, leaf: bytes) -> list[bytes]:
        try:
            index = self._layers[0].index(leaf)
        except ValueError:
            raise SpecError(ErrorCode.LEAF_NOT_FOUND, "leaf not found") from None

        siblings: list[bytes] = []
        for layer in self._layers[:-1]:
            pair_index = index - 1 if index % 2 else index + 1
            # A promoted node has no sibling at this level.
            if pair_index < len(layer):
                siblings.append(layer[pair_index])
            index //= 2
        return siblings

    def hex_proof(self, leaf: bytes) -> list[str]:
        return [encode_hex(s) for s in self.proof(leaf)]

    def __contains__(self, leaf: object) -> bool:
        return leaf in self._layers[0]

    def __len__(self) -> int:
        return len(self._layers[0])


def get_tree(elements: Sequence[bytes]) -> tuple[MerkleTree, bytes]:
    """Build a tree and return it with its root."""
    tree = MerkleTree(elements)
    return tree, tree.root


def get_proof(tree: MerkleTree, leaf: bytes) -> list[bytes]:
    return tree.proof(leaf)


def process_proof(proof: Iterable[bytes], leaf: bytes) -> bytes:
    computed = leaf
    for sibling in proof:
        computed = hash_pair(computed, sibling)
    return computed


def verify_proof(proof: Iterable[bytes], root: bytes, leaf: bytes) -> bool:
    try:
        return process_proof(proof, leaf) == root
    except SpecError:
        return False


def build_allow_list(addresses: Iterable[AddressLike]) -> MerkleTree:
    """Tree whose leaves are keccak256 of each allow-listed address."""
    return MerkleTree([address_leaf(a) for a in addresses])


def proof_for_address(tree: MerkleTree, address: AddressLike) -> list[bytes]:
    return tree.proof(address_leaf(address))


def hex_to_node(value: str) -> bytes:
    node = decode_hex(value)
    if len(node) != HASH_SIZE:
        raise SpecError(ErrorCode.INVALID_FORMAT, f"expected {HASH_SIZE}-byte hex value, got {len(node)}")
    return node
