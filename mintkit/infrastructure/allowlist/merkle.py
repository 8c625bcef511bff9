"""Allowlist Merkle proofs.

Uses keccak-256 with sorted-pair hashing, matching the on-chain
``MerkleProof.verify`` used by the claim extensions. An allowlist leaf is
``keccak256(abi.encodePacked(address minter, uint32 mintIndex))``.

The tree builder exists so tests and tooling can produce roots and proofs
the contracts would accept.
"""

from __future__ import annotations

from typing import List, Sequence

from eth_utils import keccak, to_canonical_address

from mintkit.infrastructure.chain.encoding import to_bytes32


def allowlist_leaf(wallet: str, mint_index: int) -> bytes:
    """Leaf hash for one (wallet, index) allowlist slot."""
    if not 0 <= mint_index < 2**32:
        raise ValueError(f"Mint index out of uint32 range: {mint_index}")
    return keccak(to_canonical_address(wallet) + mint_index.to_bytes(4, "big"))


def _hash_pair(left: bytes, right: bytes) -> bytes:
    return keccak(left + right) if left <= right else keccak(right + left)


def process_proof(leaf: bytes, proof: Sequence[str]) -> bytes:
    computed = leaf
    for node in proof:
        computed = _hash_pair(computed, to_bytes32(node))
    return computed


def verify_proof(root: str, wallet: str, mint_index: int, proof: Sequence[str]) -> bool:
    """True when ``proof`` links the wallet's leaf to ``root``.

    Malformed proof nodes or roots are treated as a failed verification.
    """
    try:
        expected = to_bytes32(root)
        computed = process_proof(allowlist_leaf(wallet, mint_index), proof)
    except ValueError:
        return False
    return computed == expected


class MerkleTree:
    """Sorted-pair keccak tree over allowlist leaves.

    Usage:
        tree = MerkleTree([allowlist_leaf(addr, 0), allowlist_leaf(addr, 1)])
        root = tree.root_hex
        proof = tree.proof_hex(0)
    """

    def __init__(self, leaves: Sequence[bytes]):
        if not leaves:
            raise ValueError("Merkle tree needs at least one leaf")
        self._levels: List[List[bytes]] = [list(leaves)]
        level = list(leaves)
        while len(level) > 1:
            parents: List[bytes] = []
            for i in range(0, len(level), 2):
                if i + 1 < len(level):
                    parents.append(_hash_pair(level[i], level[i + 1]))
                else:
                    # odd node is promoted unchanged
                    parents.append(level[i])
            self._levels.append(parents)
            level = parents

    @property
    def root(self) -> bytes:
        return self._levels[-1][0]

    @property
    def root_hex(self) -> str:
        return "0x" + self.root.hex()

    def proof(self, position: int) -> List[bytes]:
        if not 0 <= position < len(self._levels[0]):
            raise IndexError(position)
        path: List[bytes] = []
        idx = position
        for level in self._levels[:-1]:
            sibling = idx + 1 if idx % 2 == 0 else idx - 1
            if sibling < len(level):
                path.append(level[sibling])
            idx //= 2
        return path

    def proof_hex(self, position: int) -> List[str]:
        return ["0x" + node.hex() for node in self.proof(position)]
