"""
Unit Tests for allowlist Merkle proofs
"""

import pytest
from eth_utils import keccak, to_canonical_address

from conftest import OTHER_WALLET, WALLET

from mintkit.infrastructure.allowlist.merkle import (
    MerkleTree,
    allowlist_leaf,
    process_proof,
    verify_proof,
)

THIRD_WALLET = "0x" + "77" * 20


def test_leaf_packs_address_and_uint32():
    expected = keccak(to_canonical_address(WALLET) + (5).to_bytes(4, "big"))
    assert allowlist_leaf(WALLET, 5) == expected


def test_leaf_rejects_out_of_range_index():
    with pytest.raises(ValueError):
        allowlist_leaf(WALLET, 2 ** 32)


def test_single_leaf_tree():
    leaf = allowlist_leaf(WALLET, 0)
    tree = MerkleTree([leaf])
    assert tree.root == leaf
    assert tree.proof(0) == []
    assert verify_proof(tree.root_hex, WALLET, 0, [])


@pytest.mark.parametrize("position", [0, 1, 2])
def test_odd_tree_proofs_verify(position):
    slots = [(WALLET, 0), (OTHER_WALLET, 1), (THIRD_WALLET, 2)]
    tree = MerkleTree([allowlist_leaf(w, i) for w, i in slots])
    wallet, index = slots[position]
    assert verify_proof(tree.root_hex, wallet, index, tree.proof_hex(position))


def test_proof_for_other_slot_fails():
    tree = MerkleTree([allowlist_leaf(WALLET, 0), allowlist_leaf(OTHER_WALLET, 1)])
    assert not verify_proof(tree.root_hex, WALLET, 1, tree.proof_hex(1))
    assert not verify_proof(tree.root_hex, OTHER_WALLET, 0, tree.proof_hex(0))


def test_malformed_nodes_fail_verification():
    tree = MerkleTree([allowlist_leaf(WALLET, 0), allowlist_leaf(OTHER_WALLET, 1)])
    assert not verify_proof(tree.root_hex, WALLET, 0, ["0x1234"])
    assert not verify_proof("0xdead", WALLET, 0, tree.proof_hex(0))


def test_process_proof_is_order_independent_per_pair():
    a, b = allowlist_leaf(WALLET, 0), allowlist_leaf(OTHER_WALLET, 1)
    assert process_proof(a, ["0x" + b.hex()]) == process_proof(b, ["0x" + a.hex()])


def test_empty_tree_rejected():
    with pytest.raises(ValueError):
        MerkleTree([])
