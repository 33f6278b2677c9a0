"""Tests for the bulk signature Merkle tree."""

import pytest
from eth_utils import keccak

from ..exceptions import ValidationError
from ..signing.merkle import OrderMerkleTree, compute_root, hash_pair, tree_height

DEFAULT = keccak(b"default")


def _leaves(n):
    return [keccak(i.to_bytes(4, "big")) for i in range(n)]


@pytest.mark.parametrize("count,height", [(1, 1), (2, 1), (3, 2), (4, 2), (5, 3), (8, 3), (9, 4)])
def test_tree_height(count, height):
    assert tree_height(count) == height


def test_tree_height_rejects_empty():
    with pytest.raises(ValidationError):
        tree_height(0)


def test_two_leaf_root():
    a, b = _leaves(2)
    assert OrderMerkleTree([a, b], DEFAULT).root == keccak(a + b)


def test_single_leaf_padded():
    (a,) = _leaves(1)
    tree = OrderMerkleTree([a], DEFAULT)

    assert tree.size == 2
    assert tree.root == hash_pair(a, DEFAULT)
    assert tree.proof(0) == [DEFAULT]


def test_three_leaves_padded_to_four():
    a, b, c = _leaves(3)
    tree = OrderMerkleTree([a, b, c], DEFAULT)

    assert tree.height == 2
    assert tree.leaf(3) == DEFAULT
    assert tree.proof(2)[0] == DEFAULT
    assert tree.root == hash_pair(hash_pair(a, b), hash_pair(c, DEFAULT))


@pytest.mark.parametrize("count", [1, 2, 3, 5, 8, 13])
def test_every_proof_reaches_root(count):
    leaves = _leaves(count)
    tree = OrderMerkleTree(leaves, DEFAULT)

    for index, leaf in enumerate(leaves):
        proof = tree.proof(index)
        assert len(proof) == tree.height
        assert compute_root(leaf, index, proof) == tree.root


def test_pairing_is_positional():
    """Swapping two leaves changes the root."""
    a, b = _leaves(2)
    assert OrderMerkleTree([a, b], DEFAULT).root != OrderMerkleTree([b, a], DEFAULT).root


def test_wrong_index_misses_root():
    leaves = _leaves(4)
    tree = OrderMerkleTree(leaves, DEFAULT)
    assert compute_root(leaves[0], 1, tree.proof(0)) != tree.root


def test_index_out_of_range():
    tree = OrderMerkleTree(_leaves(3), DEFAULT)
    with pytest.raises(ValidationError):
        tree.proof(4)
    with pytest.raises(ValidationError):
        tree.leaf(-1)
