"""
Position-preserving Merkle tree for bulk order signatures.

Nodes live in one array in heap order: index 1 is the root, the children of
node ``k`` are ``2k`` (left) and ``2k + 1`` (right), and the leaves occupy
``[size, 2 * size)``. Pairs are hashed as ``keccak(left || right)`` without
sorting, so a proof doubles as a left/right path given by the leaf index.
"""

from typing import Sequence

from eth_utils import keccak

from ..exceptions import ValidationError


def tree_height(leaf_count: int) -> int:
    """Levels needed for ``leaf_count`` leaves: max(ceil(log2(n)), 1)."""
    if leaf_count < 1:
        raise ValidationError("Cannot build a tree without leaves")
    return max((leaf_count - 1).bit_length(), 1)


def hash_pair(left: bytes, right: bytes) -> bytes:
    return keccak(left + right)


class OrderMerkleTree:
    """Perfect binary tree over order content hashes."""

    def __init__(self, leaves: Sequence[bytes], default_leaf: bytes):
        """
        Build the tree.

        Args:
            leaves: Leaf hashes in signing order
            default_leaf: Hash used to pad up to the next power of two
        """
        self.leaf_count = len(leaves)
        self.height = tree_height(self.leaf_count)
        self.size = 1 << self.height

        nodes = [b""] * (2 * self.size)
        padded = list(leaves) + [default_leaf] * (self.size - self.leaf_count)
        nodes[self.size:] = padded
        for index in range(self.size - 1, 0, -1):
            nodes[index] = hash_pair(nodes[2 * index], nodes[2 * index + 1])
        self._nodes = nodes

    @property
    def root(self) -> bytes:
        return self._nodes[1]

    def leaf(self, index: int) -> bytes:
        self._check_index(index)
        return self._nodes[self.size + index]

    def proof(self, index: int) -> list[bytes]:
        """
        Sibling hashes from leaf ``index`` up to (excluding) the root.

        Padding leaves are addressable too, which keeps every proof exactly
        ``height`` long.
        """
        self._check_index(index)
        proof = []
        node = self.size + index
        while node > 1:
            proof.append(self._nodes[node ^ 1])
            node >>= 1
        return proof

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.size:
            raise ValidationError(f"Leaf index {index} outside tree of size {self.size}")


def compute_root(leaf: bytes, index: int, proof: Sequence[bytes]) -> bytes:
    """
    Walk a proof from ``leaf`` to the root.

    Bit ``i`` of ``index`` tells whether the node at level ``i`` is a left (0)
    or right (1) child.
    """
    node = leaf
    for level, sibling in enumerate(proof):
        if (index >> level) & 1 == 0:
            node = hash_pair(node, sibling)
        else:
            node = hash_pair(sibling, node)
    return node
