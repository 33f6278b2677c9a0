"""
Bulk order signatures.

One signature authorizes a whole batch: the orders' content hashes form a
perfect Merkle tree, the signer signs the EIP-712 ``BulkOrder`` struct whose
tree member encodes to that root, and every order carries
``signature || leaf index (3 bytes) || proof`` as its own ``sig``.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from eth_abi import encode
from eth_utils import to_hex

from ..config import MAX_BULK_TREE_HEIGHT
from ..eip712.hasher import StructuredHasher
from ..exceptions import ValidationError
from ..models import SignedOBOrder
from .merkle import OrderMerkleTree, tree_height
from .signer import OrderSigner

logger = logging.getLogger(__name__)


LEAF_INDEX_BYTES = 3


@dataclass
class BulkSignatureResult:
    """Outcome of one bulk signing call."""

    orders: list[SignedOBOrder]
    root: bytes
    height: int
    signature: bytes = field(repr=False)


def pack_bulk_signature(signature: bytes, index: int, proof: Sequence[bytes]) -> bytes:
    """Serialize ``signature || index (3 bytes, big-endian) || proof``."""
    return (
        signature
        + index.to_bytes(LEAF_INDEX_BYTES, "big")
        + encode([f"bytes32[{len(proof)}]"], [list(proof)])
    )


class BulkSignatureTreeBuilder:
    """
    Builds bulk signature trees and splices proofs into orders.

    Each call owns its tree; nothing survives between calls.
    """

    def __init__(
        self,
        hasher: Optional[StructuredHasher] = None,
        max_height: int = MAX_BULK_TREE_HEIGHT
    ):
        """
        Initialize builder.

        Args:
            hasher: EIP-712 hasher (must match the signer's domain)
            max_height: Largest tree the on-chain verifier accepts
        """
        self.hasher = hasher or StructuredHasher()
        self.max_height = max_height

    def build_tree(self, orders: Sequence[SignedOBOrder]) -> OrderMerkleTree:
        """
        Build the Merkle tree over the orders' content hashes.

        Raises:
            ValidationError: If the batch is empty or too large
        """
        if not orders:
            raise ValidationError("Bulk signing requires at least one order")

        height = tree_height(len(orders))
        if height > self.max_height:
            raise ValidationError(
                f"Batch of {len(orders)} orders needs height {height}, "
                f"maximum is {self.max_height}"
            )

        leaves = [self.hasher.order_content_hash(order) for order in orders]
        return OrderMerkleTree(leaves, self.hasher.default_leaf_hash())

    def sign(
        self,
        orders: Sequence[SignedOBOrder],
        signer: OrderSigner,
        chain_id: int,
        verifying_contract: str
    ) -> BulkSignatureResult:
        """
        Sign a finalized batch with one signature.

        Args:
            orders: Orders in wire form; existing signatures are stripped
            signer: Signer whose address every order declares
            chain_id: Chain ID of the domain
            verifying_contract: Complication contract address

        Returns:
            BulkSignatureResult with one signed copy per input order

        Raises:
            ValidationError: If the batch is empty or too large
            SigningFailedError: If signing fails or an order names another signer
        """
        unsigned = [order.without_signature() for order in orders]
        for order in unsigned:
            signer.ensure_signer(order.signer)

        tree = self.build_tree(unsigned)
        bulk_hash = self.hasher.bulk_order_hash(tree.root, tree.height)
        signature = signer.sign_digest_parts(
            self.hasher.domain_separator(chain_id, verifying_contract),
            bulk_hash
        )

        signed = [
            order.with_signature(to_hex(pack_bulk_signature(signature, i, tree.proof(i))))
            for i, order in enumerate(unsigned)
        ]

        logger.info(
            f"Bulk signed {len(signed)} orders "
            f"(height={tree.height}, root={to_hex(tree.root)})"
        )
        return BulkSignatureResult(
            orders=signed,
            root=tree.root,
            height=tree.height,
            signature=signature,
        )
