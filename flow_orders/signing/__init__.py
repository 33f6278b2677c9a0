"""Plain and bulk order signing, and signature verification."""

from .signer import OrderSigner
from .merkle import OrderMerkleTree, compute_root, tree_height
from .bulk import BulkSignatureResult, BulkSignatureTreeBuilder, pack_bulk_signature
from .verifier import (
    SignatureVerifier,
    is_bulk_signature,
    parse_bulk_signature,
    to_compact_signature,
    expand_compact_signature,
)

__all__ = [
    "OrderSigner",
    "OrderMerkleTree",
    "compute_root",
    "tree_height",
    "BulkSignatureResult",
    "BulkSignatureTreeBuilder",
    "pack_bulk_signature",
    "SignatureVerifier",
    "is_bulk_signature",
    "parse_bulk_signature",
    "to_compact_signature",
    "expand_compact_signature",
]
