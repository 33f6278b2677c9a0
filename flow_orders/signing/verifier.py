"""
Order signature verification.

Accepts both plain signatures and bulk signatures. The two are told apart by
length: a bulk signature is ``signature (64 or 65 bytes) || leaf index
(3 bytes) || height * 32 bytes of proof``, which never collides with the
64/65-byte plain form.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from eth_account import Account
from eth_utils import to_checksum_address

from ..eip712.hasher import StructuredHasher
from ..exceptions import MalformedSignatureError, SignatureMismatchError
from ..models import SignedOBOrder
from ..utils.validators import hex_to_bytes
from .bulk import LEAF_INDEX_BYTES
from .merkle import compute_root

logger = logging.getLogger(__name__)


# Shortest bulk signature: 64-byte signature + index + one proof word is 99.
# The on-chain verifier refuses anything from 837 bytes on.
MIN_BULK_SIGNATURE_LENGTH = 99
MAX_BULK_SIGNATURE_LENGTH = 836
BULK_BASE_LENGTH = 64 + LEAF_INDEX_BYTES

SIGNATURE_LENGTH = 65
COMPACT_SIGNATURE_LENGTH = 64

_S_MASK = (1 << 255) - 1


@dataclass(frozen=True)
class BulkSignatureParts:
    """Decoded pieces of a bulk signature."""

    signature: bytes
    index: int
    proof: list[bytes]

    @property
    def height(self) -> int:
        return len(self.proof)


def is_bulk_signature(signature: bytes) -> bool:
    """Length heuristic shared with the on-chain verifier."""
    length = len(signature)
    return (
        MIN_BULK_SIGNATURE_LENGTH <= length <= MAX_BULK_SIGNATURE_LENGTH
        and (length - BULK_BASE_LENGTH) % 32 < 2
    )


def parse_bulk_signature(signature: bytes) -> BulkSignatureParts:
    """
    Split a bulk signature into signature, leaf index and proof.

    Raises:
        MalformedSignatureError: If the blob is not a bulk signature or the
            index does not fit the tree
    """
    if not is_bulk_signature(signature):
        raise MalformedSignatureError(
            f"Not a bulk signature ({len(signature)} bytes)", len(signature)
        )

    sig_length = COMPACT_SIGNATURE_LENGTH + (len(signature) - BULK_BASE_LENGTH) % 32
    index_end = sig_length + LEAF_INDEX_BYTES
    index = int.from_bytes(signature[sig_length:index_end], "big")
    proof_bytes = signature[index_end:]
    proof = [proof_bytes[i:i + 32] for i in range(0, len(proof_bytes), 32)]

    if index >= 1 << len(proof):
        raise MalformedSignatureError(
            f"Leaf index {index} outside tree of height {len(proof)}", len(signature)
        )

    return BulkSignatureParts(signature[:sig_length], index, proof)


def to_compact_signature(signature: bytes) -> bytes:
    """
    Convert a 65-byte r || s || v signature to EIP-2098 r || vs.

    Raises:
        MalformedSignatureError: If the input is not 65 bytes or v is invalid
    """
    if len(signature) != SIGNATURE_LENGTH:
        raise MalformedSignatureError(
            f"Expected {SIGNATURE_LENGTH}-byte signature, got {len(signature)}", len(signature)
        )
    v = signature[64]
    if v < 27:
        v += 27
    if v not in (27, 28):
        raise MalformedSignatureError(f"Invalid recovery id v={signature[64]}", len(signature))

    s = int.from_bytes(signature[32:64], "big")
    vs = ((v - 27) << 255) | s
    return signature[:32] + vs.to_bytes(32, "big")


def expand_compact_signature(signature: bytes) -> bytes:
    """
    Convert an EIP-2098 r || vs signature back to r || s || v.

    65-byte input is returned unchanged.

    Raises:
        MalformedSignatureError: If the input is neither 64 nor 65 bytes
    """
    if len(signature) == SIGNATURE_LENGTH:
        return signature
    if len(signature) != COMPACT_SIGNATURE_LENGTH:
        raise MalformedSignatureError(
            f"Expected {COMPACT_SIGNATURE_LENGTH}- or {SIGNATURE_LENGTH}-byte signature, "
            f"got {len(signature)}",
            len(signature)
        )
    vs = int.from_bytes(signature[32:], "big")
    s = vs & _S_MASK
    v = 27 + (vs >> 255)
    return signature[:32] + s.to_bytes(32, "big") + bytes([v])


class SignatureVerifier:
    """
    Recovers and checks the signer of plain and bulk signed orders.

    Stateless; safe to share between threads.
    """

    def __init__(self, hasher: Optional[StructuredHasher] = None):
        """
        Initialize verifier.

        Args:
            hasher: EIP-712 hasher (must match the signer's domain)
        """
        self.hasher = hasher or StructuredHasher()

    def recover(self, order: SignedOBOrder, chain_id: int, verifying_contract: str) -> str:
        """
        Recover the address that signed ``order``.

        Args:
            order: Signed order
            chain_id: Chain ID of the domain
            verifying_contract: Complication contract address

        Returns:
            Checksummed recovered address

        Raises:
            MalformedSignatureError: If the signature cannot be decoded
        """
        if not order.sig:
            raise MalformedSignatureError("Order carries no signature", 0)

        raw = hex_to_bytes(order.sig)
        domain_separator = self.hasher.domain_separator(chain_id, verifying_contract)
        leaf = self.hasher.order_content_hash(order)

        if is_bulk_signature(raw):
            parts = parse_bulk_signature(raw)
            root = compute_root(leaf, parts.index, parts.proof)
            struct_hash = self.hasher.bulk_order_hash(root, parts.height)
            signature = parts.signature
        else:
            struct_hash = leaf
            signature = raw

        signature = expand_compact_signature(signature)
        try:
            recovered = Account.recover_message(
                self.hasher.signable_message(domain_separator, struct_hash),
                signature=signature
            )
        except Exception as e:
            raise MalformedSignatureError(
                f"Signature recovery failed: {type(e).__name__}: {e}", len(raw)
            ) from e

        return to_checksum_address(recovered)

    def verify(self, order: SignedOBOrder, chain_id: int, verifying_contract: str) -> str:
        """
        Check that ``order`` was signed by its declared signer.

        Returns:
            Recovered (checksummed) signer address

        Raises:
            SignatureMismatchError: If another key signed the order
            MalformedSignatureError: If the signature cannot be decoded
        """
        recovered = self.recover(order, chain_id, verifying_contract)
        bulk = is_bulk_signature(hex_to_bytes(order.sig))

        if recovered.lower() != order.signer.lower():
            logger.warning(
                f"Signature mismatch: expected {order.signer}, recovered {recovered} "
                f"({'bulk' if bulk else 'plain'})"
            )
            raise SignatureMismatchError(
                f"Order signed by {recovered}, declares {order.signer}",
                expected=order.signer,
                recovered=recovered,
                bulk=bulk
            )

        logger.debug(f"Verified {'bulk' if bulk else 'plain'} signature of {recovered}")
        return recovered

    def is_valid(self, order: SignedOBOrder, chain_id: int, verifying_contract: str) -> bool:
        """Boolean form of ``verify``."""
        try:
            self.verify(order, chain_id, verifying_contract)
            return True
        except (SignatureMismatchError, MalformedSignatureError):
            return False
