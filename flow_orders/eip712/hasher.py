"""
Structured (EIP-712) hashing of Flow orders.

Computes the same digests the complication contract computes on-chain.
Nested arrays are reduced level by level: token hashes are concatenated and
hashed per order item, order item hashes are concatenated and hashed per
order. Plain and bulk signing both go through ``order_content_hash`` so a
logical order always hashes to the same leaf.
"""

import logging
from typing import Sequence

from eth_abi import encode
from eth_account.messages import SignableMessage
from eth_utils import keccak

from ..config import (
    DEFAULT_DOMAIN_NAME,
    DEFAULT_DOMAIN_VERSION,
    ZERO_ADDRESS,
    ZERO_HASH,
)
from ..exceptions import ValidationError
from ..models import (
    OrderItem,
    SignedOBOrder,
    TokenInfo,
    STANDARD_CONSTRAINTS_LENGTH,
    TRUSTED_CONSTRAINTS_LENGTH,
)
from ..utils.validators import hex_to_bytes, validate_address
from .types import (
    DOMAIN_TYPE,
    ORDER_ITEM_TYPE,
    ORDER_TYPE,
    TOKEN_INFO_TYPE,
    bulk_order_type,
)

logger = logging.getLogger(__name__)


DOMAIN_TYPE_HASH = keccak(text=DOMAIN_TYPE)
TOKEN_INFO_TYPE_HASH = keccak(text=TOKEN_INFO_TYPE)
ORDER_ITEM_TYPE_HASH = keccak(text=ORDER_ITEM_TYPE)
ORDER_TYPE_HASH = keccak(text=ORDER_TYPE)

EIP712_PREFIX = b"\x19\x01"


class StructuredHasher:
    """
    Versioned EIP-712 hasher for the Flow order schema.

    Stateless apart from the domain name and version, so one instance can be
    shared between threads.
    """

    def __init__(
        self,
        domain_name: str = DEFAULT_DOMAIN_NAME,
        domain_version: str = DEFAULT_DOMAIN_VERSION
    ):
        """
        Initialize hasher.

        Args:
            domain_name: EIP-712 domain name of the verifying contract
            domain_version: EIP-712 domain version
        """
        self.domain_name = domain_name
        self.domain_version = domain_version
        self._name_hash = keccak(text=domain_name)
        self._version_hash = keccak(text=domain_version)
        self._default_leaf = self._hash_order_fields(
            is_sell_order=False,
            signer=ZERO_ADDRESS,
            constraints=[],
            nfts=[],
            exec_params=[],
            extra_params=hex_to_bytes(ZERO_HASH),
        )

    def domain_separator(self, chain_id: int, verifying_contract: str) -> bytes:
        """
        Hash the EIP-712 domain.

        Depends on both arguments; compute it per (chain, contract) pair.

        Args:
            chain_id: Chain ID
            verifying_contract: Complication contract address

        Returns:
            32-byte domain separator
        """
        contract = validate_address(verifying_contract)
        return keccak(encode(
            ["bytes32", "bytes32", "bytes32", "uint256", "address"],
            [DOMAIN_TYPE_HASH, self._name_hash, self._version_hash, chain_id, contract]
        ))

    def token_info_hash(self, token: TokenInfo) -> bytes:
        return keccak(encode(
            ["bytes32", "uint256", "uint256"],
            [TOKEN_INFO_TYPE_HASH, token.token_id, token.num_tokens]
        ))

    def tokens_hash(self, tokens: Sequence[TokenInfo]) -> bytes:
        return keccak(b"".join(self.token_info_hash(token) for token in tokens))

    def order_item_hash(self, item: OrderItem) -> bytes:
        return keccak(encode(
            ["bytes32", "address", "bytes32"],
            [ORDER_ITEM_TYPE_HASH, item.collection, self.tokens_hash(item.tokens)]
        ))

    def nfts_hash(self, nfts: Sequence[OrderItem]) -> bytes:
        return keccak(b"".join(self.order_item_hash(item) for item in nfts))

    def constraints_hash(self, constraints: Sequence[int]) -> bytes:
        """
        Hash the constraints array as a fixed-size uint256 array.

        The trusted-execution flag adds an eighth slot; each length has its
        own encoding. The empty array is only used by the padding leaf.

        Raises:
            ValidationError: If the length is not 0, 7 or 8
        """
        if len(constraints) == TRUSTED_CONSTRAINTS_LENGTH:
            encoded = encode(["uint256[8]"], [list(constraints)])
        elif len(constraints) == STANDARD_CONSTRAINTS_LENGTH:
            encoded = encode(["uint256[7]"], [list(constraints)])
        elif not constraints:
            encoded = b""
        else:
            raise ValidationError(
                f"Cannot hash constraints of length {len(constraints)}; "
                f"expected {STANDARD_CONSTRAINTS_LENGTH} or {TRUSTED_CONSTRAINTS_LENGTH}"
            )
        return keccak(encoded)

    def exec_params_hash(self, exec_params: Sequence[str]) -> bytes:
        """Hash [complication, currency]; empty only for the padding leaf."""
        if len(exec_params) == 2:
            encoded = encode(["address[2]"], [list(exec_params)])
        elif not exec_params:
            encoded = b""
        else:
            raise ValidationError(
                f"execParams must hold 2 addresses, got {len(exec_params)}"
            )
        return keccak(encoded)

    def order_content_hash(self, order: SignedOBOrder) -> bytes:
        """
        hashStruct(Order) of a signed order, signature excluded.

        Args:
            order: Order in wire form (``sig`` is ignored)

        Returns:
            32-byte struct hash
        """
        return self._hash_order_fields(
            is_sell_order=order.is_sell_order,
            signer=order.signer,
            constraints=order.constraints,
            nfts=order.nfts,
            exec_params=order.exec_params,
            extra_params=hex_to_bytes(order.extra_params),
        )

    def default_leaf_hash(self) -> bytes:
        """Content hash of the canonical empty order used to pad bulk trees."""
        return self._default_leaf

    def bulk_order_type_hash(self, height: int) -> bytes:
        return keccak(text=bulk_order_type(height))

    def bulk_order_hash(self, root: bytes, height: int) -> bytes:
        """
        hashStruct(BulkOrder) for a tree of ``height`` levels.

        The encoded ``tree`` member of a nested ``Order[2]...[2]`` array is
        exactly the Merkle root of its leaves.
        """
        return keccak(self.bulk_order_type_hash(height) + root)

    def signable_message(self, domain_separator: bytes, struct_hash: bytes) -> SignableMessage:
        """EIP-712 message (``0x1901 || domain || struct``) for eth-account."""
        return SignableMessage(version=b"\x01", header=domain_separator, body=struct_hash)

    def typed_data_digest(self, domain_separator: bytes, struct_hash: bytes) -> bytes:
        return keccak(EIP712_PREFIX + domain_separator + struct_hash)

    def order_digest(self, order: SignedOBOrder, chain_id: int, verifying_contract: str) -> bytes:
        """Digest a plain signature over ``order`` commits to."""
        return self.typed_data_digest(
            self.domain_separator(chain_id, verifying_contract),
            self.order_content_hash(order)
        )

    def _hash_order_fields(
        self,
        is_sell_order: bool,
        signer: str,
        constraints: Sequence[int],
        nfts: Sequence[OrderItem],
        exec_params: Sequence[str],
        extra_params: bytes
    ) -> bytes:
        return keccak(encode(
            ["bytes32", "bool", "address", "bytes32", "bytes32", "bytes32", "bytes32"],
            [
                ORDER_TYPE_HASH,
                is_sell_order,
                signer,
                self.constraints_hash(constraints),
                self.nfts_hash(nfts),
                self.exec_params_hash(exec_params),
                keccak(extra_params),
            ]
        ))
