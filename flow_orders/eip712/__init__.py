"""EIP-712 schema and hashing for Flow orders."""

from .hasher import StructuredHasher
from .types import (
    ORDER_EIP712_TYPES,
    EIP712_DOMAIN_FIELDS,
    bulk_order_eip712_types,
    bulk_order_type,
)

__all__ = [
    "StructuredHasher",
    "ORDER_EIP712_TYPES",
    "EIP712_DOMAIN_FIELDS",
    "bulk_order_eip712_types",
    "bulk_order_type",
]
