"""
Flow order tooling

EIP-712 hashing, bulk Merkle signatures, Dutch auction pricing and
pre-trade preparation for Flow exchange order book orders.
"""

from .config import FlowSettings, get_settings
from .models import (
    TokenInfo,
    OrderItem,
    ExecParams,
    ExtraParams,
    OBOrder,
    SignedOBOrder,
)
from .exceptions import (
    FlowError,
    ValidationError,
    OrderValidationError,
    ExpiredOrderError,
    InvalidNonceError,
    NotOwnerError,
    ApprovalFailedError,
    SigningFailedError,
    SignatureError,
    SignatureMismatchError,
    MalformedSignatureError,
    LedgerError,
)
from .eip712 import StructuredHasher
from .trading import PriceDecayCalculator, OrderBuilder, OrderValidator
from .ledger import LedgerClient, Web3Ledger, ApprovalGranter
from .signing import (
    OrderSigner,
    BulkSignatureTreeBuilder,
    BulkSignatureResult,
    SignatureVerifier,
)
from .trading.preparer import OrderPreparer, BatchResult, RejectedOrder

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "FlowSettings",
    "get_settings",

    # Types
    "TokenInfo",
    "OrderItem",
    "ExecParams",
    "ExtraParams",
    "OBOrder",
    "SignedOBOrder",

    # Exceptions
    "FlowError",
    "ValidationError",
    "OrderValidationError",
    "ExpiredOrderError",
    "InvalidNonceError",
    "NotOwnerError",
    "ApprovalFailedError",
    "SigningFailedError",
    "SignatureError",
    "SignatureMismatchError",
    "MalformedSignatureError",
    "LedgerError",

    # Components
    "StructuredHasher",
    "PriceDecayCalculator",
    "OrderBuilder",
    "OrderValidator",
    "LedgerClient",
    "Web3Ledger",
    "ApprovalGranter",
    "OrderSigner",
    "BulkSignatureTreeBuilder",
    "BulkSignatureResult",
    "SignatureVerifier",
    "OrderPreparer",
    "BatchResult",
    "RejectedOrder",
]
