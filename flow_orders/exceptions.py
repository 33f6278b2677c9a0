"""
Custom exceptions for Flow order tooling.

Provides typed exceptions so callers can tell a rejected order from a
transient ledger failure.
"""

from typing import Optional, Any


class FlowError(Exception):
    """Base exception for all Flow order errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(FlowError):
    """Input validation failed."""
    pass


# Pre-trade validation
class OrderValidationError(FlowError):
    """Order failed pre-trade validation."""

    def __init__(self, message: str, order_id: Optional[str] = None,
                 details: Optional[dict[str, Any]] = None):
        details = dict(details or {})
        details["order_id"] = order_id
        super().__init__(message, details)
        self.order_id = order_id


class ExpiredOrderError(OrderValidationError):
    """Order end time has already passed."""

    def __init__(self, message: str, order_id: Optional[str] = None,
                 end_time: Optional[int] = None, now: Optional[int] = None):
        super().__init__(message, order_id, {"end_time": end_time, "now": now})
        self.end_time = end_time
        self.now = now


class InvalidNonceError(OrderValidationError):
    """Ledger reports the nonce as consumed or cancelled."""

    def __init__(self, message: str, order_id: Optional[str] = None,
                 signer: Optional[str] = None, nonce: Optional[int] = None):
        super().__init__(message, order_id, {"signer": signer, "nonce": nonce})
        self.signer = signer
        self.nonce = nonce


class NotOwnerError(OrderValidationError):
    """Signer does not own a token listed in a sell order."""

    def __init__(self, message: str, order_id: Optional[str] = None,
                 collection: Optional[str] = None, token_id: Optional[int] = None,
                 owner: Optional[str] = None):
        super().__init__(
            message, order_id,
            {"collection": collection, "token_id": token_id, "owner": owner}
        )
        self.collection = collection
        self.token_id = token_id
        self.owner = owner


class ApprovalFailedError(FlowError):
    """Allowance or operator approval could not be granted."""

    def __init__(self, message: str, order_id: Optional[str] = None,
                 token: Optional[str] = None):
        super().__init__(message, {"order_id": order_id, "token": token})
        self.order_id = order_id
        self.token = token


class SigningFailedError(FlowError):
    """Key signing failed or was rejected."""
    pass


# Signature verification
class SignatureError(FlowError):
    """Base exception for signature verification."""
    pass


class SignatureMismatchError(SignatureError):
    """Recovered signer differs from the declared signer."""

    def __init__(self, message: str, expected: Optional[str] = None,
                 recovered: Optional[str] = None, bulk: bool = False):
        super().__init__(message, {"expected": expected, "recovered": recovered, "bulk": bulk})
        self.expected = expected
        self.recovered = recovered
        self.bulk = bulk


class MalformedSignatureError(SignatureError):
    """Signature blob cannot be decoded."""

    def __init__(self, message: str, length: Optional[int] = None):
        super().__init__(message, {"length": length})
        self.length = length


# Ledger
class LedgerError(FlowError):
    """Ledger query or transaction failed."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 retryable: bool = True):
        super().__init__(message, {"operation": operation, "retryable": retryable})
        self.operation = operation
        self.retryable = retryable
