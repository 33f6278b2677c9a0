"""Utility modules for Flow order tooling."""

from .validators import (
    validate_address,
    validate_private_key,
    validate_uint256,
    validate_hex_bytes,
)
from .retry import RetryStrategy, with_retry
from .structured_logging import (
    CredentialRedactionFilter,
    CorrelationIdFilter,
    set_correlation_id,
    get_correlation_id,
    clear_correlation_id,
    correlation_context,
)

__all__ = [
    "validate_address",
    "validate_private_key",
    "validate_uint256",
    "validate_hex_bytes",
    "RetryStrategy",
    "with_retry",
    "CredentialRedactionFilter",
    "CorrelationIdFilter",
    "set_correlation_id",
    "get_correlation_id",
    "clear_correlation_id",
    "correlation_context",
]
