"""
Logging helpers: credential redaction and correlation IDs.

Order hashes, Merkle roots and signatures are 0x hex as long as (or longer
than) a private key, so redaction is keyed on the name next to the value
rather than on the value's shape.
"""

import logging
import re
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

# Per-context correlation ID (one per batch or request)
_correlation_id: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)


class CredentialRedactionFilter(logging.Filter):
    """
    Redacts private keys and secrets from log records.

    Redacts values that follow a credential-like name, e.g.
    ``private_key=0x...``, ``"secret": "..."``, ``mnemonic: ...``.
    Hashes and signatures logged under other names pass unchanged.

    Usage:
        >>> handler = logging.StreamHandler()
        >>> handler.addFilter(CredentialRedactionFilter())
        >>> logger.addHandler(handler)
    """

    PRIVATE_KEY_PATTERN = re.compile(
        r'((?:private[_ ]?key|priv[_ ]?key|signing[_ ]?key|pk)["\']?\s*[:=]\s*["\']?)'
        r'(?:0x)?[0-9a-fA-F]{64}',
        re.IGNORECASE
    )
    SECRET_PATTERN = re.compile(
        r'((?:secret|passphrase|password|mnemonic)["\']?\s*[:=]\s*["\']?)[^\s"\',;]{8,}',
        re.IGNORECASE
    )

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Redact credentials from log record.

        Returns:
            Always True (records are sanitized, never dropped)
        """
        if record.msg:
            record.msg = self._redact_credentials(str(record.msg))

        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    k: self._redact_credentials(str(v))
                    for k, v in record.args.items()
                }
            elif isinstance(record.args, tuple):
                record.args = tuple(
                    self._redact_credentials(str(arg))
                    for arg in record.args
                )

        if record.exc_text:
            record.exc_text = self._redact_credentials(record.exc_text)

        return True

    def _redact_credentials(self, text: str) -> str:
        if not text:
            return text

        text = self.PRIVATE_KEY_PATTERN.sub(r'\1[REDACTED]', text)
        text = self.SECRET_PATTERN.sub(r'\1[REDACTED]', text)
        return text


class CorrelationIdFilter(logging.Filter):
    """Adds ``correlation_id`` to every record (``-`` when unset)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = _correlation_id.get() or "-"
        return True


def set_correlation_id(correlation_id: Optional[str] = None) -> str:
    """
    Set correlation ID for current context.

    Args:
        correlation_id: Correlation ID (generates one if None)

    Returns:
        The correlation ID set

    Example:
        >>> batch_id = set_correlation_id()
        >>> preparer.batch_prepare_orders(orders)  # logs carry batch_id
    """
    if correlation_id is None:
        correlation_id = f"batch_{uuid.uuid4().hex[:12]}"

    _correlation_id.set(correlation_id)
    return correlation_id


def get_correlation_id() -> Optional[str]:
    """Get current correlation ID."""
    return _correlation_id.get()


def clear_correlation_id() -> None:
    """Clear correlation ID from current context."""
    _correlation_id.set(None)


@contextmanager
def correlation_context(correlation_id: Optional[str] = None) -> Iterator[str]:
    """
    Scope a correlation ID to a block.

    The previous value is restored on exit, also when the block raises.

    Example:
        >>> with correlation_context() as batch_id:
        ...     logger.info("preparing")  # carries batch_id
    """
    if correlation_id is None:
        correlation_id = f"batch_{uuid.uuid4().hex[:12]}"

    token = _correlation_id.set(correlation_id)
    try:
        yield correlation_id
    finally:
        _correlation_id.reset(token)
