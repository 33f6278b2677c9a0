"""Ledger queries, transactions and token approvals."""

from .client import LedgerClient, Web3Ledger
from .allowances import ApprovalGranter

__all__ = [
    "LedgerClient",
    "Web3Ledger",
    "ApprovalGranter",
]
