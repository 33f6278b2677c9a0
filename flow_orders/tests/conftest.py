"""Shared fixtures: test accounts, order factory and an in-memory ledger."""

import threading
from typing import Optional

import pytest
from eth_account import Account

from ..exceptions import LedgerError
from ..models import ExecParams, OBOrder, OrderItem, TokenInfo
from ..signing.signer import OrderSigner

# Test-only keys, never funded
TEST_KEY = "0x" + "ab" * 32
OTHER_KEY = "0x" + "cd" * 32

CHAIN_ID = 1
COMPLICATION = "0x" + "11" * 20
EXCHANGE = "0x" + "22" * 20
COLLECTION = "0x" + "33" * 20
OTHER_COLLECTION = "0x" + "55" * 20
CURRENCY = "0x" + "44" * 20
NATIVE = "0x" + "00" * 20

START_TIME = 1_700_000_000
END_TIME = START_TIME + 1000
ONE_ETH = 10**18


class FakeLedger:
    """
    In-memory LedgerClient.

    Nonces are valid unless listed in ``invalid_nonces``; ownership,
    allowances and operator approvals live in plain dicts. Every
    transaction is recorded in ``transactions``.
    """

    def __init__(self):
        self.invalid_nonces: set[tuple[str, int]] = set()
        self.owners: dict[tuple[str, int], str] = {}
        self.allowances: dict[tuple[str, str, str], int] = {}
        self.operators: set[tuple[str, str, str]] = set()
        self.transactions: list[tuple] = []
        self.fail_operations: set[str] = set()
        self._lock = threading.Lock()

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail_operations:
            raise LedgerError(f"{operation} failed", operation)

    def _tx(self, *record) -> str:
        with self._lock:
            self.transactions.append(record)
            return "0x" + f"{len(self.transactions):064x}"

    def is_nonce_valid(self, user: str, nonce: int) -> bool:
        self._maybe_fail("isNonceValid")
        return (user.lower(), nonce) not in self.invalid_nonces

    def owner_of(self, collection: str, token_id: int) -> Optional[str]:
        self._maybe_fail("ownerOf")
        return self.owners.get((collection.lower(), token_id))

    def allowance(self, token: str, owner: str, spender: str) -> int:
        self._maybe_fail("allowance")
        return self.allowances.get((token.lower(), owner.lower(), spender.lower()), 0)

    def approve(self, token: str, spender: str, amount: int) -> str:
        self._maybe_fail("approve")
        owner = Account.from_key(TEST_KEY).address
        self.allowances[(token.lower(), owner.lower(), spender.lower())] = amount
        return self._tx("approve", token, spender, amount)

    def is_approved_for_all(self, collection: str, owner: str, operator: str) -> bool:
        self._maybe_fail("isApprovedForAll")
        return (collection.lower(), owner.lower(), operator.lower()) in self.operators

    def set_approval_for_all(self, collection: str, operator: str, approved: bool) -> str:
        self._maybe_fail("setApprovalForAll")
        owner = Account.from_key(TEST_KEY).address
        key = (collection.lower(), owner.lower(), operator.lower())
        if approved:
            self.operators.add(key)
        else:
            self.operators.discard(key)
        return self._tx("setApprovalForAll", collection, operator, approved)

    def give(self, collection: str, token_id: int, owner: str) -> None:
        self.owners[(collection.lower(), token_id)] = owner


@pytest.fixture
def signer() -> OrderSigner:
    return OrderSigner.from_key(TEST_KEY)


@pytest.fixture
def other_signer() -> OrderSigner:
    return OrderSigner.from_key(OTHER_KEY)


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def make_order(signer):
    """Factory for valid unsigned orders; keyword overrides win."""

    def factory(**overrides) -> OBOrder:
        fields = dict(
            id="order-1",
            chain_id=CHAIN_ID,
            is_sell_order=True,
            signer_address=signer.address,
            num_items=1,
            start_price=2 * ONE_ETH,
            end_price=ONE_ETH,
            start_time=START_TIME,
            end_time=END_TIME,
            nonce=1,
            nfts=[OrderItem(collection=COLLECTION, tokens=[TokenInfo(token_id=7, num_tokens=1)])],
            exec_params=ExecParams(complication_address=COMPLICATION, currency_address=CURRENCY),
        )
        fields.update(overrides)
        return OBOrder(**fields)

    return factory
