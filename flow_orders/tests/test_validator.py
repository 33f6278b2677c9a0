"""Tests for pre-trade validation."""

import pytest

from ..exceptions import ExpiredOrderError, InvalidNonceError, LedgerError, NotOwnerError
from ..models import OrderItem, TokenInfo
from ..trading.validator import OrderValidator
from .conftest import COLLECTION, END_TIME, OTHER_COLLECTION, START_TIME


@pytest.fixture
def validator(ledger):
    return OrderValidator(ledger, clock=lambda: START_TIME + 10)


@pytest.fixture
def owned(ledger, signer):
    ledger.give(COLLECTION, 7, signer.address)
    return ledger


def test_valid_sell_order(validator, owned, make_order):
    validator.validate(make_order())
    assert validator.is_order_valid(make_order())


def test_expired_order(validator, owned, make_order):
    with pytest.raises(ExpiredOrderError) as exc_info:
        validator.validate(make_order(), now=END_TIME + 1)
    assert exc_info.value.end_time == END_TIME
    assert exc_info.value.order_id == "order-1"


def test_order_valid_until_end_time(validator, owned, make_order):
    validator.validate(make_order(), now=END_TIME)


def test_not_yet_active_order_is_valid(validator, owned, make_order):
    validator.validate(make_order(), now=START_TIME - 3600)


def test_invalid_nonce(validator, owned, signer, make_order):
    owned.invalid_nonces.add((signer.address.lower(), 1))
    with pytest.raises(InvalidNonceError) as exc_info:
        validator.validate(make_order())
    assert exc_info.value.nonce == 1


def test_not_owner(validator, ledger, other_signer, make_order):
    ledger.give(COLLECTION, 7, other_signer.address)
    with pytest.raises(NotOwnerError) as exc_info:
        validator.validate(make_order())
    assert exc_info.value.owner == other_signer.address
    assert exc_info.value.token_id == 7


def test_nonexistent_token_is_not_owned(validator, ledger, make_order):
    """ownerOf reverting (no owner) counts as not owned."""
    with pytest.raises(NotOwnerError):
        validator.validate(make_order())


def test_ownership_checked_for_every_token(validator, owned, make_order):
    nfts = [
        OrderItem(collection=COLLECTION, tokens=[TokenInfo(token_id=7, num_tokens=1)]),
        OrderItem(collection=OTHER_COLLECTION, tokens=[TokenInfo(token_id=8, num_tokens=1)]),
    ]
    with pytest.raises(NotOwnerError) as exc_info:
        validator.validate(make_order(nfts=nfts, num_items=2))
    assert exc_info.value.collection == OTHER_COLLECTION


def test_items_without_tokens_skipped(validator, ledger, make_order):
    validator.validate(make_order(nfts=[OrderItem(collection=COLLECTION)]))


def test_skip_ownership_check(validator, ledger, make_order):
    validator.validate(make_order(), skip_ownership_check=True)


def test_buy_orders_skip_ownership(validator, ledger, make_order):
    validator.validate(make_order(is_sell_order=False))


def test_ledger_failure_propagates(validator, owned, make_order):
    owned.fail_operations.add("isNonceValid")
    with pytest.raises(LedgerError):
        validator.validate(make_order())
    assert not validator.is_order_valid(make_order())


def test_is_order_valid_false_on_rejection(validator, ledger, make_order):
    assert not validator.is_order_valid(make_order(), now=END_TIME + 1)
