"""Tests for approval granting."""

import pytest

from ..config import MAX_UINT256
from ..exceptions import ApprovalFailedError
from ..ledger.allowances import ApprovalGranter
from ..models import ExecParams, OrderItem, TokenInfo
from .conftest import (
    COLLECTION,
    COMPLICATION,
    CURRENCY,
    EXCHANGE,
    NATIVE,
    ONE_ETH,
    OTHER_COLLECTION,
    START_TIME,
)


@pytest.fixture
def granter(ledger):
    return ApprovalGranter(ledger, EXCHANGE)


@pytest.fixture
def buy_order(make_order):
    return make_order(is_sell_order=False, start_price=ONE_ETH, end_price=2 * ONE_ETH)


def test_buy_order_approves_currency(granter, ledger, signer, buy_order):
    tx_hashes = granter.grant_approvals(buy_order, now=START_TIME)

    assert len(tx_hashes) == 1
    assert ledger.transactions == [("approve", CURRENCY, granter.exchange_address, MAX_UINT256)]
    assert ledger.allowance(CURRENCY, signer.address, EXCHANGE) == MAX_UINT256


def test_buy_approval_is_idempotent(granter, ledger, buy_order):
    granter.grant_approvals(buy_order, now=START_TIME)
    assert granter.grant_approvals(buy_order, now=START_TIME) == []
    assert len(ledger.transactions) == 1


def test_sufficient_allowance_sends_nothing(granter, ledger, signer, buy_order):
    ledger.allowances[(CURRENCY.lower(), signer.address.lower(), EXCHANGE.lower())] = ONE_ETH

    assert granter.grant_approvals(buy_order, now=START_TIME) == []
    assert ledger.transactions == []


def test_allowance_compared_with_current_price(granter, ledger, signer, buy_order):
    """Ascending offer: an allowance enough at start is short later on."""
    ledger.allowances[(CURRENCY.lower(), signer.address.lower(), EXCHANGE.lower())] = ONE_ETH

    assert len(granter.grant_approvals(buy_order, now=START_TIME + 500)) == 1


def test_native_currency_needs_no_allowance(granter, ledger, make_order):
    order = make_order(
        is_sell_order=False,
        exec_params=ExecParams(complication_address=COMPLICATION, currency_address=NATIVE),
    )
    assert granter.grant_approvals(order) == []
    assert ledger.transactions == []


def test_sell_order_approves_each_collection_once(granter, ledger, make_order):
    nfts = [
        OrderItem(collection=COLLECTION, tokens=[TokenInfo(token_id=1, num_tokens=1)]),
        OrderItem(collection=OTHER_COLLECTION, tokens=[TokenInfo(token_id=2, num_tokens=1)]),
        OrderItem(collection=COLLECTION, tokens=[TokenInfo(token_id=3, num_tokens=1)]),
    ]
    order = make_order(nfts=nfts, num_items=3)

    assert len(granter.grant_approvals(order)) == 2
    assert [tx[1] for tx in ledger.transactions] == [COLLECTION, OTHER_COLLECTION]
    assert granter.grant_approvals(order) == []


def test_already_approved_collection(granter, ledger, signer, make_order):
    ledger.operators.add((COLLECTION.lower(), signer.address.lower(), EXCHANGE.lower()))
    assert granter.grant_approvals(make_order()) == []


def test_ledger_failure_wrapped(granter, ledger, make_order, buy_order):
    ledger.fail_operations.add("setApprovalForAll")
    with pytest.raises(ApprovalFailedError) as exc_info:
        granter.grant_approvals(make_order())
    assert exc_info.value.token == COLLECTION
    assert exc_info.value.order_id == "order-1"

    ledger.fail_operations.add("allowance")
    with pytest.raises(ApprovalFailedError):
        granter.grant_approvals(buy_order, now=START_TIME)
