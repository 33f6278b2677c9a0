"""Tests for Dutch auction pricing."""

import pytest

from ..trading.order_builder import OrderBuilder
from ..trading.pricing import PriceDecayCalculator
from .conftest import END_TIME, ONE_ETH, START_TIME


@pytest.fixture
def calculator():
    return PriceDecayCalculator()


def test_declining_price(calculator):
    """2.0 -> 1.0 over 1000 seconds."""
    def price(t):
        return calculator.price_at(2 * ONE_ETH, ONE_ETH, START_TIME, END_TIME, t)

    assert price(START_TIME) == 2 * ONE_ETH
    assert price(START_TIME + 500) == 15 * ONE_ETH // 10
    assert price(END_TIME) == ONE_ETH


def test_ascending_price(calculator):
    def price(t):
        return calculator.price_at(ONE_ETH, 2 * ONE_ETH, START_TIME, END_TIME, t)

    assert price(START_TIME) == ONE_ETH
    assert price(START_TIME + 250) == 125 * ONE_ETH // 100
    assert price(END_TIME) == 2 * ONE_ETH


def test_price_before_start_is_start_price(calculator):
    assert calculator.price_at(2 * ONE_ETH, ONE_ETH, START_TIME, END_TIME, START_TIME - 100) == 2 * ONE_ETH


def test_price_after_end_is_exactly_end_price(calculator):
    """Saturates at endPrice, no precision residue."""
    assert calculator.price_at(3, 1, START_TIME, END_TIME, END_TIME + 10**6) == 1
    assert calculator.price_at(1, 3, START_TIME, END_TIME, END_TIME + 1) == 3


def test_flat_order(calculator):
    assert calculator.price_at(ONE_ETH, ONE_ETH, START_TIME, END_TIME, START_TIME + 10) == ONE_ETH
    # Zero duration
    assert calculator.price_at(2 * ONE_ETH, ONE_ETH, START_TIME, START_TIME, START_TIME + 10) == 2 * ONE_ETH


def test_integer_truncation(calculator):
    """Portion is floored to the precision grid."""
    # portion = 1 * 10000 // 3 = 3333
    assert calculator.price_at(10_000, 0, 0, 3, 1) == 10_000 - 3333


def test_monotonic(calculator):
    declining = [
        calculator.price_at(5 * ONE_ETH, ONE_ETH, START_TIME, END_TIME, t)
        for t in range(START_TIME - 10, END_TIME + 10, 7)
    ]
    ascending = [
        calculator.price_at(ONE_ETH, 5 * ONE_ETH, START_TIME, END_TIME, t)
        for t in range(START_TIME - 10, END_TIME + 10, 7)
    ]

    assert all(a >= b for a, b in zip(declining, declining[1:]))
    assert all(a <= b for a, b in zip(ascending, ascending[1:]))
    assert all(ONE_ETH <= p <= 5 * ONE_ETH for p in declining + ascending)


def test_order_and_signed_order_agree(calculator, make_order):
    order = make_order()
    signed = OrderBuilder().build_signable(order)

    for t in (START_TIME, START_TIME + 333, END_TIME + 1):
        assert calculator.order_price(order, now=t) == calculator.signed_order_price(signed, now=t)


def test_invalid_precision():
    with pytest.raises(ValueError):
        PriceDecayCalculator(precision=0)
