"""Tests for order building."""

from eth_abi import decode

from ..config import DEFAULT_MAX_GAS_PRICE
from ..models import ExtraParams
from ..trading.order_builder import OrderBuilder, encode_extra_params
from ..utils.validators import hex_to_bytes
from .conftest import COMPLICATION, CURRENCY, END_TIME, EXCHANGE, ONE_ETH, START_TIME


def test_constraints_layout(make_order):
    order = make_order(num_items=2, nonce=9)
    assert OrderBuilder().build_constraints(order) == [
        2,
        2 * ONE_ETH,
        ONE_ETH,
        START_TIME,
        END_TIME,
        9,
        DEFAULT_MAX_GAS_PRICE,
    ]


def test_trusted_exec_adds_flag(make_order):
    constraints = OrderBuilder().build_constraints(make_order(is_trusted_exec=True))
    assert len(constraints) == 8
    assert constraints[7] == 1


def test_custom_max_gas_price(make_order):
    assert OrderBuilder(max_gas_price=42).build_constraints(make_order())[6] == 42


def test_build_signable(signer, make_order):
    signable = OrderBuilder().build_signable(make_order())

    assert signable.sig == ""
    assert not signable.is_signed
    assert signable.signer == signer.address
    assert signable.exec_params == [COMPLICATION, CURRENCY]
    assert signable.nfts == make_order().nfts
    assert signable.is_sell_order is True
    assert signable.is_trusted_exec is False


def test_extra_params_untargeted():
    encoded = hex_to_bytes(encode_extra_params(ExtraParams()))
    assert encoded == b"\x00" * 32


def test_extra_params_with_buyer():
    encoded = hex_to_bytes(encode_extra_params(ExtraParams(buyer=EXCHANGE)))
    (buyer,) = decode(["address"], encoded)
    assert buyer.lower() == EXCHANGE.lower()
