"""Tests for order models."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationError
from ..models import OBOrder, SignedOBOrder
from ..trading.order_builder import OrderBuilder
from .conftest import END_TIME, START_TIME


def test_order_parses_wire_aliases(make_order):
    order = make_order()
    data = order.model_dump(by_alias=True)

    assert "signerAddress" in data
    assert OBOrder.model_validate(data) == order


def test_addresses_are_checksummed(make_order):
    order = make_order(signer_address=make_order().signer_address.lower())
    assert order.signer_address == make_order().signer_address


def test_rejects_end_before_start(make_order):
    with pytest.raises(PydanticValidationError):
        make_order(start_time=END_TIME, end_time=START_TIME)


def test_rejects_invalid_address(make_order):
    with pytest.raises(PydanticValidationError):
        make_order(signer_address="0x1234")


def test_rejects_zero_items(make_order):
    with pytest.raises(PydanticValidationError):
        make_order(num_items=0)


def test_signed_order_constraints_length(make_order):
    wire = OrderBuilder().build_signable(make_order()).to_wire()
    wire["constraints"] = wire["constraints"][:6]

    with pytest.raises(PydanticValidationError):
        SignedOBOrder.model_validate(wire)


def test_signed_order_exec_params_length(make_order):
    wire = OrderBuilder().build_signable(make_order()).to_wire()
    wire["execParams"] = wire["execParams"][:1]

    with pytest.raises(PydanticValidationError):
        SignedOBOrder.model_validate(wire)


def test_constraint_accessors(make_order):
    signable = OrderBuilder().build_signable(make_order(nonce=4))

    assert signable.start_time == START_TIME
    assert signable.end_time == END_TIME
    assert signable.nonce == 4
    assert signable.num_items == 1


def test_with_signature_refuses_resign(make_order):
    signed = OrderBuilder().build_signable(make_order()).with_signature("0x" + "ab" * 65)

    assert signed.is_signed
    with pytest.raises(ValidationError):
        signed.with_signature("0x" + "cd" * 65)
    assert signed.without_signature().sig == ""


def test_orders_are_immutable(make_order):
    order = make_order()
    with pytest.raises(PydanticValidationError):
        order.nonce = 5
