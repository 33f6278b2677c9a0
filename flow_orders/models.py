"""
Type definitions for Flow orders.

Uses Pydantic for runtime validation. Attribute names are snake_case,
aliases follow the camelCase wire format the exchange contracts use.
All amounts are integers in the currency's smallest unit.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .exceptions import ValidationError
from .utils.validators import (
    UINT256_MAX,
    validate_address,
    validate_hex_bytes,
)


STANDARD_CONSTRAINTS_LENGTH = 7
TRUSTED_CONSTRAINTS_LENGTH = 8


def _checksum(value: Any) -> str:
    """Field-validator adapter: pydantic only wraps ValueError."""
    try:
        return validate_address(value)
    except ValidationError as e:
        raise ValueError(e.message) from e


def _hex(value: Any, name: str) -> str:
    try:
        return validate_hex_bytes(value, name)
    except ValidationError as e:
        raise ValueError(e.message) from e


class _FlowModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class TokenInfo(_FlowModel):
    """One token (id + quantity) inside a collection."""

    token_id: int = Field(..., alias="tokenId", ge=0, le=UINT256_MAX)
    num_tokens: int = Field(..., alias="numTokens", ge=0, le=UINT256_MAX)


class OrderItem(_FlowModel):
    """
    Collection and the tokens the order refers to.

    An empty ``tokens`` list means any token of the collection.
    """

    collection: str
    tokens: list[TokenInfo] = Field(default_factory=list)

    @field_validator("collection", mode="before")
    @classmethod
    def validate_collection(cls, v: Any) -> str:
        return _checksum(v)


class ExecParams(_FlowModel):
    """Settlement strategy and payment currency (zero address = native)."""

    complication_address: str = Field(..., alias="complicationAddress")
    currency_address: str = Field(..., alias="currencyAddress")

    @field_validator("complication_address", "currency_address", mode="before")
    @classmethod
    def validate_addresses(cls, v: Any) -> str:
        return _checksum(v)


class ExtraParams(_FlowModel):
    """Optional restriction of the order to a single buyer."""

    buyer: Optional[str] = None

    @field_validator("buyer", mode="before")
    @classmethod
    def validate_buyer(cls, v: Any) -> Optional[str]:
        return None if v is None else _checksum(v)


class OBOrder(_FlowModel):
    """Unsigned, caller-facing order book order."""

    id: str = ""
    chain_id: int = Field(..., alias="chainId", ge=1)
    is_sell_order: bool = Field(..., alias="isSellOrder")
    signer_address: str = Field(..., alias="signerAddress")
    num_items: int = Field(..., alias="numItems", ge=1, le=UINT256_MAX)
    start_price: int = Field(..., alias="startPrice", ge=0, le=UINT256_MAX)
    end_price: int = Field(..., alias="endPrice", ge=0, le=UINT256_MAX)
    start_time: int = Field(..., alias="startTime", ge=0, le=UINT256_MAX)
    end_time: int = Field(..., alias="endTime", ge=0, le=UINT256_MAX)
    nonce: int = Field(..., ge=0, le=UINT256_MAX)
    nfts: list[OrderItem] = Field(default_factory=list)
    exec_params: ExecParams = Field(..., alias="execParams")
    extra_params: ExtraParams = Field(default_factory=ExtraParams, alias="extraParams")
    is_trusted_exec: bool = Field(default=False, alias="isTrustedExec")

    @field_validator("signer_address", mode="before")
    @classmethod
    def validate_signer(cls, v: Any) -> str:
        return _checksum(v)

    @model_validator(mode="after")
    def validate_time_window(self) -> "OBOrder":
        if self.end_time < self.start_time:
            raise ValueError(
                f"endTime {self.end_time} is before startTime {self.start_time}"
            )
        return self


class SignedOBOrder(_FlowModel):
    """
    Wire form of an order.

    ``constraints`` is positional:
    [numItems, startPrice, endPrice, startTime, endTime, nonce,
    maxGasPrice, trustedExecFlag?]. The eighth slot exists only for
    trusted execution orders.
    """

    is_sell_order: bool = Field(..., alias="isSellOrder")
    signer: str
    constraints: list[int]
    nfts: list[OrderItem] = Field(default_factory=list)
    exec_params: list[str] = Field(..., alias="execParams")
    extra_params: str = Field(..., alias="extraParams")
    sig: str = ""

    @field_validator("signer", mode="before")
    @classmethod
    def validate_signer(cls, v: Any) -> str:
        return _checksum(v)

    @field_validator("constraints")
    @classmethod
    def validate_constraints(cls, v: list[int]) -> list[int]:
        if len(v) not in (STANDARD_CONSTRAINTS_LENGTH, TRUSTED_CONSTRAINTS_LENGTH):
            raise ValueError(
                f"constraints must have {STANDARD_CONSTRAINTS_LENGTH} or "
                f"{TRUSTED_CONSTRAINTS_LENGTH} elements, got {len(v)}"
            )
        for value in v:
            if value < 0 or value > UINT256_MAX:
                raise ValueError(f"constraint out of uint256 range: {value}")
        return v

    @field_validator("exec_params", mode="before")
    @classmethod
    def validate_exec_params(cls, v: Any) -> list[str]:
        if len(v) != 2:
            raise ValueError(f"execParams must be [complication, currency], got {len(v)} items")
        return [_checksum(address) for address in v]

    @field_validator("extra_params", mode="before")
    @classmethod
    def validate_extra_params(cls, v: Any) -> str:
        return _hex(v, "extraParams")

    @field_validator("sig", mode="before")
    @classmethod
    def validate_sig(cls, v: Any) -> str:
        if v in ("", "0x", b"", None):
            return ""
        return _hex(v, "sig")

    # Constraint accessors
    @property
    def num_items(self) -> int:
        return self.constraints[0]

    @property
    def start_price(self) -> int:
        return self.constraints[1]

    @property
    def end_price(self) -> int:
        return self.constraints[2]

    @property
    def start_time(self) -> int:
        return self.constraints[3]

    @property
    def end_time(self) -> int:
        return self.constraints[4]

    @property
    def nonce(self) -> int:
        return self.constraints[5]

    @property
    def is_trusted_exec(self) -> bool:
        return len(self.constraints) == TRUSTED_CONSTRAINTS_LENGTH and self.constraints[7] == 1

    @property
    def is_signed(self) -> bool:
        return bool(self.sig)

    def without_signature(self) -> "SignedOBOrder":
        """Copy of this order with the signature stripped."""
        return self.model_copy(update={"sig": ""})

    def with_signature(self, sig: str) -> "SignedOBOrder":
        """
        Copy of this order carrying ``sig``.

        Raises:
            ValidationError: If the order is already signed
        """
        if self.sig:
            raise ValidationError("Order already carries a signature")
        return self.model_copy(update={"sig": validate_hex_bytes(sig, "sig")})

    def to_wire(self) -> dict[str, Any]:
        """camelCase dict as submitted to the exchange."""
        return self.model_dump(by_alias=True)
