"""
Input validation utilities.

Validates addresses, keys and hex blobs before they reach hashing or the ledger.
"""

import re
from typing import Any, Union

from eth_utils import is_address, to_checksum_address

from ..exceptions import ValidationError


UINT256_MAX = 2**256 - 1
HEX_PATTERN = re.compile(r"^(0x)?[0-9a-fA-F]*$")


def validate_address(address: Any) -> str:
    """
    Validate Ethereum address.

    Args:
        address: Ethereum address

    Returns:
        Checksummed address

    Raises:
        ValidationError: If address is invalid
    """
    if not isinstance(address, str):
        raise ValidationError(f"Address must be string, got {type(address)}")

    # is_address rejects mixed-case strings with a bad checksum
    if not is_address(address):
        raise ValidationError(f"Invalid Ethereum address: {address}")

    return to_checksum_address(address)


def validate_private_key(private_key: str) -> str:
    """
    Validate private key format.

    Args:
        private_key: Private key hex string

    Returns:
        Normalized private key

    Raises:
        ValidationError: If private key is invalid
    """
    if not isinstance(private_key, str):
        raise ValidationError(f"Private key must be string, got {type(private_key)}")

    key = private_key[2:] if private_key.startswith("0x") else private_key

    # 32 bytes = 64 hex chars
    if not re.match(r"^[0-9a-fA-F]{64}$", key):
        raise ValidationError("Invalid private key format")

    return f"0x{key.lower()}"


def validate_uint256(value: Any, name: str = "value") -> int:
    """
    Validate an unsigned 256-bit integer.

    Accepts ints and decimal or 0x-prefixed strings (wire orders carry
    big numbers as strings).

    Raises:
        ValidationError: If value is not an integer in [0, 2**256)
    """
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer, got bool")

    if isinstance(value, str):
        try:
            value = int(value, 16) if value.startswith("0x") else int(value)
        except ValueError as e:
            raise ValidationError(f"{name} is not an integer: {value}") from e
    elif not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {type(value)}")

    if value < 0 or value > UINT256_MAX:
        raise ValidationError(f"{name} out of uint256 range: {value}")

    return value


def validate_hex_bytes(value: Union[str, bytes], name: str = "value") -> str:
    """
    Normalize a bytes value to a lowercase 0x-prefixed hex string.

    Raises:
        ValidationError: If value is not bytes or an even-length hex string
    """
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()

    if not isinstance(value, str):
        raise ValidationError(f"{name} must be hex string or bytes, got {type(value)}")

    if not HEX_PATTERN.match(value):
        raise ValidationError(f"{name} is not a hex string")

    body = value[2:] if value.startswith("0x") else value
    if len(body) % 2:
        raise ValidationError(f"{name} has odd hex length ({len(body)})")

    return f"0x{body.lower()}"


def hex_to_bytes(value: Union[str, bytes]) -> bytes:
    """Decode a 0x-prefixed (or bare) hex string; bytes pass through."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return bytes.fromhex(validate_hex_bytes(value)[2:])
