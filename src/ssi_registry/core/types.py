"""Primitive value helpers: addresses and 32-byte words.

Addresses are carried around as EIP-55 checksummed hex strings; 32-byte
values (document hashes, credential ids, signature components) as ``bytes``.
"""

from __future__ import annotations

from eth_utils import decode_hex, is_address, is_hex, to_canonical_address, to_checksum_address

from .exceptions import InvalidAddressError, ValidationException

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
ZERO_HASH = b"\x00" * 32


def normalize_address(value: str | bytes, field: str = "address") -> str:
    """Return the checksummed form of ``value`` or raise InvalidAddressError."""
    if isinstance(value, bytes):
        if len(value) != 20:
            raise InvalidAddressError(value.hex(), field=field)
        return to_checksum_address(value)
    if not isinstance(value, str) or not is_address(value):
        raise InvalidAddressError(value, field=field)
    return to_checksum_address(value)


def address_bytes(address: str) -> bytes:
    """20-byte canonical form of an address."""
    return to_canonical_address(address)


def to_bytes32(value: bytes | str, field: str = "value") -> bytes:
    """Coerce a 32-byte value given as bytes or 0x-prefixed hex."""
    if isinstance(value, str):
        if not is_hex(value):
            raise ValidationException(f"{field} is not hex: {value!r}", field=field, value=value)
        try:
            value = decode_hex(value)
        except ValueError:
            raise ValidationException(f"{field} is not hex: {value!r}", field=field, value=value) from None
    if not isinstance(value, bytes) or len(value) != 32:
        raise ValidationException(f"{field} must be exactly 32 bytes", field=field, value=value)
    return value


def hex32(value: bytes) -> str:
    """0x-prefixed hex of a 32-byte value, for messages and JSON."""
    return "0x" + value.hex()
