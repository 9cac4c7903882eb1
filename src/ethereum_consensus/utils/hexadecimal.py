"""
Utility Functions For Hexadecimal Strings
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Conversions between `0x` prefixed hexadecimal strings and the byte and
integer types used by transactions and receipts.

Byte strings are written with two digits per byte (`"0x"` for empty data).
Quantities are written without leading zeros (`"0x0"` for zero), as in the
JSON-RPC interface.
"""

from typing import SupportsInt, Type, TypeVar

from ethereum_types.bytes import Bytes, FixedBytes
from ethereum_types.numeric import U64, U256, Unsigned

from ..crypto.hash import Hash32
from ..eth_types import U128, Address, Bloom

B = TypeVar("B", bound=FixedBytes)
U = TypeVar("U", bound=Unsigned)


def has_hex_prefix(hex_string: str) -> bool:
    """
    Check if a hex string starts with hex prefix (0x).
    """
    return hex_string.startswith(("0x", "0X"))


def remove_hex_prefix(hex_string: str) -> str:
    """
    Remove 0x prefix from a hex string if present. This function returns the
    passed hex string if it isn't prefixed with 0x.
    """
    if has_hex_prefix(hex_string):
        return hex_string[len("0x") :]

    return hex_string


def hex_to_bytes(hex_string: str) -> Bytes:
    """
    Convert hex string to bytes.

    Parameters
    ----------
    hex_string :
        The hexadecimal string to be converted to bytes.

    Returns
    -------
    byte_stream : `bytes`
        Byte stream corresponding to the given hexadecimal string.
    """
    return bytes.fromhex(remove_hex_prefix(hex_string))


def hex_to_fixed_bytes(hex_string: str, cls: Type[B]) -> B:
    """
    Convert hex string to a fixed width byte string, left padding it with
    zeros.
    """
    digits = remove_hex_prefix(hex_string).rjust(cls.LENGTH * 2, "0")
    return cls(bytes.fromhex(digits))


def hex_to_address(hex_string: str) -> Address:
    """
    Convert hex string to a 20 byte address. Checksum casing is ignored.
    """
    return hex_to_fixed_bytes(hex_string, Address)


def hex_to_hash(hex_string: str) -> Hash32:
    """
    Convert hex string to hash32 (32 bytes).
    """
    return Hash32(bytes.fromhex(remove_hex_prefix(hex_string)))


def hex_to_bloom(hex_string: str) -> Bloom:
    """
    Convert hex string to a 256 byte bloom.
    """
    return Bloom(bytes.fromhex(remove_hex_prefix(hex_string)))


def hex_to_unsigned(hex_string: str, cls: Type[U]) -> U:
    """
    Convert a hex quantity to the unsigned integer type `cls`.

    Raises `OverflowError` when the value does not fit.
    """
    return cls(int(remove_hex_prefix(hex_string), 16))


def hex_to_u64(hex_string: str) -> U64:
    """
    Convert hex string to U64.
    """
    return hex_to_unsigned(hex_string, U64)


def hex_to_u128(hex_string: str) -> U128:
    """
    Convert hex string to U128.
    """
    return hex_to_unsigned(hex_string, U128)


def hex_to_u256(hex_string: str) -> U256:
    """
    Convert hex string to U256.
    """
    return hex_to_unsigned(hex_string, U256)


def bytes_to_hex(data: Bytes) -> str:
    """
    `0x` followed by two lowercase digits per byte.
    """
    return "0x" + data.hex()


def quantity_to_hex(value: SupportsInt) -> str:
    """
    `0x` followed by the minimal lowercase hexadecimal digits of `value`.
    """
    return hex(int(value))
