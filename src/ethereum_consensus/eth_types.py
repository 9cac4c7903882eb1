"""
Ethereum Types
^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Types re-used by transactions and receipts, along with the RLP field decoders
for the ones that are not plain byte strings or scalars.
"""

from dataclasses import dataclass
from typing import ClassVar, Tuple, Union

from ethereum_types.bytes import Bytes, Bytes0, Bytes20, Bytes32, Bytes256
from ethereum_types.frozen import slotted_freezable
from ethereum_types.numeric import FixedUnsigned

from . import rlp
from .crypto.hash import Hash32
from .exceptions import UnexpectedLength, UnexpectedList
from .utils.ensure import ensure

Address = Bytes20
Root = Hash32

Bloom = Bytes256

To = Union[Bytes0, Address]
"""
Destination of a transaction: an `Address` for a call, or the empty `Bytes0`
for contract creation.
"""


class U128(FixedUnsigned):
    """
    Unsigned positive integer, which can represent `0` to `2 ** 128 - 1`,
    inclusive.
    """

    MAX_VALUE: ClassVar["U128"]
    """
    Largest value that can be represented by this integer type.
    """


def _max_value(bits: int) -> U128:
    value = object.__new__(U128)
    value._number = (2**bits) - 1  # type: ignore[misc]
    return value


U128.MAX_VALUE = _max_value(128)


@slotted_freezable
@dataclass
class Log:
    """
    Data record produced during the execution of a transaction.
    """

    address: Address
    topics: Tuple[Hash32, ...]
    data: Bytes


@slotted_freezable
@dataclass
class Access:
    """
    A mapping from account address to storage slots that are pre-warmed as
    part of a transaction.
    """

    account: Address
    slots: Tuple[Bytes32, ...]


def is_create(to: To) -> bool:
    """
    Whether `to` designates contract creation.
    """
    return len(to) == 0


def decode_to(buffer: rlp.Buffer) -> To:
    """
    Decode the destination field: the empty string for contract creation,
    otherwise a 20 byte address.
    """
    header = rlp.decode_header(buffer)
    ensure(not header.is_list, UnexpectedList)
    ensure(
        header.payload_length in (0, Address.LENGTH),
        UnexpectedLength(
            f"expected 0 or {Address.LENGTH} bytes, "
            f"got {header.payload_length}"
        ),
    )
    if header.payload_length == 0:
        return Bytes0()
    return Address(buffer.read(header.payload_length))


def decode_hash(buffer: rlp.Buffer) -> Hash32:
    """
    Decode a 32 byte hash.
    """
    return rlp.decode_fixed_bytes(buffer, Hash32)


def decode_log(buffer: rlp.Buffer) -> Log:
    """
    Decode a `[address, [topics...], data]` log entry.
    """

    def decode_payload(payload: rlp.Buffer) -> Log:
        return Log(
            address=rlp.decode_fixed_bytes(payload, Address),
            topics=rlp.decode_sequence(payload, decode_hash),
            data=rlp.decode_bytes(payload),
        )

    return rlp.decode_structure(buffer, decode_payload)


def decode_access(buffer: rlp.Buffer) -> Access:
    """
    Decode a single `[account, [slots...]]` access list entry.
    """

    def decode_payload(payload: rlp.Buffer) -> Access:
        return Access(
            account=rlp.decode_fixed_bytes(payload, Address),
            slots=rlp.decode_sequence(payload, decode_hash),
        )

    return rlp.decode_structure(buffer, decode_payload)


def decode_access_list(buffer: rlp.Buffer) -> Tuple[Access, ...]:
    """
    Decode an access list.
    """
    return rlp.decode_sequence(buffer, decode_access)
