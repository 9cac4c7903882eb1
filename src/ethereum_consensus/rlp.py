"""
.. _rlp:

Recursive Length Prefix (RLP) Encoding
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Defines the serialization and deserialization format used throughout Ethereum.

Every encoded unit starts with a [`Header`] telling whether a string or a list
follows, and how many payload bytes it spans. Decoding reads one header at a
time from a [`Buffer`]. The format is not self-describing beyond that: the
number, order and type of the fields inside a list is agreed out of band, so
callers decode lists with a schema (see [`decode_structure`]).

Decoding is strict. Non-canonical encodings, truncated input, and lists whose
consumed length differs from their declared length are all rejected with a
subclass of [`RLPDecodingError`].

[`Header`]: ref:ethereum_consensus.rlp.Header
[`Buffer`]: ref:ethereum_consensus.rlp.Buffer
[`decode_structure`]: ref:ethereum_consensus.rlp.decode_structure
[`RLPDecodingError`]: ref:ethereum_consensus.exceptions.RLPDecodingError
"""

from dataclasses import dataclass, fields, is_dataclass
from typing import (
    Callable,
    ClassVar,
    Dict,
    List,
    Protocol,
    Sequence,
    Tuple,
    Type,
    TypeVar,
    Union,
    runtime_checkable,
)

from ethereum_types.bytes import Bytes, FixedBytes
from ethereum_types.frozen import slotted_freezable
from ethereum_types.numeric import FixedUnsigned, Uint, Unsigned
from typing_extensions import TypeAlias

from .crypto.hash import Hash32, keccak256
from .exceptions import (
    CustomDecodingError,
    InputTooShort,
    LeadingZero,
    ListLengthMismatch,
    NonCanonicalSingleByte,
    NonCanonicalSize,
    Overflow,
    RLPEncodingError,
    UnexpectedLength,
    UnexpectedList,
    UnexpectedString,
)
from .utils.ensure import ensure

EMPTY_STRING_CODE = 0x80
LONG_STRING_CODE = 0xB7
EMPTY_LIST_CODE = 0xC0
LONG_LIST_CODE = 0xF7
SHORT_PAYLOAD_LIMIT = 0x38

MAX_LENGTH_OF_LENGTH = 8
"""
Payload lengths are limited to 64 bits.
"""


class RLP(Protocol):
    """
    [`Protocol`] that describes the requirements to be RLP-encodable as a
    list of dataclass fields.

    [`Protocol`]: https://docs.python.org/3/library/typing.html#typing.Protocol
    """

    __dataclass_fields__: ClassVar[Dict]


@runtime_checkable
class Encodable(Protocol):
    """
    Values that know their own RLP encoding.
    """

    def encode_rlp(self) -> Bytes:
        """
        Returns the complete RLP encoding of this value.
        """
        ...


Simple: TypeAlias = Union[Sequence["Simple"], bytes]

Extended: TypeAlias = Union[
    Sequence["Extended"],
    bytearray,
    bytes,
    Unsigned,
    int,
    str,
    bool,
    Encodable,
    RLP,
]


@slotted_freezable
@dataclass
class Header:
    """
    Describes the next unit of RLP data: whether it is a list, and the length
    of its payload in bytes (for a list, the total length of the encoded
    children, not their count).
    """

    is_list: bool
    payload_length: int

    def encode(self) -> Bytes:
        """
        Encodes the header on its own, without any payload.
        """
        offset = EMPTY_LIST_CODE if self.is_list else EMPTY_STRING_CODE
        if self.payload_length < SHORT_PAYLOAD_LIMIT:
            return bytes([offset + self.payload_length])

        length_as_be = Uint(self.payload_length).to_be_bytes()
        return bytes([offset + 0x37 + len(length_as_be)]) + length_as_be

    def length(self) -> int:
        """
        Number of bytes taken by the encoded header.
        """
        return length_of_length(self.payload_length)

    def length_with_payload(self) -> int:
        """
        Number of bytes taken by the header and its payload together.
        """
        return self.length() + self.payload_length


def length_of_length(payload_length: int) -> int:
    """
    Number of bytes a header takes for a payload of `payload_length` bytes.
    """
    if payload_length < SHORT_PAYLOAD_LIMIT:
        return 1
    return 1 + len(Uint(payload_length).to_be_bytes())


#
# RLP Encode
#


def encode(raw_data: Extended) -> Bytes:
    """
    Encodes `raw_data` into a sequence of bytes using RLP.

    Parameters
    ----------
    raw_data :
        A `Bytes`, unsigned integer, `bool`, dataclass, `Encodable` or
        sequence of RLP encodable objects.

    Returns
    -------
    encoded : `Bytes`
        The RLP encoded bytes representing `raw_data`.
    """
    if isinstance(raw_data, Sequence):
        if isinstance(raw_data, (bytearray, bytes)):
            return encode_bytes(bytes(raw_data))
        elif isinstance(raw_data, str):
            return encode_bytes(raw_data.encode())
        else:
            return encode_sequence(raw_data)
    elif isinstance(raw_data, Unsigned):
        return encode_bytes(raw_data.to_be_bytes())
    elif isinstance(raw_data, bool):
        if raw_data:
            return encode_bytes(b"\x01")
        else:
            return encode_bytes(b"")
    elif isinstance(raw_data, int):
        if raw_data < 0:
            raise RLPEncodingError("cannot RLP encode a negative integer")
        return encode_bytes(Uint(raw_data).to_be_bytes())
    elif isinstance(raw_data, Encodable):
        return raw_data.encode_rlp()
    elif is_dataclass(raw_data):
        return encode_sequence(
            [getattr(raw_data, field.name) for field in fields(raw_data)]
        )
    else:
        raise RLPEncodingError(
            "RLP Encoding of type {} is not supported".format(type(raw_data))
        )


def encode_bytes(raw_bytes: Bytes) -> Bytes:
    """
    Encodes `raw_bytes`, a sequence of bytes, using RLP.

    Parameters
    ----------
    raw_bytes :
        Bytes to encode with RLP.

    Returns
    -------
    encoded : `Bytes`
        The RLP encoded bytes representing `raw_bytes`.
    """
    if len(raw_bytes) == 1 and raw_bytes[0] < EMPTY_STRING_CODE:
        return raw_bytes

    return Header(is_list=False, payload_length=len(raw_bytes)).encode() + (
        raw_bytes
    )


def encode_sequence(raw_sequence: Sequence[Extended]) -> Bytes:
    """
    Encodes a list of RLP encodable objects (`raw_sequence`) using RLP.

    Parameters
    ----------
    raw_sequence :
        Sequence of RLP encodable objects.

    Returns
    -------
    encoded : `Bytes`
        The RLP encoded bytes representing `raw_sequence`.
    """
    joined_encodings = join_encodings(raw_sequence)
    header = Header(is_list=True, payload_length=len(joined_encodings))
    return header.encode() + joined_encodings


def join_encodings(raw_sequence: Sequence[Extended]) -> Bytes:
    """
    Obtain concatenation of rlp encoding for each item in the sequence
    raw_sequence.
    """
    return b"".join(encode(item) for item in raw_sequence)


def encoded_length(raw_data: Extended) -> int:
    """
    Number of bytes `encode(raw_data)` produces.
    """
    if isinstance(raw_data, (bytes, bytearray)):
        if len(raw_data) == 1 and raw_data[0] < EMPTY_STRING_CODE:
            return 1
        return length_of_length(len(raw_data)) + len(raw_data)
    elif isinstance(raw_data, Unsigned):
        return encoded_length(raw_data.to_be_bytes())
    elif isinstance(raw_data, Sequence) and not isinstance(raw_data, str):
        payload_length = sum(encoded_length(item) for item in raw_data)
        return length_of_length(payload_length) + payload_length
    return len(encode(raw_data))


def rlp_hash(data: Extended) -> Hash32:
    """
    Obtain the keccak-256 hash of the rlp encoding of the passed in data.
    """
    return keccak256(encode(data))


#
# RLP Decode
#


class Buffer:
    """
    Read cursor over RLP encoded bytes.

    A buffer belongs to a single decoding call; decoders advance it as they
    consume input, and never read past its end.
    """

    __slots__ = ("_data", "_position")

    def __init__(self, data: Bytes) -> None:
        self._data = bytes(data)
        self._position = 0

    def __len__(self) -> int:
        return len(self._data) - self._position

    @property
    def position(self) -> int:
        """
        Number of bytes consumed so far.
        """
        return self._position

    def peek(self) -> int:
        """
        The next byte, without consuming it.
        """
        ensure(len(self) > 0, InputTooShort)
        return self._data[self._position]

    def read(self, count: int) -> Bytes:
        """
        Consume and return the next `count` bytes.
        """
        ensure(count <= len(self), InputTooShort)
        start = self._position
        self._position += count
        return self._data[start : self._position]

    def advance(self, count: int) -> None:
        """
        Skip the next `count` bytes.
        """
        ensure(count <= len(self), InputTooShort)
        self._position += count


T = TypeVar("T")
U = TypeVar("U", bound=Unsigned)
B = TypeVar("B", bound=FixedBytes)


def decode_header(buffer: Buffer) -> Header:
    """
    Read the next header from `buffer`.

    A single byte below `0x80` is its own payload; in that case the buffer is
    not advanced, so the payload can be read like any other string payload.
    The declared payload must fit in the remaining input.
    """
    prefix = buffer.peek()

    if prefix < EMPTY_STRING_CODE:
        return Header(is_list=False, payload_length=1)

    buffer.advance(1)

    if prefix <= LONG_STRING_CODE:
        is_list = False
        payload_length = prefix - EMPTY_STRING_CODE
        if payload_length == 1:
            ensure(buffer.peek() >= EMPTY_STRING_CODE, NonCanonicalSingleByte)
    elif EMPTY_LIST_CODE <= prefix <= LONG_LIST_CODE:
        is_list = True
        payload_length = prefix - EMPTY_LIST_CODE
    else:
        is_list = prefix > LONG_LIST_CODE
        length_length = prefix - (
            LONG_LIST_CODE if is_list else LONG_STRING_CODE
        )
        ensure(length_length <= MAX_LENGTH_OF_LENGTH, Overflow)
        length_as_be = buffer.read(length_length)
        ensure(length_as_be[0] != 0, LeadingZero)
        payload_length = int.from_bytes(length_as_be, "big")
        ensure(payload_length >= SHORT_PAYLOAD_LIMIT, NonCanonicalSize)

    ensure(payload_length <= len(buffer), InputTooShort)
    return Header(is_list=is_list, payload_length=payload_length)


def decode_bytes(buffer: Buffer) -> Bytes:
    """
    Decode a byte string.
    """
    header = decode_header(buffer)
    ensure(not header.is_list, UnexpectedList)
    return buffer.read(header.payload_length)


def decode_fixed_bytes(buffer: Buffer, cls: Type[B]) -> B:
    """
    Decode a byte string of exactly `cls.LENGTH` bytes.
    """
    header = decode_header(buffer)
    ensure(not header.is_list, UnexpectedList)
    ensure(
        header.payload_length == cls.LENGTH,
        UnexpectedLength(
            f"expected {cls.LENGTH} bytes, got {header.payload_length}"
        ),
    )
    return cls(buffer.read(header.payload_length))


def decode_uint(buffer: Buffer, cls: Type[U]) -> U:
    """
    Decode a scalar into the unsigned integer type `cls`.

    Scalars must be minimal: zero is the empty string, and no other value
    may start with a zero byte.
    """
    header = decode_header(buffer)
    ensure(not header.is_list, UnexpectedList)
    raw = buffer.read(header.payload_length)
    ensure(len(raw) == 0 or raw[0] != 0, LeadingZero)
    value = int.from_bytes(raw, "big")
    if issubclass(cls, FixedUnsigned):
        ensure(value <= int(cls.MAX_VALUE), Overflow)
    return cls(value)


def decode_bool(buffer: Buffer) -> bool:
    """
    Decode a boolean encoded as the scalar `0` or `1`.
    """
    value = int(decode_uint(buffer, Uint))
    ensure(value in (0, 1), CustomDecodingError("invalid bool value"))
    return value == 1


def decode_structure(
    buffer: Buffer, decode_payload: Callable[[Buffer], T]
) -> T:
    """
    Decode a list with a fixed schema.

    `decode_payload` reads the fields of the list in order. The number of
    bytes it consumes must equal the payload length declared by the list
    header.
    """
    header = decode_header(buffer)
    ensure(header.is_list, UnexpectedString)

    started = len(buffer)
    value = decode_payload(buffer)
    consumed = started - len(buffer)
    ensure(
        consumed == header.payload_length,
        ListLengthMismatch(expected=header.payload_length, got=consumed),
    )
    return value


def decode_sequence(
    buffer: Buffer, decode_item: Callable[[Buffer], T]
) -> Tuple[T, ...]:
    """
    Decode a list of items that all share the decoder `decode_item`.
    """
    header = decode_header(buffer)
    ensure(header.is_list, UnexpectedString)

    started = len(buffer)
    items: List[T] = []
    while started - len(buffer) < header.payload_length:
        items.append(decode_item(buffer))

    consumed = started - len(buffer)
    ensure(
        consumed == header.payload_length,
        ListLengthMismatch(expected=header.payload_length, got=consumed),
    )
    return tuple(items)


def decode_item(buffer: Buffer) -> Simple:
    """
    Decode one item without a schema, as nested lists of byte strings.
    """
    if buffer.peek() < EMPTY_LIST_CODE:
        return decode_bytes(buffer)
    return list(decode_sequence(buffer, decode_item))


def decode_exact(decoder: Callable[[Buffer], T], encoded_data: Bytes) -> T:
    """
    Run `decoder` over `encoded_data`, which must be consumed entirely.
    """
    buffer = Buffer(encoded_data)
    value = decoder(buffer)
    ensure(
        len(buffer) == 0,
        UnexpectedLength(f"{len(buffer)} trailing byte(s) after value"),
    )
    return value


def decode(encoded_data: Bytes) -> Simple:
    """
    Decodes an integer, byte sequence, or list of RLP encodable objects
    from the byte sequence `encoded_data`, using RLP.

    Parameters
    ----------
    encoded_data :
        A sequence of bytes, in RLP form.

    Returns
    -------
    decoded_data : `Simple`
        Object decoded from `encoded_data`.
    """
    return decode_exact(decode_item, encoded_data)
