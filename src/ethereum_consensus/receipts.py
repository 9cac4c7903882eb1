"""
Receipts
^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

A receipt records the outcome of executing a transaction: whether it
succeeded (or, before [EIP-658], the state root after it ran), the gas used
by the block so far, and the logs it emitted.

The bloom filter over a receipt's logs is derived data. [`Receipt`] computes
it on demand with [`bloom_slow`]; [`ReceiptWithBloom`] computes it once and
keeps it alongside the receipt.

[EIP-658]: https://eips.ethereum.org/EIPS/eip-658
[`Receipt`]: ref:ethereum_consensus.receipts.Receipt
[`bloom_slow`]: ref:ethereum_consensus.receipts.Receipt.bloom_slow
[`ReceiptWithBloom`]: ref:ethereum_consensus.receipts.ReceiptWithBloom
"""

from dataclasses import dataclass
from typing import (
    Callable,
    Generic,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
    Union,
)

from ethereum_types.bytes import Bytes
from ethereum_types.frozen import slotted_freezable

from . import rlp
from .bloom import logs_bloom
from .crypto.hash import Hash32
from .eth_types import U128, Bloom, Log, decode_log
from .exceptions import (
    CustomDecodingError,
    InputTooShort,
    TransactionTypeError,
    UnexpectedList,
)
from .transactions import LEGACY_TX_TYPE, TRANSACTION_TYPES
from .utils.ensure import ensure


@slotted_freezable
@dataclass
class Eip658Value:
    """
    Outcome of a transaction: a success flag after [EIP-658], or the
    intermediate state root before it.

    [EIP-658]: https://eips.ethereum.org/EIPS/eip-658
    """

    value: Union[bool, Hash32]

    @classmethod
    def eip658(cls, success: bool) -> "Eip658Value":
        """
        A success flag.
        """
        return cls(value=bool(success))

    @classmethod
    def post_state(cls, root: Hash32) -> "Eip658Value":
        """
        A pre-[EIP-658] state root.

        [EIP-658]: https://eips.ethereum.org/EIPS/eip-658
        """
        return cls(value=Hash32(root))

    def is_eip658(self) -> bool:
        """
        Whether this is a success flag rather than a state root.
        """
        return isinstance(self.value, bool)

    def coerce_status(self) -> bool:
        """
        The success flag. A state root carries no status and is reported as
        success.
        """
        if isinstance(self.value, bool):
            return self.value
        return True

    @property
    def json_key(self) -> str:
        """
        Key this value is serialized under in JSON receipts.
        """
        return "status" if self.is_eip658() else "root"

    def encode_rlp(self) -> Bytes:
        """
        A boolean scalar, or the 32 byte state root.
        """
        return rlp.encode(self.value)


def decode_eip658_value(buffer: rlp.Buffer) -> Eip658Value:
    """
    Read a status flag or a 32 byte state root.
    """
    header = rlp.decode_header(buffer)
    ensure(not header.is_list, UnexpectedList)
    payload = buffer.read(header.payload_length)

    if len(payload) == Hash32.LENGTH:
        return Eip658Value.post_state(Hash32(payload))
    if payload == b"":
        return Eip658Value.eip658(False)
    if payload == b"\x01":
        return Eip658Value.eip658(True)
    raise CustomDecodingError("invalid receipt status")


@slotted_freezable
@dataclass
class Receipt:
    """
    Result of a transaction.
    """

    status: Eip658Value
    cumulative_gas_used: U128
    logs: Tuple[Log, ...]

    def bloom_slow(self) -> Bloom:
        """
        Compute the bloom of the logs. Use `ReceiptWithBloom` to avoid
        recomputing it.
        """
        return logs_bloom(self.logs)

    def with_bloom(self) -> "ReceiptWithBloom":
        """
        This receipt together with its bloom.
        """
        return ReceiptWithBloom.from_receipt(self)


@slotted_freezable
@dataclass
class ReceiptWithBloom:
    """
    A [`Receipt`] and the bloom of its logs.

    Build it with [`from_receipt`] so that `logs_bloom` is derived from the
    logs. The constructor itself does not check the bloom; use
    [`bloom_matches`] on values built by hand. Decoding rejects a bloom that
    does not match.

    [`Receipt`]: ref:ethereum_consensus.receipts.Receipt
    [`from_receipt`]: ref:ethereum_consensus.receipts.ReceiptWithBloom.from_receipt
    [`bloom_matches`]: ref:ethereum_consensus.receipts.ReceiptWithBloom.bloom_matches
    """

    receipt: Receipt
    logs_bloom: Bloom

    @classmethod
    def from_receipt(cls, receipt: Receipt) -> "ReceiptWithBloom":
        """
        Compute the bloom of `receipt` once.
        """
        return cls(receipt=receipt, logs_bloom=receipt.bloom_slow())

    def bloom(self) -> Bloom:
        """
        The stored bloom.
        """
        return self.logs_bloom

    def bloom_matches(self) -> bool:
        """
        Whether the stored bloom is the bloom of the receipt's logs.
        """
        return self.logs_bloom == self.receipt.bloom_slow()

    def _fields(self) -> Tuple[rlp.Extended, ...]:
        return (
            self.receipt.status,
            self.receipt.cumulative_gas_used,
            self.logs_bloom,
            self.receipt.logs,
        )

    def payload_length(self) -> int:
        """
        Encoded length of the fields, excluding the list header.
        """
        return sum(rlp.encoded_length(field) for field in self._fields())

    def encode_rlp(self) -> Bytes:
        """
        `rlp([status, cumulative_gas_used, logs_bloom, logs])`.
        """
        header = rlp.Header(is_list=True, payload_length=self.payload_length())
        return header.encode() + rlp.join_encodings(self._fields())


def decode_receipt_with_bloom(buffer: rlp.Buffer) -> ReceiptWithBloom:
    """
    Read `[status, cumulative_gas_used, logs_bloom, logs]`, checking that
    the bloom matches the logs.
    """

    def decode_payload(payload: rlp.Buffer) -> ReceiptWithBloom:
        status = decode_eip658_value(payload)
        cumulative_gas_used = rlp.decode_uint(payload, U128)
        bloom = rlp.decode_fixed_bytes(payload, Bloom)
        logs = rlp.decode_sequence(payload, decode_log)
        return ReceiptWithBloom(
            receipt=Receipt(
                status=status,
                cumulative_gas_used=cumulative_gas_used,
                logs=logs,
            ),
            logs_bloom=bloom,
        )

    decoded = rlp.decode_structure(buffer, decode_payload)
    ensure(
        decoded.bloom_matches(),
        CustomDecodingError("receipt bloom does not match its logs"),
    )
    return decoded


def encode_receipt(receipt: ReceiptWithBloom, tx_type: int) -> Bytes:
    """
    Encode a receipt for a transaction of type `tx_type`. Receipts of typed
    transactions are prefixed with the type byte, like the transactions
    themselves.
    """
    encoded = receipt.encode_rlp()
    if tx_type == LEGACY_TX_TYPE:
        return encoded
    if tx_type not in TRANSACTION_TYPES:
        raise TransactionTypeError(tx_type)
    return bytes([tx_type]) + encoded


def decode_receipt(data: Bytes) -> Tuple[int, ReceiptWithBloom]:
    """
    Decode a receipt produced by `encode_receipt`, returning the type of the
    transaction it belongs to along with the receipt.
    """
    ensure(len(data) > 0, InputTooShort)

    if data[0] >= rlp.EMPTY_LIST_CODE:
        return LEGACY_TX_TYPE, rlp.decode_exact(
            decode_receipt_with_bloom, data
        )

    if data[0] not in TRANSACTION_TYPES:
        raise TransactionTypeError(data[0])
    return data[0], rlp.decode_exact(decode_receipt_with_bloom, data[1:])


T = TypeVar("T")
R = TypeVar("R")


class Receipts(Generic[T]):
    """
    Receipts grouped by block: the outer sequence follows block order, each
    inner sequence follows transaction order within its block.
    """

    def __init__(self, receipt_lists: Iterable[Sequence[T]] = ()) -> None:
        self.receipt_lists: List[List[T]] = [
            list(receipts) for receipts in receipt_lists
        ]

    @classmethod
    def from_block(cls, receipts: Sequence[T]) -> "Receipts[T]":
        """
        A collection holding the receipts of a single block.
        """
        return cls([receipts])

    def push(self, receipts: Sequence[T]) -> None:
        """
        Append the receipts of one more block.
        """
        self.receipt_lists.append(list(receipts))

    def __len__(self) -> int:
        return len(self.receipt_lists)

    def is_empty(self) -> bool:
        return not self.receipt_lists

    def __iter__(self) -> Iterator[List[T]]:
        return iter(self.receipt_lists)

    def __getitem__(self, index: int) -> List[T]:
        return self.receipt_lists[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Receipts):
            return NotImplemented
        return self.receipt_lists == other.receipt_lists

    def root_slow(
        self, index: int, aggregate: Callable[[Tuple[T, ...]], R]
    ) -> Optional[R]:
        """
        Aggregate the receipts of block `index` into a root with
        `aggregate`, or `None` if there is no such block.
        """
        if not 0 <= index < len(self.receipt_lists):
            return None
        return aggregate(tuple(self.receipt_lists[index]))
