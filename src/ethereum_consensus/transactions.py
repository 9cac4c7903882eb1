"""
Transactions are atomic units of work created externally to Ethereum and
submitted to be executed. If Ethereum is viewed as a state machine,
transactions are the events that move between states.

Several transaction shapes share one wire format through the [EIP-2718]
envelope: a legacy transaction is a bare RLP list (its first byte is always
at least `0xc0`), while a typed transaction is a single type byte followed by
the RLP list of its fields.

Every variant provides the same four operations:

- `fields_length()`, the total encoded length of its fields;
- `encode_fields()`, the fields encoded back to back in schema order;
- `decode_fields(buffer)`, the inverse of `encode_fields()`;
- `encode_for_signing()`, the preimage of the signature hash.

[EIP-2718]: https://eips.ethereum.org/EIPS/eip-2718
"""

from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple, Type, Union

from ethereum_types.bytes import Bytes
from ethereum_types.frozen import slotted_freezable
from ethereum_types.numeric import U64, U256, Uint

from . import rlp
from .crypto.hash import Hash32, keccak256
from .eth_types import (
    U128,
    Access,
    Address,
    To,
    decode_access_list,
    decode_to,
)
from .exceptions import (
    CustomDecodingError,
    InputTooShort,
    ListLengthMismatch,
    TransactionTypeError,
    UnexpectedLength,
    UnexpectedString,
)
from .signature import (
    Eip155Parity,
    RawParity,
    Signature,
    YParity,
    decode_vrs,
    encode_vrs,
    parity_chain_id,
    vrs_length,
)
from .utils.ensure import ensure

LEGACY_TX_TYPE = 0
ACCESS_LIST_TX_TYPE = 1
FEE_MARKET_TX_TYPE = 2

U64_SIZE = 8
U128_SIZE = 16
U256_SIZE = 32


def _fields_length(fields: Tuple[rlp.Extended, ...]) -> int:
    return sum(rlp.encoded_length(field) for field in fields)


def _access_list_size(access_list: Tuple[Access, ...]) -> int:
    return sum(
        Address.LENGTH + len(access.slots) * U256_SIZE
        for access in access_list
    )


@slotted_freezable
@dataclass
class LegacyTransaction:
    """
    Atomic operation performed on the block chain, in the format that
    predates typed transactions.

    `chain_id` is not part of the field list. When it is set, the transaction
    is signed with [EIP-155] replay protection and the chain id is carried by
    the signature's `v` value.

    [EIP-155]: https://eips.ethereum.org/EIPS/eip-155
    """

    TX_TYPE = LEGACY_TX_TYPE

    chain_id: Optional[U64]
    nonce: U64
    gas_price: U128
    gas_limit: U64
    to: To
    value: U256
    input: Bytes

    def _fields(self) -> Tuple[rlp.Extended, ...]:
        return (
            self.nonce,
            self.gas_price,
            self.gas_limit,
            self.to,
            self.value,
            self.input,
        )

    def fields_length(self) -> int:
        """
        Encoded length of the fields, excluding the list header.
        """
        return _fields_length(self._fields())

    def encode_fields(self) -> Bytes:
        """
        `nonce, gas_price, gas_limit, to, value, input`, each RLP encoded.
        """
        return rlp.join_encodings(self._fields())

    @classmethod
    def decode_fields(cls, buffer: rlp.Buffer) -> "LegacyTransaction":
        """
        Read the fields written by `encode_fields()`. The chain id is left
        unset; it is only known once the signature has been read.
        """
        return cls(
            chain_id=None,
            nonce=rlp.decode_uint(buffer, U64),
            gas_price=rlp.decode_uint(buffer, U128),
            gas_limit=rlp.decode_uint(buffer, U64),
            to=decode_to(buffer),
            value=rlp.decode_uint(buffer, U256),
            input=rlp.decode_bytes(buffer),
        )

    def eip155_fields_length(self) -> int:
        """
        Encoded length of the `chain_id, 0, 0` signing trailer, or zero for a
        transaction without replay protection.
        """
        if self.chain_id is None:
            return 0
        # Each zero scalar encodes as the single byte `0x80`.
        return rlp.encoded_length(self.chain_id) + 2

    def encode_eip155_fields(self) -> Bytes:
        """
        The `chain_id, 0, 0` signing trailer, if a chain id is set.
        """
        if self.chain_id is None:
            return b""
        return rlp.join_encodings((self.chain_id, Uint(0), Uint(0)))

    def encode_for_signing(self) -> Bytes:
        """
        RLP list of the fields, followed by the [EIP-155] trailer when the
        transaction is bound to a chain.

        [EIP-155]: https://eips.ethereum.org/EIPS/eip-155
        """
        header = rlp.Header(
            is_list=True,
            payload_length=self.fields_length() + self.eip155_fields_length(),
        )
        return (
            header.encode()
            + self.encode_fields()
            + self.encode_eip155_fields()
        )

    def size(self) -> int:
        """
        Heuristic for the in-memory size of the transaction.
        """
        return (
            U64_SIZE  # chain_id
            + U64_SIZE  # nonce
            + U128_SIZE  # gas_price
            + U64_SIZE  # gas_limit
            + len(self.to)
            + U256_SIZE  # value
            + len(self.input)
        )


@slotted_freezable
@dataclass
class AccessListTransaction:
    """
    The transaction type added in [EIP-2930] to support access lists.

    [EIP-2930]: https://eips.ethereum.org/EIPS/eip-2930
    """

    TX_TYPE = ACCESS_LIST_TX_TYPE

    chain_id: U64
    nonce: U64
    gas_price: U128
    gas_limit: U64
    to: To
    value: U256
    input: Bytes
    access_list: Tuple[Access, ...]

    def _fields(self) -> Tuple[rlp.Extended, ...]:
        return (
            self.chain_id,
            self.nonce,
            self.gas_price,
            self.gas_limit,
            self.to,
            self.value,
            self.input,
            self.access_list,
        )

    def fields_length(self) -> int:
        """
        Encoded length of the fields, excluding the list header.
        """
        return _fields_length(self._fields())

    def encode_fields(self) -> Bytes:
        """
        Each field RLP encoded, in schema order.
        """
        return rlp.join_encodings(self._fields())

    @classmethod
    def decode_fields(cls, buffer: rlp.Buffer) -> "AccessListTransaction":
        """
        Read the fields written by `encode_fields()`.
        """
        return cls(
            chain_id=rlp.decode_uint(buffer, U64),
            nonce=rlp.decode_uint(buffer, U64),
            gas_price=rlp.decode_uint(buffer, U128),
            gas_limit=rlp.decode_uint(buffer, U64),
            to=decode_to(buffer),
            value=rlp.decode_uint(buffer, U256),
            input=rlp.decode_bytes(buffer),
            access_list=decode_access_list(buffer),
        )

    def encode_for_signing(self) -> Bytes:
        """
        Type byte followed by the RLP list of the fields.
        """
        header = rlp.Header(is_list=True, payload_length=self.fields_length())
        return bytes([self.TX_TYPE]) + header.encode() + self.encode_fields()

    def size(self) -> int:
        """
        Heuristic for the in-memory size of the transaction.
        """
        return (
            U64_SIZE  # chain_id
            + U64_SIZE  # nonce
            + U128_SIZE  # gas_price
            + U64_SIZE  # gas_limit
            + len(self.to)
            + U256_SIZE  # value
            + len(self.input)
            + _access_list_size(self.access_list)
        )


@slotted_freezable
@dataclass
class FeeMarketTransaction:
    """
    The transaction type added in [EIP-1559].

    [EIP-1559]: https://eips.ethereum.org/EIPS/eip-1559
    """

    TX_TYPE = FEE_MARKET_TX_TYPE

    chain_id: U64
    nonce: U64
    max_priority_fee_per_gas: U128
    max_fee_per_gas: U128
    gas_limit: U64
    to: To
    value: U256
    input: Bytes
    access_list: Tuple[Access, ...]

    def _fields(self) -> Tuple[rlp.Extended, ...]:
        return (
            self.chain_id,
            self.nonce,
            self.max_priority_fee_per_gas,
            self.max_fee_per_gas,
            self.gas_limit,
            self.to,
            self.value,
            self.input,
            self.access_list,
        )

    def fields_length(self) -> int:
        """
        Encoded length of the fields, excluding the list header.
        """
        return _fields_length(self._fields())

    def encode_fields(self) -> Bytes:
        """
        Each field RLP encoded, in schema order.
        """
        return rlp.join_encodings(self._fields())

    @classmethod
    def decode_fields(cls, buffer: rlp.Buffer) -> "FeeMarketTransaction":
        """
        Read the fields written by `encode_fields()`.
        """
        return cls(
            chain_id=rlp.decode_uint(buffer, U64),
            nonce=rlp.decode_uint(buffer, U64),
            max_priority_fee_per_gas=rlp.decode_uint(buffer, U128),
            max_fee_per_gas=rlp.decode_uint(buffer, U128),
            gas_limit=rlp.decode_uint(buffer, U64),
            to=decode_to(buffer),
            value=rlp.decode_uint(buffer, U256),
            input=rlp.decode_bytes(buffer),
            access_list=decode_access_list(buffer),
        )

    def encode_for_signing(self) -> Bytes:
        """
        Type byte followed by the RLP list of the fields.
        """
        header = rlp.Header(is_list=True, payload_length=self.fields_length())
        return bytes([self.TX_TYPE]) + header.encode() + self.encode_fields()

    def size(self) -> int:
        """
        Heuristic for the in-memory size of the transaction.
        """
        return (
            U64_SIZE  # chain_id
            + U64_SIZE  # nonce
            + U128_SIZE  # max_priority_fee_per_gas
            + U128_SIZE  # max_fee_per_gas
            + U64_SIZE  # gas_limit
            + len(self.to)
            + U256_SIZE  # value
            + len(self.input)
            + _access_list_size(self.access_list)
        )


Transaction = Union[
    LegacyTransaction,
    AccessListTransaction,
    FeeMarketTransaction,
]

TypedTransaction = Union[AccessListTransaction, FeeMarketTransaction]

TRANSACTION_TYPES: Dict[int, Type[TypedTransaction]] = {
    ACCESS_LIST_TX_TYPE: AccessListTransaction,
    FEE_MARKET_TX_TYPE: FeeMarketTransaction,
}
"""
Typed transaction classes, by their [EIP-2718] type byte.

[EIP-2718]: https://eips.ethereum.org/EIPS/eip-2718
"""


@slotted_freezable
@dataclass
class SignedTransaction:
    """
    A transaction together with its signature and its hash.

    Built by [`into_signed`] or by decoding; `hash` always equals
    `transaction_hash(tx, signature)`.

    [`into_signed`]: ref:ethereum_consensus.transactions.into_signed
    """

    tx: Transaction
    signature: Signature
    hash: Hash32


def transaction_type(tx: Transaction) -> int:
    """
    The [EIP-2718] type byte of `tx`, `0` for legacy transactions.

    [EIP-2718]: https://eips.ethereum.org/EIPS/eip-2718
    """
    return tx.TX_TYPE


def transaction_size(tx: Transaction) -> int:
    """
    Heuristic for the in-memory size of `tx`. This is not its encoded length.
    """
    return tx.size()


def signature_hash(tx: Transaction) -> Hash32:
    """
    The hash signed by the sender of `tx`.
    """
    return keccak256(tx.encode_for_signing())


def normalize_signature(tx: Transaction, signature: Signature) -> Signature:
    """
    Give `signature` the parity form `tx` is serialized with.

    A legacy transaction bound to a chain gets an [EIP-155] parity carrying
    that chain id, a legacy transaction without a chain id gets the `27`/`28`
    form, and typed transactions get the bare parity. Only the `y` parity of
    the input is used.

    [EIP-155]: https://eips.ethereum.org/EIPS/eip-155
    """
    y_parity = signature.y_parity
    if isinstance(tx, LegacyTransaction):
        if tx.chain_id is not None:
            parity = Eip155Parity(chain_id=tx.chain_id, y_parity=y_parity)
        else:
            parity = RawParity(y_parity=y_parity)
    else:
        parity = YParity(y_parity=y_parity)

    if parity == signature.parity:
        return signature
    return signature.with_parity(parity)


def _signed_header(tx: Transaction, signature: Signature) -> rlp.Header:
    return rlp.Header(
        is_list=True,
        payload_length=tx.fields_length() + vrs_length(signature),
    )


def encode_signed(tx: Transaction, signature: Signature) -> Bytes:
    """
    Encode `tx` together with `signature`.

    Legacy transactions are `rlp([fields..., v, r, s])`; typed transactions
    are `type || rlp([fields..., y_parity, r, s])`.
    """
    signature = normalize_signature(tx, signature)
    encoded = (
        _signed_header(tx, signature).encode()
        + tx.encode_fields()
        + encode_vrs(signature)
    )
    if isinstance(tx, LegacyTransaction):
        return encoded
    return bytes([tx.TX_TYPE]) + encoded


def encoded_signed_length(tx: Transaction, signature: Signature) -> int:
    """
    Length of `encode_signed(tx, signature)`.
    """
    signature = normalize_signature(tx, signature)
    length = _signed_header(tx, signature).length_with_payload()
    if isinstance(tx, LegacyTransaction):
        return length
    return 1 + length


def transaction_hash(tx: Transaction, signature: Signature) -> Hash32:
    """
    The identifier of the signed transaction.
    """
    return keccak256(encode_signed(tx, signature))


def into_signed(tx: Transaction, signature: Signature) -> SignedTransaction:
    """
    Attach `signature` to `tx`, normalizing its parity and computing the
    transaction hash.
    """
    signature = normalize_signature(tx, signature)
    return SignedTransaction(
        tx=tx,
        signature=signature,
        hash=keccak256(encode_signed(tx, signature)),
    )


def decode_legacy_with_signature(
    buffer: rlp.Buffer,
) -> Tuple[LegacyTransaction, Signature]:
    """
    Read a signed legacy transaction from `buffer`.

    The chain id of the transaction is taken from the signature: it is set
    for an [EIP-155] `v`, and unset for `27`/`28`. A bare `0`/`1` parity is
    rejected.

    [EIP-155]: https://eips.ethereum.org/EIPS/eip-155
    """
    header = rlp.decode_header(buffer)
    ensure(header.is_list, UnexpectedString)

    started = len(buffer)
    tx = LegacyTransaction.decode_fields(buffer)
    signature = decode_vrs(buffer)

    if isinstance(signature.parity, YParity):
        raise CustomDecodingError("invalid parity for legacy transaction")

    tx = replace(tx, chain_id=parity_chain_id(signature.parity))

    consumed = started - len(buffer)
    ensure(
        consumed == header.payload_length,
        ListLengthMismatch(expected=header.payload_length, got=consumed),
    )
    return tx, signature


def decode_typed_with_signature(
    cls: Type[TypedTransaction], buffer: rlp.Buffer
) -> Tuple[TypedTransaction, Signature]:
    """
    Read the RLP list of a signed typed transaction, after its type byte.
    """

    def decode_payload(
        payload: rlp.Buffer,
    ) -> Tuple[TypedTransaction, Signature]:
        tx = cls.decode_fields(payload)
        signature = decode_vrs(payload)
        if not isinstance(signature.parity, YParity):
            raise CustomDecodingError("invalid parity for typed transaction")
        return tx, signature

    return rlp.decode_structure(buffer, decode_payload)


def decode_signed(data: Bytes) -> SignedTransaction:
    """
    Decode a signed transaction of any known type.

    Parameters
    ----------
    data :
        A legacy RLP list, or a type byte followed by a typed payload.

    Returns
    -------
    signed : `SignedTransaction`
        The transaction, its signature and its hash.
    """
    ensure(len(data) > 0, InputTooShort)

    if data[0] >= rlp.EMPTY_LIST_CODE:
        tx, signature = rlp.decode_exact(decode_legacy_with_signature, data)
        return into_signed(tx, signature)

    try:
        cls = TRANSACTION_TYPES[data[0]]
    except KeyError as e:
        raise TransactionTypeError(data[0]) from e

    typed, signature = rlp.decode_exact(
        lambda buffer: decode_typed_with_signature(cls, buffer), data[1:]
    )
    return into_signed(typed, signature)


def _decode_legacy_unsigned(buffer: rlp.Buffer) -> LegacyTransaction:
    header = rlp.decode_header(buffer)
    ensure(header.is_list, UnexpectedString)

    started = len(buffer)
    tx = LegacyTransaction.decode_fields(buffer)

    # Anything left in the list is the EIP-155 `chain_id, 0, 0` trailer.
    if started - len(buffer) < header.payload_length:
        chain_id = rlp.decode_uint(buffer, U64)
        rlp.decode_uint(buffer, U256)
        rlp.decode_uint(buffer, U256)
        tx = replace(tx, chain_id=chain_id)

    consumed = started - len(buffer)
    ensure(
        consumed == header.payload_length,
        UnexpectedLength(
            f"expected {header.payload_length} payload bytes, "
            f"got {consumed}"
        ),
    )
    return tx


def decode_legacy_unsigned(data: Bytes) -> LegacyTransaction:
    """
    Decode the signing form of a legacy transaction, as produced by
    `LegacyTransaction.encode_for_signing()`.
    """
    return rlp.decode_exact(_decode_legacy_unsigned, data)
