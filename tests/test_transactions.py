from dataclasses import replace
from typing import Optional

import pytest
from ethereum_types.bytes import Bytes, Bytes0
from ethereum_types.numeric import U64, U256, Uint

from ethereum_consensus import rlp
from ethereum_consensus.exceptions import (
    CustomDecodingError,
    InputTooShort,
    ListLengthMismatch,
    TransactionTypeError,
    UnexpectedLength,
)
from ethereum_consensus.signature import (
    Eip155Parity,
    RawParity,
    Signature,
    YParity,
    encode_vrs,
)
from ethereum_consensus.signing import recover_signer, sign_transaction
from ethereum_consensus.transactions import (
    LegacyTransaction,
    Transaction,
    decode_legacy_unsigned,
    decode_signed,
    encode_signed,
    encoded_signed_length,
    into_signed,
    normalize_signature,
    signature_hash,
    transaction_hash,
    transaction_size,
    transaction_type,
)

from .helpers import (
    MAINNET_SIGNATURE,
    MAINNET_SIGNER,
    MAINNET_TX,
    MAINNET_TX_HASH,
    RAW_LEGACY_TX,
    RAW_LEGACY_TX_SIGNER,
    SECRET_KEY_1,
    access_list_transaction,
    fee_market_transaction,
    legacy_transaction,
)

SIGNATURE = Signature(r=U256(1), s=U256(2), parity=YParity(y_parity=True))


def _legacy_with_vrs(tx: LegacyTransaction, vrs: Bytes) -> Bytes:
    payload = tx.encode_fields() + vrs
    header = rlp.Header(is_list=True, payload_length=len(payload))
    return header.encode() + payload


def test_mainnet_transaction_hash() -> None:
    signed = into_signed(MAINNET_TX, MAINNET_SIGNATURE)
    assert signed.hash == MAINNET_TX_HASH
    assert transaction_hash(MAINNET_TX, MAINNET_SIGNATURE) == MAINNET_TX_HASH
    assert signed.signature.v == 37


def test_mainnet_transaction_signer() -> None:
    signed = into_signed(MAINNET_TX, MAINNET_SIGNATURE)
    assert recover_signer(signed) == MAINNET_SIGNER


def test_mainnet_transaction_decodes() -> None:
    encoded = encode_signed(MAINNET_TX, MAINNET_SIGNATURE)
    assert len(encoded) == encoded_signed_length(MAINNET_TX, MAINNET_SIGNATURE)

    decoded = decode_signed(encoded)
    assert decoded.tx == MAINNET_TX
    assert decoded.signature == MAINNET_SIGNATURE
    assert decoded.hash == MAINNET_TX_HASH


def test_raw_legacy_transaction() -> None:
    signed = decode_signed(RAW_LEGACY_TX)
    assert isinstance(signed.tx, LegacyTransaction)
    assert signed.tx.chain_id == 1
    assert recover_signer(signed) == RAW_LEGACY_TX_SIGNER
    assert encode_signed(signed.tx, signed.signature) == RAW_LEGACY_TX


@pytest.mark.parametrize("chain_id", [U64(1), U64(1337), None])
def test_legacy_chain_id_pairs_with_v(chain_id: Optional[U64]) -> None:
    tx = replace(legacy_transaction, chain_id=chain_id)
    signed = sign_transaction(tx, SECRET_KEY_1)

    if chain_id is None:
        assert isinstance(signed.signature.parity, RawParity)
        assert signed.signature.v in (27, 28)
    else:
        assert signed.signature.parity == Eip155Parity(
            chain_id=chain_id, y_parity=signed.signature.y_parity
        )

    decoded = decode_signed(encode_signed(signed.tx, signed.signature))
    assert decoded == signed
    assert decoded.tx.chain_id == chain_id


def test_signing_preimage_has_eip155_trailer() -> None:
    unprotected = replace(MAINNET_TX, chain_id=None)
    trailer = MAINNET_TX.encode_for_signing()[-3:]

    assert MAINNET_TX.eip155_fields_length() == 3
    assert unprotected.eip155_fields_length() == 0
    assert trailer == b"\x01\x80\x80"
    assert signature_hash(MAINNET_TX) != signature_hash(unprotected)


@pytest.mark.parametrize(
    "tx",
    [legacy_transaction, access_list_transaction, fee_market_transaction],
)
def test_signed_round_trip(tx: Transaction) -> None:
    signed = sign_transaction(tx, SECRET_KEY_1)
    encoded = encode_signed(signed.tx, signed.signature)

    assert len(encoded) == encoded_signed_length(signed.tx, signed.signature)
    if transaction_type(tx) != 0:
        assert encoded[0] == transaction_type(tx)

    decoded = decode_signed(encoded)
    assert decoded == signed
    assert recover_signer(decoded) == recover_signer(signed)


def test_typed_transactions_use_bare_parity() -> None:
    raw = SIGNATURE.with_parity(RawParity(y_parity=True))
    normalized = normalize_signature(fee_market_transaction, raw)
    assert normalized.parity == YParity(y_parity=True)
    assert normalized.v == 1


def test_normalize_keeps_matching_signature() -> None:
    assert normalize_signature(access_list_transaction, SIGNATURE) is SIGNATURE


def test_legacy_rejects_bare_parity() -> None:
    encoded = _legacy_with_vrs(MAINNET_TX, encode_vrs(SIGNATURE))
    with pytest.raises(CustomDecodingError):
        decode_signed(encoded)


@pytest.mark.parametrize("v", [2, 26, 29, 30, 34])
def test_legacy_rejects_undefined_v(v: int) -> None:
    vrs = rlp.join_encodings((Uint(v), U256(1), U256(2)))
    with pytest.raises(CustomDecodingError):
        decode_signed(_legacy_with_vrs(MAINNET_TX, vrs))


def test_typed_rejects_legacy_parity() -> None:
    tx = fee_market_transaction
    raw = SIGNATURE.with_parity(RawParity(y_parity=False))
    payload = tx.encode_fields() + encode_vrs(raw)
    header = rlp.Header(is_list=True, payload_length=len(payload))
    with pytest.raises(CustomDecodingError):
        decode_signed(bytes([tx.TX_TYPE]) + header.encode() + payload)


@pytest.mark.parametrize("type_byte", [0x03, 0x05, 0x7F])
def test_unknown_transaction_type(type_byte: int) -> None:
    with pytest.raises(TransactionTypeError) as excinfo:
        decode_signed(bytes([type_byte]) + b"\xc0")
    assert excinfo.value.transaction_type == type_byte


def test_empty_input() -> None:
    with pytest.raises(InputTooShort):
        decode_signed(b"")


def test_truncated_transaction() -> None:
    with pytest.raises(InputTooShort):
        decode_signed(RAW_LEGACY_TX[:-1])


def test_trailing_bytes() -> None:
    with pytest.raises(UnexpectedLength):
        decode_signed(RAW_LEGACY_TX + b"\x80")


def test_padded_legacy_list() -> None:
    encoded = _legacy_with_vrs(
        MAINNET_TX, encode_vrs(MAINNET_SIGNATURE) + b"\x80"
    )
    with pytest.raises(ListLengthMismatch):
        decode_signed(encoded)


def test_padded_typed_list() -> None:
    tx = access_list_transaction
    payload = tx.encode_fields() + encode_vrs(SIGNATURE) + b"\x80"
    header = rlp.Header(is_list=True, payload_length=len(payload))
    with pytest.raises(ListLengthMismatch):
        decode_signed(bytes([tx.TX_TYPE]) + header.encode() + payload)


@pytest.mark.parametrize("tx", [MAINNET_TX, legacy_transaction])
def test_decode_legacy_unsigned(tx: LegacyTransaction) -> None:
    assert decode_legacy_unsigned(tx.encode_for_signing()) == tx


def test_decode_legacy_unsigned_leftover_bytes() -> None:
    payload = (
        MAINNET_TX.encode_fields()
        + MAINNET_TX.encode_eip155_fields()
        + b"\x80"
    )
    header = rlp.Header(is_list=True, payload_length=len(payload))
    with pytest.raises(UnexpectedLength):
        decode_legacy_unsigned(header.encode() + payload)


def test_transaction_size() -> None:
    # Contract creation with a 3 byte input.
    assert transaction_size(legacy_transaction) == 75
    assert transaction_size(replace(legacy_transaction, to=Bytes0())) == 75
    # Two access entries, one of them with two storage keys.
    assert transaction_size(access_list_transaction) == (
        8 + 8 + 16 + 8 + 20 + 32 + 3 + (20 + 2 * 32) + 20
    )
    assert transaction_size(fee_market_transaction) == (
        8 + 8 + 16 + 16 + 8 + 0 + 32 + 3 + (20 + 32)
    )


def test_transaction_type() -> None:
    assert transaction_type(legacy_transaction) == 0
    assert transaction_type(access_list_transaction) == 1
    assert transaction_type(fee_market_transaction) == 2
