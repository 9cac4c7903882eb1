import json
from dataclasses import replace

import pytest
from ethereum_types.numeric import U64, U256

from ethereum_consensus.eth_types import U128, Bloom
from ethereum_consensus.receipts import Eip658Value, Receipt
from ethereum_consensus.signing import sign_transaction
from ethereum_consensus.transactions import Transaction, into_signed
from ethereum_consensus.utils.hexadecimal import (
    bytes_to_hex,
    has_hex_prefix,
    hex_to_address,
    hex_to_bloom,
    hex_to_bytes,
    hex_to_hash,
    hex_to_u64,
    hex_to_u128,
    hex_to_u256,
    quantity_to_hex,
    remove_hex_prefix,
)
from ethereum_consensus.utils.json import (
    json_to_log,
    json_to_receipt,
    json_to_signed_transaction,
    json_to_transaction,
    log_to_json,
    receipt_to_json,
    receipt_with_bloom_to_json,
    signed_transaction_to_json,
    transaction_to_json,
)

from .helpers import (
    MAINNET_SIGNATURE,
    MAINNET_TX,
    MAINNET_TX_HASH,
    SECRET_KEY_1,
    access_list_transaction,
    fee_market_transaction,
    legacy_transaction,
    log1,
)

ZERO_ROOT = "0x" + "00" * 32


def _dumps(data: object) -> str:
    return json.dumps(data, separators=(",", ":"))


def test_hex_prefix() -> None:
    assert has_hex_prefix("0xab")
    assert has_hex_prefix("0Xab")
    assert not has_hex_prefix("ab")
    assert remove_hex_prefix("0xab") == "ab"
    assert remove_hex_prefix("ab") == "ab"


def test_hex_conversions() -> None:
    assert hex_to_bytes("0x") == b""
    assert hex_to_bytes("0x0102") == b"\x01\x02"
    assert hex_to_address("0x01") == b"\x00" * 19 + b"\x01"
    assert hex_to_hash(ZERO_ROOT) == b"\x00" * 32
    assert hex_to_bloom("0x" + "ff" * 256) == Bloom(b"\xff" * 256)
    assert hex_to_u64("0x10") == U64(16)
    assert hex_to_u128("0xff") == U128(255)
    assert hex_to_u256("0x0") == U256(0)
    assert bytes_to_hex(b"\x00\xab") == "0x00ab"
    assert quantity_to_hex(U64(0)) == "0x0"
    assert quantity_to_hex(U256(4096)) == "0x1000"


def test_hex_quantity_overflow() -> None:
    with pytest.raises(OverflowError):
        hex_to_u64("0x1" + "0" * 16)


def test_legacy_transaction_json() -> None:
    assert transaction_to_json(legacy_transaction) == {
        "nonce": "0x1",
        "gasPrice": "0x2",
        "gas": "0x3",
        "value": "0x4",
        "input": "0x666f6f",
    }

    data = transaction_to_json(MAINNET_TX)
    assert list(data) == [
        "chainId",
        "nonce",
        "gasPrice",
        "gas",
        "to",
        "value",
        "input",
    ]
    assert data["to"] == "0x06012c8cf97bead5deae237070f9587f8e7a266d"


def test_fee_market_transaction_json() -> None:
    data = transaction_to_json(fee_market_transaction)
    assert data["type"] == "0x2"
    assert data["maxPriorityFeePerGas"] == "0x7"
    assert data["maxFeePerGas"] == "0x2"
    assert "gasPrice" not in data
    assert "to" not in data
    assert len(data["accessList"]) == 1


def test_access_list_json() -> None:
    data = transaction_to_json(access_list_transaction)
    assert data["type"] == "0x1"
    assert data["accessList"][1] == {
        "address": "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2",
        "storageKeys": [],
    }


@pytest.mark.parametrize(
    "tx",
    [
        legacy_transaction,
        MAINNET_TX,
        access_list_transaction,
        fee_market_transaction,
    ],
)
def test_transaction_json_round_trip(tx: Transaction) -> None:
    assert json_to_transaction(transaction_to_json(tx)) == tx


def test_unknown_transaction_type_json() -> None:
    data = transaction_to_json(fee_market_transaction)
    data["type"] = "0x5"
    with pytest.raises(ValueError):
        json_to_transaction(data)


def test_signed_transaction_json() -> None:
    signed = into_signed(MAINNET_TX, MAINNET_SIGNATURE)
    data = signed_transaction_to_json(signed)

    assert data["v"] == "0x25"
    assert "yParity" not in data
    assert data["hash"] == bytes_to_hex(MAINNET_TX_HASH)
    assert json_to_signed_transaction(data) == signed


@pytest.mark.parametrize(
    "tx",
    [
        legacy_transaction,
        replace(legacy_transaction, chain_id=U64(1)),
        access_list_transaction,
        fee_market_transaction,
    ],
)
def test_signed_transaction_json_round_trip(tx: Transaction) -> None:
    signed = sign_transaction(tx, SECRET_KEY_1)
    data = signed_transaction_to_json(signed)
    if tx.TX_TYPE != 0:
        assert data["yParity"] == data["v"]
    assert json_to_signed_transaction(data) == signed


def test_signed_transaction_json_y_parity_only() -> None:
    signed = sign_transaction(fee_market_transaction, SECRET_KEY_1)
    data = signed_transaction_to_json(signed)
    del data["v"]
    assert json_to_signed_transaction(data) == signed


def test_signed_legacy_json_chain_id_from_v() -> None:
    data = signed_transaction_to_json(
        into_signed(MAINNET_TX, MAINNET_SIGNATURE)
    )
    del data["chainId"]

    signed = json_to_signed_transaction(data)
    assert signed.tx.chain_id == 1
    assert signed.signature.v == 37
    assert signed.hash == MAINNET_TX_HASH


@pytest.mark.parametrize(
    "chain_id, v",
    [
        ("0x1", "0x1b"),
        ("0x1", "0x1c"),
        ("0x2", "0x25"),
        ("0x1", "0x0"),
    ],
)
def test_signed_legacy_json_rejects_mismatched_v(
    chain_id: str, v: str
) -> None:
    data = signed_transaction_to_json(
        into_signed(MAINNET_TX, MAINNET_SIGNATURE)
    )
    data["chainId"] = chain_id
    data["v"] = v
    with pytest.raises(ValueError):
        json_to_signed_transaction(data)


def test_signed_legacy_json_without_chain_id() -> None:
    signed = sign_transaction(legacy_transaction, SECRET_KEY_1)
    data = signed_transaction_to_json(signed)
    assert "chainId" not in data
    assert json_to_signed_transaction(data).tx.chain_id is None


def test_signed_typed_json_rejects_legacy_v() -> None:
    signed = sign_transaction(fee_market_transaction, SECRET_KEY_1)
    data = signed_transaction_to_json(signed)
    del data["yParity"]
    data["v"] = "0x1b"
    with pytest.raises(ValueError):
        json_to_signed_transaction(data)


def test_log_json() -> None:
    data = log_to_json(log1)
    assert data["data"] == "0x666f6f626172"
    assert len(data["topics"]) == 2
    assert json_to_log(data) == log1


def test_receipt_json_status() -> None:
    receipt = Receipt(
        status=Eip658Value.eip658(True),
        cumulative_gas_used=U128(0),
        logs=(),
    )
    encoded = _dumps(receipt_to_json(receipt))
    assert encoded == '{"status":"0x1","cumulativeGasUsed":"0x0","logs":[]}'
    assert json_to_receipt(json.loads(encoded)) == receipt


def test_receipt_json_failed_status() -> None:
    receipt = Receipt(
        status=Eip658Value.eip658(False),
        cumulative_gas_used=U128(21000),
        logs=(log1,),
    )
    data = receipt_to_json(receipt)
    assert data["status"] == "0x0"
    assert data["cumulativeGasUsed"] == "0x5208"
    assert json_to_receipt(data) == receipt


def test_receipt_json_root() -> None:
    receipt = Receipt(
        status=Eip658Value.post_state(hex_to_hash(ZERO_ROOT)),
        cumulative_gas_used=U128(0),
        logs=(),
    )
    encoded = _dumps(receipt_to_json(receipt))
    assert encoded == (
        '{"root":"' + ZERO_ROOT + '","cumulativeGasUsed":"0x0","logs":[]}'
    )
    assert json_to_receipt(json.loads(encoded)) == receipt


def test_receipt_with_bloom_json() -> None:
    receipt = Receipt(
        status=Eip658Value.eip658(True),
        cumulative_gas_used=U128(1),
        logs=(log1,),
    ).with_bloom()
    data = receipt_with_bloom_to_json(receipt)
    assert list(data) == ["status", "cumulativeGasUsed", "logs", "logsBloom"]
    assert hex_to_bloom(data["logsBloom"]) == receipt.logs_bloom
