"""
Json Utilities
^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Conversion of transactions, logs and receipts to and from the JSON-RPC
representation: camelCase keys, quantities as minimal `0x` hexadecimal and
byte strings as `0x` hexadecimal.

A legacy transaction calls its gas limit `gas`, omits `chainId` when it is not
bound to a chain, and omits `to` for contract creation. A receipt stores its
outcome under `status` or, before [EIP-658], under `root`.

[EIP-658]: https://eips.ethereum.org/EIPS/eip-658
"""

from dataclasses import replace
from typing import Any, Dict, List, Tuple

from ethereum_types.bytes import Bytes0
from ethereum_types.numeric import Uint

from ..eth_types import Access, Log, To
from ..receipts import Eip658Value, Receipt, ReceiptWithBloom
from ..signature import Signature, YParity, parity_chain_id, parity_from_v
from ..transactions import (
    AccessListTransaction,
    FeeMarketTransaction,
    LegacyTransaction,
    SignedTransaction,
    Transaction,
    into_signed,
)
from .hexadecimal import (
    bytes_to_hex,
    hex_to_address,
    hex_to_bytes,
    hex_to_hash,
    hex_to_u64,
    hex_to_u128,
    hex_to_u256,
    hex_to_unsigned,
    quantity_to_hex,
)


def _to_to_json(to: To, data: Dict[str, Any]) -> None:
    if len(to) > 0:
        data["to"] = bytes_to_hex(to)


def _json_to_to(json_data: Dict[str, Any]) -> To:
    to = json_data.get("to")
    if to is None or to == "" or to == "0x":
        return Bytes0()
    return hex_to_address(to)


def access_list_to_json(
    access_list: Tuple[Access, ...]
) -> List[Dict[str, Any]]:
    """
    Convert an access list to its JSON form.
    """
    return [
        {
            "address": bytes_to_hex(access.account),
            "storageKeys": [bytes_to_hex(slot) for slot in access.slots],
        }
        for access in access_list
    ]


def json_to_access_list(json_data: List[Dict[str, Any]]) -> Tuple[Access, ...]:
    """
    Convert the JSON form of an access list.
    """
    return tuple(
        Access(
            account=hex_to_address(entry["address"]),
            slots=tuple(hex_to_hash(key) for key in entry["storageKeys"]),
        )
        for entry in json_data
    )


def transaction_to_json(tx: Transaction) -> Dict[str, Any]:
    """
    Convert an unsigned transaction to its JSON form.

    Parameters
    ----------
    tx :
        The transaction to convert.

    Returns
    -------
    json_data : `Dict[str, Any]`
        The transaction fields, keyed in camelCase.
    """
    data: Dict[str, Any] = {}

    if isinstance(tx, LegacyTransaction):
        if tx.chain_id is not None:
            data["chainId"] = quantity_to_hex(tx.chain_id)
        data["nonce"] = quantity_to_hex(tx.nonce)
        data["gasPrice"] = quantity_to_hex(tx.gas_price)
    else:
        data["type"] = quantity_to_hex(tx.TX_TYPE)
        data["chainId"] = quantity_to_hex(tx.chain_id)
        data["nonce"] = quantity_to_hex(tx.nonce)
        if isinstance(tx, AccessListTransaction):
            data["gasPrice"] = quantity_to_hex(tx.gas_price)
        else:
            data["maxPriorityFeePerGas"] = quantity_to_hex(
                tx.max_priority_fee_per_gas
            )
            data["maxFeePerGas"] = quantity_to_hex(tx.max_fee_per_gas)

    data["gas"] = quantity_to_hex(tx.gas_limit)
    _to_to_json(tx.to, data)
    data["value"] = quantity_to_hex(tx.value)
    data["input"] = bytes_to_hex(tx.input)

    if not isinstance(tx, LegacyTransaction):
        data["accessList"] = access_list_to_json(tx.access_list)

    return data


def json_to_transaction(json_data: Dict[str, Any]) -> Transaction:
    """
    Convert the JSON form of an unsigned transaction. A missing `type` means
    a legacy transaction.
    """
    tx_type = int(json_data.get("type", "0x0"), 16)
    to = _json_to_to(json_data)

    if tx_type == LegacyTransaction.TX_TYPE:
        chain_id = json_data.get("chainId")
        return LegacyTransaction(
            chain_id=None if chain_id is None else hex_to_u64(chain_id),
            nonce=hex_to_u64(json_data["nonce"]),
            gas_price=hex_to_u128(json_data["gasPrice"]),
            gas_limit=hex_to_u64(json_data["gas"]),
            to=to,
            value=hex_to_u256(json_data["value"]),
            input=hex_to_bytes(json_data["input"]),
        )
    elif tx_type == AccessListTransaction.TX_TYPE:
        return AccessListTransaction(
            chain_id=hex_to_u64(json_data["chainId"]),
            nonce=hex_to_u64(json_data["nonce"]),
            gas_price=hex_to_u128(json_data["gasPrice"]),
            gas_limit=hex_to_u64(json_data["gas"]),
            to=to,
            value=hex_to_u256(json_data["value"]),
            input=hex_to_bytes(json_data["input"]),
            access_list=json_to_access_list(json_data.get("accessList", [])),
        )
    elif tx_type == FeeMarketTransaction.TX_TYPE:
        return FeeMarketTransaction(
            chain_id=hex_to_u64(json_data["chainId"]),
            nonce=hex_to_u64(json_data["nonce"]),
            max_priority_fee_per_gas=hex_to_u128(
                json_data["maxPriorityFeePerGas"]
            ),
            max_fee_per_gas=hex_to_u128(json_data["maxFeePerGas"]),
            gas_limit=hex_to_u64(json_data["gas"]),
            to=to,
            value=hex_to_u256(json_data["value"]),
            input=hex_to_bytes(json_data["input"]),
            access_list=json_to_access_list(json_data.get("accessList", [])),
        )
    else:
        raise ValueError(f"unknown transaction type {tx_type}")


def signed_transaction_to_json(signed: SignedTransaction) -> Dict[str, Any]:
    """
    Convert a signed transaction to its JSON form, with `v`, `r`, `s` and
    `hash` added to the transaction fields.
    """
    data = transaction_to_json(signed.tx)
    signature = signed.signature
    data["v"] = quantity_to_hex(signature.v)
    data["r"] = quantity_to_hex(signature.r)
    data["s"] = quantity_to_hex(signature.s)
    if isinstance(signature.parity, YParity):
        data["yParity"] = data["v"]
    data["hash"] = bytes_to_hex(signed.hash)
    return data


def json_to_signed_transaction(json_data: Dict[str, Any]) -> SignedTransaction:
    """
    Convert the JSON form of a signed transaction.

    The hash is recomputed rather than read. A legacy transaction takes its
    chain id from an [EIP-155] `v`; a `chainId` that disagrees with `v`, or a
    parity form that does not fit the transaction type, raises `ValueError`.

    [EIP-155]: https://eips.ethereum.org/EIPS/eip-155
    """
    tx = json_to_transaction(json_data)
    v = json_data["v"] if "v" in json_data else json_data["yParity"]
    parity = parity_from_v(hex_to_unsigned(v, Uint))

    if isinstance(tx, LegacyTransaction):
        if isinstance(parity, YParity):
            raise ValueError("invalid parity for legacy transaction")
        chain_id = parity_chain_id(parity)
        if tx.chain_id is not None and (
            chain_id is None or int(tx.chain_id) != int(chain_id)
        ):
            raise ValueError(
                f"chainId {int(tx.chain_id)} does not match v {int(v, 16)}"
            )
        tx = replace(tx, chain_id=chain_id)
    elif not isinstance(parity, YParity):
        raise ValueError("invalid parity for typed transaction")

    signature = Signature(
        r=hex_to_u256(json_data["r"]),
        s=hex_to_u256(json_data["s"]),
        parity=parity,
    )
    return into_signed(tx, signature)


def log_to_json(log: Log) -> Dict[str, Any]:
    """
    Convert a log to its JSON form.
    """
    return {
        "address": bytes_to_hex(log.address),
        "topics": [bytes_to_hex(topic) for topic in log.topics],
        "data": bytes_to_hex(log.data),
    }


def json_to_log(json_data: Dict[str, Any]) -> Log:
    """
    Convert the JSON form of a log.
    """
    return Log(
        address=hex_to_address(json_data["address"]),
        topics=tuple(hex_to_hash(topic) for topic in json_data["topics"]),
        data=hex_to_bytes(json_data["data"]),
    )


def receipt_to_json(receipt: Receipt) -> Dict[str, Any]:
    """
    Convert a receipt to its JSON form.

    Parameters
    ----------
    receipt :
        The receipt to convert.

    Returns
    -------
    json_data : `Dict[str, Any]`
        `status` (or `root`), `cumulativeGasUsed` and `logs`, in that order.
    """
    status = receipt.status
    if isinstance(status.value, bool):
        status_json = quantity_to_hex(int(status.value))
    else:
        status_json = bytes_to_hex(status.value)

    return {
        status.json_key: status_json,
        "cumulativeGasUsed": quantity_to_hex(receipt.cumulative_gas_used),
        "logs": [log_to_json(log) for log in receipt.logs],
    }


def json_to_receipt(json_data: Dict[str, Any]) -> Receipt:
    """
    Convert the JSON form of a receipt. The outcome is read from `status`
    if present, otherwise from `root`.
    """
    if "status" in json_data:
        status = Eip658Value.eip658(int(json_data["status"], 16) != 0)
    else:
        status = Eip658Value.post_state(hex_to_hash(json_data["root"]))

    return Receipt(
        status=status,
        cumulative_gas_used=hex_to_u128(json_data["cumulativeGasUsed"]),
        logs=tuple(json_to_log(log) for log in json_data["logs"]),
    )


def receipt_with_bloom_to_json(receipt: ReceiptWithBloom) -> Dict[str, Any]:
    """
    Convert a receipt to its JSON form, with `logsBloom` added.
    """
    data = receipt_to_json(receipt.receipt)
    data["logsBloom"] = bytes_to_hex(receipt.logs_bloom)
    return data
