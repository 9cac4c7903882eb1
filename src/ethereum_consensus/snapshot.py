"""
Flat, plain Python mirror of a legacy transaction, for persisting it within
a process (for instance with `pickle` or a key value store) without going
through RLP.
"""

from typing import Optional, TypedDict

from ethereum_types.bytes import Bytes0
from ethereum_types.numeric import U64, U256

from .eth_types import U128, Address
from .transactions import LegacyTransaction


class LegacySnapshot(TypedDict):
    """
    Fields of a `LegacyTransaction` as built-in types. `to` is `None` for
    contract creation.
    """

    chain_id: Optional[int]
    nonce: int
    gas_price: int
    gas_limit: int
    to: Optional[bytes]
    value: int
    input: bytes


def to_snapshot(tx: LegacyTransaction) -> LegacySnapshot:
    """
    Flatten `tx`.
    """
    return LegacySnapshot(
        chain_id=None if tx.chain_id is None else int(tx.chain_id),
        nonce=int(tx.nonce),
        gas_price=int(tx.gas_price),
        gas_limit=int(tx.gas_limit),
        to=bytes(tx.to) if len(tx.to) > 0 else None,
        value=int(tx.value),
        input=bytes(tx.input),
    )


def from_snapshot(snapshot: LegacySnapshot) -> LegacyTransaction:
    """
    Rebuild the transaction flattened by `to_snapshot`. Values out of range
    for their field raise `OverflowError`.
    """
    chain_id = snapshot["chain_id"]
    to = snapshot["to"]
    return LegacyTransaction(
        chain_id=None if chain_id is None else U64(chain_id),
        nonce=U64(snapshot["nonce"]),
        gas_price=U128(snapshot["gas_price"]),
        gas_limit=U64(snapshot["gas_limit"]),
        to=Bytes0() if to is None else Address(to),
        value=U256(snapshot["value"]),
        input=snapshot["input"],
    )
