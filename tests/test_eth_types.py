import pytest
from ethereum_types.bytes import Bytes, Bytes0
from ethereum_types.numeric import U256

from ethereum_consensus import rlp
from ethereum_consensus.eth_types import (
    U128,
    Address,
    decode_access_list,
    decode_log,
    decode_to,
    is_create,
)
from ethereum_consensus.exceptions import (
    ListLengthMismatch,
    UnexpectedLength,
    UnexpectedList,
)

from .helpers import access_list_transaction, address1, log1, log2


def test_u128_bounds() -> None:
    assert int(U128.MAX_VALUE) == 2**128 - 1
    assert U128(2**128 - 1) == 2**128 - 1
    with pytest.raises(OverflowError):
        U128(2**128)


def test_u128_encoding() -> None:
    assert rlp.encode(U128(0)) == b"\x80"
    assert rlp.encode(U128(2**128 - 1)) == b"\x90" + b"\xff" * 16
    assert rlp.encode(U128(5)) == rlp.encode(U256(5))


def test_decode_to() -> None:
    assert rlp.decode_exact(decode_to, b"\x80") == Bytes0()
    assert is_create(rlp.decode_exact(decode_to, b"\x80"))

    to = rlp.decode_exact(decode_to, rlp.encode(address1))
    assert isinstance(to, Address)
    assert to == address1
    assert not is_create(to)


@pytest.mark.parametrize(
    "encoded, error",
    [
        (b"\x81\xaa", UnexpectedLength),
        (b"\x93" + b"\x00" * 19, UnexpectedLength),
        (b"\x95" + b"\x00" * 21, UnexpectedLength),
        (b"\xc0", UnexpectedList),
    ],
)
def test_decode_to_rejects(encoded: Bytes, error: type) -> None:
    with pytest.raises(error):
        rlp.decode_exact(decode_to, encoded)


@pytest.mark.parametrize("log", [log1, log2])
def test_decode_log(log: object) -> None:
    assert rlp.decode_exact(decode_log, rlp.encode(log)) == log


def test_decode_log_extra_field() -> None:
    encoded = rlp.encode([address1, [], b"", b""])
    with pytest.raises(ListLengthMismatch):
        rlp.decode_exact(decode_log, encoded)


def test_decode_access_list() -> None:
    access_list = access_list_transaction.access_list
    assert (
        rlp.decode_exact(decode_access_list, rlp.encode(access_list))
        == access_list
    )
