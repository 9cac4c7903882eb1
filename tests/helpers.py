from ethereum_types.bytes import Bytes0, Bytes32
from ethereum_types.numeric import U64, U256

from ethereum_consensus.crypto.hash import keccak256
from ethereum_consensus.eth_types import U128, Access, Log
from ethereum_consensus.signature import Eip155Parity, Signature
from ethereum_consensus.transactions import (
    AccessListTransaction,
    FeeMarketTransaction,
    LegacyTransaction,
)
from ethereum_consensus.utils.hexadecimal import (
    hex_to_address,
    hex_to_bytes,
)

SECRET_KEY_1 = Bytes32((1).to_bytes(32, "big"))
ADDRESS_1 = hex_to_address("0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf")

hash1 = keccak256(b"foo")
hash2 = keccak256(b"bar")
hash3 = keccak256(b"baz")

address1 = hex_to_address("0x00000000219ab540356cbb839cbe05303d7705fa")
address2 = hex_to_address("0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2")

#
# Legacy transaction signed with replay protection on mainnet
# (0xbb3a336e3f823ec18197f1e13ee875700f08f03e2cab75f0d0b118dabb44cba0).
#

MAINNET_TX = LegacyTransaction(
    chain_id=U64(1),
    nonce=U64(0x18),
    gas_price=U128(0xFA56EA00),
    gas_limit=U64(119902),
    to=hex_to_address("0x06012c8cf97bead5deae237070f9587f8e7a266d"),
    value=U256(0x1C6BF526340000),
    input=hex_to_bytes(
        "f7d8c88300000000000000000000000000000000000000000000000000000000000c"
        "ee6100000000000000000000000000000000000000000000000000000000000ac3e1"
    ),
)

MAINNET_SIGNATURE = Signature(
    r=U256(
        0x2A378831CF81D99A3F06A18AE1B6CA366817AB4D88A70053C41D7A8F0368E031
    ),
    s=U256(
        0x450D831A05B6E418724436C05C155E0A1B7B921015D0FBC2F667AED709AC4FB5
    ),
    parity=Eip155Parity(chain_id=U64(1), y_parity=False),
)

MAINNET_TX_HASH = hex_to_bytes(
    "bb3a336e3f823ec18197f1e13ee875700f08f03e2cab75f0d0b118dabb44cba0"
)
MAINNET_SIGNER = hex_to_address("0x398137383b3d25c92898c656696e41950e47316b")

#
# Raw signed legacy transaction, and the address that signed it.
#

RAW_LEGACY_TX = hex_to_bytes(
    "f9015482078b8505d21dba0083022ef1947a250d5630b4cf539739df2c5dacb4c659f2"
    "488d880c46549a521b13d8b8e47ff36ab50000000000000000000000000000000000"
    "000000000066ab5a608bd00a23f2fe000000000000000000000000000000000000000"
    "000000000000000000000008000000000000000000000000048c04ed5691981c42154"
    "c6167398f95e8f38a7ff00000000000000000000000000000000000000000000000000"
    "000000632ceac7000000000000000000000000000000000000000000000000000000"
    "0000000002000000000000000000000000c02aaa39b223fe8d0a0e5c4f27ead9083c7"
    "56cc20000000000000000000000006c6ee5e31d828de241282b9606c8e98ea48526e2"
    "25a0c9077369501641a92ef7399ff81c21639ed4fd8fc69cb793cfa1dbfab342e10aa0"
    "615facb2f1bcf3274a354cfe384a38d0cc008a11c2dd23a69111bc6930ba27a8"
)
RAW_LEGACY_TX_SIGNER = hex_to_address(
    "0xa12e1462d0ceD572f396F58B6E2D03894cD7C8a4"
)

legacy_transaction = LegacyTransaction(
    chain_id=None,
    nonce=U64(1),
    gas_price=U128(2),
    gas_limit=U64(3),
    to=Bytes0(),
    value=U256(4),
    input=b"foo",
)

access_list_transaction = AccessListTransaction(
    chain_id=U64(1),
    nonce=U64(1),
    gas_price=U128(2),
    gas_limit=U64(3),
    to=address1,
    value=U256(4),
    input=b"bar",
    access_list=(
        Access(account=address1, slots=(hash1, hash2)),
        Access(account=address2, slots=()),
    ),
)

fee_market_transaction = FeeMarketTransaction(
    chain_id=U64(1),
    nonce=U64(1),
    max_priority_fee_per_gas=U128(7),
    max_fee_per_gas=U128(2),
    gas_limit=U64(3),
    to=Bytes0(),
    value=U256(4),
    input=b"bar",
    access_list=(Access(account=address1, slots=(hash3,)),),
)

log1 = Log(address=address1, topics=(hash1, hash2), data=b"foobar")
log2 = Log(address=address2, topics=(), data=b"")
