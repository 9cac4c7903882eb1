"""
Signatures
^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

An ECDSA signature is the pair of scalars `(r, s)` plus the parity of the `y`
coordinate of the curve point `R`, which is needed to recover the signer's
public key. How that parity is serialized as `v` depends on the transaction
it signs:

- typed transactions store `y_parity` directly (`v ∈ {0, 1}`), see
  [`YParity`];
- legacy transactions signed before [EIP-155] use `v = 27 + y_parity`, see
  [`RawParity`];
- legacy transactions signed with replay protection fold the chain id into
  `v = 35 + 2 * chain_id + y_parity`, see [`Eip155Parity`].

[EIP-155]: https://eips.ethereum.org/EIPS/eip-155
[`YParity`]: ref:ethereum_consensus.signature.YParity
[`RawParity`]: ref:ethereum_consensus.signature.RawParity
[`Eip155Parity`]: ref:ethereum_consensus.signature.Eip155Parity
"""

from dataclasses import dataclass, replace
from typing import Optional, Union

from ethereum_types.bytes import Bytes
from ethereum_types.frozen import slotted_freezable
from ethereum_types.numeric import U64, U256, Uint

from . import rlp
from .exceptions import (
    CustomDecodingError,
    InvalidParityError,
    InvalidSignatureError,
)

EIP155_V_OFFSET = 35
RAW_V_OFFSET = 27


@slotted_freezable
@dataclass
class YParity:
    """
    Bare `y` parity, as used by typed transactions.
    """

    y_parity: bool


@slotted_freezable
@dataclass
class RawParity:
    """
    Legacy parity without replay protection, serialized as `27` or `28`.
    """

    y_parity: bool


@slotted_freezable
@dataclass
class Eip155Parity:
    """
    Legacy parity bound to a chain, serialized as `35 + 2 * chain_id + y`.
    """

    chain_id: U64
    y_parity: bool


Parity = Union[YParity, RawParity, Eip155Parity]


def parity_to_v(parity: Parity) -> Uint:
    """
    The `v` value `parity` is serialized as.
    """
    y = int(parity.y_parity)
    if isinstance(parity, Eip155Parity):
        return Uint(EIP155_V_OFFSET + 2 * int(parity.chain_id) + y)
    elif isinstance(parity, RawParity):
        return Uint(RAW_V_OFFSET + y)
    else:
        return Uint(y)


def parity_from_v(v: Uint) -> Parity:
    """
    Interpret a serialized `v` value.

    Values between `2` and `26`, and between `29` and `34` do not describe
    any parity and are rejected.
    """
    value = int(v)
    if value in (0, 1):
        return YParity(y_parity=bool(value))
    if value in (RAW_V_OFFSET, RAW_V_OFFSET + 1):
        return RawParity(y_parity=bool(value - RAW_V_OFFSET))
    if value < EIP155_V_OFFSET:
        raise InvalidParityError(value)

    chain_id, y = divmod(value - EIP155_V_OFFSET, 2)
    if chain_id > int(U64.MAX_VALUE):
        raise InvalidParityError(value)
    return Eip155Parity(chain_id=U64(chain_id), y_parity=bool(y))


def parity_chain_id(parity: Parity) -> Optional[U64]:
    """
    The chain id folded into `parity`, if any.
    """
    if isinstance(parity, Eip155Parity):
        return parity.chain_id
    return None


@slotted_freezable
@dataclass
class Signature:
    """
    An ECDSA signature over secp256k1.
    """

    r: U256
    s: U256
    parity: Parity

    @property
    def y_parity(self) -> bool:
        """
        Parity of the `y` coordinate, whatever its serialized form.
        """
        return self.parity.y_parity

    @property
    def v(self) -> Uint:
        """
        Serialized parity.
        """
        return parity_to_v(self.parity)

    def with_parity(self, parity: Parity) -> "Signature":
        """
        Same scalars, different parity form.
        """
        return replace(self, parity=parity)

    def to_bytes(self) -> Bytes:
        """
        The 65 byte `r || s || y_parity` form understood by secp256k1
        libraries.
        """
        return (
            self.r.to_be_bytes32()
            + self.s.to_be_bytes32()
            + bytes([int(self.y_parity)])
        )

    @classmethod
    def from_bytes(cls, data: Bytes) -> "Signature":
        """
        Parse the 65 byte `r || s || v` form. The last byte may be a bare
        parity or a pre-[EIP-155] `27`/`28`.

        [EIP-155]: https://eips.ethereum.org/EIPS/eip-155
        """
        if len(data) != 65:
            raise InvalidSignatureError(
                f"expected 65 signature bytes, got {len(data)}"
            )
        parity = parity_from_v(Uint(data[64]))
        if isinstance(parity, Eip155Parity):
            raise InvalidParityError(data[64])
        return cls(
            r=U256.from_be_bytes(data[0:32]),
            s=U256.from_be_bytes(data[32:64]),
            parity=parity,
        )


def encode_vrs(signature: Signature) -> Bytes:
    """
    RLP encodings of `v`, `r` and `s`, concatenated.
    """
    return rlp.join_encodings((signature.v, signature.r, signature.s))


def vrs_length(signature: Signature) -> int:
    """
    Length of `encode_vrs(signature)`.
    """
    return (
        rlp.encoded_length(signature.v)
        + rlp.encoded_length(signature.r)
        + rlp.encoded_length(signature.s)
    )


def decode_vrs(buffer: rlp.Buffer) -> Signature:
    """
    Read `v`, `r` and `s` from `buffer`.
    """
    v = rlp.decode_uint(buffer, Uint)
    r = rlp.decode_uint(buffer, U256)
    s = rlp.decode_uint(buffer, U256)
    try:
        parity = parity_from_v(v)
    except InvalidParityError as e:
        raise CustomDecodingError("invalid signature parity") from e
    return Signature(r=r, s=s, parity=parity)
