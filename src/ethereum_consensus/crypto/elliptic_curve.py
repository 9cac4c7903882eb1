"""
Elliptic Curves
^^^^^^^^^^^^^^^

secp256k1 signing and public key recovery, delegated to `coincurve`.
"""

from typing import Tuple

import coincurve
from ethereum_types.bytes import Bytes, Bytes20, Bytes32, Bytes64
from ethereum_types.numeric import U256

from ..exceptions import InvalidPrivateKeyError, InvalidSignatureError
from .hash import Hash32, keccak256

SECP256K1B = 7
SECP256K1P = (
    0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
)
SECP256K1N = U256(
    0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
)


def is_valid_secret(secret: Bytes) -> bool:
    """
    Whether `secret` is a canonical, non-zero 32-byte secp256k1 scalar.
    """
    if len(secret) != 32:
        return False
    scalar = int.from_bytes(secret, "big")
    return 0 < scalar < int(SECP256K1N)


def secp256k1_private_key(secret: Bytes32) -> coincurve.PrivateKey:
    """
    Wrap `secret` in a `coincurve` private key, rejecting scalars that are
    zero or not below the curve order.
    """
    if not is_valid_secret(secret):
        raise InvalidPrivateKeyError("secret scalar is not in (0, N)")
    return coincurve.PrivateKey(bytes(secret))


def secp256k1_public_key(private_key: coincurve.PrivateKey) -> Bytes64:
    """
    Uncompressed public key of `private_key`, without the `0x04` prefix.
    """
    return Bytes64(private_key.public_key.format(compressed=False)[1:])


def public_key_to_address(public_key: Bytes64) -> Bytes20:
    """
    The account address is the last 20 bytes of the keccak256 hash of the
    uncompressed public key.
    """
    return Bytes20(keccak256(public_key)[12:32])


def secp256k1_sign(
    msg_hash: Hash32, private_key: coincurve.PrivateKey
) -> Tuple[U256, U256, bool]:
    """
    Returns the `(r, s, y_parity)` signature of a message hash.

    `coincurve` produces deterministic (RFC 6979) signatures with a low `s`.
    """
    signature = private_key.sign_recoverable(bytes(msg_hash), hasher=None)

    return (
        U256.from_be_bytes(signature[0:32]),
        U256.from_be_bytes(signature[32:64]),
        bool(signature[64]),
    )


def secp256k1_recover(
    r: U256, s: U256, y_parity: bool, msg_hash: Hash32
) -> Bytes64:
    """
    Recovers the public key from a given signature.

    Parameters
    ----------
    r :
        x coordinate of the signature's curve point.
    s :
        Signature proof scalar.
    y_parity :
        Whether the y coordinate of the curve point is odd.
    msg_hash :
        Hash of the message being recovered.

    Returns
    -------
    public_key : `Bytes64`
        Recovered public key.
    """
    r_int = int(r)
    s_int = int(s)

    if not 0 < r_int < int(SECP256K1N):
        raise InvalidSignatureError("bad r")
    if not 0 < s_int < int(SECP256K1N):
        raise InvalidSignatureError("bad s")

    is_square = pow(
        pow(r_int, 3, SECP256K1P) + SECP256K1B,
        (SECP256K1P - 1) // 2,
        SECP256K1P,
    )

    if is_square != 1:
        raise InvalidSignatureError(
            "r is not the x-coordinate of a point on the secp256k1 curve"
        )

    signature = bytearray([0] * 65)
    signature[0:32] = r_int.to_bytes(32, "big")
    signature[32:64] = s_int.to_bytes(32, "big")
    signature[64] = int(y_parity)

    # If the recovery algorithm returns the point at infinity,
    # the signature is considered invalid
    # the below function will raise a ValueError.
    try:
        public_key = coincurve.PublicKey.from_signature_and_message(
            bytes(signature), bytes(msg_hash), hasher=None
        )
    except ValueError as e:
        raise InvalidSignatureError from e

    return Bytes64(public_key.format(compressed=False)[1:])
