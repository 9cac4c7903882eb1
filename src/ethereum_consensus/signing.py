"""
Signing and Recovery
^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Binds a private key to a transaction through its signature hash, and
recovers the signer's address from a signature and the hash it signed.

The `v`, `r`, and `s` values are the three parts that make up the signature
of a transaction. In order to recover the sender of a transaction the two
components needed are the signature and the signing hash of the transaction.
The sender's public key can be obtained with these two values and therefore
the sender address can be retrieved.
"""

import logging

from ethereum_types.bytes import Bytes, Bytes32

from .crypto.elliptic_curve import (
    public_key_to_address,
    secp256k1_private_key,
    secp256k1_recover,
    secp256k1_sign,
)
from .crypto.hash import Hash32, eip191_hash_message
from .eth_types import Address
from .signature import Signature, YParity
from .transactions import (
    SignedTransaction,
    Transaction,
    into_signed,
    signature_hash,
)

logger = logging.getLogger(__name__)


def sign_hash(msg_hash: Hash32, secret_key: Bytes32) -> Signature:
    """
    Sign a 32 byte prehash.

    The returned signature carries a bare `y` parity; transactions give it
    their own parity form when the signature is attached.
    """
    private_key = secp256k1_private_key(secret_key)
    r, s, y_parity = secp256k1_sign(msg_hash, private_key)
    return Signature(r=r, s=s, parity=YParity(y_parity=y_parity))


def sign_transaction(
    tx: Transaction, secret_key: Bytes32
) -> SignedTransaction:
    """
    Sign `tx` with `secret_key`.

    Parameters
    ----------
    tx :
        Transaction to sign. A legacy transaction with a chain id is signed
        with replay protection.
    secret_key :
        The 32 byte secp256k1 scalar of the sender.

    Returns
    -------
    signed : `SignedTransaction`
        The signed transaction and its hash.
    """
    signature = sign_hash(signature_hash(tx), secret_key)
    signed = into_signed(tx, signature)
    logger.debug(
        "signed type %d transaction %s", tx.TX_TYPE, signed.hash.hex()
    )
    return signed


def recover_address_from_prehash(
    signature: Signature, msg_hash: Hash32
) -> Address:
    """
    Address of the key that produced `signature` over `msg_hash`.

    Raises `InvalidSignatureError` when no public key can be recovered.
    """
    public_key = secp256k1_recover(
        signature.r, signature.s, signature.y_parity, msg_hash
    )
    return public_key_to_address(public_key)


def recover_signer(signed: SignedTransaction) -> Address:
    """
    Extracts the sender address from a signed transaction.

    Parameters
    ----------
    signed :
        Transaction of interest.

    Returns
    -------
    sender : `Address`
        The address of the account that signed the transaction.
    """
    sender = recover_address_from_prehash(
        signed.signature, signature_hash(signed.tx)
    )
    logger.debug(
        "recovered sender %s of transaction %s",
        sender.hex(),
        signed.hash.hex(),
    )
    return sender


def recover_address_from_message(
    signature: Signature, message: Bytes
) -> Address:
    """
    Address of the key that signed `message` with the [EIP-191] prefix.

    [EIP-191]: https://eips.ethereum.org/EIPS/eip-191
    """
    return recover_address_from_prehash(
        signature, eip191_hash_message(message)
    )
