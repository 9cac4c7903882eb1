"""
Cryptographic Hash Functions
^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Keccak-256, the hash behind transaction hashes, signing hashes, addresses
and the logs bloom.
"""

from Crypto.Hash import keccak
from ethereum_types.bytes import Bytes, Bytes32

Hash32 = Bytes32

EIP191_PREFIX = b"\x19Ethereum Signed Message:\n"


def keccak256(buffer: Bytes) -> Hash32:
    """
    Computes the keccak256 hash of the input `buffer`.

    Parameters
    ----------
    buffer :
        Input for the hashing function.

    Returns
    -------
    hash : `Hash32`
        Output of the hash function.
    """
    k = keccak.new(digest_bits=256)
    return Hash32(k.update(buffer).digest())


def eip191_hash_message(message: Bytes) -> Hash32:
    """
    Hash a personal message as described in [EIP-191] (version `0x45`).

    [EIP-191]: https://eips.ethereum.org/EIPS/eip-191
    """
    length = str(len(message)).encode()
    return keccak256(EIP191_PREFIX + length + message)
