"""
Ethereum Logs Bloom
^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

This modules defines functions for calculating bloom filters of logs. For the
general theory of bloom filters see e.g. `Wikipedia
<https://en.wikipedia.org/wiki/Bloom_filter>`_. Bloom filters are used to allow
for efficient searching of logs by address and/or topic, by rapidly
eliminating blocks and receipts from their search.

A bloom never produces false negatives: every address and topic of the logs
it was built from is reported by [`bloom_contains`]. False positives are
expected.

[`bloom_contains`]: ref:ethereum_consensus.bloom.bloom_contains
"""

from typing import Iterable, Iterator, Tuple

from ethereum_types.bytes import Bytes

from .crypto.hash import keccak256
from .eth_types import Bloom, Log

BLOOM_BYTE_LENGTH = 256


def _bloom_positions(bloom_entry: Bytes) -> Iterator[Tuple[int, int]]:
    """
    Yields the `(byte_index, bit_value)` pairs selected by `bloom_entry`.
    """
    hash = keccak256(bloom_entry)

    for idx in (0, 2, 4):
        # Least significant 11 bits of the 16 bit word, counted from the
        # least significant bit of the whole filter.
        bit_to_set = int.from_bytes(hash[idx : idx + 2], "big") & 0x07FF
        # Index of that bit when byte 0 is the most significant byte.
        bit_index = 0x07FF - bit_to_set

        yield bit_index // 8, 1 << (7 - (bit_index % 8))


def add_to_bloom(bloom: bytearray, bloom_entry: Bytes) -> None:
    """
    Add a bloom entry to the bloom filter (`bloom`).

    The number of hash functions used is 3. They are calculated by taking the
    least significant 11 bits from the first 3 16-bit words of the
    `keccak_256()` hash of `bloom_entry`.

    Parameters
    ----------
    bloom :
        The bloom filter.
    bloom_entry :
        An entry which is to be added to bloom filter.
    """
    for byte_index, bit_value in _bloom_positions(bloom_entry):
        bloom[byte_index] = bloom[byte_index] | bit_value


def logs_bloom(logs: Iterable[Log]) -> Bloom:
    """
    Obtain the logs bloom from a list of log entries.

    The address and each topic of a log are added to the bloom filter.

    Parameters
    ----------
    logs :
        List of logs for which the logs bloom is to be obtained.

    Returns
    -------
    logs_bloom : `Bloom`
        The logs bloom obtained which is 256 bytes with some bits set as per
        the caller address and the log topics.
    """
    bloom: bytearray = bytearray(b"\x00" * BLOOM_BYTE_LENGTH)

    for log in logs:
        add_to_bloom(bloom, log.address)
        for topic in log.topics:
            add_to_bloom(bloom, topic)

    return Bloom(bloom)


def bloom_contains(bloom: Bloom, bloom_entry: Bytes) -> bool:
    """
    Whether all three bits selected by `bloom_entry` are set in `bloom`.
    """
    return all(
        bloom[byte_index] & bit_value
        for byte_index, bit_value in _bloom_positions(bloom_entry)
    )


def combine_blooms(blooms: Iterable[Bloom]) -> Bloom:
    """
    Bitwise union of several blooms, as found in a block header.
    """
    combined = bytearray(BLOOM_BYTE_LENGTH)
    for bloom in blooms:
        for index, byte in enumerate(bloom):
            combined[index] |= byte
    return Bloom(combined)
