"""
Ethereum Consensus Core
^^^^^^^^^^^^^^^^^^^^^^^

The byte-level and cryptographic core of Ethereum transactions and receipts:
the canonical RLP codec, the typed transaction envelope, signing and sender
recovery, receipts with their logs bloom, and wallet key material.

Everything in this package is a pure function of its inputs (apart from
keystore file access), so values may be encoded, decoded, signed and
recovered concurrently without coordination.
"""

__version__ = "0.1.0"
