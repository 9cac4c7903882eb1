"""
Cryptographic primitives: keccak hashing and secp256k1 signatures.
"""
