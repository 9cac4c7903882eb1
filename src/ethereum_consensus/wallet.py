"""
Wallets
^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

A [`Wallet`] owns a secp256k1 private key, the address derived from it, and
optionally the chain id it signs transactions for.

The address is always derived from the key; it cannot be set. The secret is
never logged and is left out of `repr()`.

[`Wallet`]: ref:ethereum_consensus.wallet.Wallet
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Callable, Optional, Tuple, Union

from ethereum_types.bytes import Bytes, Bytes32
from ethereum_types.numeric import U64

from .crypto.elliptic_curve import (
    is_valid_secret,
    public_key_to_address,
    secp256k1_private_key,
    secp256k1_public_key,
)
from .crypto.hash import Hash32, eip191_hash_message
from .eth_types import Address
from .exceptions import ChainIdMismatchError, InvalidPrivateKeyError
from .keystore import (
    Keystore,
    Password,
    Web3SecretStorage,
    read_keystore,
    write_keystore,
)
from .signature import Signature
from .signing import sign_hash
from .transactions import SignedTransaction, Transaction, into_signed
from .transactions import signature_hash as transaction_signature_hash
from .utils.hexadecimal import remove_hex_prefix

logger = logging.getLogger(__name__)

SECRET_LENGTH = 32
MAX_RANDOM_DRAWS = 128

RandomSource = Callable[[int], bytes]
"""
Returns the requested number of random bytes, like `os.urandom` or
`secrets.token_bytes`.
"""


class Wallet:
    """
    A private key, its address and an optional chain id.
    """

    __slots__ = ("_secret", "_address", "_chain_id")

    def __init__(self, secret: Bytes32, chain_id: Optional[U64] = None):
        if not is_valid_secret(secret):
            raise InvalidPrivateKeyError("secret scalar is not in (0, N)")

        private_key = secp256k1_private_key(Bytes32(secret))
        self._secret = Bytes32(secret)
        self._address = public_key_to_address(
            secp256k1_public_key(private_key)
        )
        self._chain_id = chain_id

    @classmethod
    def from_bytes(
        cls, secret: Bytes32, chain_id: Optional[U64] = None
    ) -> "Wallet":
        """
        Wallet for a 32 byte secret.
        """
        if len(secret) != SECRET_LENGTH:
            raise InvalidPrivateKeyError(
                f"expected {SECRET_LENGTH} bytes, got {len(secret)}"
            )
        return cls(Bytes32(secret), chain_id)

    @classmethod
    def from_slice(cls, data: Bytes) -> "Wallet":
        """
        Wallet for a big endian secret of at most 32 bytes. Shorter input is
        left padded with zeros.
        """
        if len(data) > SECRET_LENGTH:
            raise InvalidPrivateKeyError(
                f"expected at most {SECRET_LENGTH} bytes, got {len(data)}"
            )
        return cls(Bytes32(bytes(data).rjust(SECRET_LENGTH, b"\x00")))

    @classmethod
    def from_hex(cls, hex_string: str) -> "Wallet":
        """
        Wallet for a secret written as exactly 64 hexadecimal digits, with
        or without a `0x` prefix.
        """
        digits = remove_hex_prefix(hex_string)
        if len(digits) != SECRET_LENGTH * 2:
            raise InvalidPrivateKeyError(
                f"expected {SECRET_LENGTH * 2} hex digits, got {len(digits)}"
            )
        try:
            secret = bytes.fromhex(digits)
        except ValueError as e:
            raise InvalidPrivateKeyError("invalid hex private key") from e
        return cls(Bytes32(secret))

    @classmethod
    def random_with(cls, rng: RandomSource) -> "Wallet":
        """
        Wallet for a fresh secret drawn from `rng`. Draws that are not a
        valid scalar are discarded; after `MAX_RANDOM_DRAWS` of them the
        source is rejected.
        """
        for _ in range(MAX_RANDOM_DRAWS):
            candidate = rng(SECRET_LENGTH)
            if len(candidate) != SECRET_LENGTH:
                raise InvalidPrivateKeyError(
                    f"random source returned {len(candidate)} bytes"
                )
            if is_valid_secret(candidate):
                return cls(Bytes32(candidate))

        raise InvalidPrivateKeyError(
            f"no valid secret in {MAX_RANDOM_DRAWS} random draws"
        )

    @property
    def address(self) -> Address:
        """
        Address derived from the public key.
        """
        return self._address

    @property
    def chain_id(self) -> Optional[U64]:
        """
        Chain this wallet signs transactions for, if any.
        """
        return self._chain_id

    def with_chain_id(self, chain_id: Optional[U64]) -> "Wallet":
        """
        Same key, bound to `chain_id`.
        """
        return type(self)(self._secret, chain_id)

    def to_bytes(self) -> Bytes32:
        """
        The 32 byte secret.
        """
        return self._secret

    def sign_hash(self, msg_hash: Hash32) -> Signature:
        """
        Sign a 32 byte prehash.
        """
        return sign_hash(msg_hash, self._secret)

    def sign_message(self, message: Bytes) -> Signature:
        """
        Sign `message` with the [EIP-191] personal message prefix.

        [EIP-191]: https://eips.ethereum.org/EIPS/eip-191
        """
        return self.sign_hash(eip191_hash_message(message))

    def sign_transaction(self, tx: Transaction) -> SignedTransaction:
        """
        Sign `tx` for this wallet's chain.

        A legacy transaction without a chain id gets the wallet's one. A
        transaction bound to a different chain than the wallet is rejected
        with `ChainIdMismatchError`.
        """
        if self._chain_id is not None:
            if tx.chain_id is None:
                tx = replace(tx, chain_id=self._chain_id)
            elif tx.chain_id != self._chain_id:
                raise ChainIdMismatchError(
                    int(self._chain_id), int(tx.chain_id)
                )

        signature = self.sign_hash(transaction_signature_hash(tx))
        signed = into_signed(tx, signature)
        logger.debug(
            "wallet %s signed transaction %s",
            self._address.hex(),
            signed.hash.hex(),
        )
        return signed

    @classmethod
    def new_keystore(
        cls,
        directory: Union[str, Path],
        rng: RandomSource,
        password: Password,
        name: Optional[str] = None,
        keystore: Optional[Keystore] = None,
    ) -> Tuple["Wallet", str]:
        """
        Create a wallet with a fresh secret, and store it encrypted in
        `directory`.

        The key file is named `name`, or after its identifier when `name` is
        `None`. Returns the wallet and the key file identifier.
        """
        wallet = cls.random_with(rng)
        return cls.encrypt_keystore(
            directory, wallet.to_bytes(), password, name, keystore
        )

    @classmethod
    def encrypt_keystore(
        cls,
        directory: Union[str, Path],
        secret: Bytes,
        password: Password,
        name: Optional[str] = None,
        keystore: Optional[Keystore] = None,
    ) -> Tuple["Wallet", str]:
        """
        Store `secret` encrypted in `directory`, and return its wallet and
        the key file identifier.
        """
        wallet = cls.from_slice(secret)
        if keystore is None:
            keystore = Web3SecretStorage()

        blob, uuid = keystore.encrypt(wallet.to_bytes(), password)
        write_keystore(directory, blob, name if name is not None else uuid)
        logger.info("stored key for %s as %s", wallet.address.hex(), uuid)
        return wallet, uuid

    @classmethod
    def decrypt_keystore(
        cls,
        path: Union[str, Path],
        password: Password,
        keystore: Optional[Keystore] = None,
    ) -> "Wallet":
        """
        Load the wallet stored in the key file at `path`.
        """
        return cls.from_keystore_blob(read_keystore(path), password, keystore)

    @classmethod
    def from_keystore_blob(
        cls,
        blob: Bytes,
        password: Password,
        keystore: Optional[Keystore] = None,
    ) -> "Wallet":
        """
        Load the wallet stored in an encrypted key file's content.
        """
        if keystore is None:
            keystore = Web3SecretStorage()
        return cls.from_slice(keystore.decrypt(blob, password))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Wallet):
            return NotImplemented
        return (
            self._secret == other._secret
            and self._address == other._address
            and self._chain_id == other._chain_id
        )

    def __hash__(self) -> int:
        return hash(self._address)

    def __repr__(self) -> str:
        return "Wallet(address=0x{}, chain_id={})".format(
            self._address.hex(), self._chain_id
        )
