"""
Keystores
^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Encryption of secret keys at rest. Wallets only depend on the [`Keystore`]
protocol: a keystore turns a secret and a password into an opaque blob plus
an identifier, and back.

[`Web3SecretStorage`] implements it with the JSON key file format of the
[Web3 Secret Storage Definition], through the `eth-keyfile` library.

Reading and writing key files is blocking, and no locking is done: callers
must not write the same path concurrently.

[`Keystore`]: ref:ethereum_consensus.keystore.Keystore
[`Web3SecretStorage`]: ref:ethereum_consensus.keystore.Web3SecretStorage
[Web3 Secret Storage Definition]: https://ethereum.org/en/developers/docs/data-structures-and-encoding/web3-secret-storage/
"""

import json
import logging
from pathlib import Path
from typing import Optional, Protocol, Tuple, Union

from eth_keyfile import create_keyfile_json, decode_keyfile_json
from ethereum_types.bytes import Bytes, Bytes32

from .config import KeystoreConfig
from .exceptions import KeystoreError

logger = logging.getLogger(__name__)

Password = Union[str, bytes]


def _password_bytes(password: Password) -> bytes:
    if isinstance(password, str):
        return password.encode("utf-8")
    return bytes(password)


class Keystore(Protocol):
    """
    Encrypts and decrypts 32 byte secrets.
    """

    def encrypt(
        self, secret: Bytes32, password: Password
    ) -> Tuple[Bytes, str]:
        """
        Returns the encrypted blob and its identifier.
        """
        ...

    def decrypt(self, blob: Bytes, password: Password) -> Bytes32:
        """
        Returns the secret stored in `blob`.
        """
        ...


class Web3SecretStorage:
    """
    Version 3 JSON key files.

    Attributes:
    - kdf: `"scrypt"` or `"pbkdf2"`.
    - iterations: work factor of the kdf, `None` for the library default.
    """

    def __init__(self, kdf: str = "scrypt", iterations: Optional[int] = None):
        self.kdf = kdf
        self.iterations = iterations

    @classmethod
    def from_config(cls, config: KeystoreConfig) -> "Web3SecretStorage":
        """
        Build a keystore from the `keystore` configuration section.
        """
        return cls(kdf=config.kdf, iterations=config.iterations)

    def encrypt(
        self, secret: Bytes32, password: Password
    ) -> Tuple[Bytes, str]:
        """
        Encrypt `secret` into a JSON key file, returned as UTF-8 bytes with
        the file's `id`.
        """
        try:
            keyfile = create_keyfile_json(
                bytes(secret),
                _password_bytes(password),
                kdf=self.kdf,
                iterations=self.iterations,
            )
        except (ValueError, TypeError) as e:
            raise KeystoreError("encryption failed", e) from e

        logger.debug("encrypted key file %s with %s", keyfile["id"], self.kdf)
        return json.dumps(keyfile).encode("utf-8"), keyfile["id"]

    def decrypt(self, blob: Bytes, password: Password) -> Bytes32:
        """
        Decrypt a JSON key file. A wrong password, like a malformed file,
        raises `KeystoreError`.
        """
        try:
            keyfile = json.loads(bytes(blob).decode("utf-8"))
            secret = decode_keyfile_json(keyfile, _password_bytes(password))
            return Bytes32(secret)
        except (ValueError, KeyError, TypeError) as e:
            raise KeystoreError("decryption failed", e) from e


def write_keystore(
    directory: Union[str, Path], blob: Bytes, name: str
) -> Path:
    """
    Write `blob` to `directory / name`, creating the directory if needed.
    """
    path = Path(directory) / name
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(blob)
    except OSError as e:
        raise KeystoreError(f"cannot write key file {path}", e) from e

    logger.debug("wrote key file %s", path)
    return path


def read_keystore(path: Union[str, Path]) -> Bytes:
    """
    Read the key file at `path`.
    """
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise KeystoreError(f"cannot read key file {path}", e) from e
