"""
A module for loading the package configuration.

The configuration is read from a YAML file and validated with Pydantic. Every
section has defaults, so an empty file is a valid configuration.

Example::

    keystore:
      kdf: pbkdf2
      iterations: 262144
      directory: ~/.ethereum/keystore
    logging:
      level: DEBUG
"""

from pathlib import Path
from typing import Literal, Optional, Union

import yaml
from pydantic import BaseModel, ValidationError


class KeystoreConfig(BaseModel):
    """
    Settings for encrypted key files.

    Attributes:
    - kdf: key derivation function used when encrypting new key files.
    - iterations: work factor of the kdf, or the library default when unset.
    - directory: where key files are written.
    """

    kdf: Literal["scrypt", "pbkdf2"] = "scrypt"
    iterations: Optional[int] = None
    directory: Path = Path("keystore")


class LoggingConfig(BaseModel):
    """
    Settings passed to `setup_logger`.
    """

    level: str = "INFO"


class Config(BaseModel):
    """
    Represents the overall configuration.
    """

    keystore: KeystoreConfig = KeystoreConfig()
    logging: LoggingConfig = LoggingConfig()


def load_config(path: Union[str, Path]) -> Config:
    """
    Read and validate the configuration file at `path`.

    Raises `FileNotFoundError` if the file does not exist, and `ValueError`
    if its content does not validate.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(
            f"The configuration file '{path}' does not exist."
        )

    with path.open("r") as file:
        config_data = yaml.safe_load(file) or {}

    if not isinstance(config_data, dict):
        raise ValueError("Invalid configuration: expected a mapping")

    try:
        return Config(**config_data)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e
