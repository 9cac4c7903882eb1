"""
Logging setup for applications embedding this package.

Modules log through `logging.getLogger(__name__)` and never configure
handlers themselves; `setup_logger` attaches a single stream handler.
"""

import logging
from typing import Union

LOG_FORMAT = "%(levelname)s:%(name)s:%(message)s"


def setup_logger(
    name: str = "ethereum_consensus", level: Union[int, str] = logging.INFO
) -> logging.Logger:
    """
    Get a logger that writes to stderr. Calling it again for the same name
    only updates the level.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        stream_handler = logging.StreamHandler()
        formatter = logging.Formatter(LOG_FORMAT)
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)
    logger.setLevel(level)

    return logger
