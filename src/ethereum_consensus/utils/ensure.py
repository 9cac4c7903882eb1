"""
Ensure (Assertion) Utilities
^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Decoding and signature checks are written as `ensure(condition, error)` so
every rejection raises a typed exception instead of an `AssertionError`.
"""

from typing import Callable, Union


def ensure(
    value: bool, exception: Union[Callable[[], BaseException], BaseException]
) -> None:
    """
    Does nothing if `value` is truthy, otherwise raises `exception`.

    Parameters
    ----------
    value :
        Condition that must hold.

    exception :
        Exception instance (or zero-argument exception class) to raise when
        the condition does not hold.
    """
    if value:
        return
    raise exception  # type: ignore
