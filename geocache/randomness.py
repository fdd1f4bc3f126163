"""Deterministic, stateless randomness for the cache world.

``luck`` maps a string key onto a float in [0, 1) by hashing it. There is no
generator state and no seed: the same key gives the same value in every call,
every engine and every process. The viewport re-derives cache membership from
scratch on every move, so this has to behave like a hash, not like a stream.

Keys are built with :func:`make_key`, which joins parts with ``","`` and refuses
string parts containing the separator, and parts that are neither strings nor
integers, so that distinct inputs never collide.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterable
from numbers import Integral

import numpy as np

__all__ = [
    "INITIAL_VALUE_TAG",
    "KEY_SEPARATOR",
    "initial_value_roll",
    "luck",
    "luck_grid",
    "make_key",
    "spawn_roll",
]

KEY_SEPARATOR = ","
INITIAL_VALUE_TAG = "initialValue"

# 53 bits is the mantissa of a double, so every value below is exactly representable
_MANTISSA_BITS = 53
_SCALE = 1.0 / (1 << _MANTISSA_BITS)


def luck(key: str) -> float:
    """Return a reproducible pseudo-random float in [0, 1) for ``key``.

    Args:
        key: any string, usually built with :func:`make_key`

    Returns:
        float in [0, 1)
    """
    digest = hashlib.blake2b(key.encode("utf-8"), digest_size=8).digest()
    return (int.from_bytes(digest, "big") >> (64 - _MANTISSA_BITS)) * _SCALE


def make_key(*parts: int | str) -> str:
    """Join identifiers into a luck key.

    ``make_key(3, -4)`` gives ``"3,-4"`` and ``make_key(3, -4, "initialValue")``
    gives ``"3,-4,initialValue"``.

    Raises:
        ValueError: if no parts are given, a string part contains the separator,
            or a part is neither a string nor an integer
    """
    if not parts:
        raise ValueError("a luck key needs at least one part")

    tokens = []
    for part in parts:
        if isinstance(part, str):
            if KEY_SEPARATOR in part:
                raise ValueError(
                    f"key part {part!r} contains the separator {KEY_SEPARATOR!r}"
                )
            tokens.append(part)
        elif isinstance(part, Integral) and not isinstance(part, bool):
            tokens.append(str(int(part)))
        else:
            raise ValueError(f"key part {part!r} must be a string or an integer")
    return KEY_SEPARATOR.join(tokens)


def spawn_roll(i: int, j: int) -> float:
    """Roll deciding whether cell (i, j) hosts a cache."""
    return luck(make_key(i, j))


def initial_value_roll(i: int, j: int) -> float:
    """Roll seeding the initial point value of the cache at (i, j)."""
    return luck(make_key(i, j, INITIAL_VALUE_TAG))


def luck_grid(i_values: Iterable[int], j_values: Iterable[int]) -> np.ndarray:
    """Return spawn rolls for a block of cells.

    Args:
        i_values: row indices
        j_values: column indices

    Returns:
        array of shape (len(i_values), len(j_values)) where
        ``result[a, b] == spawn_roll(i_values[a], j_values[b])``
    """
    i_values = list(i_values)
    j_values = list(j_values)
    rolls = np.fromiter(
        (spawn_roll(i, j) for i in i_values for j in j_values),
        dtype=float,
        count=len(i_values) * len(j_values),
    )
    return rolls.reshape(len(i_values), len(j_values))
