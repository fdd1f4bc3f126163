"""The Cell class, the identity of one grid square."""

from __future__ import annotations

from dataclasses import dataclass

from geocache.errors import InvalidCoordinate

_INDEX_MIN = -(2**31)
_INDEX_MAX = 2**31 - 1
_HALF_MASK = 0xFFFFFFFF


def pack_key(i: int, j: int) -> int:
    """Pack a cell index pair into one 64-bit integer key.

    Both indices are stored as signed 32-bit halves, ``i`` in the high half.

    Raises:
        InvalidCoordinate: if either index does not fit in 32 bits
    """
    i, j = int(i), int(j)
    for index in (i, j):
        if not _INDEX_MIN <= index <= _INDEX_MAX:
            raise InvalidCoordinate(index, "does not fit a 32-bit cell index")
    return ((i & _HALF_MASK) << 32) | (j & _HALF_MASK)


def unpack_key(key: int) -> tuple[int, int]:
    """Inverse of :func:`pack_key`."""
    i = (key >> 32) & _HALF_MASK
    j = key & _HALF_MASK
    if i > _INDEX_MAX:
        i -= 2**32
    if j > _INDEX_MAX:
        j -= 2**32
    return i, j


@dataclass(frozen=True, slots=True)
class Cell:
    """One quantization unit of the coordinate plane.

    Attributes:
        i: row index, the floored scaled latitude
        j: column index, the floored scaled longitude

    Notes:
        Cells compare equal iff ``i`` and ``j`` are equal. Use
        :class:`~geocache.space.CellFlyweight` to obtain the canonical
        object for a coordinate so that identity comparison is enough.
    """

    i: int
    j: int

    @property
    def coordinate(self) -> tuple[int, int]:
        """The (i, j) tuple of this cell."""
        return self.i, self.j

    @property
    def key(self) -> int:
        """The packed integer key of this cell."""
        return pack_key(self.i, self.j)

    def __repr__(self):  # noqa: D105
        return f"Cell({self.i}, {self.j})"
