"""Mapping between continuous coordinates and canonical cells.

CoordinateQuantizer floors scaled (lat, lng) values onto integer cell indices,
and CellFlyweight makes sure that every (i, j) maps onto one shared Cell object
for the lifetime of the process. There is no eviction: the number of cells is
bounded by the area a player visits in one session.
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from numbers import Real

import numpy as np

from geocache.errors import InvalidCoordinate
from geocache.space.cell import _INDEX_MAX, _INDEX_MIN, Cell, pack_key

CellLike = Cell | tuple[int, int]


class CellFlyweight:
    """Canonical Cell objects keyed by their packed (i, j) key.

    Calling :meth:`get_or_create` twice with the same indices returns the same
    object, not merely an equal one.
    """

    def __init__(self) -> None:
        """Create an empty flyweight cache."""
        self._cells: dict[int, Cell] = {}

    def get_or_create(self, i: int, j: int) -> Cell:
        """Return the canonical cell for ``(i, j)``, creating it on first use."""
        key = pack_key(i, j)
        try:
            return self._cells[key]
        except KeyError:
            cell = Cell(int(i), int(j))
            self._cells[key] = cell
            return cell

    def __len__(self) -> int:  # noqa: D105
        return len(self._cells)

    def __contains__(self, coordinate: tuple[int, int]) -> bool:  # noqa: D105
        try:
            return pack_key(*coordinate) in self._cells
        except InvalidCoordinate:
            return False

    def __iter__(self) -> Iterator[Cell]:  # noqa: D105
        return iter(self._cells.values())


class CoordinateQuantizer:
    """Converts (lat, lng) coordinates into cells and cells back into bounds.

    Attributes:
        scale_factor (float): cells per coordinate unit, 1e4 gives cells of 1e-4 degrees
        flyweight (CellFlyweight): the cache holding the canonical cells
    """

    def __init__(
        self, scale_factor: float = 1e4, flyweight: CellFlyweight | None = None
    ) -> None:
        """Create a quantizer.

        Args:
            scale_factor: multiplier applied to coordinates before flooring
            flyweight: cell cache to register cells in, a new one if None
        """
        if not (
            isinstance(scale_factor, Real)
            and math.isfinite(scale_factor)
            and scale_factor > 0
        ):
            raise ValueError(
                f"scale_factor must be a positive finite number, got {scale_factor!r}"
            )
        self.scale_factor = float(scale_factor)
        self.flyweight = flyweight if flyweight is not None else CellFlyweight()

    def quantize(self, lat: float, lng: float) -> Cell:
        """Return the canonical cell containing the point (lat, lng).

        Raises:
            InvalidCoordinate: if a coordinate is not a finite number or lies
                outside the range of the packed cell key
        """
        position = _as_position(lat, lng)
        i, j = np.floor(position * self.scale_factor)

        for index in (i, j):
            if not _INDEX_MIN <= index <= _INDEX_MAX:
                raise InvalidCoordinate(
                    (lat, lng), "lies outside the addressable grid"
                )

        return self.flyweight.get_or_create(int(i), int(j))

    def cell_bounds(self, cell: CellLike) -> tuple[float, float, float, float]:
        """Return the rectangle covered by a cell.

        Args:
            cell: a Cell or an (i, j) tuple

        Returns:
            (lat_min, lng_min, lat_max, lng_max)
        """
        i, j = _indices(cell)
        scale = self.scale_factor
        return i / scale, j / scale, (i + 1) / scale, (j + 1) / scale

    def cell_center(self, cell: CellLike) -> tuple[float, float]:
        """Return the (lat, lng) midpoint of a cell."""
        lat_min, lng_min, lat_max, lng_max = self.cell_bounds(cell)
        return (lat_min + lat_max) / 2, (lng_min + lng_max) / 2


def _indices(cell: CellLike) -> tuple[int, int]:
    if isinstance(cell, Cell):
        return cell.i, cell.j
    i, j = cell
    return int(i), int(j)


def _as_position(lat, lng) -> np.ndarray:
    for value in (lat, lng):
        if isinstance(value, bool) or not isinstance(value, Real | np.number):
            raise InvalidCoordinate(value, "is not a number")

    position = np.array((lat, lng), dtype=float)
    if not np.isfinite(position).all():
        bad = lat if not math.isfinite(float(lat)) else lng
        raise InvalidCoordinate(bad)
    return position
