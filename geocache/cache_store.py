"""Authoritative per-cache state that outlives its presentation.

A CacheRecord is created the first time its cell rolls visible and is never
deleted. When the presentation layer throws away the rendered object of a cache
that left the viewport, the record stays here untouched, so coming back restores
the same point value and item serial instead of re-rolling them.
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from geocache import randomness
from geocache.errors import PreconditionViolation
from geocache.geocache_logging import create_module_logger
from geocache.space.cell import pack_key, unpack_key

_geocache_logger = create_module_logger()


@dataclass(frozen=True, slots=True)
class ItemIdentity:
    """A harvested item (a coin), unique as the full (i, j, serial) tuple."""

    i: int
    j: int
    serial: int

    def __str__(self):  # noqa: D105
        return f"{self.i}:{self.j}#{self.serial}"


@dataclass(frozen=True, slots=True)
class CacheRecordView:
    """Read-only snapshot of a CacheRecord handed to the presentation layer."""

    i: int
    j: int
    point_value: int
    next_item_serial: int


@dataclass(slots=True)
class CacheRecord:
    """Mutable state of one cache.

    Attributes:
        i: row index of the cell hosting the cache
        j: column index of the cell hosting the cache
        point_value: points left in the cache, can go below zero
        next_item_serial: serial the next harvested item gets, never decreases
        handle: opaque rendered object from the presentation layer, None if not shown
    """

    i: int
    j: int
    point_value: int
    next_item_serial: int = 0
    handle: Any = None

    @property
    def coordinate(self) -> tuple[int, int]:
        """The (i, j) tuple of the hosting cell."""
        return self.i, self.j

    @property
    def is_materialized(self) -> bool:
        """Whether the cache currently has a rendered object."""
        return self.handle is not None

    def view(self) -> CacheRecordView:
        """Return a read-only snapshot of this record."""
        return CacheRecordView(self.i, self.j, self.point_value, self.next_item_serial)


class CacheStateStore:
    """Owns every CacheRecord generated during a session.

    Attributes:
        initial_value_scale (int): the initial point value is
            ``floor(initial_value_roll(i, j) * initial_value_scale)``

    Notes:
        There is at most one record per (i, j). Records are never evicted.
    """

    def __init__(self, initial_value_scale: int = 100) -> None:
        """Create an empty store.

        Args:
            initial_value_scale: exclusive upper bound of rolled initial point values
        """
        self.initial_value_scale = initial_value_scale
        self._records: dict[int, CacheRecord] = {}
        # keys of records holding a handle, so materialized() stays cheap
        self._materialized: dict[int, None] = {}

    def get_or_create(self, i: int, j: int) -> CacheRecord:
        """Return the record at (i, j), rolling its point value on first creation."""
        key = pack_key(i, j)
        try:
            return self._records[key]
        except KeyError:
            value = math.floor(
                randomness.initial_value_roll(i, j) * self.initial_value_scale
            )
            record = CacheRecord(i, j, value)
            self._records[key] = record
            _geocache_logger.debug(f"created cache at ({i}, {j}) with value {value}")
            return record

    def get(self, i: int, j: int) -> CacheRecord:
        """Return the existing record at (i, j).

        Raises:
            PreconditionViolation: if no cache was ever generated at (i, j)
        """
        try:
            return self._records[pack_key(i, j)]
        except KeyError:
            raise PreconditionViolation((i, j), "no cache has been generated here") from None

    def harvest(self, i: int, j: int) -> ItemIdentity:
        """Take one item out of the cache at (i, j).

        The point value drops by one and the item gets the current serial, which
        is then incremented. Harvesting never creates a record.

        Raises:
            PreconditionViolation: if no cache was ever generated at (i, j)
        """
        record = self.get(i, j)
        item = ItemIdentity(i, j, record.next_item_serial)
        record.point_value, record.next_item_serial = (
            record.point_value - 1,
            record.next_item_serial + 1,
        )
        return item

    def deposit(self, i: int, j: int) -> int:
        """Put one point back into the cache at (i, j) and return its new value.

        Raises:
            PreconditionViolation: if no cache was ever generated at (i, j)
        """
        record = self.get(i, j)
        record.point_value += 1
        return record.point_value

    def set_materialized(self, i: int, j: int, handle: Any = None) -> None:
        """Record the rendered handle of the cache at (i, j), None when hidden.

        Raises:
            PreconditionViolation: if no cache was ever generated at (i, j)
        """
        record = self.get(i, j)
        record.handle = handle
        key = pack_key(i, j)
        if handle is None:
            self._materialized.pop(key, None)
        else:
            self._materialized[key] = None

    def materialized(self) -> dict[tuple[int, int], Any]:
        """Return the handles of all currently materialized caches."""
        return {unpack_key(key): self._records[key].handle for key in self._materialized}

    def __len__(self) -> int:  # noqa: D105
        return len(self._records)

    def __contains__(self, coordinate: tuple[int, int]) -> bool:  # noqa: D105
        return pack_key(*coordinate) in self._records

    def __iter__(self) -> Iterator[CacheRecord]:  # noqa: D105
        return iter(self._records.values())
