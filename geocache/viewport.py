"""Visibility of caches around the player.

The ViewportEngine re-derives, on every move, which cells in the square of side
``2R + 1`` around the player's cell host a cache. Membership comes straight from
``spawn_roll``, so the same cell always gets the same answer regardless of history.
The result is reconciled against the caches that are currently materialized:

- members without a rendered object are materialized (spawn or restore)
- materialized caches that are no longer members are dematerialized (despawn)

Records are never deleted, only their rendered handle comes and goes.
"""

from __future__ import annotations

from collections.abc import Callable, Collection
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from geocache import randomness
from geocache.cache_store import CacheRecordView, CacheStateStore
from geocache.geocache_logging import create_module_logger
from geocache.space import Cell, CoordinateQuantizer, pack_key

__all__ = [
    "DESPAWN",
    "SPAWN",
    "ViewportEngine",
    "VisibilityDiff",
    "VisibilityEvent",
]

_geocache_logger = create_module_logger()

SPAWN = "spawn"
DESPAWN = "despawn"

Materializer = Callable[[Cell, CacheRecordView], Any]
Dematerializer = Callable[[Cell, Any], None]


@dataclass(frozen=True, slots=True)
class VisibilityEvent:
    """A message sent to visibility observers."""

    kind: str
    cell: Cell
    record: CacheRecordView


@dataclass(frozen=True)
class VisibilityDiff:
    """Outcome of one visibility recomputation.

    Attributes:
        center: the player's cell, None if visibility was never computed
        spawn: newly materialized caches with a snapshot of their state
        despawn: cells whose caches were dematerialized
    """

    center: Cell | None
    spawn: list[tuple[Cell, CacheRecordView]] = field(default_factory=list)
    despawn: list[Cell] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True if nothing was spawned or despawned."""
        return not self.spawn and not self.despawn


def _default_materialize(cell: Cell, record: CacheRecordView) -> Any:
    return True


def _default_dematerialize(cell: Cell, handle: Any) -> None:
    return None


class ViewportEngine:
    """Computes the visible cache set and the spawn/despawn diff on every move.

    Attributes:
        quantizer (CoordinateQuantizer): maps player positions onto cells
        store (CacheStateStore): holds the state of all caches
        radius (int): neighborhood radius, the visible square has side 2 * radius + 1
        spawn_probability (float): a cell hosts a cache iff its spawn roll is below this
        center (Cell | None): the player's cell at the last recomputation

    Notes:
        ``materialize(cell, view)`` is called for each spawning cache and must
        return a handle that is not None. ``dematerialize(cell, handle)`` is called
        for each despawning cache. Observers registered with :meth:`on_spawn` and
        :meth:`on_despawn` receive a :class:`VisibilityEvent` afterwards.

        The engine keeps its own visible set, so the work per move depends on the
        neighborhood size only, never on the number of records in the store.
    """

    def __init__(
        self,
        quantizer: CoordinateQuantizer,
        store: CacheStateStore,
        radius: int = 8,
        spawn_probability: float = 0.1,
        materialize: Materializer | None = None,
        dematerialize: Dematerializer | None = None,
    ) -> None:
        """Create a viewport engine.

        Args:
            quantizer: maps player positions onto cells
            store: holds the state of all caches
            radius: neighborhood radius in cells
            spawn_probability: probability that a cell hosts a cache
            materialize: presentation hook creating a rendered object
            dematerialize: presentation hook disposing of a rendered object
        """
        if radius < 0:
            raise ValueError(f"radius must be >= 0, got {radius}")
        self.quantizer = quantizer
        self.store = store
        self.radius = radius
        self.spawn_probability = spawn_probability
        self.center: Cell | None = None
        self._materialize = materialize or _default_materialize
        self._dematerialize = dematerialize or _default_dematerialize
        # packed cell key -> canonical cell, in materialization order
        self._visible: dict[int, Cell] = {}
        self._observers: dict[str, list[Callable[[VisibilityEvent], None]]] = {
            SPAWN: [],
            DESPAWN: [],
        }

    def on_spawn(self, callback: Callable[[VisibilityEvent], None]) -> None:
        """Register an observer called for every spawned cache."""
        self._observers[SPAWN].append(callback)

    def on_despawn(self, callback: Callable[[VisibilityEvent], None]) -> None:
        """Register an observer called for every despawned cache."""
        self._observers[DESPAWN].append(callback)

    def members(self, center: Cell) -> list[Cell]:
        """Return the cells around ``center`` that host a cache.

        This is a pure computation: no record is created or materialized.
        """
        r = self.radius
        rows = range(center.i - r, center.i + r + 1)
        columns = range(center.j - r, center.j + r + 1)
        rolls = randomness.luck_grid(rows, columns)

        flyweight = self.quantizer.flyweight
        return [
            flyweight.get_or_create(rows[a], columns[b])
            for a, b in np.argwhere(rolls < self.spawn_probability)
        ]

    def visible_cells(self) -> set[Cell]:
        """Return the cells whose caches are currently materialized."""
        return set(self._visible.values())

    def visible_cell(self, i: int, j: int) -> Cell | None:
        """Return the canonical cell at (i, j) if its cache is visible, else None."""
        return self._visible.get(pack_key(i, j))

    def recompute_visibility(self, lat: float, lng: float) -> VisibilityDiff:
        """Bring the materialized caches in line with the player at (lat, lng).

        Either every spawn of this move is committed or none is: if a
        ``materialize`` hook fails, the handles created so far are handed back
        to ``dematerialize`` and the error is re-raised with the visible set
        unchanged.

        Returns:
            VisibilityDiff with the spawned and despawned caches
        """
        center = self.quantizer.quantize(lat, lng)
        members = self.members(center)

        pending = []
        try:
            for cell in members:
                if cell.key in self._visible:
                    continue
                record = self.store.get_or_create(cell.i, cell.j)
                view = record.view()
                handle = self._materialize(cell, view)
                if handle is None:
                    raise ValueError(
                        f"materialize hook returned None for {cell}, a handle is required"
                    )
                pending.append((cell, view, handle))
        except Exception:
            for cell, _, handle in pending:
                self._dematerialize(cell, handle)
            raise

        diff = VisibilityDiff(center)
        for cell, view, handle in pending:
            self.store.set_materialized(cell.i, cell.j, handle)
            self._visible[cell.key] = cell
            diff.spawn.append((cell, view))

        member_keys = {cell.key for cell in members}
        diff.despawn.extend(self._despawn_all(exclude=member_keys))

        self.center = center
        self._notify(diff)

        _geocache_logger.debug(
            f"viewport at {center}: {len(diff.spawn)} spawned, {len(diff.despawn)} despawned"
        )
        return diff

    def clear(self) -> VisibilityDiff:
        """Dematerialize every visible cache, leaving all records in the store.

        Returns:
            VisibilityDiff listing the despawned cells, centered on the last center
        """
        diff = VisibilityDiff(self.center, despawn=self._despawn_all())
        self._notify(diff)
        _geocache_logger.debug(f"viewport cleared: {len(diff.despawn)} despawned")
        return diff

    def _despawn_all(self, exclude: Collection[int] = ()) -> list[Cell]:
        leaving = sorted(
            (cell for key, cell in self._visible.items() if key not in exclude),
            key=lambda cell: cell.coordinate,
        )
        for cell in leaving:
            record = self.store.get(cell.i, cell.j)
            self._dematerialize(cell, record.handle)
            self.store.set_materialized(cell.i, cell.j, None)
            del self._visible[cell.key]
        return leaving

    def _notify(self, diff: VisibilityDiff) -> None:
        for cell, view in diff.spawn:
            event = VisibilityEvent(SPAWN, cell, view)
            for callback in self._observers[SPAWN]:
                callback(event)

        for cell in diff.despawn:
            event = VisibilityEvent(DESPAWN, cell, self.store.get(cell.i, cell.j).view())
            for callback in self._observers[DESPAWN]:
                callback(event)
