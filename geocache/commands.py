"""Player actions expressed as data.

The presentation layer builds one of these and hands it to
:meth:`geocache.game.GameState.execute` instead of wiring closures that capture
game state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from geocache.space import Cell

__all__ = ["Command", "Deposit", "Direction", "Harvest", "MovePlayer", "Reset", "Step"]


class Direction(Enum):
    """Compass directions as unit (d_lat, d_lng) steps."""

    NORTH = (1, 0)
    SOUTH = (-1, 0)
    EAST = (0, 1)
    WEST = (0, -1)

    @property
    def d_lat(self) -> int:  # noqa: D102
        return self.value[0]

    @property
    def d_lng(self) -> int:  # noqa: D102
        return self.value[1]


@dataclass(frozen=True, slots=True)
class Harvest:
    """Take one coin out of the cache at ``cell``."""

    cell: Cell | tuple[int, int]


@dataclass(frozen=True, slots=True)
class Deposit:
    """Put the most recently collected coin into the cache at ``cell``."""

    cell: Cell | tuple[int, int]


@dataclass(frozen=True, slots=True)
class MovePlayer:
    """Move the player by (d_lat, d_lng)."""

    d_lat: float
    d_lng: float


@dataclass(frozen=True, slots=True)
class Step:
    """Move the player one movement delta in ``direction``."""

    direction: Direction


@dataclass(frozen=True, slots=True)
class Reset:
    """Put the player back at the origin."""


Command = Harvest | Deposit | MovePlayer | Step | Reset
