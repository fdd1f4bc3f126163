"""The GameState aggregate.

Core Objects: GameState

A GameState owns everything one play session needs: the configuration, the
cell flyweight, the cache store, the viewport and the player (position, points
and collected coins). There is no module-level mutable state, so several games
can live side by side, e.g. in tests.
"""

from __future__ import annotations

from functools import singledispatchmethod
from typing import Any

from geocache.cache_store import CacheStateStore, ItemIdentity
from geocache.commands import (
    Command,
    Deposit,
    Direction,
    Harvest,
    MovePlayer,
    Reset,
    Step,
)
from geocache.config import GameConfig
from geocache.errors import ConfigurationError, PreconditionViolation
from geocache.geocache_logging import create_module_logger, method_logger
from geocache.space import Cell, CoordinateQuantizer
from geocache.viewport import Dematerializer, Materializer, ViewportEngine, VisibilityDiff

_geocache_logger = create_module_logger()


class GameState:
    """One play session of the cache game.

    Attributes:
        config: the (frozen) configuration of this game
        quantizer: maps positions onto cells
        store: state of every cache generated so far
        viewport: computes which caches are visible
        player_position: the player's (lat, lng)
        player_points: coins currently held by the player
        inventory: the coins held by the player, oldest first
        last_diff: the visibility diff of the most recent move

    Notes:
        Operations run to completion one at a time; the caller serializes player
        actions. Visibility is computed at the origin on construction, so pass
        presentation hooks to the constructor to see the first spawns.
    """

    @method_logger(__name__)
    def __init__(
        self,
        config: GameConfig | None = None,
        *,
        materialize: Materializer | None = None,
        dematerialize: Dematerializer | None = None,
    ) -> None:
        """Create a new game and compute the caches visible at the origin.

        Args:
            config: game parameters, the defaults if None
            materialize: presentation hook called for each spawning cache
            dematerialize: presentation hook called for each despawning cache
        """
        if config is None:
            config = GameConfig()
        elif config.game is not None:
            raise ConfigurationError("config", "is already bound to another game")
        self.config = config

        self.quantizer = CoordinateQuantizer(config.scale_factor)
        self.store = CacheStateStore(config.initial_value_scale)
        self.viewport = ViewportEngine(
            self.quantizer,
            self.store,
            radius=config.neighborhood_radius,
            spawn_probability=config.spawn_probability,
            materialize=materialize,
            dematerialize=dematerialize,
        )

        self.player_points: int = 0
        self.inventory: list[ItemIdentity] = []
        self.player_position: tuple[float, float] = config.origin
        self.last_diff: VisibilityDiff = self.viewport.recompute_visibility(
            *self.player_position
        )
        config.game = self

    @property
    def player_cell(self) -> Cell:
        """The cell the player is standing in."""
        return self.quantizer.quantize(*self.player_position)

    def move_player(self, d_lat: float, d_lng: float) -> VisibilityDiff:
        """Move the player by (d_lat, d_lng) and update visibility."""
        lat, lng = self.player_position
        return self._relocate(lat + d_lat, lng + d_lng)

    def step(self, direction: Direction) -> VisibilityDiff:
        """Move the player one movement delta in ``direction``."""
        delta = self.config.movement_delta
        return self.move_player(direction.d_lat * delta, direction.d_lng * delta)

    def reset(self) -> VisibilityDiff:
        """Put the player back at the origin and recompute visibility from scratch.

        Every visible cache is despawned first, the caches around the origin are
        then spawned again, so the hooks and observers see the full rebuild.
        The returned diff is the net change: caches shown both before and after
        the reset appear in neither list. Coins and points are kept.
        """
        cleared = self.viewport.clear()
        _geocache_logger.info("player reset to origin")
        rebuilt = self._relocate(*self.config.origin)

        respawned = {cell for cell, _ in rebuilt.spawn}
        kept = respawned.intersection(cleared.despawn)
        diff = VisibilityDiff(
            rebuilt.center,
            spawn=[(cell, view) for cell, view in rebuilt.spawn if cell not in kept],
            despawn=[cell for cell in cleared.despawn if cell not in kept]
            + rebuilt.despawn,
        )
        self.last_diff = diff
        return diff

    def harvest(self, cell: Cell | tuple[int, int]) -> ItemIdentity:
        """Take a coin out of a visible cache and give it to the player.

        Raises:
            PreconditionViolation: if the cache at ``cell`` is not visible
        """
        cell = self._visible_cell(cell)
        item = self.store.harvest(cell.i, cell.j)
        self.player_points += 1
        self.inventory.append(item)
        _geocache_logger.info(f"Player picked up coin: {item}")
        return item

    def deposit(self, cell: Cell | tuple[int, int]) -> int:
        """Put the most recently collected coin into a visible cache.

        Returns:
            the new point value of the cache

        Raises:
            PreconditionViolation: if the cache is not visible or the player has no coins
        """
        cell = self._visible_cell(cell)
        if not self.inventory:
            raise PreconditionViolation(cell.coordinate, "the player has no coins to deposit")
        item = self.inventory.pop()
        self.player_points -= 1
        value = self.store.deposit(cell.i, cell.j)
        _geocache_logger.info(f"Player deposited coin {item} at {cell}")
        return value

    def point_value(self, cell: Cell | tuple[int, int]) -> int:
        """Return the current point value of the cache at ``cell``."""
        i, j = cell.coordinate if isinstance(cell, Cell) else cell
        return self.store.get(i, j).point_value

    def status(self) -> str:
        """Return the status line shown to the player."""
        if self.player_points == 0 and not self.inventory:
            return "No points yet..."
        return f"{self.player_points} points accumulated"

    @singledispatchmethod
    def execute(self, command: Command) -> Any:
        """Run a command object and return the result of the matching operation.

        Raises:
            TypeError: for objects that are not commands
        """
        raise TypeError(f"unknown command {command!r}")

    @execute.register
    def _(self, command: Harvest) -> ItemIdentity:
        return self.harvest(command.cell)

    @execute.register
    def _(self, command: Deposit) -> int:
        return self.deposit(command.cell)

    @execute.register
    def _(self, command: MovePlayer) -> VisibilityDiff:
        return self.move_player(command.d_lat, command.d_lng)

    @execute.register
    def _(self, command: Step) -> VisibilityDiff:
        return self.step(command.direction)

    @execute.register
    def _(self, command: Reset) -> VisibilityDiff:
        return self.reset()

    def _relocate(self, lat: float, lng: float) -> VisibilityDiff:
        diff = self.viewport.recompute_visibility(lat, lng)
        self.player_position = (lat, lng)
        self.last_diff = diff
        return diff

    def _visible_cell(self, cell: Cell | tuple[int, int]) -> Cell:
        i, j = cell.coordinate if isinstance(cell, Cell) else cell
        canonical = self.viewport.visible_cell(i, j)
        if canonical is None:
            raise PreconditionViolation((i, j), "the cache is not visible")
        return canonical
