"""Tests for the GameState aggregate and the command interface."""

import pytest

from geocache import (
    Deposit,
    Direction,
    GameConfig,
    GameState,
    Harvest,
    ItemIdentity,
    MovePlayer,
    Reset,
    Step,
    randomness,
)
from geocache.config import DEFAULT_ORIGIN
from geocache.errors import InvalidCoordinate, PreconditionViolation
from geocache.space import Cell


def forced_luck(values=None, default=0.5):
    """Return a luck replacement with fixed values per key."""
    values = values or {}

    def fake(key):
        return values.get(key, default)

    return fake


@pytest.fixture
def everywhere(monkeypatch):
    """Make every cell host a cache worth 3 points."""
    monkeypatch.setattr(
        randomness, "luck", lambda key: 0.0355 if key.endswith("initialValue") else 0.05
    )


@pytest.fixture
def game(everywhere):
    """A small game where every cell hosts a cache."""
    return GameState(GameConfig(neighborhood_radius=1, origin=(0.00005, 0.00005)))


def test_initial_visibility(game):
    """Test the caches around the origin are visible after construction."""
    assert game.player_position == (0.00005, 0.00005)
    assert game.player_cell == Cell(0, 0)
    assert len(game.last_diff.spawn) == 9
    assert len(game.viewport.visible_cells()) == 9
    assert game.status() == "No points yet..."


def test_default_game_starts_at_the_classroom():
    """Test a default game is centered on the default origin."""
    game = GameState()
    assert game.player_position == DEFAULT_ORIGIN
    assert game.player_cell.coordinate == (369894, -1220628)
    assert game.last_diff.center is game.player_cell
    assert game.viewport.radius == 8
    assert game.viewport.spawn_probability == 0.1


def test_harvest_three_times(game):
    """Test harvesting a 3 point cache three times."""
    values, items = [], []
    for _ in range(3):
        items.append(game.harvest(Cell(1, 1)))
        values.append(game.point_value(Cell(1, 1)))

    assert values == [2, 1, 0]
    assert [item.serial for item in items] == [0, 1, 2]
    assert game.player_points == 3
    assert game.inventory == items
    assert game.status() == "3 points accumulated"


def test_harvest_accepts_tuples(game):
    """Test cells can be given as (i, j) tuples."""
    assert game.harvest((-1, 0)) == ItemIdentity(-1, 0, 0)
    assert game.point_value((-1, 0)) == 2


def test_harvest_invisible_cache(game):
    """Test interaction outside the visible set is rejected."""
    with pytest.raises(PreconditionViolation, match="not visible"):
        game.harvest(Cell(5, 5))
    assert (5, 5) not in game.store
    assert (5, 5) not in game.quantizer.flyweight
    assert game.player_points == 0

    game.move_player(0.01, 0.0)
    with pytest.raises(PreconditionViolation, match="not visible"):
        game.harvest(Cell(0, 0))


def test_harvest_below_zero(game):
    """Test a cache can be emptied below zero."""
    for _ in range(5):
        game.harvest(Cell(0, 0))
    assert game.point_value(Cell(0, 0)) == -2


def test_deposit(game):
    """Test depositing the last coin into another cache."""
    coin = game.harvest(Cell(0, 0))
    assert game.deposit(Cell(0, 1)) == 4
    assert game.player_points == 0
    assert game.inventory == []
    assert coin.serial == 0

    with pytest.raises(PreconditionViolation, match="no coins"):
        game.deposit(Cell(0, 1))
    assert game.point_value(Cell(0, 1)) == 4


def test_step_moves_by_movement_delta(game):
    """Test steps move by the configured delta."""
    diff = game.step(Direction.NORTH)
    assert game.player_position == pytest.approx((0.01005, 0.00005))
    assert game.player_cell.coordinate == (100, 0)
    assert len(diff.despawn) == 9
    assert len(diff.spawn) == 9

    game.step(Direction.SOUTH)
    game.step(Direction.WEST)
    assert game.player_cell.coordinate == (0, -100)
    game.step(Direction.EAST)
    assert game.player_cell.coordinate == (0, 0)


def test_state_survives_round_trip(game):
    """Test caches keep their state when the player comes back."""
    game.harvest(Cell(1, 0))
    game.step(Direction.EAST)
    game.step(Direction.WEST)
    assert Cell(1, 0) in game.viewport.visible_cells()
    assert game.point_value(Cell(1, 0)) == 2
    assert game.harvest(Cell(1, 0)).serial == 1


def test_move_within_cell(game):
    """Test a tiny move inside the same cell gives an empty diff."""
    diff = game.move_player(0.00001, -0.00001)
    assert diff.is_empty
    assert game.last_diff is diff


def test_invalid_move_keeps_position(game):
    """Test a failed move leaves the player where they were."""
    with pytest.raises(InvalidCoordinate):
        game.move_player(float("nan"), 0.0)
    assert game.player_position == (0.00005, 0.00005)


def test_reset(game):
    """Test reset returns to the origin and rebuilds visibility."""
    game.harvest(Cell(0, 0))
    game.step(Direction.NORTH)
    away = game.viewport.visible_cells()

    diff = game.reset()
    assert game.player_position == (0.00005, 0.00005)
    assert {cell for cell in diff.despawn} == away
    assert len(diff.spawn) == 9
    assert game.player_points == 1
    assert game.point_value(Cell(0, 0)) == 2


def test_reset_at_origin_respawns_everything(everywhere):
    """Test reset at the origin rebuilds every cache but reports no net change."""
    events = []
    dematerialized = []
    game = GameState(
        GameConfig(neighborhood_radius=1, origin=(0.00005, 0.00005)),
        dematerialize=lambda cell, handle: dematerialized.append(cell),
    )
    game.viewport.on_spawn(events.append)
    game.viewport.on_despawn(events.append)

    diff = game.reset()
    assert diff.is_empty
    assert game.last_diff is diff
    assert diff.center == Cell(0, 0)
    assert len(dematerialized) == 9
    assert [event.kind for event in events] == ["despawn"] * 9 + ["spawn"] * 9
    assert len(game.viewport.visible_cells()) == 9
    assert len(game.store.materialized()) == 9


def test_reset_diff_never_overlaps(game):
    """Test a reset near the origin lists each cell at most once."""
    game.move_player(0.0, 0.0001)
    diff = game.reset()

    spawned = {cell.coordinate for cell, _ in diff.spawn}
    despawned = {cell.coordinate for cell in diff.despawn}
    assert not spawned & despawned
    assert spawned == {(-1, -1), (0, -1), (1, -1)}
    assert despawned == {(-1, 2), (0, 2), (1, 2)}


def test_execute_commands(game):
    """Test the command interface."""
    item = game.execute(Harvest(Cell(0, 0)))
    assert item == ItemIdentity(0, 0, 0)
    assert game.execute(Deposit((0, 0))) == 3

    diff = game.execute(MovePlayer(0.0, 0.0001))
    assert diff.center.coordinate == (0, 1)
    game.execute(Step(Direction.SOUTH))
    assert game.player_cell.coordinate == (-100, 1)
    game.execute(Reset())
    assert game.player_cell.coordinate == (0, 0)

    with pytest.raises(TypeError, match="unknown command"):
        game.execute("north")


def test_presentation_hooks(everywhere):
    """Test hooks passed to the game see the first spawns."""
    shown = {}

    def materialize(cell, view):
        shown[cell] = view.point_value
        return cell

    def dematerialize(cell, handle):
        assert handle is cell
        del shown[cell]

    game = GameState(
        GameConfig(neighborhood_radius=1, origin=(0.00005, 0.00005)),
        materialize=materialize,
        dematerialize=dematerialize,
    )
    assert len(shown) == 9
    game.step(Direction.EAST)
    assert set(shown) == game.viewport.visible_cells()


def test_games_are_independent(everywhere):
    """Test two games do not share state."""
    config = {"neighborhood_radius": 0, "origin": (0.00005, 0.00005)}
    first, second = GameState(GameConfig(**config)), GameState(GameConfig(**config))
    first.harvest(Cell(0, 0))
    assert second.point_value(Cell(0, 0)) == 3
    assert second.player_points == 0


def test_sparse_world(monkeypatch):
    """Test only rolled cells are visible in a realistic world."""
    monkeypatch.setattr(randomness, "luck", forced_luck({"1,1": 0.05, "-1,0": 0.09}))
    game = GameState(GameConfig(neighborhood_radius=1, origin=(0.00005, 0.00005)))
    assert {cell.coordinate for cell in game.viewport.visible_cells()} == {(1, 1), (-1, 0)}
