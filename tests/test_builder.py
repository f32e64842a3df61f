import logging
import random

import pytest

from delve.dungeon.builder import BuildState, MapBuilder, center_start
from delve.dungeon.carvers import Carver, DrunkardsWalkCarver, RoomsCarver
from delve.dungeon.map import Point
from delve.dungeon.pathfinding import dijkstra_map, find_path
from delve.dungeon.tiles import TileType
from delve.exceptions import DisconnectedMap, InvalidDimensions, MapGenerationFailed


class NothingCarver(Carver):
    """Leaves the map solid so only the forced start tile is floor."""

    def __init__(self):
        self.calls = 0

    def carve(self, dmap, start, rng):
        self.calls += 1
        rng.random()


class FlakyCarver(Carver):
    """Carves nothing for the first ``failures`` calls, then digs caverns."""

    def __init__(self, failures):
        self.failures = failures
        self.calls = 0
        self.draws = []
        self._inner = DrunkardsWalkCarver()

    def carve(self, dmap, start, rng):
        self.calls += 1
        self.draws.append(rng.random())
        if self.calls > self.failures:
            self._inner.carve(dmap, start, rng)


class IslandCarver(Carver):
    """Carves next to the start plus one floor tile nobody can reach."""

    def carve(self, dmap, start, rng):
        dmap.set_tile(start.x + 1, start.y, TileType.FLOOR)
        dmap.set_tile(1, 1, TileType.FLOOR)


def test_reference_scenario_14_by_21(seeded_rng):
    result = MapBuilder().build(seeded_rng(1234), 14, 21)
    dmap = result.map

    assert (dmap.width, dmap.height) == (14, 21)
    assert result.start == Point(7, 10), "Start is the grid center"
    assert dmap.tile_at(7, 10) == TileType.FLOOR
    assert dmap.count(TileType.FLOOR) >= 1
    assert dmap.count(TileType.EXIT) == 1

    start_idx = dmap.point_to_index(result.start.x, result.start.y)
    exit_idx = dmap.point_to_index(result.exit.x, result.exit.y)
    path = find_path(dmap, start_idx, exit_idx)
    assert path is not None and len(path) > 1, "Exit must be reachable from start"

    dist = dijkstra_map(dmap, [start_idx])
    for idx, tile in dmap:
        if tile is TileType.FLOOR:
            assert dist[idx] is not None, "Every floor tile is connected to the start"


@pytest.mark.parametrize("seed", [0, 1, 42, 1234, 987654321])
def test_same_seed_same_map(seed):
    a = MapBuilder().build(random.Random(seed), 14, 21)
    b = MapBuilder().build(random.Random(seed), 14, 21)
    assert a.map.snapshot() == b.map.snapshot(), "Tiles differ with same seed"
    assert a.start == b.start
    assert a.exit == b.exit


def test_different_seeds_differ():
    a = MapBuilder().build(random.Random(1), 14, 21)
    b = MapBuilder().build(random.Random(2), 14, 21)
    assert a.map.snapshot() != b.map.snapshot()


@pytest.mark.parametrize("seed", [3, 17, 256, 4096])
@pytest.mark.parametrize("carver", [DrunkardsWalkCarver, RoomsCarver])
def test_exit_is_farthest_with_lowest_index_tie_break(seed, carver):
    result = MapBuilder(carver=carver()).build(random.Random(seed), 14, 21)
    dmap = result.map
    start_idx = dmap.point_to_index(result.start.x, result.start.y)
    exit_idx = dmap.point_to_index(result.exit.x, result.exit.y)
    dist = dijkstra_map(dmap, [start_idx])

    exit_d = dist[exit_idx]
    assert exit_d is not None and exit_d > 0
    for idx, tile in dmap:
        if tile is TileType.FLOOR and dist[idx] is not None:
            assert dist[idx] <= exit_d
            if dist[idx] == exit_d:
                assert idx > exit_idx, "Ties must resolve to the lowest index"


def test_retry_recovers_with_fresh_draws():
    carver = FlakyCarver(failures=2)
    builder = MapBuilder(carver=carver, max_attempts=5)
    result = builder.build(random.Random(7), 14, 21)

    assert result.attempts == 3
    assert carver.calls == 3
    assert len(set(carver.draws)) == 3, "Each attempt draws fresh values from the rng"
    assert result.map.count(TileType.EXIT) == 1
    assert builder.state is BuildState.SUCCESS
    assert builder.history == [
        BuildState.CARVING,
        BuildState.VALIDATING,
        BuildState.RETRY,
        BuildState.CARVING,
        BuildState.VALIDATING,
        BuildState.RETRY,
        BuildState.CARVING,
        BuildState.VALIDATING,
        BuildState.SUCCESS,
    ]


def test_degenerate_carve_exhausts_retries():
    carver = NothingCarver()
    builder = MapBuilder(carver=carver, max_attempts=4)
    with pytest.raises(MapGenerationFailed) as excinfo:
        builder.build(random.Random(0), 14, 21)

    assert excinfo.value.attempts == 4
    assert isinstance(excinfo.value.__cause__, DisconnectedMap)
    assert carver.calls == 4
    assert builder.state is BuildState.FATAL
    assert builder.history.count(BuildState.VALIDATING) == 4
    assert builder.history[-1] is BuildState.FATAL


def test_unreachable_floor_is_rejected():
    builder = MapBuilder(carver=IslandCarver(), max_attempts=2)
    with pytest.raises(MapGenerationFailed) as excinfo:
        builder.build(random.Random(0), 14, 21)
    assert "unreachable" in str(excinfo.value.__cause__)


def test_tiny_maps_fail_instead_of_returning_broken_map():
    with pytest.raises(MapGenerationFailed):
        MapBuilder(max_attempts=2).build(random.Random(0), 3, 3)
    with pytest.raises(MapGenerationFailed):
        MapBuilder(max_attempts=1).build(random.Random(0), 1, 1)


def test_invalid_dimensions_are_not_retried():
    carver = NothingCarver()
    with pytest.raises(InvalidDimensions):
        MapBuilder(carver=carver).build(random.Random(0), 0, 21)
    assert carver.calls == 0


def test_max_attempts_must_be_positive():
    with pytest.raises(ValueError):
        MapBuilder(max_attempts=0)


def test_diagonal_builder_marks_map(seeded_rng):
    result = MapBuilder(allow_diagonal=True).build(seeded_rng(11), 14, 21)
    assert result.map.allow_diagonal
    assert result.map.count(TileType.EXIT) == 1


def test_center_start_is_clamped():
    assert center_start(14, 21) == Point(7, 10)
    assert center_start(1, 1) == Point(0, 0)
    assert center_start(2, 3) == Point(1, 1)


def test_every_transition_is_logged(caplog):
    builder = MapBuilder(carver=FlakyCarver(failures=1), max_attempts=3)
    with caplog.at_level(logging.DEBUG, logger="delve.dungeon.builder"):
        builder.build(random.Random(5), 14, 21)
    transitions = [r.getMessage() for r in caplog.records if r.getMessage().startswith("MapBuilder:")]
    assert len(transitions) == len(builder.history)
    assert transitions[0].endswith("-> CARVING")
    assert [t.rsplit("-> ", 1)[1] for t in transitions] == [s.name for s in builder.history]


def test_rooms_on_a_single_row_interior():
    result = MapBuilder(carver=RoomsCarver(), max_attempts=1).build(random.Random(3), 14, 3)
    assert result.start == Point(7, 1)
    assert result.map.count(TileType.EXIT) == 1
    assert result.exit.y == 1
