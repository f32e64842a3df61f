import logging
import random

from delve.dungeon.carvers import DrunkardsWalkCarver, RoomsCarver, build_carver
from delve.dungeon.map import Map, Point
from delve.dungeon.pathfinding import dijkstra_map
from delve.dungeon.tiles import TileType


def _border_is_wall(dmap):
    for x in range(dmap.width):
        if dmap.tile_at(x, 0) != TileType.WALL or dmap.tile_at(x, dmap.height - 1) != TileType.WALL:
            return False
    for y in range(dmap.height):
        if dmap.tile_at(0, y) != TileType.WALL or dmap.tile_at(dmap.width - 1, y) != TileType.WALL:
            return False
    return True


def _all_floor_reachable(dmap, start):
    dist = dijkstra_map(dmap, [dmap.point_to_index(start.x, start.y)])
    return all(dist[i] is not None for i, t in dmap if t is TileType.FLOOR)


def test_drunkard_reaches_floor_quota_and_stays_connected():
    dmap = Map(14, 21)
    start = Point(7, 10)
    DrunkardsWalkCarver(max_drunkards=500).carve(dmap, start, random.Random(99))

    desired = int(12 * 19 / 3)
    assert dmap.count(TileType.FLOOR) >= desired
    assert dmap.tile_at(7, 10) == TileType.FLOOR, "First drunkard starts on the start tile"
    assert _border_is_wall(dmap)
    assert _all_floor_reachable(dmap, start)


def test_drunkard_is_deterministic():
    a, b = Map(20, 20), Map(20, 20)
    DrunkardsWalkCarver().carve(a, Point(10, 10), random.Random(5))
    DrunkardsWalkCarver().carve(b, Point(10, 10), random.Random(5))
    assert a.snapshot() == b.snapshot()


def test_drunkard_with_zero_stagger_carves_nothing():
    dmap = Map(14, 21)
    DrunkardsWalkCarver(stagger_distance=0, max_drunkards=5).carve(dmap, Point(7, 10), random.Random(1))
    assert dmap.count(TileType.FLOOR) == 0


def test_drunkard_skips_maps_without_interior():
    dmap = Map(2, 5)
    DrunkardsWalkCarver().carve(dmap, Point(1, 2), random.Random(1))
    assert dmap.count(TileType.FLOOR) == 0


def test_rooms_connected_to_start():
    dmap = Map(14, 21)
    start = Point(7, 10)
    RoomsCarver(max_rooms=8).carve(dmap, start, random.Random(2024))

    assert dmap.tile_at(7, 10) == TileType.FLOOR
    assert dmap.count(TileType.FLOOR) >= 4
    assert _border_is_wall(dmap)
    assert _all_floor_reachable(dmap, start)


def test_rooms_without_interior_carve_nothing(caplog):
    dmap = Map(2, 5)
    with caplog.at_level(logging.WARNING):
        RoomsCarver().carve(dmap, Point(1, 2), random.Random(0))
    assert dmap.count(TileType.FLOOR) == 0
    assert "no interior" in caplog.text


def test_rooms_shrink_to_narrow_interior():
    dmap = Map(14, 3)
    start = Point(7, 1)
    RoomsCarver(room_min_size=2).carve(dmap, start, random.Random(0))
    assert dmap.count(TileType.FLOOR) >= 2
    assert _border_is_wall(dmap)
    assert _all_floor_reachable(dmap, start)
    assert all(p.y == 1 for p in dmap.find(TileType.FLOOR))


def test_build_carver_by_name():
    assert isinstance(build_carver("rooms", max_rooms=3, stagger_distance=10), RoomsCarver)
    carver = build_carver("drunkard", stagger_distance=10, max_rooms=3)
    assert isinstance(carver, DrunkardsWalkCarver)
    assert carver.stagger_distance == 10


def test_build_carver_unknown_falls_back(caplog):
    with caplog.at_level(logging.WARNING):
        carver = build_carver("cellular")
    assert isinstance(carver, DrunkardsWalkCarver)
    assert "falling back" in caplog.text
