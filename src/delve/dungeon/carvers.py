from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from typing import Any, List

from .map import Map, Point, Rect
from .pathfinding import dijkstra_map
from .tiles import TileType

logger = logging.getLogger(__name__)

_STEPS = ((0, -1), (1, 0), (0, 1), (-1, 0))


class Carver(ABC):
    """Turns walls of a fresh map into floor using the supplied rng.

    Carvers keep a one-tile wall border and never touch the exit; the builder
    owns start placement and validation.
    """

    @abstractmethod
    def carve(self, dmap: Map, start: Point, rng: random.Random) -> None:
        raise NotImplementedError


class DrunkardsWalkCarver(Carver):
    """Drunkard's-walk caverns.

    Algorithm:
    - The first drunkard starts on the start tile, later ones on random
      interior tiles.
    - Each drunkard flips every tile it visits to floor, staggering for at
      most ``stagger_distance`` steps or until it would cross the border.
    - After each drunkard, floor the start can no longer reach reverts to wall.
    - Stop once ``floor_fraction`` of the interior is floor or
      ``max_drunkards`` have walked.
    """

    def __init__(
        self,
        stagger_distance: int = 400,
        floor_fraction: float = 1 / 3,
        max_drunkards: int = 64,
    ) -> None:
        self.stagger_distance = int(stagger_distance)
        self.floor_fraction = float(floor_fraction)
        self.max_drunkards = int(max_drunkards)

    def carve(self, dmap: Map, start: Point, rng: random.Random) -> None:
        if dmap.width < 3 or dmap.height < 3:
            logger.debug("Map %s has no interior; nothing to carve", dmap)
            return
        interior = (dmap.width - 2) * (dmap.height - 2)
        desired = max(1, int(interior * self.floor_fraction))
        start_idx = dmap.point_to_index(start.x, start.y)

        spawn = start
        drunkards = 0
        floors = dmap.count(TileType.FLOOR)
        while floors < desired and drunkards < self.max_drunkards:
            self._stagger(dmap, spawn, rng)
            drunkards += 1
            floors = self._prune_unreachable(dmap, start_idx)
            spawn = Point(rng.randint(1, dmap.width - 2), rng.randint(1, dmap.height - 2))
        logger.debug("Drunkards: %d walked, %d/%d floor tiles", drunkards, floors, desired)

    def _stagger(self, dmap: Map, spawn: Point, rng: random.Random) -> None:
        x, y = spawn.x, spawn.y
        for _ in range(self.stagger_distance):
            dmap.tiles[y * dmap.width + x] = TileType.FLOOR
            dx, dy = rng.choice(_STEPS)
            nx, ny = x + dx, y + dy
            if not (1 <= nx < dmap.width - 1 and 1 <= ny < dmap.height - 1):
                break
            x, y = nx, ny

    @staticmethod
    def _prune_unreachable(dmap: Map, start_idx: int) -> int:
        dist = dijkstra_map(dmap, [start_idx])
        floors = 0
        for idx, tile in enumerate(dmap.tiles):
            if tile is not TileType.FLOOR:
                continue
            if dist[idx] is None:
                dmap.tiles[idx] = TileType.WALL
            else:
                floors += 1
        return floors


class RoomsCarver(Carver):
    """Rooms-and-corridors.

    Random rectangles inside the wall border (overlapping candidates are
    dropped), joined by L-shaped corridors in placement order. The start tile
    is joined to the first room so the whole carve hangs off it. Interiors
    narrower than ``room_min_size`` get rooms as thin as the interior allows.
    """

    def __init__(self, max_rooms: int = 6, room_min_size: int = 2, room_max_size: int = 5) -> None:
        self.max_rooms = int(max_rooms)
        self.room_min_size = int(room_min_size)
        self.room_max_size = max(int(room_max_size), self.room_min_size)

    def carve(self, dmap: Map, start: Point, rng: random.Random) -> None:
        inner_w, inner_h = dmap.width - 2, dmap.height - 2
        if inner_w < 1 or inner_h < 1:
            logger.warning("Map %s has no interior; rooms carver has nothing to dig", dmap)
            return
        # Narrow interiors get thinner rooms rather than none at all
        min_w, min_h = min(self.room_min_size, inner_w), min(self.room_min_size, inner_h)
        if (min_w, min_h) != (self.room_min_size, self.room_min_size):
            logger.debug("Clamped room minimum to %dx%d for %s", min_w, min_h, dmap)

        rooms: List[Rect] = []
        for _ in range(self.max_rooms):
            w = rng.randint(min_w, max(min_w, min(self.room_max_size, inner_w)))
            h = rng.randint(min_h, max(min_h, min(self.room_max_size, inner_h)))
            x = rng.randint(1, dmap.width - w - 1)
            y = rng.randint(1, dmap.height - h - 1)
            room = Rect(x, y, w, h)
            if any(room.intersects(other) for other in rooms):
                continue
            rooms.append(room)

        for room in rooms:
            for yy in range(room.y, room.bottom()):
                for xx in range(room.x, room.right()):
                    dmap.set_tile(xx, yy, TileType.FLOOR)

        anchors = [start] + [room.center() for room in rooms]
        for a, b in zip(anchors, anchors[1:]):
            self._connect(dmap, a, b, rng)
        logger.debug("Rooms carved: %d of %d attempts", len(rooms), self.max_rooms)

    @staticmethod
    def _connect(dmap: Map, a: Point, b: Point, rng: random.Random) -> None:
        if rng.random() < 0.5:
            # horizontal then vertical
            _carve_h(dmap, a.x, b.x, a.y)
            _carve_v(dmap, a.y, b.y, b.x)
        else:
            _carve_v(dmap, a.y, b.y, a.x)
            _carve_h(dmap, a.x, b.x, b.y)


def _carve_h(dmap: Map, x1: int, x2: int, y: int) -> None:
    if x2 < x1:
        x1, x2 = x2, x1
    for xx in range(x1, x2 + 1):
        dmap.set_tile(xx, y, TileType.FLOOR)


def _carve_v(dmap: Map, y1: int, y2: int, x: int) -> None:
    if y2 < y1:
        y1, y2 = y2, y1
    for yy in range(y1, y2 + 1):
        dmap.set_tile(x, yy, TileType.FLOOR)


def build_carver(name: str = "drunkard", **options: Any) -> Carver:
    """Return the carver registered under ``name``.

    Options not understood by the chosen carver are ignored, so one config
    table can carry settings for every algorithm.
    """
    algo = (name or "drunkard").lower()
    if algo in ("rooms", "room", "rooms_and_corridors"):
        logger.debug("Using RoomsCarver (carver=%s)", algo)
        return RoomsCarver(**_pick(options, "max_rooms", "room_min_size", "room_max_size"))
    if algo not in ("drunkard", "drunkards", "drunkards_walk", "walk"):
        logger.warning("Unknown carver '%s', falling back to DrunkardsWalkCarver", algo)
    return DrunkardsWalkCarver(**_pick(options, "stagger_distance", "floor_fraction", "max_drunkards"))


def _pick(options: dict, *keys: str) -> dict:
    return {k: options[k] for k in keys if k in options}
