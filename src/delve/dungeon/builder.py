from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional

from ..exceptions import DisconnectedMap, MapGenerationFailed
from .carvers import Carver, DrunkardsWalkCarver
from .map import Map, Point
from .pathfinding import dijkstra_map, farthest_index
from .tiles import TileType

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 10


class BuildState(Enum):
    """Per-attempt build states. SUCCESS and FATAL are terminal."""

    CARVING = auto()
    VALIDATING = auto()
    SUCCESS = auto()
    RETRY = auto()
    FATAL = auto()


@dataclass(frozen=True)
class BuildResult:
    map: Map
    start: Point
    exit: Point
    attempts: int


def center_start(width: int, height: int) -> Point:
    """Grid center, clamped to the grid."""
    return Point(min(max(width // 2, 0), width - 1), min(max(height // 2, 0), height - 1))


class MapBuilder:
    """
    Carves a map and places a reachable exit.

    Guarantees:
    - Deterministic output for an identically seeded rng
    - Start is the grid center and is always floor
    - Exactly one EXIT, on the floor tile farthest (in steps) from the start,
      lowest index on ties
    - Every floor tile is reachable from the start

    A disconnected carve is thrown away and re-carved with the next draws from
    the same rng; after ``max_attempts`` tries MapGenerationFailed is raised.
    """

    def __init__(
        self,
        carver: Optional[Carver] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        allow_diagonal: bool = False,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.carver = carver or DrunkardsWalkCarver()
        self.max_attempts = max_attempts
        self.allow_diagonal = allow_diagonal
        self.state = BuildState.CARVING
        self.history: List[BuildState] = []

    def _transition(self, state: BuildState) -> None:
        logger.debug("MapBuilder: %s -> %s", self.state.name, state.name)
        self.state = state
        self.history.append(state)

    def build(self, rng: random.Random, width: int, height: int) -> BuildResult:
        start = center_start(width, height)
        self.state = BuildState.CARVING
        self.history = [BuildState.CARVING]
        logger.debug("MapBuilder: start -> %s", BuildState.CARVING.name)
        last_error: Optional[DisconnectedMap] = None

        for attempt in range(1, self.max_attempts + 1):
            if attempt > 1:
                self._transition(BuildState.CARVING)
            dmap = self._carve(rng, width, height, start)

            self._transition(BuildState.VALIDATING)
            try:
                exit_point = self._place_exit(dmap, start)
            except DisconnectedMap as e:
                last_error = e
                logger.warning("Attempt %d/%d rejected: %s", attempt, self.max_attempts, e)
                if attempt < self.max_attempts:
                    self._transition(BuildState.RETRY)
                continue

            self._transition(BuildState.SUCCESS)
            logger.info(
                "Built %dx%d map in %d attempt(s): start=%s exit=%s floor=%d",
                width,
                height,
                attempt,
                start.as_tuple(),
                exit_point.as_tuple(),
                dmap.count(TileType.FLOOR),
            )
            return BuildResult(map=dmap, start=start, exit=exit_point, attempts=attempt)

        self._transition(BuildState.FATAL)
        raise MapGenerationFailed(
            f"No connected {width}x{height} map after {self.max_attempts} attempts",
            attempts=self.max_attempts,
        ) from last_error

    def _carve(self, rng: random.Random, width: int, height: int, start: Point) -> Map:
        dmap = Map(width, height, default=TileType.WALL, allow_diagonal=self.allow_diagonal)
        self.carver.carve(dmap, start, rng)
        if dmap.tile_at(start.x, start.y) is not TileType.FLOOR:
            dmap.set_tile(start.x, start.y, TileType.FLOOR)
        return dmap

    @staticmethod
    def _place_exit(dmap: Map, start: Point) -> Point:
        start_idx = dmap.point_to_index(start.x, start.y)
        dist = dijkstra_map(dmap, [start_idx])

        unreachable = sum(
            1 for idx, tile in enumerate(dmap.tiles) if tile is TileType.FLOOR and dist[idx] is None
        )
        if unreachable:
            raise DisconnectedMap(f"{unreachable} floor tile(s) unreachable from start {start.as_tuple()}")

        exit_idx = farthest_index(dist, exclude=(start_idx,))
        if exit_idx is None:
            raise DisconnectedMap(f"no floor reachable from start {start.as_tuple()}")
        dmap.tiles[exit_idx] = TileType.EXIT
        return dmap.index_to_point(exit_idx)
