"""
Dungeon grid and generation.

Contains the flat tile grid, a pathfinding capability any search can consume,
the carving algorithms, and the builder that validates connectivity and
places the exit.
"""

from .builder import BuildResult, BuildState, MapBuilder
from .carvers import Carver, DrunkardsWalkCarver, RoomsCarver, build_carver
from .map import Map, Point, Rect
from .tiles import TileType

__all__ = [
    "BuildResult",
    "BuildState",
    "Carver",
    "DrunkardsWalkCarver",
    "Map",
    "MapBuilder",
    "Point",
    "Rect",
    "RoomsCarver",
    "TileType",
    "build_carver",
]
