from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from ..exceptions import InvalidDimensions, OutOfBounds
from .tiles import TileType

logger = logging.getLogger(__name__)

# Ordered for deterministic traversal: N, E, S, W then NE, SE, SW, NW
_ORTHOGONAL: Tuple[Tuple[int, int], ...] = ((0, -1), (1, 0), (0, 1), (-1, 0))
_DIAGONAL: Tuple[Tuple[int, int], ...] = ((1, -1), (1, 1), (-1, 1), (-1, -1))


@dataclass(frozen=True)
class Point:
    x: int
    y: int

    def as_tuple(self) -> Tuple[int, int]:
        return self.x, self.y


@dataclass
class Rect:
    x: int
    y: int
    w: int
    h: int

    def right(self) -> int:
        return self.x + self.w

    def bottom(self) -> int:
        return self.y + self.h

    def center(self) -> Point:
        return Point(self.x + self.w // 2, self.y + self.h // 2)

    def intersects(self, other: "Rect") -> bool:
        return (
            self.x < other.right()
            and other.x < self.right()
            and self.y < other.bottom()
            and other.y < self.bottom()
        )


class Map:
    """
    Flat, row-major tile grid. ``tiles[y * width + x]`` holds the tile at
    ``(x, y)``; (0, 0) is the top-left corner.

    A fresh map is solid wall so nothing is traversable before carving. The
    public accessors are range-checked and raise :class:`OutOfBounds`.
    ``available_exits`` is the only thing pathfinding needs to know about the
    grid.
    """

    def __init__(
        self,
        width: int,
        height: int,
        default: TileType = TileType.WALL,
        allow_diagonal: bool = False,
    ) -> None:
        if not isinstance(width, int) or not isinstance(height, int) or width <= 0 or height <= 0:
            raise InvalidDimensions(f"Map dimensions must be positive integers, got {width!r}x{height!r}")
        self.width = width
        self.height = height
        self.allow_diagonal = allow_diagonal
        self.tiles: List[TileType] = [default] * (width * height)

    # ---- Safety / Bounds -------------------------------------------------
    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def in_bounds_index(self, idx: int) -> bool:
        return 0 <= idx < len(self.tiles)

    def point_to_index(self, x: int, y: int) -> int:
        if not self.in_bounds(x, y):
            raise OutOfBounds(f"Point out of bounds: ({x},{y}) not in [0,{self.width})x[0,{self.height})")
        return y * self.width + x

    def index_to_point(self, idx: int) -> Point:
        if not self.in_bounds_index(idx):
            raise OutOfBounds(f"Index out of bounds: {idx} not in [0,{len(self.tiles)})")
        return Point(idx % self.width, idx // self.width)

    # ---- Tile access -----------------------------------------------------
    def tile_at(self, x: int, y: int) -> TileType:
        return self.tiles[self.point_to_index(x, y)]

    def set_tile(self, x: int, y: int, tile: TileType) -> None:
        self.tiles[self.point_to_index(x, y)] = tile

    def is_walkable(self, x: int, y: int) -> bool:
        if not self.in_bounds(x, y):
            return False
        return self.tiles[y * self.width + x].is_walkable

    # ---- Graph view for pathfinding --------------------------------------
    def available_exits(self, idx: int) -> List[Tuple[int, int]]:
        """Walkable in-bounds neighbors of ``idx`` as ``(index, cost)`` pairs."""
        x, y = idx % self.width, idx // self.width
        deltas = _ORTHOGONAL + _DIAGONAL if self.allow_diagonal else _ORTHOGONAL
        exits: List[Tuple[int, int]] = []
        for dx, dy in deltas:
            nx, ny = x + dx, y + dy
            if not self.in_bounds(nx, ny):
                continue
            n_idx = ny * self.width + nx
            if self.tiles[n_idx].is_walkable:
                exits.append((n_idx, 1))
        return exits

    # ---- Query -----------------------------------------------------------
    def __len__(self) -> int:
        return len(self.tiles)

    def __iter__(self) -> Iterator[Tuple[int, TileType]]:
        return self.enumerate_tiles()

    def enumerate_tiles(self) -> Iterator[Tuple[int, TileType]]:
        return iter(enumerate(self.tiles))

    def iter_points(self) -> Iterator[Tuple[Point, TileType]]:
        for idx, tile in enumerate(self.tiles):
            yield Point(idx % self.width, idx // self.width), tile

    def count(self, tile: TileType) -> int:
        return self.tiles.count(tile)

    def find(self, tile: TileType) -> List[Point]:
        return [p for p, t in self.iter_points() if t is tile]

    # ---- Export / Compare -----------------------------------------------
    def to_str_lines(self, start: Optional[Point] = None) -> List[str]:
        lines: List[str] = []
        for y in range(self.height):
            row = []
            for x in range(self.width):
                if start is not None and start.x == x and start.y == y:
                    row.append('@')
                else:
                    row.append(self.tiles[y * self.width + x].glyph)
            lines.append(''.join(row))
        return lines

    def snapshot(self) -> Tuple[int, ...]:
        """Deterministic, hashable snapshot of the tiles for equality tests."""
        return tuple(t.value for t in self.tiles)

    @classmethod
    def from_ascii(cls, rows: Sequence[str], allow_diagonal: bool = False) -> "Map":
        """
        Build a Map from ASCII rows using tile glyphs (``#``, ``.``, ``>``).
        Intended for tests and tools.
        """
        if not rows:
            raise InvalidDimensions("rows must not be empty")
        width = len(rows[0])
        for r in rows:
            if len(r) != width:
                raise InvalidDimensions("All rows must be same width")
        dmap = cls(width, len(rows), allow_diagonal=allow_diagonal)
        for y, row in enumerate(rows):
            for x, ch in enumerate(row):
                dmap.tiles[y * width + x] = TileType.from_glyph(ch)
        return dmap

    def __repr__(self) -> str:
        return f"Map({self.width}x{self.height})"
