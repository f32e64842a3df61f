from enum import Enum, auto
from typing import Tuple


class TileType(Enum):
    """Dungeon tile types.

    - WALL: Non-walkable obstacle, the default for a fresh grid
    - FLOOR: Walkable open tile
    - EXIT: Walkable tile marking the level exit (exactly one per built map)
    """

    WALL = auto()
    FLOOR = auto()
    EXIT = auto()

    @property
    def is_walkable(self) -> bool:
        return self in {TileType.FLOOR, TileType.EXIT}

    @property
    def glyph(self) -> str:
        """A single-character visualization useful for logs/debug."""
        return {TileType.WALL: '#', TileType.FLOOR: '.', TileType.EXIT: '>'}[self]

    @property
    def color(self) -> Tuple[int, int, int]:
        """Default RGB color for 2D rendering."""
        return {
            TileType.WALL: (40, 40, 48),
            TileType.FLOOR: (180, 180, 180),
            TileType.EXIT: (200, 160, 40),
        }[self]

    @property
    def elevation(self) -> float:
        """Vertical offset of the tile's model in a 3D scene.

        Walls sit raised, the exit sits sunken so it reads as a pit.
        """
        return {TileType.WALL: 0.2, TileType.FLOOR: 0.0, TileType.EXIT: -0.2}[self]

    @classmethod
    def from_glyph(cls, ch: str) -> "TileType":
        for t in cls:
            if t.glyph == ch:
                return t
        raise ValueError(f"Unknown tile glyph: {ch!r}")
