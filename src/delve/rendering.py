"""
Rendering adapter: turns a built map into drawables.

The dungeon core only emits ``(position, TileType)`` pairs. This module maps
them to 3D placements (one model per tile, raised or sunken by tile type) or
to 2D sprites via a pluggable factory, so no engine import leaks into the
core.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Protocol, Tuple

from .dungeon.map import Map
from .dungeon.tiles import TileType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TilePlacement:
    """Where one tile's model goes in a 3D scene (x right, y up, z forward)."""

    index: int
    x: float
    y: float
    z: float
    tile: TileType


def placements(dmap: Map) -> Iterator[TilePlacement]:
    """One placement per tile, in index order."""
    for idx, tile in dmap.enumerate_tiles():
        p = dmap.index_to_point(idx)
        yield TilePlacement(index=idx, x=float(p.x), y=tile.elevation, z=float(p.y), tile=tile)


# --------- Sprite abstractions ---------
class SpriteLike(Protocol):
    center_x: float
    center_y: float


class SpriteListLike(Protocol):
    def append(self, sprite: SpriteLike) -> None:
        ...

    def draw(self) -> None:
        ...

    def __len__(self) -> int:
        ...


class SpriteFactory(Protocol):
    """Creates colored tile sprites and the list that batches them.

    Use ArcadeSpriteFactory in production. Tests use DummySpriteFactory to
    avoid needing an OpenGL context.
    """

    def create_sprite(self, size: int, color: Tuple[int, int, int], center_x: float, center_y: float) -> SpriteLike:
        ...

    def create_sprite_list(self) -> SpriteListLike:
        ...


class _DummySprite:
    def __init__(self, size: int, color: Tuple[int, int, int], center_x: float, center_y: float) -> None:
        self.size = size
        self.color = color
        self.center_x = center_x
        self.center_y = center_y


class _DummySpriteList:
    def __init__(self) -> None:
        self.sprites: List[_DummySprite] = []
        self.draw_count = 0

    def append(self, sprite: _DummySprite) -> None:
        self.sprites.append(sprite)

    def draw(self) -> None:
        self.draw_count += 1

    def __len__(self) -> int:
        return len(self.sprites)


class DummySpriteFactory:
    """Headless factory used in tests or CLI tools without a GL context."""

    def create_sprite(self, size: int, color: Tuple[int, int, int], center_x: float, center_y: float) -> _DummySprite:
        return _DummySprite(size, color, center_x, center_y)

    def create_sprite_list(self) -> _DummySpriteList:
        return _DummySpriteList()


class ArcadeSpriteFactory:
    """Factory backed by arcade.SpriteSolidColor and arcade.SpriteList.

    Import is deferred to runtime to keep the core and tests headless.
    """

    def __init__(self) -> None:
        try:
            import arcade  # type: ignore
        except ImportError as e:  # pragma: no cover - runtime only
            raise RuntimeError("ArcadeSpriteFactory requires the 'arcade' package at runtime") from e
        self._arcade = arcade

    def create_sprite(self, size: int, color: Tuple[int, int, int], center_x: float, center_y: float):  # pragma: no cover - requires arcade
        sprite = self._arcade.SpriteSolidColor(size, size, color=color)
        sprite.center_x = center_x
        sprite.center_y = center_y
        return sprite

    def create_sprite_list(self):  # pragma: no cover - requires arcade
        return self._arcade.SpriteList()


def build_tile_sprites(
    dmap: Map,
    factory: Optional[SpriteFactory] = None,
    tile_px: int = 24,
) -> SpriteListLike:
    """Batch one colored square per tile.

    Row 0 of the map is drawn at the top of the screen, matching the ASCII dump.
    """
    if tile_px <= 0:
        raise ValueError("tile_px must be > 0")
    factory = factory or DummySpriteFactory()
    sprites = factory.create_sprite_list()
    half = tile_px / 2.0
    for idx, tile in dmap.enumerate_tiles():
        p = dmap.index_to_point(idx)
        cx = p.x * tile_px + half
        cy = (dmap.height - 1 - p.y) * tile_px + half
        sprites.append(factory.create_sprite(tile_px, tile.color, cx, cy))
    logger.debug("Built %d tile sprites at %dpx", len(sprites), tile_px)
    return sprites
