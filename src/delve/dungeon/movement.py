from __future__ import annotations

from dataclasses import dataclass

from .map import Map, Point


@dataclass
class MoveResult:
    new_pos: Point
    moved: bool


def try_move(dmap: Map, pos: Point, dx: int, dy: int) -> MoveResult:
    """
    Attempt a single cardinal step from pos by (dx, dy). Out-of-bounds targets
    count as non-walkable, so this never raises on the map edge.
    """
    if abs(dx) + abs(dy) != 1:
        return MoveResult(new_pos=pos, moved=False)
    target_x = pos.x + dx
    target_y = pos.y + dy
    if not dmap.is_walkable(target_x, target_y):
        return MoveResult(new_pos=pos, moved=False)
    return MoveResult(new_pos=Point(target_x, target_y), moved=True)
