from __future__ import annotations

import logging
import random
from enum import Enum, auto
from typing import Callable, List, Optional, Tuple

from .config import GenerationConfig
from .dungeon.builder import BuildResult, MapBuilder
from .dungeon.carvers import build_carver
from .dungeon.map import Map, Point
from .dungeon.movement import try_move
from .exceptions import SessionClosed
from .rng import make_rng

logger = logging.getLogger(__name__)

Vec3 = Tuple[float, float, float]


class SessionEvent(Enum):
    """Events emitted by GameSession to notify UI or systems."""

    PLAYER_MOVED = auto()
    EXIT_REACHED = auto()
    TORN_DOWN = auto()


def reset_focus(width: int, height: int) -> Vec3:
    """Point the camera looks at when a board is first shown."""
    return (height / 2.0, 0.0, width / 2.0 - 0.5)


class GameSession:
    """Holds one play session: the built map, player position and score.

    Created by the top-level controller at session start and torn down at the
    end. The map is read-only once it lands here.
    """

    def __init__(self, result: BuildResult, seed: Optional[object] = None) -> None:
        self._listeners: List[Callable[[SessionEvent, "GameSession"], None]] = []
        self.map: Map = result.map
        self.start: Point = result.start
        self.exit: Point = result.exit
        self.attempts: int = result.attempts
        self.seed = seed
        self.player: Point = result.start
        self.score: int = 0
        self.camera_should_focus: Vec3 = reset_focus(self.map.width, self.map.height)
        self.camera_is_focus: Vec3 = self.camera_should_focus
        self.active: bool = True
        logger.info("Session started on %r, player at %s", self.map, self.player.as_tuple())

    @classmethod
    def start_new(
        cls,
        config: Optional[GenerationConfig] = None,
        rng: Optional[random.Random] = None,
        builder: Optional[MapBuilder] = None,
    ) -> "GameSession":
        """Build a fresh map and wrap it in a session.

        Raises MapGenerationFailed when no connected map could be built; the
        caller should abort session setup.
        """
        cfg = config or GenerationConfig()
        if builder is None:
            builder = MapBuilder(
                carver=build_carver(cfg.carver, **cfg.carver_options()),
                max_attempts=cfg.max_attempts,
                allow_diagonal=cfg.allow_diagonal,
            )
        if rng is None:
            rng = make_rng(cfg.seed)
        result = builder.build(rng, cfg.width, cfg.height)
        return cls(result, seed=cfg.seed)

    def add_listener(self, listener: Callable[[SessionEvent, "GameSession"], None]) -> None:
        """Subscribe to session events (movement, exit, teardown)."""
        self._listeners.append(listener)

    def _emit(self, event: SessionEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, self)
            except Exception:
                logger.exception("Listener errored on %s", event)

    @property
    def player_pos(self) -> Tuple[int, int]:
        return self.player.as_tuple()

    @property
    def on_exit(self) -> bool:
        return self.player == self.exit

    def move(self, dx: int, dy: int) -> bool:
        """Attempt to move the player one cardinal step.

        Returns True if the move happened. Stepping onto the exit scores a
        point and emits EXIT_REACHED.
        """
        if not self.active:
            raise SessionClosed("Session has been torn down")
        result = try_move(self.map, self.player, dx, dy)
        if not result.moved:
            logger.debug("Blocked move by (%d, %d) from %s", dx, dy, self.player.as_tuple())
            return False
        self.player = result.new_pos
        self._emit(SessionEvent.PLAYER_MOVED)
        if self.on_exit:
            self.score += 1
            logger.info("Player reached the exit at %s; score=%d", self.player.as_tuple(), self.score)
            self._emit(SessionEvent.EXIT_REACHED)
        return True

    def teardown(self) -> None:
        if not self.active:
            return
        self._emit(SessionEvent.TORN_DOWN)
        self._listeners.clear()
        self.active = False
        logger.info("Session torn down (score=%d)", self.score)
