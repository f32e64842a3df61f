from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from importlib.resources import files as resource_files
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

CARVERS = ("drunkard", "rooms")

_ENV_FIELDS = {
    "DELVE_WIDTH": ("width", int),
    "DELVE_HEIGHT": ("height", int),
    "DELVE_CARVER": ("carver", str),
    "DELVE_SEED": ("seed", str),
    "DELVE_MAX_ATTEMPTS": ("max_attempts", int),
}

_INT_FIELDS = (
    "width",
    "height",
    "max_attempts",
    "stagger_distance",
    "max_drunkards",
    "max_rooms",
    "room_min_size",
    "room_max_size",
)


@dataclass(frozen=True)
class GenerationConfig:
    """Map generation settings.

    The defaults reproduce the reference board: a 14 x 21 drunkard's-walk
    cavern with up to 10 build attempts. ``seed`` of None means a fresh random
    layout per session.
    """

    width: int = 14
    height: int = 21
    carver: str = "drunkard"
    max_attempts: int = 10
    allow_diagonal: bool = False
    seed: Optional[Union[int, str]] = None

    # Drunkard's walk
    stagger_distance: int = 400
    floor_fraction: float = 1 / 3
    max_drunkards: int = 64

    # Rooms and corridors
    max_rooms: int = 6
    room_min_size: int = 2
    room_max_size: int = 5

    def validate(self) -> "GenerationConfig":
        for name in _INT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"{name} must be an integer, got {value!r}")
        if isinstance(self.floor_fraction, bool) or not isinstance(self.floor_fraction, (int, float)):
            raise ConfigError(f"floor_fraction must be a number, got {self.floor_fraction!r}")
        if not isinstance(self.allow_diagonal, bool):
            raise ConfigError(f"allow_diagonal must be true or false, got {self.allow_diagonal!r}")
        if not isinstance(self.carver, str):
            raise ConfigError(f"carver must be a string, got {self.carver!r}")
        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, (int, str))):
            raise ConfigError(f"seed must be an integer or a string, got {self.seed!r}")
        if isinstance(self.seed, int) and self.seed < 0:
            raise ConfigError(f"seed must be non-negative, got {self.seed}")
        if self.width <= 0 or self.height <= 0:
            raise ConfigError(f"width/height must be > 0, got {self.width}x{self.height}")
        if self.max_attempts < 1:
            raise ConfigError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if not 0.0 < self.floor_fraction <= 1.0:
            raise ConfigError(f"floor_fraction must be in (0, 1], got {self.floor_fraction}")
        if self.stagger_distance < 0 or self.max_drunkards < 0 or self.max_rooms < 0:
            raise ConfigError("stagger_distance, max_drunkards and max_rooms must be >= 0")
        if self.room_min_size < 1 or self.room_max_size < self.room_min_size:
            raise ConfigError(
                f"room sizes must satisfy 1 <= min <= max, got {self.room_min_size}..{self.room_max_size}"
            )
        if self.carver not in CARVERS:
            logger.warning("Unknown carver '%s'; builder will fall back to 'drunkard'", self.carver)
        return self

    def carver_options(self) -> Dict[str, Any]:
        return {
            "stagger_distance": self.stagger_distance,
            "floor_fraction": self.floor_fraction,
            "max_drunkards": self.max_drunkards,
            "max_rooms": self.max_rooms,
            "room_min_size": self.room_min_size,
            "room_max_size": self.room_max_size,
        }

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "GenerationConfig":
        known = {f.name: f for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in raw.items():
            if key not in known:
                logger.warning("Ignoring unknown generation setting: %s", key)
                continue
            values[key] = value
        try:
            return cls(**values).validate()
        except TypeError as e:
            raise ConfigError(f"Invalid generation settings: {e}") from e

    @classmethod
    def from_env(cls, base: Optional["GenerationConfig"] = None) -> "GenerationConfig":
        """Apply DELVE_* environment overrides on top of ``base`` (or defaults)."""
        cfg = base or cls()
        overrides: Dict[str, Any] = {}
        for env_key, (name, cast) in _ENV_FIELDS.items():
            raw = os.environ.get(env_key)
            if raw is None or raw == "":
                continue
            try:
                overrides[name] = cast(raw)
            except ValueError as e:
                raise ConfigError(f"{env_key}={raw!r} is not a valid {cast.__name__}") from e
        if overrides:
            logger.debug("Environment overrides: %s", overrides)
        return replace(cfg, **overrides).validate()


def load_generation_config(path: Optional[Union[str, Path]] = None) -> GenerationConfig:
    """Load generation settings from YAML.

    If path is None, loads the embedded default resource at
    delve/data/generation.yaml. Settings may sit at the top level or under a
    ``generation`` key.
    """
    if path is None:
        data = resource_files("delve.data").joinpath("generation.yaml").read_text(encoding="utf-8")
        logger.debug("Loaded embedded generation config resource")
    else:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        data = config_path.read_text(encoding="utf-8")
        logger.debug("Loaded generation config from path: %s", config_path)

    try:
        raw = yaml.safe_load(data) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Malformed generation config: {e}") from e
    if not isinstance(raw, Mapping):
        raise ConfigError("Generation config must be a mapping")
    section = raw.get("generation", raw)
    if not isinstance(section, Mapping):
        raise ConfigError("[generation] must be a mapping")
    cfg = GenerationConfig.from_mapping(section)
    logger.info("Generation config: %dx%d carver=%s attempts=%d", cfg.width, cfg.height, cfg.carver, cfg.max_attempts)
    return cfg
