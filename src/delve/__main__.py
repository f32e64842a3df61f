from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict

from . import __version__
from .config import CARVERS, GenerationConfig, load_generation_config
from .exceptions import ConfigError, MapGenerationFailed
from .logging_config import configure_logging
from .rng import RNGManager
from .session import GameSession

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="delve",
        description="Generate a seeded dungeon map with a reachable exit",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, default=None, help="YAML generation config (default: packaged)")
    parser.add_argument("--seed", default=None, help="Master seed (int or string); random when omitted")
    parser.add_argument("--width", type=int, default=None, help="Map width in tiles")
    parser.add_argument("--height", type=int, default=None, help="Map height in tiles")
    parser.add_argument("--carver", choices=CARVERS, default=None, help="Carving algorithm")
    parser.add_argument("--max-attempts", type=int, default=None, help="Build attempts before giving up")
    parser.add_argument("--format", choices=("ascii", "json"), default="ascii", help="Output format")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity (-v, -vv)")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> GenerationConfig:
    """Packaged/YAML config, then DELVE_* env vars, then CLI flags."""
    cfg = GenerationConfig.from_env(load_generation_config(args.config))
    overrides: Dict[str, Any] = {}
    for name in ("seed", "width", "height", "carver", "max_attempts"):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value
    return replace(cfg, **overrides).validate()


def session_summary(session: GameSession) -> Dict[str, Any]:
    dmap = session.map
    return {
        "width": dmap.width,
        "height": dmap.height,
        "seed": session.seed,
        "start": list(session.start.as_tuple()),
        "exit": list(session.exit.as_tuple()),
        "attempts": session.attempts,
        "rows": dmap.to_str_lines(),
    }


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        cfg = build_config(args)
    except (ConfigError, FileNotFoundError) as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    rngm = RNGManager(cfg.seed)
    try:
        session = GameSession.start_new(cfg, rng=rngm.context_rng("map_layout"))
    except MapGenerationFailed as e:
        logger.error("Map generation failed after %d attempts: %s", e.attempts, e)
        return 1

    if session.seed is None:
        session.seed = "0x" + rngm.seed_hex
    if args.format == "json":
        print(json.dumps(session_summary(session), indent=2, sort_keys=True))
    else:
        print("\n".join(session.map.to_str_lines(start=session.start)))
    session.teardown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
