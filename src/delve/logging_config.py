import logging
import os

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"


def level_for_verbosity(verbosity: int) -> int:
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def configure_logging(verbosity: int = 0) -> int:
    """Configure the root logger for command-line runs.

    ``-v`` maps to INFO and ``-vv`` to DEBUG. A DELVE_LOG_LEVEL env var
    (e.g. ``debug``) wins over the flag. Returns the effective level.
    """
    level = level_for_verbosity(verbosity)
    level_name = os.getenv("DELVE_LOG_LEVEL")
    if level_name:
        named = getattr(logging, level_name.upper(), None)
        if isinstance(named, int):
            level = named
    logging.basicConfig(level=level, format=LOG_FORMAT)
    return level
