"""
delve package root.

Seeded dungeon generation with a guaranteed reachable exit. The core under
``delve.dungeon`` is engine-agnostic; drawing lives in ``delve.rendering``.
"""

__version__ = "0.1.0"

__all__ = [
    "dungeon",
]
