class DelveError(Exception):
    """Base exception for the delve project."""


class InvalidDimensions(DelveError, ValueError):
    """Raised when a map is constructed with non-positive width/height."""


class OutOfBounds(DelveError, IndexError):
    """Raised by range-checked accessors for coordinates outside the grid."""


class DisconnectedMap(DelveError):
    """Raised when a carved map has no reachable exit candidate.

    Recovered internally by the builder's retry loop.
    """


class MapGenerationFailed(DelveError):
    """Raised when every generation attempt produced a disconnected map."""

    def __init__(self, message: str, attempts: int = 0) -> None:
        super().__init__(message)
        self.attempts = attempts


class ConfigError(DelveError, ValueError):
    """Raised for invalid generation configuration values."""


class SessionClosed(DelveError, RuntimeError):
    """Raised when a torn-down session is used."""
