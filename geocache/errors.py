"""Exception hierarchy for geocache.

Every error is a local contract violation: nothing here is retried and
nothing is recoverable in the middle of an operation.
"""

import geocache


class GeocacheError(Exception):
    """Base class for all geocache exceptions.

    It automatically prepends the geocache version to help with debugging reports.
    """

    def __init__(self, message: str):
        self.geocache_version = getattr(geocache, "__version__", "unknown")
        # Store the original message cleanly for programmatic access
        self.original_message = message
        full_message = f"[geocache {self.geocache_version}] {message}"
        super().__init__(full_message)


class ConfigurationError(GeocacheError):
    """Raised when game parameters are invalid or cannot be changed."""

    def __init__(self, param_name: str | None = None, reason: str | None = None):
        # Allow flexible usage: raise ConfigurationError("Generic message")
        # OR: raise ConfigurationError("neighborhood_radius", "must be >= 0")
        if param_name and reason:
            message = f"Invalid configuration for '{param_name}': {reason}"
            self.param_name = param_name
        else:
            message = param_name if param_name else "Invalid configuration"
            self.param_name = None

        super().__init__(message)


# Space Errors
class SpaceError(GeocacheError):
    """Generic errors related to coordinates and cells."""


class InvalidCoordinate(SpaceError):  # noqa: N818
    """Raised for coordinates that cannot be mapped onto a cell.

    Examples: NaN or infinite latitude, a string instead of a number, or a
    cell index that does not fit the packed cell key.
    """

    def __init__(self, value, reason: str = "is not a finite number"):
        self.value = value
        self.reason = reason
        super().__init__(f"Coordinate {value!r} {reason}.")


# Cache Errors
class CacheError(GeocacheError):
    """Generic errors related to caches and their state."""


class PreconditionViolation(CacheError):  # noqa: N818
    """Raised when a cache is used in a way its current state does not allow.

    Example: harvesting a cell whose cache was never rolled visible.
    """

    def __init__(self, coordinate, reason: str):
        self.coordinate = coordinate
        self.reason = reason
        super().__init__(f"Cache at cell {coordinate}: {reason}.")
