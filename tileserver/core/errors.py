"""Exception types raised by the tile server.

Startup and shutdown failures propagate to the caller of ``start_tile_server``
and ``stop_tile_server``. ``QueryExecutionError`` is the only per-request
error; the dispatcher turns it into a 500 response.
"""


class TileServerError(Exception):
    """Base class for all tile server errors."""


class ConfigurationError(TileServerError):
    """The store connection or target table is unusable."""


class PortUnavailableError(TileServerError):
    """No port could be bound for the tile listener."""


class QueryExecutionError(TileServerError):
    """The store failed to produce a tile for a single request."""


class UsageError(TileServerError):
    """A server handle was used outside its lifecycle contract."""
