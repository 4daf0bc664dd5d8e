"""Store helpers for reading vector tiles out of PostGIS."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import psycopg2
import psycopg2.extensions

from tileserver.core import errors

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tileserver.core import config


@runtime_checkable
class TileStoreProtocol(Protocol):
    """Protocol interface for the spatial store behind the tile server.

    Implementations answer existence checks and run a parameterized tile
    query that yields a single binary value (or ``None`` for an empty tile).
    """

    def table_exists(self, table_name: str) -> bool: ...

    def fetch_tile(self, sql: str, params: Sequence[int]) -> bytes | None: ...

    def close(self) -> None: ...


class PostgisTileStore(TileStoreProtocol):
    """psycopg2-backed tile store wrapping a caller-owned connection.

    A single psycopg2 connection carries one transaction for all of its
    cursors, so queries are serialized on a lock. Each query runs in its own
    transaction via the connection context manager: committed on success,
    rolled back on failure, so no snapshot or table lock outlives a request.
    """

    def __init__(self, connection: psycopg2.extensions.connection) -> None:
        """Initialize the store with an open connection.

        Args:
            connection: psycopg2 connection to a PostGIS-enabled database.
                The store does not take ownership; ``close`` is only
                called when the caller asks for it.
        """
        self.connection = connection
        self._lock = threading.Lock()

    def table_exists(self, table_name: str) -> bool:
        """Check whether a (possibly schema-qualified) relation exists.

        Args:
            table_name: Table name, e.g. ``"features"`` or ``"public.features"``.

        Returns:
            True if the relation resolves in the current search path.
        """
        try:
            with self._lock, self.connection, self.connection.cursor() as cur:
                cur.execute("SELECT to_regclass(%s) IS NOT NULL", (table_name,))
                row = cur.fetchone()
        except psycopg2.Error as exc:
            raise errors.ConfigurationError(
                f"Could not look up table '{table_name}': {exc}"
            ) from exc
        return bool(row and row[0])

    def fetch_tile(self, sql: str, params: Sequence[int]) -> bytes | None:
        """Execute the tile query and return the MVT payload.

        Args:
            sql: Tile query with positional ``%s`` placeholders.
            params: Values bound to the placeholders, in order.

        Returns:
            Tile bytes, or None when the query yields no value.

        Raises:
            QueryExecutionError: If the database rejects the query.
        """
        try:
            with self._lock, self.connection, self.connection.cursor() as cur:
                cur.execute(sql, tuple(params))
                row = cur.fetchone()
        except psycopg2.Error as exc:
            raise errors.QueryExecutionError(str(exc).strip()) from exc
        if row is None or row[0] is None:
            return None
        return bytes(row[0])

    def close(self) -> None:
        """Close the underlying connection."""
        self.connection.close()


def as_tile_store(connection: object) -> TileStoreProtocol:
    """Adapt a caller-supplied connection to the tile store protocol.

    Args:
        connection: A psycopg2 connection, or any object already
            implementing ``TileStoreProtocol``.

    Returns:
        A tile store backed by the given connection.

    Raises:
        ConfigurationError: If the object is neither.
    """
    if isinstance(connection, psycopg2.extensions.connection):
        return PostgisTileStore(connection)
    if isinstance(connection, TileStoreProtocol):
        return connection
    raise errors.ConfigurationError(
        "connection must be a psycopg2 connection or implement TileStoreProtocol"
    )


def get_connection(
    settings: config.Settings,
) -> psycopg2.extensions.connection:
    """Create a synchronous psycopg2 connection.

    The caller owns the returned connection and is responsible for closing
    it, either directly or via ``stop_tile_server(..., disconnect_store=True)``.

    Args:
        settings: Application settings containing database connection URL.

    Returns:
        psycopg2 connection object for direct database access.
    """
    return psycopg2.connect(settings.database_url)
