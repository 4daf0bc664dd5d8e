"""Store collaborator interfaces and data models.

``database`` holds the ``TileStoreProtocol`` the server talks to and its
psycopg2-backed implementation; ``models`` holds the plain dataclasses passed
between the parser, the query builder and the server handle.

Example:
    Wrap an existing psycopg2 connection:
        >>> from tileserver.db import database
        >>> store = database.as_tile_store(con)
        >>> store.table_exists("features")
        True
"""
