"""PostGIS MVT (Mapbox Vector Tiles) SQL query builder and executor.

This module provides utilities for generating PostGIS SQL queries that
produce Mapbox Vector Tiles (MVT) format, and for running them against a
tile store. The generated SQL uses PostGIS functions like ST_AsMVT,
ST_AsMVTGeom, and ST_TileEnvelope to create vector tiles from geometry
data.

The SQL queries are designed to work with geometries already stored in
EPSG:3857 (Web Mercator) coordinate system. Table, column and layer names
are interpolated verbatim and must come from trusted configuration; tile
coordinates are always bound as parameters.

Example:
    Build the query once and run it per request:
        >>> from tileserver.services import tiles_postgis
        >>> sql = tiles_postgis.build_mvt_sql("cities", properties=["id", "name"])
        >>> coord = TileCoordinate(z=10, x=512, y=384)
        >>> data = tiles_postgis.fetch_tile(store, sql, coord)

    The generated SQL:
     - Uses ST_TileEnvelope to create tile bounds
     - Clips geometries to tile extent with ST_AsMVTGeom
     - Keeps only rows intersecting the tile envelope
     - Returns MVT binary data via ST_AsMVT
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tileserver.core import errors

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tileserver.db import database
    from tileserver.db import models as db_models

logger = logging.getLogger(__name__)

MVT_EXTENT = 4096


def _property_columns(
    geometry_column: str,
    properties: Sequence[str] | None,
) -> str:
    """Return the attribute projection for the tile subquery."""
    if properties is not None:
        return ",\n    ".join(properties)
    return f"to_jsonb(t) - '{geometry_column}' AS properties"


def build_mvt_sql(
    table_name: str,
    geometry_column: str = "geometry",
    layer_name: str = "layer",
    properties: Sequence[str] | None = None,
) -> str:
    """Return an ST_AsMVT query for a table.

    The query carries six positional ``%s`` placeholders which must be bound
    as ``(z, x, y, z, x, y)``: the first envelope clips geometries, the
    second restricts rows via ST_Intersects.

    Note: identifiers are inserted into the SQL string without quoting.
    Invalid column names only surface when the query is executed.

    Args:
        table_name: PostGIS table name (optionally schema-qualified).
        geometry_column: Geometry column name, kept as the MVT geometry name.
        layer_name: Name of the MVT layer inside the tile.
        properties: Attribute columns to include, in order. When None, all
            non-geometry columns are included as a jsonb object, which
            ST_AsMVT expands into feature properties.

    Returns:
        SQL query string ready for execution with tile parameters.

    Example:
        >>> sql = build_mvt_sql("roads", geometry_column="geom", layer_name="roads")
        >>> cursor.execute(sql, (10, 512, 384, 10, 512, 384))
        >>> mvt_data = cursor.fetchone()[0]
    """
    columns = _property_columns(geometry_column, properties)
    return f"""
SELECT ST_AsMVT(mvt_geom.*, '{layer_name}', {MVT_EXTENT}, '{geometry_column}')
FROM (
  SELECT
    {columns},
    ST_AsMVTGeom(
      t.{geometry_column},
      ST_TileEnvelope(%s, %s, %s)::box2d
    ) AS {geometry_column}
  FROM {table_name} AS t
  WHERE ST_Intersects(t.{geometry_column}, ST_TileEnvelope(%s, %s, %s))
) AS mvt_geom
""".strip()


def fetch_tile(
    store: database.TileStoreProtocol,
    sql: str,
    coord: db_models.TileCoordinate,
) -> bytes:
    """Run the tile query for one tile.

    An empty tile (no intersecting features) is a valid result and comes
    back as ``b""``.

    Args:
        store: Tile store to query.
        sql: Query produced by ``build_mvt_sql``.
        coord: Requested tile.

    Returns:
        MVT bytes, possibly empty.

    Raises:
        QueryExecutionError: If the store fails for any reason.
    """
    try:
        data = store.fetch_tile(sql, coord.params())
    except errors.QueryExecutionError:
        raise
    except Exception as exc:
        raise errors.QueryExecutionError(str(exc)) from exc
    if data is None:
        logger.debug("Empty tile %s/%s/%s", coord.z, coord.x, coord.y)
        return b""
    return bytes(data)
