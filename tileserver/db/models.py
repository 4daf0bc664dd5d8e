"""Data models for tile requests and server configuration.

Example:
    Coordinates parsed from ``/tiles/10/512/384.pbf``:
        >>> from tileserver.db.models import TileCoordinate
        >>> TileCoordinate(z=10, x=512, y=384).params()
        (10, 512, 384, 10, 512, 384)

    Configuration for a server exposing two attribute columns:
        >>> from tileserver.db.models import ServerConfig
        >>> config = ServerConfig(
        ...     table_name="features",
        ...     properties=("id", "name"),
        ...     port=9000,
        ... )
"""

from __future__ import annotations

import dataclasses


@dataclasses.dataclass(frozen=True)
class TileCoordinate:
    """A single tile address in the XYZ quadtree scheme.

    No range validation against ``2 ** z`` is done here; out-of-range tiles
    are left for the store to reject or render empty.

    Attributes:
        z: Zoom level.
        x: Tile column.
        y: Tile row.
    """

    z: int
    x: int
    y: int

    def params(self) -> tuple[int, int, int, int, int, int]:
        """Return the six bound parameters for the tile query.

        The tile envelope appears twice in the query (clip bounds, then the
        intersects predicate), so ``z, x, y`` is repeated in that order.
        """
        return (self.z, self.x, self.y, self.z, self.x, self.y)


@dataclasses.dataclass(frozen=True)
class ServerConfig:
    """Immutable configuration for one tile server.

    Attributes:
        table_name: Spatial table the tiles are read from.
        geometry_column: Geometry column name (EPSG:3857).
        layer_name: MVT layer name written into every tile.
        properties: Explicit attribute columns, in order. ``None`` means
            every non-geometry column.
        host: Interface the listener binds to.
        port: Listening port, or ``None`` to probe for a free one.
    """

    table_name: str
    geometry_column: str = "geometry"
    layer_name: str = "layer"
    properties: tuple[str, ...] | None = None
    host: str = "127.0.0.1"
    port: int | None = None

    @property
    def base_url(self) -> str:
        """Root URL of the server; requires a resolved port."""
        return f"http://{self.host}:{self.port}/"

    @property
    def tile_url(self) -> str:
        """Client-side tile URL template with literal ``{z}/{x}/{y}`` markers."""
        return f"http://{self.host}:{self.port}/tiles/{{z}}/{{x}}/{{y}}.pbf"
