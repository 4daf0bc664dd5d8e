"""Tile URL path parsing.

Recognizes exactly ``/tiles/<z>/<x>/<y>.pbf`` with decimal digits in each
segment. Anything else is a "no match", reported as ``None`` rather than an
exception so the dispatcher can answer 404 without a try/except.

Example:
    >>> from tileserver.services.tile_paths import parse_tile_path
    >>> parse_tile_path("/tiles/10/512/384.pbf")
    TileCoordinate(z=10, x=512, y=384)
    >>> parse_tile_path("/tiles/10/512") is None
    True
"""

from __future__ import annotations

import re

from tileserver.db import models as db_models

# ASCII digits only; \d would also accept other Unicode decimal digits.
TILE_PATH_PATTERN = re.compile(r"/tiles/([0-9]+)/([0-9]+)/([0-9]+)\.pbf")


def parse_tile_path(path: str) -> db_models.TileCoordinate | None:
    """Extract tile coordinates from a request path.

    Args:
        path: URL path component (no host, no query string).

    Returns:
        TileCoordinate on a full match, None otherwise.
    """
    match = TILE_PATH_PATTERN.fullmatch(path)
    if match is None:
        return None
    z, x, y = (int(group) for group in match.groups())
    return db_models.TileCoordinate(z=z, x=x, y=y)
