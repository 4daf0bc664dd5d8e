"""FastAPI application factory for the tile server.

Example:
    Build an app around a store and a prepared query:
        >>> from tileserver import main
        >>> from tileserver.api import tiles
        >>> app = main.create_app(tiles.TileSource(store=store, sql=sql))
"""

import fastapi

from tileserver.api import tiles


def create_app(source: tiles.TileSource) -> fastapi.FastAPI:
    """Create the FastAPI application serving tiles from ``source``.

    CORS headers are set by the tile dispatcher itself on every response,
    including 404 and 500, so no CORS middleware is installed. The OpenAPI
    and docs routes are disabled so that every path other than a tile
    answers 404, and methods the router does not list are handed to the
    dispatcher rather than answered with 405.

    Args:
        source: Store and prepared tile query shared by all requests.

    Returns:
        Configured FastAPI application instance ready for an ASGI server.
    """
    app = fastapi.FastAPI(
        title="Vector Tile Server",
        version="0.1.0",
        openapi_url=None,
        docs_url=None,
        redoc_url=None,
    )
    app.state.tile_source = source
    app.include_router(tiles.router)
    app.add_exception_handler(405, tiles.serve_unrouted_method)
    return app
