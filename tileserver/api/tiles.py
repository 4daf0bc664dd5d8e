"""XYZ vector tile endpoint.

Every request goes through ``dispatch``, a plain function over a fixed
request descriptor, so routing and response assembly can be tested without
any networking. The FastAPI router at the bottom of this module is a
catch-all that adapts Starlette requests to ``TileRequest`` and
``TileResponse`` back to a Starlette response.

Routing:
    - ``OPTIONS`` on any path: 200 with CORS preflight headers, empty body.
    - ``/tiles/<z>/<x>/<y>.pbf``: 200 ``application/x-protobuf`` with the
      tile bytes (possibly empty), or 500 ``text/plain`` on store failure.
    - Anything else: 404 ``text/plain`` ``"Not Found"``.

Every response carries ``Access-Control-Allow-Origin: *``.

Example:
    Use in MapLibre GL JS:
        >>> map.addSource('features', {
        ...     type: 'vector',
        ...     tiles: ['http://127.0.0.1:8000/tiles/{z}/{x}/{y}.pbf']
        ... });
"""

from __future__ import annotations

import dataclasses
import logging

import fastapi
from fastapi import responses

from tileserver.core import errors
from tileserver.db import database
from tileserver.services import tile_paths, tiles_postgis

logger = logging.getLogger(__name__)

ALLOW_ORIGIN = {"Access-Control-Allow-Origin": "*"}
PREFLIGHT_HEADERS = {
    **ALLOW_ORIGIN,
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "*",
}
ROUTED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@dataclasses.dataclass(frozen=True)
class TileRequest:
    """The parts of an HTTP request the dispatcher looks at."""

    method: str
    path: str


@dataclasses.dataclass(frozen=True)
class TileResponse:
    """Status, headers and body produced by the dispatcher."""

    status: int
    headers: dict[str, str]
    body: bytes = b""


@dataclasses.dataclass(frozen=True)
class TileSource:
    """Store and prepared tile query shared by all requests of one server.

    Attributes:
        store: Tile store the query runs against.
        sql: Query built once at server start by ``build_mvt_sql``.
    """

    store: database.TileStoreProtocol
    sql: str


def _text(status: int, message: str) -> TileResponse:
    return TileResponse(
        status=status,
        headers={"Content-Type": "text/plain", **ALLOW_ORIGIN},
        body=message.encode("utf-8"),
    )


def dispatch(request: TileRequest, source: TileSource) -> TileResponse:
    """Route a single request and build its response.

    Store failures are contained here: they become a 500 response and never
    propagate to the HTTP server.

    Args:
        request: Method and path of the incoming request.
        source: Store and tile query to answer tile requests with.

    Returns:
        The complete response for the request.
    """
    if request.method.upper() == "OPTIONS":
        return TileResponse(status=200, headers=dict(PREFLIGHT_HEADERS))

    coord = tile_paths.parse_tile_path(request.path)
    if coord is None:
        return _text(404, "Not Found")

    try:
        data = tiles_postgis.fetch_tile(source.store, source.sql, coord)
    except errors.QueryExecutionError as exc:
        logger.warning(
            "Tile %d/%d/%d failed: %s", coord.z, coord.x, coord.y, exc
        )
        return _text(500, f"Error generating tile: {exc}")

    return TileResponse(
        status=200,
        headers={"Content-Type": "application/x-protobuf", **ALLOW_ORIGIN},
        body=data,
    )


def _get_tile_source(request: fastapi.Request) -> TileSource:
    """Resolve the tile source attached to the application state.

    Args:
        request: Incoming request (injected by FastAPI).

    Returns:
        TileSource set by ``create_app``.
    """
    return request.app.state.tile_source


router = fastapi.APIRouter(tags=["tiles"])


@router.api_route("/{path:path}", methods=ROUTED_METHODS)
def serve(
    request: fastapi.Request,
    source: TileSource = fastapi.Depends(_get_tile_source),  # noqa: B008
) -> responses.Response:
    """Answer any request through ``dispatch``.

    Declared as a plain ``def`` so FastAPI runs it in its threadpool; the
    store round-trip is blocking.

    Args:
        request: Incoming request (injected by FastAPI).
        source: Tile source (injected via FastAPI Depends).

    Returns:
        Response carrying the dispatcher's status, headers and body.
    """
    return _respond(request, source)


def serve_unrouted_method(
    request: fastapi.Request, exc: Exception
) -> responses.Response:
    """Send methods outside ``ROUTED_METHODS`` through ``dispatch`` too.

    Registered by ``create_app`` as the 405 handler, so TRACE or custom
    verbs get the same tile, 404 and CORS behaviour as GET instead of
    Starlette's JSON "Method Not Allowed".

    Args:
        request: Incoming request.
        exc: The 405 raised by the router (unused).

    Returns:
        Response carrying the dispatcher's status, headers and body.
    """
    return _respond(request, _get_tile_source(request))


def _respond(request: fastapi.Request, source: TileSource) -> responses.Response:
    result = dispatch(
        TileRequest(method=request.method, path=request.url.path),
        source,
    )
    return responses.Response(
        content=result.body,
        status_code=result.status,
        headers=result.headers,
    )
