"""API router subpackage for the tile server.

Submodules:
    - tiles: Request dispatch for ``/tiles/{z}/{x}/{y}.pbf``, CORS preflight
      and not-found handling, exposed as a catch-all APIRouter.
"""
