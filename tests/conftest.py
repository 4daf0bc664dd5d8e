"""Shared fixtures for tile server tests.

Provides an in-memory tile store implementing ``TileStoreProtocol`` so the
dispatcher and server lifecycle can be exercised without PostGIS.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tileserver.core import config

if TYPE_CHECKING:
    from collections.abc import Sequence

TileKey = tuple[int, int, int]


class FakeTileStore:
    """In-memory stand-in for a PostGIS connection.

    Tiles are looked up by the first three bound parameters. Every call is
    recorded so tests can assert on the SQL and parameters that reached the
    store.
    """

    def __init__(
        self,
        tables: dict[str, dict[TileKey, bytes]] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.tables = tables if tables is not None else {"features": {}}
        self.error = error
        self.calls: list[tuple[str, tuple[int, ...]]] = []
        self.closed = False

    def table_exists(self, table_name: str) -> bool:
        return table_name in self.tables

    def fetch_tile(self, sql: str, params: Sequence[int]) -> bytes | None:
        self.calls.append((sql, tuple(params)))
        if self.error is not None:
            raise self.error
        key = (params[0], params[1], params[2])
        for tiles in self.tables.values():
            if key in tiles:
                return tiles[key]
        return None

    def close(self) -> None:
        self.closed = True


class FakeListener:
    """Listener that records lifecycle calls instead of binding a socket."""

    def __init__(self, app: object, host: str, port: int) -> None:
        self.app = app
        self.host = host
        self.port = port
        self.started = False
        self.stopped = False

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True


@pytest.fixture
def store() -> FakeTileStore:
    """Store with a ``features`` table holding one feature at 0/0/0."""
    return FakeTileStore({"features": {(0, 0, 0): b"\x1a\x05layer"}})


@pytest.fixture
def settings() -> config.Settings:
    """Settings with short timeouts for listener tests."""
    return config.Settings(startup_timeout=5.0, shutdown_timeout=5.0)
