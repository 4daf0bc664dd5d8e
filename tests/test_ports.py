"""Tests for free port discovery in tileserver.services.ports."""

from __future__ import annotations

import socket
from typing import TYPE_CHECKING, Any

import pytest

from tileserver.core import errors
from tileserver.services import ports

if TYPE_CHECKING:
    import types


class FakeSocket:
    """Socket double failing to bind on a configured set of ports."""

    busy: set[int] = set()
    attempts: list[int] = []

    def __init__(self, *args: Any) -> None:
        pass

    def __enter__(self) -> FakeSocket:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        return None

    def bind(self, address: tuple[str, int]) -> None:
        FakeSocket.attempts.append(address[1])
        if address[1] in FakeSocket.busy:
            raise OSError(98, "Address already in use")


@pytest.fixture
def fake_socket(monkeypatch: pytest.MonkeyPatch) -> type[FakeSocket]:
    """Replace socket.socket within the ports module."""
    FakeSocket.busy = set()
    FakeSocket.attempts = []
    monkeypatch.setattr(ports.socket, "socket", FakeSocket)
    return FakeSocket


def test_find_available_port_in_range() -> None:
    """Test that the returned port lies within the searched window."""
    port = ports.find_available_port(start_port=9000, max_attempts=10)
    assert 9000 <= port < 9010


def test_find_available_port_skips_bound_port() -> None:
    """Test that a port held by a live socket is skipped."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as held:
        held.bind(("127.0.0.1", 0))
        held.listen()
        busy = held.getsockname()[1]
        if busy >= 65535 - 5:
            pytest.skip("ephemeral port too close to the top of the range")
        port = ports.find_available_port(start_port=busy, max_attempts=5)
    assert busy < port < busy + 5


def test_find_available_port_returns_first_free(
    fake_socket: type[FakeSocket],
) -> None:
    """Test that ports are tried in ascending order and the lowest free wins."""
    fake_socket.busy = {9000, 9001, 9003}
    assert ports.find_available_port(start_port=9000, max_attempts=10) == 9002
    assert fake_socket.attempts == [9000, 9001, 9002]


def test_find_available_port_exhausted(fake_socket: type[FakeSocket]) -> None:
    """Test that an exhausted window raises PortUnavailableError."""
    fake_socket.busy = {8000, 8001, 8002}
    with pytest.raises(errors.PortUnavailableError, match="8000-8002"):
        ports.find_available_port(start_port=8000, max_attempts=3)
    assert fake_socket.attempts == [8000, 8001, 8002]


def test_find_available_port_out_of_range() -> None:
    """Test that ports beyond 65535 count as failures, not crashes."""
    with pytest.raises(errors.PortUnavailableError):
        ports.find_available_port(start_port=65536, max_attempts=2)
