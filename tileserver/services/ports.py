"""Free port discovery for the tile listener."""

from __future__ import annotations

import logging
import socket

from tileserver.core import errors

logger = logging.getLogger(__name__)


def find_available_port(
    start_port: int = 8000,
    max_attempts: int = 10,
    host: str = "127.0.0.1",
) -> int:
    """Return the first port in ``[start_port, start_port + max_attempts)`` that binds.

    Ports are tried in ascending order. Each candidate is bound with a
    throwaway socket which is released immediately, so the port is free at
    return time but not reserved.

    Args:
        start_port: First candidate port.
        max_attempts: Number of consecutive candidates to try.
        host: Interface to probe on.

    Returns:
        The lowest bindable port in the range.

    Raises:
        PortUnavailableError: If no candidate could be bound.
    """
    for port in range(start_port, start_port + max_attempts):
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe:
                probe.bind((host, port))
        except (OSError, OverflowError) as exc:
            logger.debug("Port %d unavailable: %s", port, exc)
            continue
        return port

    logger.error(
        "No free port on %s in range %d-%d",
        host, start_port, start_port + max_attempts - 1,
    )
    raise errors.PortUnavailableError(
        f"Could not find available port in range "
        f"{start_port}-{start_port + max_attempts - 1}"
    )
