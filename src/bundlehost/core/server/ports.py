"""Listening port negotiation."""
from __future__ import annotations

import logging
import socket

logger = logging.getLogger(__name__)


def _address_family(host: str) -> socket.AddressFamily:
    return socket.AF_INET6 if ":" in host else socket.AF_INET


def is_port_free(port: int, host: str = "") -> bool:
    """Return True when ``port`` can be bound on ``host`` right now."""
    with socket.socket(_address_family(host), socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def find_free_port(preferred: int, host: str = "") -> int:
    """Return ``preferred`` when it is free, otherwise an OS-assigned free port.

    A ``preferred`` of 0 always yields an ephemeral port. The probe socket is
    closed before returning, so the caller binds the port itself.
    """
    if preferred and is_port_free(preferred, host):
        return preferred

    if preferred:
        logger.debug("Port %s is in use on %r, asking the OS for a free port", preferred, host)

    with socket.socket(_address_family(host), socket.SOCK_STREAM) as sock:
        sock.bind((host, 0))
        return int(sock.getsockname()[1])


__all__ = ["find_free_port", "is_port_free"]
