from __future__ import annotations

import socket


def find_free_port(host: str = "localhost") -> int:
    """Ask the OS for an unused TCP port on ``host``.

    The socket is closed before returning, so another process may still grab
    the port before mongod binds it; mongod then reports "addr already in use".
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, 0))
        return int(sock.getsockname()[1])


def is_valid_port(port: int) -> bool:
    return 0 < int(port) <= 65535


__all__ = ["find_free_port", "is_valid_port"]
