"""Host port selection helpers."""

from __future__ import annotations

import socket


def port_or_get_free_port(port: int, listen_addr: str) -> int:
    """Return port if set, a free port on listen_addr if 0, and 0 if -1.

    -1 lets the container backend pick; 0 means kind picks one itself.
    """
    if port == -1:
        return 0
    if port == 0:
        return get_free_port(listen_addr)
    return port


def get_free_port(listen_addr: str) -> int:
    """Return a free TCP port on listen_addr; raises OSError if none can be bound."""
    infos = socket.getaddrinfo(
        listen_addr, 0, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE
    )
    last_error: OSError | None = None
    for family, sock_type, proto, _, address in infos:
        try:
            with socket.socket(family, sock_type, proto) as listener:
                listener.bind(address)
                listener.listen(1)
                return int(listener.getsockname()[1])
        except OSError as err:
            last_error = err
    if last_error is not None:
        raise last_error
    raise OSError(f"no address to listen on for {listen_addr!r}")