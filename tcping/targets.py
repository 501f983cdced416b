from __future__ import annotations

import socket
from dataclasses import dataclass
from typing import Any, Tuple


class ResolutionError(Exception):
    """Host name could not be turned into an address."""


@dataclass(frozen=True)
class ResolvedTarget:
    family: int
    sockaddr: Tuple[Any, ...]

    @property
    def address(self) -> str:
        return str(self.sockaddr[0])


def resolve_target(host: str, port: int) -> ResolvedTarget:
    """
    Resolve host for a TCP connect and keep the first address the
    resolver returns. Accepts:
      - IPv4 / IPv6 literals: "127.0.0.1", "::1"
      - Hostnames: "localhost", "example.com"
    """
    host = host.strip()
    if not host:
        raise ResolutionError("Empty host")

    try:
        infos = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)
    except socket.gaierror as e:
        raise ResolutionError(e.strerror or str(e)) from e
    except UnicodeError as e:
        # IDNA encoding rejects labels that are empty or too long
        raise ResolutionError(f"invalid host name '{host}': {e}") from e

    if not infos:
        raise ResolutionError(f"no address for '{host}'")

    family, _type, _proto, _canon, sockaddr = infos[0]
    return ResolvedTarget(family=family, sockaddr=sockaddr)
