"""Shared fixtures: loopback listeners and socket/selector fakes."""

from __future__ import annotations

import errno
import selectors
import socket
import threading
from collections.abc import Iterator

import pytest


@pytest.fixture
def listening_port() -> Iterator[int]:
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    srv.bind(("127.0.0.1", 0))
    srv.listen(64)
    srv.settimeout(0.05)
    stop = threading.Event()

    def accept_loop() -> None:
        # drain the accept queue so repeated probes never hit a full backlog
        while not stop.is_set():
            try:
                conn, _ = srv.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            conn.close()

    t = threading.Thread(target=accept_loop, daemon=True)
    t.start()
    try:
        yield srv.getsockname()[1]
    finally:
        stop.set()
        t.join(timeout=1.0)
        srv.close()


@pytest.fixture
def closed_port() -> int:
    # bind to learn a free port, then release it so nothing listens there
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port


class FakeSocket:
    instances: list["FakeSocket"] = []

    def __init__(self, family=socket.AF_INET, type=socket.SOCK_STREAM):  # noqa: A002
        self.family = family
        self.type = type
        self.blocking = True
        self.closed = False
        self.connect_result = errno.EINPROGRESS
        self.so_error: int | Exception = 0
        self.connected_to = None
        FakeSocket.instances.append(self)

    def __enter__(self) -> "FakeSocket":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def setblocking(self, flag: bool) -> None:
        self.blocking = flag

    def connect_ex(self, sockaddr) -> int:
        self.connected_to = sockaddr
        return self.connect_result

    def getsockopt(self, level, option):
        assert (level, option) == (socket.SOL_SOCKET, socket.SO_ERROR)
        if isinstance(self.so_error, Exception):
            raise self.so_error
        return self.so_error

    def fileno(self) -> int:
        return 99

    def close(self) -> None:
        self.closed = True


class FakeSelector:
    """Stands in for selectors.DefaultSelector; returns a scripted event list."""

    def __init__(self, events=None, error: Exception | None = None):
        self.events = events
        self.error = error
        self.timeouts: list = []
        self.registered = []
        self.closed = False

    def __call__(self) -> "FakeSelector":
        return self

    def __enter__(self) -> "FakeSelector":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.closed = True

    def register(self, fileobj, events):
        self.registered.append((fileobj, events))

    def select(self, timeout=None):
        self.timeouts.append(timeout)
        if self.error is not None:
            raise self.error
        if self.events is None:
            return [(object(), selectors.EVENT_WRITE)]
        return self.events


@pytest.fixture
def fake_socket(monkeypatch):
    from tcping import prober

    FakeSocket.instances = []
    monkeypatch.setattr(prober.socket, "socket", FakeSocket)
    monkeypatch.setattr(
        prober,
        "resolve_target",
        lambda host, port: prober.ResolvedTarget(socket.AF_INET, ("192.0.2.10", port)),
    )
    return FakeSocket


@pytest.fixture
def fake_selector(monkeypatch):
    from tcping import prober

    sel = FakeSelector()
    monkeypatch.setattr(prober.selectors, "DefaultSelector", sel)
    return sel
