from __future__ import annotations

import errno
import logging
import os
import selectors
import socket
import time

from .models import ProbeOutcome, ProbeRequest
from .targets import ResolutionError, ResolvedTarget, resolve_target

logger = logging.getLogger(__name__)

# connect_ex() codes meaning "handshake started, result comes later"
_PENDING = {errno.EINPROGRESS, errno.EWOULDBLOCK, errno.EAGAIN}

_READY = selectors.EVENT_READ | selectors.EVENT_WRITE


def _elapsed(start: float) -> float:
    return round(time.perf_counter() - start, 4)


def probe(request: ProbeRequest) -> ProbeOutcome:
    """
    One non-blocking connect attempt against request.host:request.port.

    Resolve -> connect -> wait for readiness (bounded by request.timeout,
    unbounded when it is 0) -> read SO_ERROR. Every failure is terminal;
    nothing here retries. The socket is closed before returning.
    """
    start = time.perf_counter()

    try:
        target = resolve_target(request.host, request.port)
    except ResolutionError as e:
        logger.debug("resolve %s failed: %s", request.host, e)
        return ProbeOutcome.resolution_failed(str(e), elapsed_s=_elapsed(start))

    logger.debug("resolved %s -> %s", request.host, target.address)

    try:
        sock = socket.socket(target.family, socket.SOCK_STREAM)
    except OSError as e:
        return ProbeOutcome.connect_error(
            f"socket: {e.strerror or e}", address=target.address, elapsed_s=_elapsed(start)
        )

    with sock:
        outcome = _connect(sock, target, request, start)

    logger.debug(
        "probe %s:%d finished: %s (%s) in %.4fs",
        request.host, request.port, outcome.status.name, outcome.reason, outcome.elapsed_s,
    )
    return outcome


def _connect(
    sock: socket.socket, target: ResolvedTarget, request: ProbeRequest, start: float
) -> ProbeOutcome:
    address = target.address
    sock.setblocking(False)
    err = sock.connect_ex(target.sockaddr)
    logger.debug("connect_ex(%s, %d) -> %d", address, request.port, err)

    if err == 0:
        # loopback targets can complete the handshake synchronously
        return ProbeOutcome.open(address=address, elapsed_s=_elapsed(start))

    if err not in _PENDING:
        return ProbeOutcome.connect_error(
            os.strerror(err), address=address, elapsed_s=_elapsed(start)
        )

    return _await_connect(sock, request, address, start)


def _await_connect(
    sock: socket.socket, request: ProbeRequest, address: str, start: float
) -> ProbeOutcome:
    with selectors.DefaultSelector() as sel:
        sel.register(sock, _READY)
        try:
            events = sel.select(request.deadline)
        except OSError as e:
            return ProbeOutcome.connect_error(
                f"select: {e.strerror or e}", address=address, elapsed_s=_elapsed(start)
            )
        except OverflowError as e:
            # timeout beyond what the platform's poller accepts
            return ProbeOutcome.connect_error(f"select: {e}", address=address, elapsed_s=_elapsed(start))

    if not events:
        logger.debug("no readiness within %s s", request.timeout)
        return ProbeOutcome.timed_out(address=address, elapsed_s=_elapsed(start))

    _key, mask = events[0]
    if not mask & _READY:
        return ProbeOutcome.connect_error(
            "socket not ready after wait", address=address, elapsed_s=_elapsed(start)
        )

    try:
        pending = sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
    except OSError as e:
        return ProbeOutcome.connect_error(
            f"getsockopt: {e.strerror or e}", address=address, elapsed_s=_elapsed(start)
        )

    if pending != 0:
        return ProbeOutcome.closed(os.strerror(pending), address=address, elapsed_s=_elapsed(start))

    return ProbeOutcome.open(address=address, elapsed_s=_elapsed(start))
