from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

USEC_PER_SEC = 1_000_000

# epoll/poll take the wait in int milliseconds: INT_MAX ms is ~24.8 days
MAX_TIMEOUT_SEC = 2_147_483


def build_timeout(seconds: int, microseconds: int) -> float:
    """
    Combine -t / -u values into one timeout in seconds.
    Microseconds past a full second carry into the seconds part,
    so (1, 1500000) and (2, 500000) are the same deadline.
    0 means "no deadline".
    """
    if seconds < 0 or microseconds < 0:
        raise ValueError("timeout values must be >= 0")
    carry, usec = divmod(microseconds, USEC_PER_SEC)
    whole = seconds + carry
    if whole > MAX_TIMEOUT_SEC or (whole == MAX_TIMEOUT_SEC and usec):
        raise ValueError(f"timeout must be at most {MAX_TIMEOUT_SEC} seconds")
    return whole + usec / USEC_PER_SEC


@dataclass(frozen=True)
class ProbeRequest:
    host: str
    port: int
    timeout: float = 0.0
    verbose: bool = True

    def __post_init__(self) -> None:
        if not self.host:
            raise ValueError("Empty host")
        if self.port < 1 or self.port > 65535:
            raise ValueError(f"Invalid port: {self.port}")
        if self.timeout < 0 or self.timeout > MAX_TIMEOUT_SEC:
            raise ValueError(f"Invalid timeout: {self.timeout}")

    @property
    def deadline(self) -> Optional[float]:
        # selectors treat None as "block until ready"
        return self.timeout if self.timeout > 0 else None


class ProbeStatus(Enum):
    OPEN = "open"
    CLOSED = "closed"
    TIMED_OUT = "user timeout"
    RESOLUTION_FAILED = "resolution failed"
    CONNECT_ERROR = "connect error"

    @property
    def exit_code(self) -> int:
        return _EXIT_CODES[self]

    @property
    def is_error(self) -> bool:
        return self.exit_code < 0


_EXIT_CODES = {
    ProbeStatus.OPEN: 0,
    ProbeStatus.CLOSED: 1,
    ProbeStatus.TIMED_OUT: 2,
    ProbeStatus.RESOLUTION_FAILED: -1,
    ProbeStatus.CONNECT_ERROR: -1,
}


@dataclass(frozen=True)
class ProbeOutcome:
    status: ProbeStatus
    reason: Optional[str] = None
    address: Optional[str] = None
    elapsed_s: float = 0.0

    @property
    def exit_code(self) -> int:
        return self.status.exit_code

    @classmethod
    def open(cls, address: Optional[str] = None, elapsed_s: float = 0.0) -> "ProbeOutcome":
        return cls(ProbeStatus.OPEN, address=address, elapsed_s=elapsed_s)

    @classmethod
    def closed(cls, reason: str, address: Optional[str] = None, elapsed_s: float = 0.0) -> "ProbeOutcome":
        return cls(ProbeStatus.CLOSED, reason=reason, address=address, elapsed_s=elapsed_s)

    @classmethod
    def timed_out(cls, address: Optional[str] = None, elapsed_s: float = 0.0) -> "ProbeOutcome":
        return cls(ProbeStatus.TIMED_OUT, address=address, elapsed_s=elapsed_s)

    @classmethod
    def resolution_failed(cls, reason: str, elapsed_s: float = 0.0) -> "ProbeOutcome":
        return cls(ProbeStatus.RESOLUTION_FAILED, reason=reason, elapsed_s=elapsed_s)

    @classmethod
    def connect_error(cls, reason: str, address: Optional[str] = None, elapsed_s: float = 0.0) -> "ProbeOutcome":
        return cls(ProbeStatus.CONNECT_ERROR, reason=reason, address=address, elapsed_s=elapsed_s)
