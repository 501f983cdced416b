from __future__ import annotations

import sys
from typing import Tuple

from .models import ProbeOutcome, ProbeStatus


def format_message(host: str, port: str, outcome: ProbeOutcome) -> Tuple[str, bool]:
    """
    Returns (line, is_error). Determinations go to stdout, errors to stderr.
    """
    status = outcome.status
    if not status.is_error:
        return f"{host} port {port} {status.value}.", False
    if status is ProbeStatus.RESOLUTION_FAILED:
        return f"error: {outcome.reason}", True
    return f"error: {host} port {port}: {outcome.reason}", True


def print_outcome(outcome: ProbeOutcome, host: str, port: str, quiet: bool = False) -> None:
    if quiet:
        return
    line, is_error = format_message(host, port, outcome)
    print(line, file=sys.stderr if is_error else sys.stdout)
