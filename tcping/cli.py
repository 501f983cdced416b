from __future__ import annotations

import argparse
import logging
import sys
from typing import List, NoReturn, Optional

from .models import ProbeRequest, build_timeout
from .output import print_outcome
from .prober import probe

VERSION = "2.0.0"

DEFAULT_TIMEOUT_SEC = 0
DEFAULT_TIMEOUT_USEC = 0

EXIT_USAGE = -1


class UsageError(Exception):
    """Bad or missing command-line arguments; no probe is attempted."""


class _Parser(argparse.ArgumentParser):
    # argparse exits with 2 on bad input; 2 already means "user timeout" here
    def error(self, message: str) -> NoReturn:
        raise UsageError(message)


def _decimal(value: str) -> int:
    # plain ASCII digits only; int() would also take " 80", "8_0" and "+80"
    if not (value.isascii() and value.isdigit()):
        raise argparse.ArgumentTypeError(f"not a decimal integer: {value!r}")
    return int(value)


def build_parser() -> argparse.ArgumentParser:
    p = _Parser(
        prog="tcping",
        description="Check whether a TCP port is reachable with a non-blocking connect. "
        "Exit codes: 0 open, 1 closed, 2 user timeout, -1 error.",
    )
    p.add_argument("host", help="Hostname or address literal")
    p.add_argument("port", help="TCP port (1-65535)")
    p.add_argument("-q", dest="quiet", action="store_true", help="Print nothing, rely on the exit code")
    p.add_argument(
        "-t", dest="timeout_sec", type=_decimal, default=DEFAULT_TIMEOUT_SEC, metavar="timeout_sec",
        help="Timeout seconds (default: 0, wait indefinitely)",
    )
    p.add_argument(
        "-u", dest="timeout_usec", type=_decimal, default=DEFAULT_TIMEOUT_USEC, metavar="timeout_usec",
        help="Timeout microseconds, added to -t (default: 0)",
    )
    p.add_argument("-d", "--debug", action="store_true", help="Log probe steps to stderr")
    p.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return p


def build_request(args: argparse.Namespace) -> ProbeRequest:
    try:
        port = _decimal(args.port)
    except argparse.ArgumentTypeError:
        raise UsageError(f"invalid port: {args.port!r}") from None

    try:
        timeout = build_timeout(args.timeout_sec, args.timeout_usec)
        return ProbeRequest(host=args.host, port=port, timeout=timeout, verbose=not args.quiet)
    except ValueError as e:
        raise UsageError(str(e)) from e


def setup_logging(debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
        request = build_request(args)
    except UsageError as e:
        parser.print_usage(sys.stderr)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE

    setup_logging(args.debug)

    outcome = probe(request)
    print_outcome(outcome, args.host, args.port, quiet=not request.verbose)
    return outcome.exit_code
