from __future__ import annotations

import argparse
import asyncio
import sys

from .log import setup_logging
from .models import DEFAULT_TIMEOUT_S, ScanRequest
from .output import print_results
from .ports import DEFAULT_END_PORT, DEFAULT_START_PORT, validate_port, validate_range
from .progress import NullProgress, TqdmProgress
from .scanner import ScanSession, run_scan
from .targets import parse_address

DEFAULT_CONCURRENCY = 50
MAX_CONCURRENCY = 100


def _address(value: str) -> str:
    try:
        return parse_address(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _port(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"`{value}` is not a valid port")
    try:
        return validate_port(port)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _concurrency(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"`{value}` is not a number")
    if not 1 <= n <= MAX_CONCURRENCY:
        raise argparse.ArgumentTypeError(f"Concurrency must be between 1 and {MAX_CONCURRENCY}")
    return n


def _timeout(value: str) -> float:
    try:
        t = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"`{value}` is not a number")
    if t <= 0:
        raise argparse.ArgumentTypeError("Timeout must be greater than 0")
    return t


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="port-sniffer", description="Simple concurrent TCP port scanner")
    p.add_argument("--ip", required=True, type=_address, help="Target IP address")
    p.add_argument(
        "-c", "--concurrency",
        type=_concurrency,
        default=DEFAULT_CONCURRENCY,
        help=f"Number of concurrent scans (1-{MAX_CONCURRENCY}, default {DEFAULT_CONCURRENCY})",
    )
    p.add_argument("-s", "--start_port", type=_port, default=DEFAULT_START_PORT, help="First port (default: 1)")
    p.add_argument("-e", "--end_port", type=_port, default=DEFAULT_END_PORT, help="Last port (default: 65535)")
    p.add_argument(
        "--timeout",
        type=_timeout,
        default=DEFAULT_TIMEOUT_S,
        help=f"Connect timeout seconds (default: {DEFAULT_TIMEOUT_S})",
    )
    p.add_argument("--no-progress", action="store_true", help="Disable the progress bar")
    p.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-v info, -vv debug)")
    p.add_argument("--log-file", help="Also write logs to this file")
    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose, args.log_file)

    try:
        validate_range(args.start_port, args.end_port)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    request = ScanRequest(
        address=args.ip,
        start_port=args.start_port,
        end_port=args.end_port,
        concurrency=args.concurrency,
        timeout_s=args.timeout,
    )

    progress = NullProgress() if args.no_progress else TqdmProgress(request.total)
    session = ScanSession(request, progress=progress)
    try:
        report = asyncio.run(run_scan(session))
    except KeyboardInterrupt:
        progress.finish("Scan interrupted")
        return 130
    progress.finish()

    print()
    print_results(report)
    session.mark_reported()
    return 0
