from __future__ import annotations

from typing import Iterator

MIN_PORT = 1
MAX_PORT = 65535
DEFAULT_START_PORT = MIN_PORT
DEFAULT_END_PORT = MAX_PORT


def validate_port(value: int) -> int:
    if value < MIN_PORT or value > MAX_PORT:
        raise ValueError(f"Port must be between {MIN_PORT} and {MAX_PORT}")
    return value


def validate_range(start: int, end: int) -> None:
    validate_port(start)
    validate_port(end)
    if start > end:
        raise ValueError(f"start_port ({start}) cannot be greater than end_port ({end})")


def port_range(start: int, end: int) -> Iterator[int]:
    """
    Yields every port of the inclusive range [start, end] once, ascending.
    An inverted range yields nothing.
    """
    port = start
    while port <= end:
        yield port
        port += 1
