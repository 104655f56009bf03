from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class ProgressReporter(Protocol):
    def advance(self, n: int = 1) -> None: ...


class CollectorClosed(RuntimeError):
    pass


class ResultCollector:
    """
    Accumulates open ports published by concurrently finishing probes.

    Publishers only ever call publish(); once close() has been called no
    further writes are accepted and drain() returns the final sorted list.
    """

    def __init__(self) -> None:
        self._queue: "asyncio.Queue[int]" = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, port: int) -> None:
        if self._closed:
            raise CollectorClosed(f"collector closed, dropping port {port}")
        self._queue.put_nowait(port)

    def close(self) -> None:
        self._closed = True

    def drain(self) -> List[int]:
        if not self._closed:
            raise RuntimeError("drain() before close(): publishers may still be running")
        ports: List[int] = []
        while not self._queue.empty():
            ports.append(self._queue.get_nowait())
        return sorted(ports)


class ProgressCounter:
    """Completed-probe count with a known total, forwarded to a reporter."""

    def __init__(self, total: int, reporter: Optional[ProgressReporter] = None) -> None:
        self.total = total
        self.completed = 0
        self._reporter = reporter

    def increment(self) -> None:
        self.completed += 1
        if self._reporter is not None:
            self._reporter.advance(1)
