from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

DEFAULT_TIMEOUT_S = 3.0


class ProbeOutcome(Enum):
    OPEN = "open"
    CLOSED = "closed"
    TIMED_OUT = "timed_out"

    @property
    def is_open(self) -> bool:
        return self is ProbeOutcome.OPEN


class ScanState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    COMPLETE = "complete"
    REPORTED = "reported"


@dataclass(frozen=True)
class ScanRequest:
    address: str
    start_port: int
    end_port: int
    concurrency: int
    timeout_s: float = DEFAULT_TIMEOUT_S

    @property
    def total(self) -> int:
        return max(self.end_port - self.start_port + 1, 0)


@dataclass(frozen=True)
class ScanReport:
    address: str
    start_port: int
    end_port: int
    open_ports: Tuple[int, ...]
    completed: int
    elapsed_s: float

    @property
    def total(self) -> int:
        return max(self.end_port - self.start_port + 1, 0)
