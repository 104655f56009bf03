from __future__ import annotations

import asyncio
import logging
import time
from typing import Dict, FrozenSet, Optional, Set

from .collector import ProgressCounter, ProgressReporter, ResultCollector
from .log import log_event
from .models import ProbeOutcome, ScanReport, ScanRequest, ScanState
from .ports import port_range
from .prober import Connector, probe

logger = logging.getLogger(__name__)

_TRANSITIONS: Dict[ScanState, FrozenSet[ScanState]] = {
    ScanState.IDLE: frozenset({ScanState.RUNNING}),
    ScanState.RUNNING: frozenset({ScanState.DRAINING, ScanState.COMPLETE}),
    ScanState.DRAINING: frozenset({ScanState.COMPLETE}),
    ScanState.COMPLETE: frozenset({ScanState.REPORTED}),
    ScanState.REPORTED: frozenset(),
}


class ScanSession:
    """
    Everything one scan owns: the request, its lifecycle state, the open
    port collector and the completed-probe counter.
    """

    def __init__(self, request: ScanRequest, progress: Optional[ProgressReporter] = None) -> None:
        if request.concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {request.concurrency}")
        self.request = request
        self.state = ScanState.IDLE
        self.collector = ResultCollector()
        self.counter = ProgressCounter(request.total, progress)
        self.admitted = 0
        self.in_flight = 0
        self.peak_in_flight = 0
        self.report: Optional[ScanReport] = None

    def advance(self, new_state: ScanState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal scan transition {self.state.value} -> {new_state.value}")
        logger.debug("scan state %s -> %s", self.state.value, new_state.value)
        self.state = new_state

    def mark_reported(self) -> None:
        self.advance(ScanState.REPORTED)


async def _probe_and_record(session: ScanSession, port: int, connect: Optional[Connector]) -> ProbeOutcome:
    req = session.request
    outcome = await probe(req.address, port, req.timeout_s, connect=connect)

    if outcome.is_open:
        try:
            session.collector.publish(port)
        except Exception as e:
            logger.warning("Could not record open port %d: %s", port, e)

    try:
        session.counter.increment()
    except Exception as e:
        logger.warning("Progress update failed for port %d: %s", port, e)

    return outcome


async def run_scan(session: ScanSession, connect: Optional[Connector] = None) -> ScanReport:
    """
    Sliding-window dispatcher: never more than request.concurrency probes
    pending at once, ports admitted in ascending order.
    """
    req = session.request
    ports = port_range(req.start_port, req.end_port)
    pending: Set["asyncio.Task[ProbeOutcome]"] = set()
    start_all = time.perf_counter()

    session.advance(ScanState.RUNNING)
    log_event(
        logger,
        "scan_started",
        {
            "address": req.address,
            "start_port": req.start_port,
            "end_port": req.end_port,
            "concurrency": req.concurrency,
            "timeout_s": req.timeout_s,
        },
    )

    def submit_next() -> bool:
        try:
            p = next(ports)
        except StopIteration:
            return False
        pending.add(asyncio.create_task(_probe_and_record(session, p, connect)))
        session.admitted += 1
        session.in_flight = len(pending)
        session.peak_in_flight = max(session.peak_in_flight, session.in_flight)
        return True

    exhausted = False

    def refill() -> None:
        nonlocal exhausted
        while not exhausted and len(pending) < req.concurrency:
            if not submit_next():
                exhausted = True

    def enter_draining() -> None:
        if exhausted and session.admitted and session.state is ScanState.RUNNING:
            session.advance(ScanState.DRAINING)

    try:
        refill()
        enter_draining()

        while pending:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            session.in_flight = len(pending)
            # read every finished task so no exception goes unretrieved
            errors = [fut.exception() for fut in done if not fut.cancelled() and fut.exception() is not None]
            if errors:
                raise errors[0]

            refill()
            enter_draining()
    finally:
        if pending:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            pending.clear()
            session.in_flight = 0

    # Barrier reached: every port admitted and every probe recorded.
    session.collector.close()
    open_ports = session.collector.drain()
    session.advance(ScanState.COMPLETE)

    elapsed = time.perf_counter() - start_all
    session.report = ScanReport(
        address=req.address,
        start_port=req.start_port,
        end_port=req.end_port,
        open_ports=tuple(open_ports),
        completed=session.counter.completed,
        elapsed_s=round(elapsed, 4),
    )
    log_event(
        logger,
        "scan_completed",
        {
            "address": req.address,
            "completed": session.counter.completed,
            "open_ports": open_ports,
            "peak_in_flight": session.peak_in_flight,
            "elapsed_s": session.report.elapsed_s,
        },
    )
    return session.report


def scan(
    request: ScanRequest,
    progress: Optional[ProgressReporter] = None,
    connect: Optional[Connector] = None,
) -> ScanReport:
    session = ScanSession(request, progress=progress)
    return asyncio.run(run_scan(session, connect=connect))
