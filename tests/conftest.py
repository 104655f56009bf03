from __future__ import annotations

import asyncio
import logging

import pytest


class FakeWriter:
    def __init__(self) -> None:
        self.closed = False

    def close(self) -> None:
        self.closed = True

    async def wait_closed(self) -> None:
        pass


class FakeNetwork:
    """In-memory stand-in for asyncio.open_connection against one host."""

    def __init__(self, open_ports=(), silent_ports=(), jitter: float = 0.002) -> None:
        self.open_ports = set(open_ports)
        self.silent_ports = set(silent_ports)
        self.jitter = jitter
        self.attempts: list[int] = []
        self.active = 0
        self.peak_active = 0
        self.writers: list[FakeWriter] = []

    async def connect(self, address: str, port: int):
        self.attempts.append(port)
        self.active += 1
        self.peak_active = max(self.peak_active, self.active)
        try:
            if port in self.silent_ports:
                await asyncio.sleep(3600)
            # uneven delays so completion order differs from admission order
            await asyncio.sleep(self.jitter * ((port * 7) % 5))
            if port in self.open_ports:
                writer = FakeWriter()
                self.writers.append(writer)
                return None, writer
            raise ConnectionRefusedError(f'{address}:{port} refused')
        finally:
            self.active -= 1


@pytest.fixture
def fake_network():
    def factory(open_ports=(), silent_ports=(), jitter: float = 0.002) -> FakeNetwork:
        return FakeNetwork(open_ports=open_ports, silent_ports=silent_ports, jitter=jitter)

    return factory


@pytest.fixture(autouse=True)
def reset_scanner_logger():
    yield
    logger = logging.getLogger('port_sniffer')
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.setLevel(logging.NOTSET)
