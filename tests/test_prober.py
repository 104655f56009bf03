from __future__ import annotations

import asyncio
import socket

from port_sniffer.models import ProbeOutcome
from port_sniffer.prober import probe


def test_probe_open_closes_stream(fake_network) -> None:
    net = fake_network(open_ports={22})
    outcome = asyncio.run(probe('10.0.0.1', 22, 1.0, connect=net.connect))
    assert outcome is ProbeOutcome.OPEN
    assert net.writers[0].closed


def test_probe_refused_is_closed(fake_network) -> None:
    net = fake_network()
    outcome = asyncio.run(probe('10.0.0.1', 23, 1.0, connect=net.connect))
    assert outcome is ProbeOutcome.CLOSED


def test_probe_silent_port_times_out(fake_network) -> None:
    net = fake_network(silent_ports={9})
    outcome = asyncio.run(probe('10.0.0.1', 9, 0.05, connect=net.connect))
    assert outcome is ProbeOutcome.TIMED_OUT
    assert net.active == 0


def test_probe_open_even_if_peer_resets_on_close() -> None:
    class ResettingWriter:
        def close(self) -> None:
            pass

        async def wait_closed(self) -> None:
            raise ConnectionResetError('reset by peer')

    async def connect(address: str, port: int):
        return None, ResettingWriter()

    outcome = asyncio.run(probe('10.0.0.1', 80, 1.0, connect=connect))
    assert outcome is ProbeOutcome.OPEN


def test_probe_unreachable_is_closed() -> None:
    async def connect(address: str, port: int):
        raise OSError(113, 'No route to host')

    outcome = asyncio.run(probe('10.0.0.1', 80, 1.0, connect=connect))
    assert outcome is ProbeOutcome.CLOSED


def test_probe_real_loopback_listener() -> None:
    async def runner() -> ProbeOutcome:
        server = await asyncio.start_server(lambda r, w: w.close(), '127.0.0.1', 0)
        port = server.sockets[0].getsockname()[1]
        try:
            return await probe('127.0.0.1', port, 2.0)
        finally:
            server.close()
            await server.wait_closed()

    assert asyncio.run(runner()) is ProbeOutcome.OPEN


def test_probe_real_loopback_closed_port() -> None:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        port = s.getsockname()[1]
    # nothing listens on the port once the socket is closed
    assert asyncio.run(probe('127.0.0.1', port, 2.0)) is ProbeOutcome.CLOSED
