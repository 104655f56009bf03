from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Tuple

from .models import ProbeOutcome

logger = logging.getLogger(__name__)

Connector = Callable[[str, int], Awaitable[Tuple[Any, Any]]]


async def _close_writer(writer: Any) -> None:
    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        # Peer may reset right after the handshake; the port is still open.
        pass


async def probe(
    address: str,
    port: int,
    timeout_s: float,
    connect: Optional[Connector] = None,
) -> ProbeOutcome:
    """
    Single TCP connect attempt, raced against timeout_s.
    Returns OPEN, CLOSED (refused / unreachable) or TIMED_OUT.
    """
    if connect is None:
        connect = asyncio.open_connection

    try:
        _, writer = await asyncio.wait_for(connect(address, port), timeout=timeout_s)
    except asyncio.TimeoutError:
        # checked first: TimeoutError is an OSError subclass on 3.11+
        logger.debug("%s:%d timed out after %.2fs", address, port, timeout_s)
        return ProbeOutcome.TIMED_OUT
    except OSError as e:
        logger.debug("%s:%d closed (%s)", address, port, e)
        return ProbeOutcome.CLOSED

    await _close_writer(writer)
    logger.debug("%s:%d open", address, port)
    return ProbeOutcome.OPEN
