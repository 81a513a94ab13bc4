"""
Outbound delivery channel.

One channel wraps the write side of one client connection. It is owned by
the Session that created it; the Registry only holds a reference for lookup.
"""

import asyncio
from typing import Iterable, Tuple

from chat_common.constants import ENCODING, LINE_TERMINATOR
from chat_server.utils.logger import logger


class OutboundChannel:
    """Serialized, newline-terminated writes to one client."""

    def __init__(self, writer: asyncio.StreamWriter):
        self.writer = writer
        self.peer = writer.get_extra_info('peername')
        self._write_lock = asyncio.Lock()  # FIFO, keeps each sender's order per target
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, line: str):
        """Write one line; raises ConnectionError/OSError on failure."""
        if self._closed:
            raise ConnectionError(f"Channel to {self.peer} is closed")
        data = (line + LINE_TERMINATOR).encode(ENCODING)
        async with self._write_lock:
            if self.writer.is_closing():
                raise ConnectionError(f"Connection to {self.peer} is closing")
            self.writer.write(data)
            await self.writer.drain()

    async def close(self):
        """Close the underlying connection. Idempotent."""
        if self._closed:
            return
        self._closed = True
        try:
            self.writer.close()
            await self.writer.wait_closed()
        except OSError as e:
            logger.debug(f"Connection to {self.peer} closed with error: {e}")


async def deliver(name: str, channel: OutboundChannel, line: str) -> bool:
    """
    Send one line to one target, isolating any failure.

    Returns False when the write failed; the target's own session notices the
    broken connection on its next read and cleans up.
    """
    try:
        await channel.send(line)
        return True
    except OSError as e:
        logger.log_delivery_failure(name, e)
        return False


async def fan_out(targets: Iterable[Tuple[str, OutboundChannel]], line: str) -> int:
    """Deliver one line to every target concurrently; returns the success count."""
    results = await asyncio.gather(*(deliver(name, channel, line) for name, channel in targets))
    return sum(1 for ok in results if ok)
