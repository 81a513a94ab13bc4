"""
Server-side session.

A Session owns one client connection: it performs the registration
handshake, feeds every following line to the router, and on any exit path
removes itself from the registry and releases the connection exactly once.
"""

import asyncio
from typing import Optional

from chat_common.constants import ENCODING
from chat_common.protocol_definitions import (
    parse_registration, is_exit_command, create_system_line
)
from chat_server.chat.channel import OutboundChannel, deliver
from chat_server.chat.membership import MembershipBroadcaster
from chat_server.chat.registry import Registry
from chat_server.chat.router import Router
from chat_server.utils.logger import logger


class Session:
    """One connected client."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter,
                 registry: Registry, router: Router, membership: MembershipBroadcaster):
        self.reader = reader
        self.channel = OutboundChannel(writer)
        self.addr = self.channel.peer
        self.registry = registry
        self.router = router
        self.membership = membership

        self.name: Optional[str] = None
        self.metadata: Optional[str] = None
        self.registered = False
        self._terminated = False

    @property
    def terminated(self) -> bool:
        return self._terminated

    async def run(self):
        """Handshake, then read until EOF, error, or 'exit'."""
        logger.log_connection(self.addr)
        try:
            await self._handshake()
            if not self._terminated:
                await self._read_loop()
        except asyncio.CancelledError:
            logger.info(f"Session cancelled for {self.addr}")
            raise
        except (OSError, ValueError) as e:
            # ValueError: line longer than the reader limit
            logger.info(f"Connection error for {self.addr}: {e}")
        finally:
            await self.terminate()

    async def _read_line(self) -> Optional[str]:
        """Next line without its terminator, or None at EOF."""
        data = await self.reader.readline()
        if not data:
            return None
        return data.decode(ENCODING, errors='replace').rstrip('\r\n')

    async def _handshake(self):
        """
        Register the name carried by the first line.

        An absent or empty first line leaves the session unregistered; it
        still proceeds to the read loop.
        """
        registration = parse_registration(await self._read_line())
        if registration is None:
            logger.info(f"No registration received from {self.addr}")
            return

        self.name = registration.name
        self.metadata = registration.metadata
        previous = await self.registry.register(self.name, self.channel)
        if self._terminated:
            # Terminated while waiting for the registry; undo the binding.
            await self.registry.unregister(self.name, self.channel, restore=previous)
            return
        self.registered = True
        if previous is not None and previous is not self.channel:
            logger.log_name_collision(self.name, self.addr)
        logger.log_registration(self.name, self.addr)

        await self.membership.announce_join(self.name)

    async def _read_loop(self):
        while True:
            line = await self._read_line()
            if line is None:
                break
            if is_exit_command(line):
                logger.info(f"Exit requested by {self.name or self.addr}")
                break

            if not self.registered:
                await deliver(str(self.addr), self.channel,
                              create_system_line("Not registered; message dropped."))
                continue

            await self.router.route(self.name, self.channel, line, self.metadata)

    async def terminate(self):
        """
        Unregister, notify peers, and close the connection.

        Runs at most once; later or concurrent calls return immediately.
        """
        if self._terminated:
            return
        self._terminated = True

        removed = False
        if self.registered:
            removed = await self.registry.unregister(self.name, self.channel)

        await self.channel.close()
        logger.log_disconnect(self.name, self.addr)

        # An orphaned session (its name re-registered elsewhere) leaves silently.
        if removed:
            await self.membership.announce_leave(self.name)
