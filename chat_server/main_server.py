#!/usr/bin/env python3
"""
Chat Server - Listener

Binds the configured port, accepts connections, and runs one Session task per
connection. The registry, router and membership broadcaster are shared by all
sessions.
"""

import asyncio
from typing import Optional, Set

from chat_server.chat.membership import MembershipBroadcaster
from chat_server.chat.registry import Registry
from chat_server.chat.router import Router
from chat_server.session import Session
from chat_server.utils.config import ServerConfig
from chat_server.utils.logger import logger


class BindFailure(RuntimeError):
    """The listener could not acquire its port."""


class ChatServer:
    """Main server class that wires the listener to the chat modules."""

    def __init__(self, host: str = '0.0.0.0', port: int = 12345, config: ServerConfig = None):
        self.config = config or ServerConfig(host, port)
        self.registry = Registry()
        self.router = Router(self.registry, self.config.max_line_length)
        self.membership = MembershipBroadcaster(self.registry)
        self.sessions: Set[Session] = set()
        self._server: Optional[asyncio.AbstractServer] = None

    @property
    def port(self) -> Optional[int]:
        """Actually bound port (useful when configured with port 0)."""
        if not self._server or not self._server.sockets:
            return None
        return self._server.sockets[0].getsockname()[1]

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        """Handle individual client connection."""
        session = Session(reader, writer, self.registry, self.router, self.membership)
        self.sessions.add(session)
        try:
            await session.run()
        except asyncio.CancelledError:
            pass
        except Exception as e:
            # Never let one session's failure reach the listener.
            logger.log_error(f"session {session.addr}", e)
        finally:
            self.sessions.discard(session)

    def _on_loop_exception(self, loop, context):
        """Accept errors surface here; log them and keep listening."""
        exc = context.get('exception')
        message = context.get('message', 'event loop error')
        if exc is not None:
            logger.error(f"{message}: {exc}")
        else:
            logger.error(message)

    async def open(self):
        """Bind the listener. Raises BindFailure if the port is unavailable."""
        asyncio.get_running_loop().set_exception_handler(self._on_loop_exception)
        try:
            self._server = await asyncio.start_server(
                self.handle_client,
                self.config.host,
                self.config.port,
                limit=self.config.max_line_length
            )
        except OSError as e:
            raise BindFailure(f"Cannot bind {self.config.host}:{self.config.port}: {e}") from e

        addr = ', '.join(str(sock.getsockname()) for sock in self._server.sockets)
        logger.info(f"Server listening on {addr}")
        return self._server

    async def start(self):
        """Start the server and serve until cancelled."""
        if self._server is None:
            await self.open()
        async with self._server:
            await self._server.serve_forever()

    async def stop(self):
        """Stop accepting and terminate every live session."""
        if self._server is not None:
            self._server.close()
        sessions = list(self.sessions)
        await asyncio.gather(*(session.terminate() for session in sessions))
        if self._server is not None:
            await self._server.wait_closed()
            self._server = None
        logger.info("Server stopped")
