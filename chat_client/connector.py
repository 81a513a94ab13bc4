"""
Client connection state machine.

    DISCONNECTED -> CONNECTING -> CONNECTED
    CONNECTING -> RECONNECTING            (first attempt failed)
    CONNECTED -> RECONNECTING             (connection lost unexpectedly)
    RECONNECTING -> CONNECTED             (retry succeeded)
    CONNECTING/CONNECTED/RECONNECTING -> DISCONNECTED   (explicit disconnect)

Every connect request gets its own cancellation token. The retry loop checks
it before each attempt and again after each backoff wait; a connection that
completes after the token was set is closed instead of being promoted.
"""

import asyncio
import functools
from typing import Callable, List, Optional

from chat_common.constants import ConnectionState, ENCODING, LINE_TERMINATOR, EXIT_COMMAND
from chat_common.protocol_definitions import create_registration_line, create_private_request_line
from chat_client.dispatcher import FrameDispatcher
from chat_client.receiver import Receiver
from chat_client.utils.config import ClientConfig
from chat_client.utils.logger import logger


class ChatConnector:
    """Connect, register, receive, and reconnect after transient failures."""

    def __init__(self, config: ClientConfig, dispatcher: FrameDispatcher = None,
                 open_connection: Callable = None):
        self.config = config
        self.dispatcher = dispatcher or FrameDispatcher()
        self._open_connection = open_connection or functools.partial(
            asyncio.open_connection, limit=config.max_line_length
        )

        self.state = ConnectionState.DISCONNECTED
        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None

        self._cancel: Optional[asyncio.Event] = None
        self._retry_task: Optional[asyncio.Task] = None
        self._receiver_task: Optional[asyncio.Task] = None
        self._send_lock = asyncio.Lock()
        self._state_listeners: List[Callable[[str], None]] = []

    @property
    def is_connected(self) -> bool:
        return self.state == ConnectionState.CONNECTED

    def add_state_listener(self, listener: Callable[[str], None]):
        """Register a callback invoked synchronously on every transition."""
        self._state_listeners.append(listener)

    def _set_state(self, new_state: str):
        if new_state == self.state:
            return
        old_state = self.state
        self.state = new_state
        logger.log_state_change(old_state, new_state)
        for listener in self._state_listeners:
            listener(new_state)
        self.dispatcher.publish_state(new_state)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def connect(self) -> bool:
        """
        Explicit connect request.

        Returns True when the first attempt succeeded. On failure the state
        becomes RECONNECTING and the retry loop runs in the background.
        """
        if self.state != ConnectionState.DISCONNECTED:
            logger.debug(f"Connect ignored in state {self.state}")
            return self.is_connected

        self.dispatcher.start()
        cancel = asyncio.Event()
        self._cancel = cancel
        self._set_state(ConnectionState.CONNECTING)

        if await self._attempt(cancel):
            return True
        if not cancel.is_set():
            self._start_retry(cancel)
        return False

    async def disconnect(self):
        """
        Explicit disconnect. Always ends in DISCONNECTED with no open connection.
        """
        if self._cancel is not None:
            self._cancel.set()
        writer = self.writer
        self.reader = None
        self.writer = None
        self._set_state(ConnectionState.DISCONNECTED)

        if writer is not None:
            try:
                writer.write((EXIT_COMMAND + LINE_TERMINATOR).encode(ENCODING))
                await writer.drain()
            except OSError as e:
                logger.debug(f"Could not send exit: {e}")
            await self._close_writer(writer)

        receiver = self._receiver_task
        if receiver is not None and not receiver.done() and receiver is not asyncio.current_task():
            receiver.cancel()

    async def wait_idle(self):
        """Wait for a running retry loop to finish (connected or cancelled)."""
        task = self._retry_task
        if task is not None and not task.done():
            await task

    async def send_line(self, line: str) -> bool:
        """Send one raw protocol line. Returns False when not connected."""
        writer = self.writer
        if not self.is_connected or writer is None:
            logger.warning("Not connected to server")
            return False
        try:
            async with self._send_lock:
                writer.write((line + LINE_TERMINATOR).encode(ENCODING))
                await writer.drain()
            return True
        except OSError as e:
            logger.log_error("send", e)
            return False

    async def send_public(self, text: str) -> bool:
        """Send a public message."""
        return await self.send_line(text)

    async def send_private(self, target: str, text: str) -> bool:
        """Send a private message to `target`."""
        return await self.send_line(create_private_request_line(target, text))

    # ------------------------------------------------------------------
    # State machine internals
    # ------------------------------------------------------------------

    def _start_retry(self, cancel: asyncio.Event):
        self._set_state(ConnectionState.RECONNECTING)
        self._retry_task = asyncio.create_task(self._retry_loop(cancel))

    async def _attempt(self, cancel: asyncio.Event) -> bool:
        """One connection attempt; on success register and start receiving."""
        host, port = self.config.host, self.config.port
        try:
            reader, writer = await asyncio.wait_for(
                self._open_connection(host, port),
                timeout=self.config.connect_timeout
            )
        except (OSError, asyncio.TimeoutError) as e:
            logger.log_connection(host, port, False)
            logger.debug(f"Connect error: {e!r}")
            return False

        if cancel.is_set():
            # Disconnect was requested while this attempt was in flight.
            await self._close_writer(writer)
            return False

        registration = create_registration_line(self.config.username, self.config.metadata)
        try:
            writer.write((registration + LINE_TERMINATOR).encode(ENCODING))
            await writer.drain()
        except OSError as e:
            logger.log_error("registration", e)
            await self._close_writer(writer)
            return False

        if cancel.is_set():
            await self._close_writer(writer)
            return False

        self.reader = reader
        self.writer = writer
        logger.log_connection(host, port, True)
        self._set_state(ConnectionState.CONNECTED)
        self._receiver_task = asyncio.create_task(self._receive(reader, writer, cancel))
        return True

    async def _retry_loop(self, cancel: asyncio.Event):
        delay = self.config.reconnect_delay
        while not cancel.is_set():
            logger.log_retry(delay)
            await self._backoff(cancel, delay)
            if cancel.is_set():
                break
            if await self._attempt(cancel):
                logger.info("Reconnected successfully")
                return
        logger.info("Reconnect cancelled")

    @staticmethod
    async def _backoff(cancel: asyncio.Event, delay: float):
        """Wait `delay` seconds, waking early if the token is set."""
        try:
            await asyncio.wait_for(cancel.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

    async def _receive(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter,
                       cancel: asyncio.Event):
        await Receiver(reader, self.dispatcher).run()

        if cancel.is_set() or self.writer is not writer:
            return

        logger.info("Connection lost, attempting to reconnect...")
        self.reader = None
        self.writer = None
        await self._close_writer(writer)
        if not cancel.is_set():
            self._start_retry(cancel)

    @staticmethod
    async def _close_writer(writer: asyncio.StreamWriter):
        try:
            writer.close()
            await writer.wait_closed()
        except OSError as e:
            logger.debug(f"Error while closing connection: {e}")
