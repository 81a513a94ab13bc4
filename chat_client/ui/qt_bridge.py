"""
PyQt6 bridge.

QtFrameSubscriber turns dispatcher callbacks into Qt signals; connected slots
on GUI objects run on the GUI thread through Qt's queued connections.
NetworkThread hosts the connector's asyncio loop so the GUI thread never
blocks on the network.
"""

import asyncio
import threading
from typing import List, Optional

from PyQt6.QtCore import QObject, QThread, pyqtSignal

from chat_client.connector import ChatConnector
from chat_client.dispatcher import FrameDispatcher, FrameSubscriber
from chat_client.utils.config import ClientConfig
from chat_client.utils.logger import logger


class QtFrameSubscriber(QObject, FrameSubscriber):
    """Dispatcher subscriber that re-emits everything as signals."""

    frame_received = pyqtSignal(object)  # frame dataclass
    participants_changed = pyqtSignal(list)  # names
    state_changed = pyqtSignal(str)  # ConnectionState value

    def on_frame(self, frame):
        self.frame_received.emit(frame)

    def on_participants(self, names: List[str]):
        self.participants_changed.emit(list(names))

    def on_state_changed(self, state: str):
        self.state_changed.emit(state)


class NetworkThread(QThread):
    """Thread for handling network communication."""

    def __init__(self, config: ClientConfig, subscriber: FrameSubscriber):
        super().__init__()
        self.config = config
        self.subscriber = subscriber
        self.connector: Optional[ChatConnector] = None
        self.loop: Optional[asyncio.AbstractEventLoop] = None
        self.loop_ready = threading.Event()
        self._stop_event: Optional[asyncio.Event] = None

    def run(self):
        """Run network loop."""
        self.loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self.loop)
        try:
            self.loop.run_until_complete(self._connect_and_wait())
        finally:
            self.loop.close()

    async def _connect_and_wait(self):
        self._stop_event = asyncio.Event()
        dispatcher = FrameDispatcher(self.subscriber)
        self.connector = ChatConnector(self.config, dispatcher)
        self.loop_ready.set()

        await self.connector.connect()
        await self._stop_event.wait()

        await self.connector.disconnect()
        await dispatcher.stop()

    def _submit(self, coro):
        # Wait for event loop to be ready before submitting
        if not self.loop_ready.wait(timeout=5.0):
            logger.warning("Network loop not ready, request dropped")
            coro.close()
            return None
        return asyncio.run_coroutine_threadsafe(coro, self.loop)

    def send_message(self, text: str):
        """Send a public message from the GUI thread."""
        return self._submit(self._send_public(text))

    def send_private(self, target: str, text: str):
        """Send a private message from the GUI thread."""
        return self._submit(self._send_private(target, text))

    async def _send_public(self, text: str) -> bool:
        return await self.connector.send_public(text)

    async def _send_private(self, target: str, text: str) -> bool:
        return await self.connector.send_private(target, text)

    def stop(self):
        """Disconnect and let the thread finish."""
        if not self.loop_ready.wait(timeout=5.0) or self.loop.is_closed():
            return
        self.loop.call_soon_threadsafe(self._stop_event.set)
