"""
Presentation dispatcher.

The receiver and the connector publish frames, membership lists and state
changes here. A single consumer task hands them to whichever subscriber is
currently attached, one callback at a time, so the presentation layer is
never invoked concurrently.
"""

import asyncio
import threading
from typing import List, Optional

from chat_client.utils.logger import logger


class FrameSubscriber:
    """Presentation-side interface; override what you need."""

    def on_frame(self, frame):
        """Called for every non-membership frame."""

    def on_participants(self, names: List[str]):
        """Called with the full participant list after every join/leave."""

    def on_state_changed(self, state: str):
        """Called after every connection state transition."""


class FrameDispatcher:
    """Queued, single-consumer delivery to one swappable subscriber."""

    def __init__(self, subscriber: Optional[FrameSubscriber] = None):
        self._subscriber = subscriber
        # Held while a callback runs, so a swap never overlaps a delivery.
        self._lock = threading.RLock()
        self._queue: asyncio.Queue = asyncio.Queue()
        self._consumer: Optional[asyncio.Task] = None

    @property
    def subscriber(self) -> Optional[FrameSubscriber]:
        with self._lock:
            return self._subscriber

    def subscribe(self, subscriber: FrameSubscriber) -> Optional[FrameSubscriber]:
        """Make `subscriber` the live target; returns the one it replaced."""
        with self._lock:
            previous = self._subscriber
            self._subscriber = subscriber
        return previous

    def unsubscribe(self, subscriber: FrameSubscriber) -> bool:
        """Detach `subscriber` if it is still the live target."""
        with self._lock:
            if self._subscriber is not subscriber:
                return False
            self._subscriber = None
            return True

    def start(self):
        """Start the consumer task on the running loop (no-op if running)."""
        if self._consumer is not None and not self._consumer.done():
            return
        self._consumer = asyncio.create_task(self._consume())

    async def stop(self):
        """Deliver what is queued, then stop the consumer."""
        if self._consumer is None:
            return
        if not self._consumer.done():
            await self._queue.join()
            self._consumer.cancel()
        try:
            await self._consumer
        except asyncio.CancelledError:
            pass
        self._consumer = None

    async def drain(self):
        """Wait until everything published so far has been delivered."""
        await self._queue.join()

    def publish_frame(self, frame):
        self._queue.put_nowait(('on_frame', frame))

    def publish_participants(self, names: List[str]):
        self._queue.put_nowait(('on_participants', list(names)))

    def publish_state(self, state: str):
        self._queue.put_nowait(('on_state_changed', state))

    async def _consume(self):
        while True:
            method, payload = await self._queue.get()
            try:
                with self._lock:
                    if self._subscriber is not None:
                        getattr(self._subscriber, method)(payload)
            except Exception as e:
                logger.log_error(f"subscriber {method}", e)
            finally:
                self._queue.task_done()
