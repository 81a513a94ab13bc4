"""
Participant registry.

Shared mapping from participant name to that participant's outbound channel.
Sessions insert on registration and remove on termination; the router and
the membership broadcaster read from it. Readers take a snapshot and iterate
outside the lock so a slow delivery never blocks registry mutation.
"""

import asyncio
from typing import Dict, List, Optional, Tuple

from chat_server.chat.channel import OutboundChannel


class Registry:
    """Concurrency-safe name -> OutboundChannel mapping."""

    def __init__(self):
        self._channels: Dict[str, OutboundChannel] = {}
        self.lock = asyncio.Lock()  # Protect shared state

    async def register(self, name: str, channel: OutboundChannel) -> Optional[OutboundChannel]:
        """
        Bind a name to a channel.

        A duplicate name overwrites the existing entry; the displaced channel
        is returned so the caller can report the collision.
        """
        async with self.lock:
            previous = self._channels.get(name)
            self._channels[name] = channel
        return previous

    async def unregister(self, name: str, channel: OutboundChannel,
                         restore: Optional[OutboundChannel] = None) -> bool:
        """
        Remove a name only if it is still bound to the given channel.

        With `restore`, the name is rebound to that channel instead of removed.
        """
        async with self.lock:
            if self._channels.get(name) is not channel:
                return False
            if restore is not None:
                self._channels[name] = restore
            else:
                del self._channels[name]
            return True

    async def lookup(self, name: str) -> Optional[OutboundChannel]:
        async with self.lock:
            return self._channels.get(name)

    async def snapshot(self) -> List[Tuple[str, OutboundChannel]]:
        """Copy of all (name, channel) pairs at this instant."""
        async with self.lock:
            return list(self._channels.items())

    async def names(self) -> List[str]:
        async with self.lock:
            return list(self._channels.keys())

    def __len__(self) -> int:
        return len(self._channels)

    def __contains__(self, name: str) -> bool:
        return name in self._channels
