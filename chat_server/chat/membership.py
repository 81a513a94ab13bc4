"""
Membership broadcaster.

Recomputes the full name list after every registry insert or removal and
sends it, together with the join/leave notice, to every registered channel.
"""

from chat_common.protocol_definitions import (
    create_userlist_line, create_user_joined_line, create_user_left_line
)
from chat_server.chat.channel import fan_out
from chat_server.chat.registry import Registry
from chat_server.utils.logger import logger


class MembershipBroadcaster:
    """Publishes join/leave notices and membership snapshots."""

    def __init__(self, registry: Registry):
        self.registry = registry

    async def publish_snapshot(self):
        """Send USERLIST to everyone; names and targets come from one snapshot."""
        targets = await self.registry.snapshot()
        names = [name for name, _ in targets]
        logger.debug(f"Membership snapshot ({len(names)}): {', '.join(names)}")
        await fan_out(targets, create_userlist_line(names))

    async def announce_join(self, name: str):
        await fan_out(await self.registry.snapshot(), create_user_joined_line(name))
        await self.publish_snapshot()

    async def announce_leave(self, name: str):
        await fan_out(await self.registry.snapshot(), create_user_left_line(name))
        await self.publish_snapshot()
