"""
Message router.

Interprets each line from a registered session as either a public message
(delivered to every registered channel, sender included) or a private
'@target:body' message (delivered to the target, confirmed to the sender).

Outgoing lines carry a header the incoming line did not, so a message whose
outgoing frame would exceed the line limit is refused with a system notice
instead of being forwarded to clients that cannot read it.
"""

import asyncio
from typing import Optional

from chat_common.constants import OFFLINE_REASON, MAX_LINE_LENGTH, ENCODING, LINE_TERMINATOR
from chat_common.protocol_definitions import (
    MalformedPrivateMessage, is_private_request, parse_private_request,
    create_public_line, create_private_deliver_line, create_private_confirm_line,
    create_private_error_line, create_system_line
)
from chat_server.chat.channel import OutboundChannel, deliver, fan_out
from chat_server.chat.registry import Registry
from chat_server.utils.logger import logger

MESSAGE_TOO_LONG = "Message too long; not delivered."


class Router:
    """Public/private routing over the registry."""

    def __init__(self, registry: Registry, max_line_length: int = MAX_LINE_LENGTH):
        self.registry = registry
        self.max_line_length = max_line_length

    def fits(self, *lines: str) -> bool:
        """Whether every line, terminator included, stays within the limit."""
        return all(
            len((line + LINE_TERMINATOR).encode(ENCODING)) <= self.max_line_length
            for line in lines
        )

    async def _reject_oversized(self, sender: str, sender_channel: OutboundChannel):
        logger.warning(f"Oversized message from {sender} dropped")
        await deliver(sender, sender_channel, create_system_line(MESSAGE_TOO_LONG))

    async def route(self, sender: str, sender_channel: OutboundChannel, line: str,
                    metadata: Optional[str] = None):
        """Route one incoming line from `sender`."""
        if not is_private_request(line):
            if not self.fits(create_public_line(sender, line, metadata)):
                await self._reject_oversized(sender, sender_channel)
                return
            await self.broadcast_public(sender, line, metadata)
            return

        try:
            target, body = parse_private_request(line)
        except MalformedPrivateMessage as e:
            logger.info(f"Malformed private message from {sender}: {e}")
            await deliver(sender, sender_channel, create_system_line(str(e)))
            return

        await self.send_private(sender, sender_channel, target, body, metadata)

    async def broadcast_public(self, sender: str, body: str, metadata: Optional[str] = None) -> int:
        """Deliver a public message to every registered channel."""
        logger.log_public(sender, body)
        targets = await self.registry.snapshot()
        return await fan_out(targets, create_public_line(sender, body, metadata))

    async def send_private(self, sender: str, sender_channel: OutboundChannel, target: str,
                           body: str, metadata: Optional[str] = None) -> bool:
        """
        Deliver a private message.

        Both the delivery to the target and the confirmation to the sender are
        attempted; a failure of one does not cancel the other. Returns False
        when the target is not registered or the message is too long.
        """
        deliver_line = create_private_deliver_line(sender, body, metadata)
        confirm_line = create_private_confirm_line(target, body, metadata)
        if not self.fits(deliver_line, confirm_line):
            await self._reject_oversized(sender, sender_channel)
            return False

        target_channel = await self.registry.lookup(target)
        if target_channel is None:
            logger.log_private(sender, target, False)
            await deliver(sender, sender_channel, create_private_error_line(target, OFFLINE_REASON))
            return False

        logger.log_private(sender, target, True)
        await asyncio.gather(
            deliver(target, target_channel, deliver_line),
            deliver(sender, sender_channel, confirm_line),
        )
        return True
