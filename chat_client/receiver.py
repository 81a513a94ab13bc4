"""
Client receive loop.

Reads the server stream one line at a time while connected. Membership
snapshots go to the participant list; every other frame goes to the
presentation layer. Returns when the stream ends or fails.
"""

import asyncio

from chat_common.constants import ENCODING
from chat_common.protocol_definitions import MalformedFrame, MembershipSnapshotFrame, parse_frame
from chat_client.dispatcher import FrameDispatcher
from chat_client.utils.logger import logger


class Receiver:
    """Receive loop for one live connection."""

    def __init__(self, reader: asyncio.StreamReader, dispatcher: FrameDispatcher):
        self.reader = reader
        self.dispatcher = dispatcher

    async def run(self):
        while True:
            try:
                data = await self.reader.readline()
            except (OSError, ValueError) as e:
                logger.info(f"Connection error: {e}")
                return
            if not data:
                logger.info("Server closed the connection")
                return

            line = data.decode(ENCODING, errors='replace').rstrip('\r\n')
            if not line:
                continue

            try:
                frame = parse_frame(line)
            except MalformedFrame as e:
                logger.warning(str(e))
                continue

            if isinstance(frame, MembershipSnapshotFrame):
                self.dispatcher.publish_participants(frame.names)
            else:
                self.dispatcher.publish_frame(frame)
