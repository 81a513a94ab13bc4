#!/usr/bin/env python3
"""
Chat Client - console front-end

Wires the connector and dispatcher to a console subscriber and reads chat
input from stdin.
"""

import asyncio
import sys
from typing import List

from chat_common.constants import FrameTypes, ConnectionState
from chat_common.protocol_definitions import is_exit_command
from chat_client.connector import ChatConnector
from chat_client.dispatcher import FrameDispatcher, FrameSubscriber
from chat_client.utils.config import ClientConfig
from chat_client.utils.logger import logger


def format_frame(frame) -> str:
    """Render a frame as one console line."""
    if frame.type == FrameTypes.PUBLIC:
        return f"{frame.sender}: {frame.body}"
    if frame.type == FrameTypes.PRIVATE_DELIVER:
        return f"[Private from {frame.sender}] {frame.body}"
    if frame.type == FrameTypes.PRIVATE_CONFIRM:
        return f"[Private to {frame.target}] {frame.body}"
    if frame.type == FrameTypes.PRIVATE_ERROR:
        return f"[Private Error] {frame.target}: {frame.reason}"
    if frame.type == FrameTypes.SYSTEM_NOTICE:
        return f"[System] {frame.text}"
    return str(frame)


STATE_ADVISORIES = {
    ConnectionState.CONNECTING: "[Status] Connecting...",
    ConnectionState.CONNECTED: "[Status] Connected.",
    ConnectionState.RECONNECTING: "[Status] Server not reachable, retrying...",
    ConnectionState.DISCONNECTED: "[Status] Disconnected.",
}


class ConsoleSubscriber(FrameSubscriber):
    """Prints everything the dispatcher delivers."""

    def __init__(self, out=None):
        self.out = out or sys.stdout
        self.participants: List[str] = []

    def _print(self, text: str):
        print(text, file=self.out, flush=True)

    def on_frame(self, frame):
        self._print(format_frame(frame))

    def on_participants(self, names: List[str]):
        self.participants = list(names)
        self._print(f"[Online] {', '.join(names) if names else '(nobody)'}")

    def on_state_changed(self, state: str):
        self._print(STATE_ADVISORIES.get(state, f"[Status] {state}"))


class ChatClient:
    """Main client class that integrates the connector with console I/O."""

    def __init__(self, config: ClientConfig, subscriber: FrameSubscriber = None):
        self.config = config
        self.subscriber = subscriber or ConsoleSubscriber()
        self.dispatcher = FrameDispatcher(self.subscriber)
        self.connector = ChatConnector(config, self.dispatcher)

    async def handle_input(self, text: str) -> bool:
        """
        Act on one line of user input. Returns False when the user asked to
        leave.

        '/w <name> <text>' sends a private message; '/quit' or 'exit' leaves;
        anything else (including raw '@name: text') is sent as typed.
        """
        text = text.strip()
        if not text:
            return True
        if text == '/quit' or is_exit_command(text):
            return False
        if text.startswith('/w '):
            parts = text.split(' ', 2)
            if len(parts) < 3 or not parts[1]:
                logger.warning("Usage: /w <name> <message>")
                return True
            await self.connector.send_private(parts[1], parts[2])
            return True
        await self.connector.send_public(text)
        return True

    async def interactive_mode(self):
        """Run client with interactive chat input."""
        await self.connector.connect()
        logger.info("Type messages to chat; '/w name text' for private, '/quit' to leave")

        loop = asyncio.get_running_loop()
        try:
            while True:
                user_input = await loop.run_in_executor(None, sys.stdin.readline)
                if not user_input:
                    break
                if not await self.handle_input(user_input):
                    break
        except asyncio.CancelledError:
            pass
        finally:
            await self.connector.disconnect()
            await self.dispatcher.stop()
            logger.info("Disconnected from server")
