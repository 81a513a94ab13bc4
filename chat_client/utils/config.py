"""
Client configuration module.

This module handles client-side configuration settings.
"""

import os

from chat_common.constants import (
    DEFAULT_HOST, DEFAULT_PORT, RECONNECT_DELAY, CONNECT_TIMEOUT, MAX_LINE_LENGTH
)


class ClientConfig:
    """Client configuration class."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT, username: str = None,
                 metadata: str = None):
        self.host = host
        self.port = port
        self.username = username or f"user_{id(self) % 10000}"
        self.metadata = metadata  # passed through untouched, e.g. an avatar path

        # Connection settings
        self.reconnect_delay = RECONNECT_DELAY  # seconds
        self.connect_timeout = CONNECT_TIMEOUT  # seconds
        self.max_line_length = MAX_LINE_LENGTH

    @classmethod
    def from_env(cls, host: str = None, port: int = None, username: str = None, metadata: str = None):
        """Build a config, letting SERVER_IP / SERVER_PORT fill unset values."""
        if host is None:
            host = os.environ.get('SERVER_IP', DEFAULT_HOST)
        if port is None:
            port = int(os.environ.get('SERVER_PORT', str(DEFAULT_PORT)))
        return cls(host, port, username, metadata)

    def get_connection_info(self):
        """Get connection information."""
        return {
            'host': self.host,
            'port': self.port,
            'username': self.username
        }
