"""
Server configuration module.

This module handles server-side configuration settings.
"""

import os

from chat_common.constants import DEFAULT_SERVER_HOST, DEFAULT_PORT, MAX_LINE_LENGTH, LOG_DIR


class ServerConfig:
    """Server configuration class."""

    def __init__(self, host: str = DEFAULT_SERVER_HOST, port: int = DEFAULT_PORT):
        self.host = host
        self.port = port

        # Connection settings
        self.max_line_length = MAX_LINE_LENGTH

        # Logging configuration
        self.logs_dir = LOG_DIR
        self.log_file = None

    @classmethod
    def from_env(cls, host: str = None, port: int = None):
        """Build a config, letting SERVER_IP / SERVER_PORT fill unset values."""
        if host is None:
            host = os.environ.get('SERVER_IP', DEFAULT_SERVER_HOST)
        if port is None:
            port = int(os.environ.get('SERVER_PORT', str(DEFAULT_PORT)))
        return cls(host, port)

    def get_connection_info(self):
        """Get connection information."""
        return {
            'host': self.host,
            'port': self.port
        }

    def get_log_settings(self):
        """Get logging settings."""
        return {
            'logs_dir': self.logs_dir,
            'log_file': self.log_file
        }
