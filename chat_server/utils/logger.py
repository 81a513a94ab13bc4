"""
Server logging module.

This module handles server-side logging functionality.
"""

import logging
from pathlib import Path
from typing import Optional


class ServerLogger:
    """Server logging class."""

    def __init__(self, log_level: int = logging.INFO):
        self.logger = logging.getLogger('chat_server')
        self.configure(log_level)

    def configure(self, log_level: int = logging.INFO, log_file: Optional[str] = None):
        """(Re)install handlers; safe to call more than once."""
        self.logger.setLevel(log_level)

        # Remove existing handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)
            handler.close()

        formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        if log_file:
            path = Path(log_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(path, encoding='utf-8')
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    def info(self, message: str):
        """Log info message."""
        self.logger.info(message)

    def error(self, message: str):
        """Log error message."""
        self.logger.error(message)

    def warning(self, message: str):
        """Log warning message."""
        self.logger.warning(message)

    def debug(self, message: str):
        """Log debug message."""
        self.logger.debug(message)

    def log_connection(self, addr):
        """Log client connection."""
        self.info(f"New connection from {addr}")

    def log_registration(self, name: str, addr):
        """Log participant registration."""
        self.info(f"Participant '{name}' registered from {addr}")

    def log_name_collision(self, name: str, addr):
        """Log a registration that replaced an existing entry."""
        self.warning(f"Name '{name}' was already registered; entry now bound to {addr}")

    def log_disconnect(self, name: Optional[str], addr):
        """Log session termination."""
        if name:
            self.info(f"Participant '{name}' ({addr}) disconnected")
        else:
            self.info(f"Unregistered connection {addr} closed")

    def log_public(self, sender: str, body: str):
        """Log public message."""
        self.debug(f"PUBLIC from {sender}: {body}")

    def log_private(self, sender: str, target: str, delivered: bool):
        """Log private message routing."""
        if delivered:
            self.debug(f"PRIVATE {sender} -> {target}")
        else:
            self.info(f"PRIVATE {sender} -> {target} failed: target offline/unknown")

    def log_delivery_failure(self, name: str, error: Exception):
        """Log a dropped delivery to one target."""
        self.debug(f"Delivery to '{name}' dropped: {error}")

    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")


# Global logger instance
logger = ServerLogger()
