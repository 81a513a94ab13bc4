#!/usr/bin/env python3
"""
Chat Server - Main Entry Point

Usage:
    python main_server.py

Optional arguments:
    --host HOST           Bind address (default: 0.0.0.0, or $SERVER_IP)
    --port PORT           TCP port (default: 12345, or $SERVER_PORT)
    --log-level LEVEL     Logging level (default: INFO)
    --log-file PATH       Also write logs to PATH
"""

import argparse
import asyncio
import logging
import socket
import sys

from chat_server.main_server import ChatServer, BindFailure
from chat_server.utils.config import ServerConfig
from chat_server.utils.logger import logger


def _get_primary_local_ip():
    """Best-effort primary local IPv4, only used for the startup banner."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            # This does not actually send data, it's just to select the default interface
            s.connect(('8.8.8.8', 80))
            return s.getsockname()[0]
    except OSError:
        try:
            return socket.gethostbyname(socket.gethostname())
        except OSError:
            return '127.0.0.1'


def main(argv=None):
    parser = argparse.ArgumentParser(description='Line Chat Server')
    parser.add_argument('--host', type=str, default=None,
                        help='Host to bind to (default: 0.0.0.0)')
    parser.add_argument('--port', type=int, default=None,
                        help='TCP port (default: 12345)')
    parser.add_argument('--log-level', type=str, default='INFO',
                        help='Logging level (default: INFO)')
    parser.add_argument('--log-file', type=str, default=None,
                        help='Optional log file path')

    args = parser.parse_args(argv)

    config = ServerConfig.from_env(args.host, args.port)
    config.log_file = args.log_file
    logger.configure(getattr(logging, args.log_level.upper(), logging.INFO), config.log_file)

    if config.host in ('0.0.0.0', ''):
        logger.info(f"Server IP address: {_get_primary_local_ip()}")

    server = ChatServer(config=config)
    try:
        asyncio.run(server.start())
    except BindFailure as e:
        logger.error(f"Server failed to start: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Server shutting down...")
    return 0


if __name__ == "__main__":
    sys.exit(main())
