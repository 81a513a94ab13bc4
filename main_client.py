#!/usr/bin/env python3
"""
Chat Client - Main Entry Point

Usage:
    python main_client.py [--username NAME] [--server-ip HOST] [--port PORT]

Optional arguments:
    --metadata TEXT         Opaque registration metadata (e.g. an avatar path)
    --reconnect-delay SECS  Fixed wait between reconnect attempts (default: 3)
    --log-level LEVEL       Logging level (default: INFO)
"""

import argparse
import asyncio
import logging
import sys

from chat_client.main_client import ChatClient
from chat_client.utils.config import ClientConfig
from chat_client.utils.logger import logger


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(description='Line Chat Client')
    parser.add_argument('--username', type=str, default=None,
                        help='Display name (default: asked on start)')
    parser.add_argument('--server-ip', type=str, default=None,
                        help='Server IP address (default: localhost)')
    parser.add_argument('--port', type=int, default=None,
                        help='Server port (default: 12345)')
    parser.add_argument('--metadata', type=str, default=None,
                        help='Opaque metadata sent with the registration')
    parser.add_argument('--reconnect-delay', type=float, default=None,
                        help='Seconds between reconnect attempts (default: 3)')
    parser.add_argument('--log-level', type=str, default='INFO',
                        help='Logging level (default: INFO)')

    args = parser.parse_args(argv)
    logger.configure(getattr(logging, args.log_level.upper(), logging.INFO))

    username = args.username
    if not username:
        username = input("Enter username: ").strip() or "anonymous"

    config = ClientConfig.from_env(args.server_ip, args.port, username, args.metadata)
    if args.reconnect_delay is not None:
        config.reconnect_delay = args.reconnect_delay

    client = ChatClient(config)
    try:
        asyncio.run(client.interactive_mode())
    except KeyboardInterrupt:
        print("\n[INFO] Interrupted by user")
    return 0


if __name__ == "__main__":
    sys.exit(main())
