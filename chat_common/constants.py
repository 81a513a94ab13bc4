"""
Shared constants for the line-oriented chat system.

This module contains all constants used across client and server components.
"""

# Network Configuration
DEFAULT_HOST = 'localhost'
DEFAULT_SERVER_HOST = '0.0.0.0'
DEFAULT_PORT = 12345

# Wire encoding
ENCODING = 'utf-8'
LINE_TERMINATOR = '\n'
MAX_LINE_LENGTH = 64 * 1024  # StreamReader limit, bytes per line

# Timeouts
RECONNECT_DELAY = 3.0  # fixed backoff between reconnect attempts, seconds
CONNECT_TIMEOUT = 10.0  # seconds

# Protocol tokens
EXIT_COMMAND = 'exit'
METADATA_SEPARATOR = '|'
PRIVATE_PREFIX = '@'
PRIVATE_SEPARATOR = ':'
HEADER_SEPARATOR = ': '
USERLIST_PREFIX = 'USERLIST:'
USERLIST_SEPARATOR = ','
SYSTEM_HEADER = '[System]'
PRIVATE_FROM_HEADER = '[Private from '
PRIVATE_TO_HEADER = '[Private to '
PRIVATE_ERROR_HEADER = '[Private Error '
OFFLINE_REASON = 'offline/unknown'

# Logging
LOG_DIR = 'logs'


# Frame Types
class FrameTypes:
    PUBLIC = 'public'
    PRIVATE_DELIVER = 'private_deliver'
    PRIVATE_CONFIRM = 'private_confirm'
    PRIVATE_ERROR = 'private_error'
    MEMBERSHIP_SNAPSHOT = 'membership_snapshot'
    SYSTEM_NOTICE = 'system_notice'


# Client connection states
class ConnectionState:
    DISCONNECTED = 'disconnected'
    CONNECTING = 'connecting'
    CONNECTED = 'connected'
    RECONNECTING = 'reconnecting'
