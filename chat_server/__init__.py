"""
Server package for the line-oriented chat system.

This package contains all server-side functionality including:
- Connection listening and per-connection sessions
- The participant registry
- Public/private message routing
- Membership list broadcasting
- Configuration and utilities
"""
