"""
Client package for the line-oriented chat system.

This package contains all client-side functionality including:
- The connect/reconnect state machine
- The receive loop and frame parsing
- Single-consumer delivery to the presentation layer
- The PyQt6 signal bridge
- Configuration and utilities
"""
