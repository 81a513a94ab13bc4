"""
Common package for the line-oriented chat system.

Shared between client and server:
- Protocol constants
- Frame definitions and line formatting/parsing
"""
