"""
Chat module for server-side messaging functionality.

Handles:
- Outbound delivery channels
- The name -> channel registry
- Public and private routing
- Membership snapshots and join/leave notices
"""
