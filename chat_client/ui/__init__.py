"""
UI bridge for the chat client.

Handles:
- Re-emitting dispatcher callbacks as PyQt6 signals
- Running the network event loop off the GUI thread
"""
