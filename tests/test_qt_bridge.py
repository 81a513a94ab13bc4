#!/usr/bin/env python3
"""
Unit tests for the PyQt6 bridge.

Signals are connected with DirectConnection so slots run in the emitting
thread and no GUI event loop is required.
"""

import socket
import threading
import unittest
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from PyQt6.QtCore import QCoreApplication, Qt

from chat_common.constants import ConnectionState
from chat_common.protocol_definitions import PublicFrame
from chat_client.ui.qt_bridge import QtFrameSubscriber, NetworkThread
from chat_client.utils.config import ClientConfig


def _unused_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class TestQtBridge(unittest.TestCase):
    """Test cases for signal re-emission and the network thread."""

    @classmethod
    def setUpClass(cls):
        """Create QCoreApplication once for all tests."""
        if not QCoreApplication.instance():
            cls.app = QCoreApplication([])
        else:
            cls.app = QCoreApplication.instance()

    def test_callbacks_become_signals(self):
        subscriber = QtFrameSubscriber()
        frames, names, states = [], [], []
        subscriber.frame_received.connect(frames.append, type=Qt.ConnectionType.DirectConnection)
        subscriber.participants_changed.connect(names.append, type=Qt.ConnectionType.DirectConnection)
        subscriber.state_changed.connect(states.append, type=Qt.ConnectionType.DirectConnection)

        subscriber.on_frame(PublicFrame('alice', 'hi'))
        subscriber.on_participants(['alice', 'bob'])
        subscriber.on_state_changed(ConnectionState.CONNECTED)

        self.assertEqual(frames, [PublicFrame('alice', 'hi')])
        self.assertEqual(names, [['alice', 'bob']])
        self.assertEqual(states, [ConnectionState.CONNECTED])

    def test_network_thread_retries_and_stops(self):
        config = ClientConfig('127.0.0.1', _unused_port(), 'alice')
        config.reconnect_delay = 0.05

        subscriber = QtFrameSubscriber()
        states = []
        retrying = threading.Event()

        def on_state(state):
            states.append(state)
            if state == ConnectionState.RECONNECTING:
                retrying.set()

        subscriber.state_changed.connect(on_state, type=Qt.ConnectionType.DirectConnection)

        thread = NetworkThread(config, subscriber)
        thread.start()
        try:
            self.assertTrue(retrying.wait(timeout=5.0))
        finally:
            thread.stop()
            self.assertTrue(thread.wait(5000))

        self.assertEqual(states[0], ConnectionState.CONNECTING)
        self.assertEqual(states[-1], ConnectionState.DISCONNECTED)


if __name__ == '__main__':
    unittest.main()
