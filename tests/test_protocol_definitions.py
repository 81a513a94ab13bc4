#!/usr/bin/env python3
"""
Unit tests for chat_common.protocol_definitions

Covers line formatting for every frame kind, registration and private
request parsing, and client-side frame parsing.
"""

import unittest
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from chat_common.constants import FrameTypes
from chat_common.protocol_definitions import (
    MalformedFrame, MalformedPrivateMessage,
    create_public_line, create_private_deliver_line, create_private_confirm_line,
    create_private_error_line, create_userlist_line, create_system_line,
    create_user_joined_line, create_registration_line, create_private_request_line,
    parse_registration, parse_private_request, is_exit_command, parse_frame,
    PublicFrame, PrivateDeliverFrame, PrivateConfirmFrame, PrivateErrorFrame,
    MembershipSnapshotFrame, SystemNoticeFrame
)


class TestLineFormatting(unittest.TestCase):
    """Server -> client line shapes."""

    def test_public_line_without_metadata(self):
        self.assertEqual(create_public_line('alice', 'hello'), 'alice: hello')

    def test_public_line_with_metadata(self):
        self.assertEqual(create_public_line('alice', 'hi', '/img/a.png'), 'alice|/img/a.png|hi')

    def test_private_lines(self):
        self.assertEqual(create_private_deliver_line('alice', 'psst'), '[Private from alice]: psst')
        self.assertEqual(create_private_confirm_line('bob', 'psst'), '[Private to bob]: psst')
        self.assertEqual(create_private_error_line('ghost'), '[Private Error ghost]: offline/unknown')

    def test_userlist_has_trailing_separator(self):
        self.assertEqual(create_userlist_line(['a', 'b']), 'USERLIST:a,b,')
        self.assertEqual(create_userlist_line([]), 'USERLIST:')

    def test_system_line(self):
        self.assertEqual(create_system_line('hello'), '[System]: hello')
        self.assertEqual(create_user_joined_line('bob'), '[System]: bob joined the chat.')

    def test_embedded_newlines_are_flattened(self):
        line = create_public_line('alice', 'one\ntwo\r\nthree')
        self.assertNotIn('\n', line)
        self.assertNotIn('\r', line)
        self.assertEqual(line, 'alice: one two three')

    def test_client_lines(self):
        self.assertEqual(create_registration_line('alice'), 'alice')
        self.assertEqual(create_registration_line('alice', 'meta'), 'alice|meta')
        self.assertEqual(create_private_request_line('bob', 'hi'), '@bob: hi')


class TestClientLineParsing(unittest.TestCase):
    """Registration, exit and private request parsing on the server side."""

    def test_registration_plain_and_with_metadata(self):
        reg = parse_registration('alice')
        self.assertEqual((reg.name, reg.metadata), ('alice', None))

        reg = parse_registration('alice|/avatars/1.png')
        self.assertEqual((reg.name, reg.metadata), ('alice', '/avatars/1.png'))

    def test_registration_absent_or_empty(self):
        self.assertIsNone(parse_registration(None))
        self.assertIsNone(parse_registration(''))
        self.assertIsNone(parse_registration('   '))
        self.assertIsNone(parse_registration('|meta-only'))

    def test_exit_is_case_insensitive(self):
        for line in ('exit', 'EXIT', 'Exit', ' exit '):
            self.assertTrue(is_exit_command(line))
        self.assertFalse(is_exit_command('exit now'))

    def test_private_request(self):
        self.assertEqual(parse_private_request('@bob: hello there'), ('bob', 'hello there'))
        self.assertEqual(parse_private_request('@bob:hi'), ('bob', 'hi'))
        # Only the first ':' separates target from body
        self.assertEqual(parse_private_request('@bob: time is 10:30'), ('bob', 'time is 10:30'))

    def test_private_request_missing_colon(self):
        with self.assertRaises(MalformedPrivateMessage):
            parse_private_request('@bob hello')

    def test_private_request_empty_target(self):
        with self.assertRaises(MalformedPrivateMessage):
            parse_private_request('@: hello')


class TestFrameParsing(unittest.TestCase):
    """Client-side parsing of server lines."""

    def test_public(self):
        self.assertEqual(parse_frame('alice: hi: there'), PublicFrame('alice', 'hi: there'))
        self.assertEqual(parse_frame('alice|/a.png|x|y'), PublicFrame('alice', 'x|y', '/a.png'))

    def test_public_body_with_bar_and_no_metadata(self):
        frame = parse_frame('alice: a|b|c')
        self.assertEqual(frame, PublicFrame('alice', 'a|b|c'))

    def test_private_frames(self):
        self.assertEqual(parse_frame('[Private from alice]: psst'),
                         PrivateDeliverFrame('alice', 'psst'))
        self.assertEqual(parse_frame('[Private from alice]|/a.png|psst'),
                         PrivateDeliverFrame('alice', 'psst', '/a.png'))
        self.assertEqual(parse_frame('[Private to bob]: psst'),
                         PrivateConfirmFrame('bob', 'psst'))
        self.assertEqual(parse_frame('[Private Error ghost]: offline/unknown'),
                         PrivateErrorFrame('ghost', 'offline/unknown'))

    def test_userlist(self):
        frame = parse_frame('USERLIST:alice,bob,')
        self.assertEqual(frame.type, FrameTypes.MEMBERSHIP_SNAPSHOT)
        self.assertEqual(frame.names, ['alice', 'bob'])
        self.assertEqual(parse_frame('USERLIST:'), MembershipSnapshotFrame([]))

    def test_system(self):
        self.assertEqual(parse_frame('[System]: bob left the chat.'),
                         SystemNoticeFrame('bob left the chat.'))

    def test_unrecognised(self):
        for line in ('no separator here', ': empty sender', '[Private from alice psst'):
            with self.assertRaises(MalformedFrame):
                parse_frame(line)

    def test_formatting_and_parsing_agree(self):
        line = create_private_deliver_line('alice', 'see you at 5: ok?', 'meta')
        self.assertEqual(parse_frame(line), PrivateDeliverFrame('alice', 'see you at 5: ok?', 'meta'))

    def test_reserved_header_as_sender_name_is_read_as_that_header(self):
        # Names are not validated at registration, so these senders are ambiguous
        self.assertIsInstance(parse_frame(create_public_line('USERLIST', 'a,b')), MembershipSnapshotFrame)
        self.assertEqual(parse_frame(create_public_line('[System]', 'hi')), SystemNoticeFrame('hi'))


if __name__ == '__main__':
    unittest.main()
