"""
Protocol definitions for the line-oriented chat system.

This module defines the frame structures exchanged between client and server
and the functions that turn them into (and back from) single lines of UTF-8
text. Every frame is one newline-terminated line on the wire.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from chat_common.constants import (
    FrameTypes, EXIT_COMMAND, METADATA_SEPARATOR, PRIVATE_PREFIX,
    PRIVATE_SEPARATOR, HEADER_SEPARATOR, USERLIST_PREFIX, USERLIST_SEPARATOR,
    SYSTEM_HEADER, PRIVATE_FROM_HEADER, PRIVATE_TO_HEADER, PRIVATE_ERROR_HEADER,
    OFFLINE_REASON
)


class MalformedPrivateMessage(ValueError):
    """Raised when an '@target:body' line cannot be parsed."""


class MalformedFrame(ValueError):
    """Raised when a server line does not match any known frame shape."""


@dataclass
class Registration:
    """Registration (first line) structure."""
    name: str
    metadata: Optional[str] = None


@dataclass
class PublicFrame:
    """Public message structure."""
    sender: str
    body: str
    metadata: Optional[str] = None
    type: str = FrameTypes.PUBLIC


@dataclass
class PrivateDeliverFrame:
    """Private message as seen by its recipient."""
    sender: str
    body: str
    metadata: Optional[str] = None
    type: str = FrameTypes.PRIVATE_DELIVER


@dataclass
class PrivateConfirmFrame:
    """Private message echo sent back to its author."""
    target: str
    body: str
    metadata: Optional[str] = None
    type: str = FrameTypes.PRIVATE_CONFIRM


@dataclass
class PrivateErrorFrame:
    """Private message delivery failure."""
    target: str
    reason: str
    type: str = FrameTypes.PRIVATE_ERROR


@dataclass
class MembershipSnapshotFrame:
    """Full list of currently registered names."""
    names: List[str] = field(default_factory=list)
    type: str = FrameTypes.MEMBERSHIP_SNAPSHOT


@dataclass
class SystemNoticeFrame:
    """Join/leave and other server notices."""
    text: str
    type: str = FrameTypes.SYSTEM_NOTICE


def _single_line(text: str) -> str:
    """Replace embedded line breaks so the text stays one frame."""
    return text.replace('\r\n', ' ').replace('\r', ' ').replace('\n', ' ')


def _with_header(header: str, text: str, metadata: Optional[str] = None) -> str:
    if metadata:
        return f"{header}{METADATA_SEPARATOR}{_single_line(metadata)}{METADATA_SEPARATOR}{_single_line(text)}"
    return f"{header}{HEADER_SEPARATOR}{_single_line(text)}"


# ---------------------------------------------------------------------------
# Server -> client lines
# ---------------------------------------------------------------------------

def create_public_line(sender: str, body: str, metadata: Optional[str] = None) -> str:
    """Create a public delivery line."""
    return _with_header(sender, body, metadata)


def create_private_deliver_line(sender: str, body: str, metadata: Optional[str] = None) -> str:
    """Create a private delivery line for the recipient."""
    return _with_header(f"{PRIVATE_FROM_HEADER}{sender}]", body, metadata)


def create_private_confirm_line(target: str, body: str, metadata: Optional[str] = None) -> str:
    """Create a private confirmation line for the sender."""
    return _with_header(f"{PRIVATE_TO_HEADER}{target}]", body, metadata)


def create_private_error_line(target: str, reason: str = OFFLINE_REASON) -> str:
    """Create a private delivery failure line."""
    return _with_header(f"{PRIVATE_ERROR_HEADER}{target}]", reason)


def create_userlist_line(names: List[str]) -> str:
    """Create a membership snapshot line; every name is followed by a comma."""
    return USERLIST_PREFIX + ''.join(f"{name}{USERLIST_SEPARATOR}" for name in names)


def create_system_line(text: str) -> str:
    """Create a system notice line."""
    return _with_header(SYSTEM_HEADER, text)


def create_user_joined_line(name: str) -> str:
    """Create a join notice."""
    return create_system_line(f"{name} joined the chat.")


def create_user_left_line(name: str) -> str:
    """Create a leave notice."""
    return create_system_line(f"{name} left the chat.")


# ---------------------------------------------------------------------------
# Client -> server lines
# ---------------------------------------------------------------------------

def create_registration_line(name: str, metadata: Optional[str] = None) -> str:
    """Create the registration line sent first on every connection."""
    if metadata:
        return f"{_single_line(name)}{METADATA_SEPARATOR}{_single_line(metadata)}"
    return _single_line(name)


def create_private_request_line(target: str, text: str) -> str:
    """Create an '@target: text' line."""
    return f"{PRIVATE_PREFIX}{target}{PRIVATE_SEPARATOR} {_single_line(text)}"


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_registration(line: Optional[str]) -> Optional[Registration]:
    """
    Parse a registration line of the form 'name' or 'name|metadata'.

    Returns None when the line is absent or carries no name. Names are not
    otherwise validated; one that matches a reserved header is ambiguous to
    clients.
    """
    if line is None:
        return None
    name, sep, metadata = line.partition(METADATA_SEPARATOR)
    name = name.strip()
    if not name:
        return None
    return Registration(name=name, metadata=metadata if sep and metadata else None)


def is_exit_command(line: str) -> bool:
    """Check for the case-insensitive 'exit' line."""
    return line.strip().lower() == EXIT_COMMAND


def is_private_request(line: str) -> bool:
    """Check whether a client line uses the '@target:body' syntax."""
    return line.startswith(PRIVATE_PREFIX)


def parse_private_request(line: str) -> Tuple[str, str]:
    """
    Split an '@target:body' line into (target, body).

    Raises MalformedPrivateMessage when the ':' is missing or the target
    is empty.
    """
    if not is_private_request(line):
        raise MalformedPrivateMessage("Private messages must start with '@'")
    target, sep, body = line[len(PRIVATE_PREFIX):].partition(PRIVATE_SEPARATOR)
    if not sep:
        raise MalformedPrivateMessage("Private message format is '@name: message'")
    target = target.strip()
    if not target:
        raise MalformedPrivateMessage("Private message has no recipient")
    return target, body.strip()


def _split_payload(rest: str, line: str) -> Tuple[Optional[str], str]:
    """Split what follows a header into (metadata, text)."""
    if rest.startswith(HEADER_SEPARATOR):
        return None, rest[len(HEADER_SEPARATOR):]
    if rest.startswith(METADATA_SEPARATOR):
        metadata, sep, text = rest[1:].partition(METADATA_SEPARATOR)
        if sep:
            return metadata or None, text
    raise MalformedFrame(f"Unrecognised frame: {line!r}")


def _bracketed(line: str, prefix: str) -> Tuple[str, Optional[str], str]:
    end = line.find(']', len(prefix))
    if end == -1:
        raise MalformedFrame(f"Unterminated header: {line!r}")
    name = line[len(prefix):end]
    metadata, text = _split_payload(line[end + 1:], line)
    return name, metadata, text


def parse_frame(line: str):
    """
    Parse one server line into its frame dataclass.

    Raises MalformedFrame for lines that match no known shape.
    """
    if line.startswith(USERLIST_PREFIX):
        names = [n for n in line[len(USERLIST_PREFIX):].split(USERLIST_SEPARATOR) if n]
        return MembershipSnapshotFrame(names=names)

    if line.startswith(SYSTEM_HEADER):
        _, text = _split_payload(line[len(SYSTEM_HEADER):], line)
        return SystemNoticeFrame(text=text)

    if line.startswith(PRIVATE_FROM_HEADER):
        sender, metadata, text = _bracketed(line, PRIVATE_FROM_HEADER)
        return PrivateDeliverFrame(sender=sender, body=text, metadata=metadata)

    if line.startswith(PRIVATE_TO_HEADER):
        target, metadata, text = _bracketed(line, PRIVATE_TO_HEADER)
        return PrivateConfirmFrame(target=target, body=text, metadata=metadata)

    if line.startswith(PRIVATE_ERROR_HEADER):
        target, _, reason = _bracketed(line, PRIVATE_ERROR_HEADER)
        return PrivateErrorFrame(target=target, reason=reason)

    # Public: names never contain '|', so a '|' before the first ': ' marks
    # the metadata shape.
    bar = line.find(METADATA_SEPARATOR)
    colon = line.find(HEADER_SEPARATOR)
    if bar > 0 and (colon == -1 or bar < colon):
        parts = line.split(METADATA_SEPARATOR, 2)
        if len(parts) == 3:
            return PublicFrame(sender=parts[0], body=parts[2], metadata=parts[1] or None)
    elif colon > 0:
        return PublicFrame(sender=line[:colon], body=line[colon + len(HEADER_SEPARATOR):])

    raise MalformedFrame(f"Unrecognised frame: {line!r}")
