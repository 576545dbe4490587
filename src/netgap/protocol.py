"""One-byte acknowledgment protocol shared by the probe client and server.

The server answers each read with a single byte. There is no framing and
no length prefix: a message is whatever one ``recv()`` returns.
"""

from __future__ import annotations

from enum import Enum

ACK_SUCCESS = 0b1111_1111
ACK_FAILURE = 0b0000_0000


class AckResult(Enum):
    """Decoded meaning of an ack byte."""

    SUCCESS = "success"
    FAILURE = "failure"
    UNKNOWN = "unknown"


_SUCCESS_FRAME = bytes([ACK_SUCCESS])
_FAILURE_FRAME = bytes([ACK_FAILURE])


def encode(success: bool) -> bytes:
    """Return the one-byte ack frame for an accepted or rejected message.

    Args:
        success: True to acknowledge, False to reject.

    Returns:
        ``b"\\xff"`` for success, ``b"\\x00"`` for failure.
    """
    return _SUCCESS_FRAME if success else _FAILURE_FRAME


def decode(value: int | bytes) -> AckResult:
    """Interpret an ack byte.

    Args:
        value: The byte as an int, or a one-byte ``bytes`` frame.

    Returns:
        SUCCESS or FAILURE for the two known values, UNKNOWN for anything
        else (including frames that are not exactly one byte long).
    """
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 1:
            return AckResult.UNKNOWN
        value = value[0]

    if value == ACK_SUCCESS:
        return AckResult.SUCCESS
    if value == ACK_FAILURE:
        return AckResult.FAILURE
    return AckResult.UNKNOWN
