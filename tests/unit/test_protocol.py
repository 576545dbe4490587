"""Tests for the one-byte ack protocol."""

from __future__ import annotations

import pytest

from netgap.protocol import ACK_FAILURE, ACK_SUCCESS, AckResult, decode, encode


class TestEncode:
    def test_success_is_all_ones(self) -> None:
        assert encode(True) == b"\xff"

    def test_failure_is_all_zeros(self) -> None:
        assert encode(False) == b"\x00"

    def test_frames_are_one_byte(self) -> None:
        assert len(encode(True)) == 1
        assert len(encode(False)) == 1


class TestDecode:
    @pytest.mark.parametrize(
        ("success", "expected"),
        [(True, AckResult.SUCCESS), (False, AckResult.FAILURE)],
    )
    def test_decode_of_encoded_value(self, success: bool, expected: AckResult) -> None:
        assert decode(encode(success)) is expected

    def test_accepts_int(self) -> None:
        assert decode(ACK_SUCCESS) is AckResult.SUCCESS
        assert decode(ACK_FAILURE) is AckResult.FAILURE

    def test_every_other_byte_is_unknown(self) -> None:
        unknown = [b for b in range(256) if b not in (ACK_SUCCESS, ACK_FAILURE)]
        assert len(unknown) == 254
        assert all(decode(b) is AckResult.UNKNOWN for b in unknown)
        assert all(decode(bytes([b])) is AckResult.UNKNOWN for b in unknown)

    def test_wrong_length_frame_is_unknown(self) -> None:
        assert decode(b"") is AckResult.UNKNOWN
        assert decode(b"\xff\xff") is AckResult.UNKNOWN
