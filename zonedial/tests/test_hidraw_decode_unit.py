from __future__ import annotations

import pytest

from zonedial.core.actions import DialIdentity, DialTurnEvent, RotationDirection
from zonedial.core.sources.hidraw import DIAL_REPORT_ID, TRIGGER_CODES, decode_report


def _report(report_id: int, trigger: int, size: int = 64) -> bytes:
    buf = bytearray(size)
    buf[0] = report_id
    buf[3] = trigger
    return bytes(buf)


@pytest.mark.parametrize(
    "trigger, expected",
    [
        (0x10, DialTurnEvent(DialIdentity.LEFT, RotationDirection.COUNTER_CLOCKWISE)),
        (0x08, DialTurnEvent(DialIdentity.LEFT, RotationDirection.CLOCKWISE)),
        (0x02, DialTurnEvent(DialIdentity.RIGHT, RotationDirection.COUNTER_CLOCKWISE)),
        (0x01, DialTurnEvent(DialIdentity.RIGHT, RotationDirection.CLOCKWISE)),
    ],
)
def test_trigger_codes_decode_to_one_event(trigger: int, expected: DialTurnEvent) -> None:
    assert decode_report(_report(DIAL_REPORT_ID, trigger)) == expected


def test_idle_trigger_is_skipped() -> None:
    assert decode_report(_report(DIAL_REPORT_ID, 0x00)) is None


@pytest.mark.parametrize("report_id", [0x00, 0x01, 0x02, 0x04, 0xFF])
def test_other_report_ids_are_ignored_even_with_valid_trigger(report_id: int) -> None:
    for trigger in TRIGGER_CODES:
        assert decode_report(_report(report_id, trigger)) is None


@pytest.mark.parametrize("trigger", [0x03, 0x04, 0x18, 0x20, 0x80, 0xFF])
def test_unknown_trigger_codes_are_ignored(trigger: int) -> None:
    assert decode_report(_report(DIAL_REPORT_ID, trigger)) is None


@pytest.mark.parametrize("data", [None, b"", b"\x03", b"\x03\x00\x00"])
def test_short_or_empty_reads_are_ignored(data) -> None:
    assert decode_report(data) is None


def test_minimal_four_byte_report_is_enough() -> None:
    event = decode_report(bytes([0x03, 0xAA, 0xBB, 0x08]))
    assert event == DialTurnEvent(DialIdentity.LEFT, RotationDirection.CLOCKWISE)
