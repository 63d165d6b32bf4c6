from __future__ import annotations

from datetime import datetime

import pytest

from hidclock.core.codec import (
    BUFFER_LENGTH,
    HANDSHAKE_STAGES,
    encode_handshake_stage,
    encode_stage,
    encode_time_set,
)
from hidclock.core.model import CalendarFields


def _fields(**overrides: int) -> CalendarFields:
    values = dict(year=2025, month=6, day=11, hour=9, minute=36, second=58)
    values.update(overrides)
    return CalendarFields(**values)


def test_time_set_layout() -> None:
    buffer = encode_time_set(_fields())
    assert len(buffer) == BUFFER_LENGTH == 65
    assert buffer[0] == 0x00
    assert buffer[1] == 0x01
    assert buffer[2] == 0x5A
    assert list(buffer[3:9]) == [25, 6, 11, 9, 36, 58]
    assert buffer[63:65] == bytes([0xAA, 0x55])
    assert buffer[9:63] == bytes(54)


def test_time_set_matches_captured_payload() -> None:
    captured = bytes.fromhex("00015a19060b09243a") + bytes(54) + bytes.fromhex("aa55")
    assert encode_time_set(_fields()) == captured


@pytest.mark.parametrize(
    "fields",
    [
        _fields(year=2000, month=1, day=1, hour=0, minute=0, second=0),
        _fields(year=2099, month=12, day=31, hour=23, minute=59, second=59),
    ],
)
def test_time_set_boundaries(fields: CalendarFields) -> None:
    buffer = encode_time_set(fields)
    assert list(buffer[3:9]) == [
        fields.year % 100,
        fields.month,
        fields.day,
        fields.hour,
        fields.minute,
        fields.second,
    ]
    assert buffer[-2:] == b"\xaa\x55"


def test_time_set_is_deterministic() -> None:
    fields = CalendarFields.from_datetime(datetime(2025, 6, 11, 9, 36, 58))
    assert encode_time_set(fields) == encode_time_set(fields)


def test_time_set_rejects_out_of_range_fields() -> None:
    with pytest.raises(AssertionError):
        encode_time_set(_fields(month=13))


@pytest.mark.parametrize("stage_id", [0x18, 0x28, 0x02])
def test_handshake_stage_layout(stage_id: int) -> None:
    buffer = encode_handshake_stage(stage_id)
    assert len(buffer) == 65
    assert buffer[:3] == bytes([0x00, 0x04, stage_id])
    assert buffer[3:63] == bytes(60)
    assert buffer[63:] == b"\xaa\x55"


def test_unknown_handshake_stage() -> None:
    with pytest.raises(KeyError):
        encode_handshake_stage(0x5A)


def test_stage_order_and_dispatch() -> None:
    assert [stage.command_id for stage in HANDSHAKE_STAGES] == [0x18, 0x28, 0x5A, 0x02]
    assert [stage.index for stage in HANDSHAKE_STAGES] == [0, 1, 2, 3]

    fields = _fields()
    assert encode_stage(HANDSHAKE_STAGES[2], fields) == encode_time_set(fields)
    assert encode_stage(HANDSHAKE_STAGES[0], fields) == encode_handshake_stage(0x18)
