"""Feature report encoding for the keyboard clock protocol.

Every command is a 64-byte feature report sent behind an explicit report ID
of 0, so the buffer handed to the transport is 65 bytes long::

    [0]      report ID (0x00)
    [1]      command prefix (0x01 time-set, 0x04 handshake)
    [2]      command ID
    [3..8]   year % 100, month, day, hour, minute, second (time-set only)
    [63..64] footer 0xAA 0x55

The footer is a fixed end-of-command marker, not a computed checksum.
"""

from __future__ import annotations

from hidclock.core.model import CalendarFields, HandshakeStage

REPORT_ID = 0x00
REPORT_LENGTH = 64
BUFFER_LENGTH = REPORT_LENGTH + 1

TIME_SET_PREFIX = 0x01
HANDSHAKE_PREFIX = 0x04

CMD_INIT = 0x18
CMD_PREPARE = 0x28
CMD_SET_TIME = 0x5A
CMD_COMMIT = 0x02

FOOTER = bytes([0xAA, 0x55])

HANDSHAKE_STAGES: tuple[HandshakeStage, ...] = (
    HandshakeStage(index=0, name="init", command_id=CMD_INIT),
    HandshakeStage(index=1, name="prepare", command_id=CMD_PREPARE),
    HandshakeStage(index=2, name="set_time", command_id=CMD_SET_TIME),
    HandshakeStage(index=3, name="commit", command_id=CMD_COMMIT),
)


def _frame(prefix: int, command_id: int, body: bytes = b"") -> bytes:
    buffer = bytearray(BUFFER_LENGTH)
    buffer[0] = REPORT_ID
    buffer[1] = prefix
    buffer[2] = command_id
    buffer[3 : 3 + len(body)] = body
    buffer[-len(FOOTER) :] = FOOTER
    return bytes(buffer)


_HANDSHAKE_BUFFERS: dict[int, bytes] = {
    command_id: _frame(HANDSHAKE_PREFIX, command_id)
    for command_id in (CMD_INIT, CMD_PREPARE, CMD_COMMIT)
}


def encode_time_set(fields: CalendarFields) -> bytes:
    year = fields.year % 100
    assert 0 <= year <= 99, year
    assert 1 <= fields.month <= 12, fields.month
    assert 1 <= fields.day <= 31, fields.day
    assert 0 <= fields.hour <= 23, fields.hour
    assert 0 <= fields.minute <= 59, fields.minute
    assert 0 <= fields.second <= 59, fields.second

    body = bytes([year, fields.month, fields.day, fields.hour, fields.minute, fields.second])
    return _frame(TIME_SET_PREFIX, CMD_SET_TIME, body)


def encode_handshake_stage(stage_id: int) -> bytes:
    """Return the fixed buffer for a handshake command ID (0x18, 0x28 or 0x02)."""
    return _HANDSHAKE_BUFFERS[stage_id]


def encode_stage(stage: HandshakeStage, fields: CalendarFields) -> bytes:
    if stage.command_id == CMD_SET_TIME:
        return encode_time_set(fields)
    return encode_handshake_stage(stage.command_id)
