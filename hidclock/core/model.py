"""Core data models used across codec, selector, sequencer, and CLI."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class DeviceIdentity:
    vendor_id: int
    product_id: int
    interface_number: int

    def describe(self) -> str:
        return (
            f"VID={self.vendor_id:04x}, PID={self.product_id:04x}, "
            f"Interface={self.interface_number}"
        )


@dataclass(frozen=True)
class HidInterfaceInfo:
    vendor_id: int
    product_id: int
    interface_number: int
    path: bytes = b""
    usage_page: int = 0
    usage: int = 0
    product_string: str = ""
    manufacturer_string: str = ""
    serial_number: str = ""

    @classmethod
    def from_hidapi(cls, info: dict[str, Any]) -> HidInterfaceInfo:
        """Build a descriptor from one ``hid.enumerate()`` entry."""
        path = info.get("path") or b""
        if isinstance(path, str):
            path = path.encode("utf-8")
        return cls(
            vendor_id=int(info.get("vendor_id", 0)),
            product_id=int(info.get("product_id", 0)),
            interface_number=int(info.get("interface_number", -1)),
            path=path,
            usage_page=int(info.get("usage_page", 0) or 0),
            usage=int(info.get("usage", 0) or 0),
            product_string=info.get("product_string") or "",
            manufacturer_string=info.get("manufacturer_string") or "",
            serial_number=info.get("serial_number") or "",
        )

    @property
    def display_name(self) -> str:
        return self.product_string or "Unknown"


@dataclass(frozen=True)
class CalendarFields:
    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int

    @classmethod
    def from_datetime(cls, value: datetime) -> CalendarFields:
        return cls(
            year=value.year,
            month=value.month,
            day=value.day,
            hour=value.hour,
            minute=value.minute,
            second=value.second,
        )

    def isoformat(self) -> str:
        return (
            f"{self.year:04d}-{self.month:02d}-{self.day:02d} "
            f"{self.hour:02d}:{self.minute:02d}:{self.second:02d}"
        )


@dataclass(frozen=True)
class HandshakeStage:
    index: int
    name: str
    command_id: int
    expects_response: bool = True


class SequencerState(enum.Enum):
    STAGE_1 = "stage_1"
    STAGE_2 = "stage_2"
    STAGE_3 = "stage_3"
    STAGE_4 = "stage_4"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class StageResult:
    stage: HandshakeStage
    payload_hex: str
    response_hex: str | None


@dataclass(frozen=True)
class DeviceProfile:
    id: str
    name: str
    identity: DeviceIdentity
    name_contains: tuple[str, ...] = ()
    inter_stage_delay_s: float = 0.05


@dataclass(frozen=True)
class SyncResult:
    profile: DeviceProfile
    interface: HidInterfaceInfo
    fields: CalendarFields
    stages: tuple[StageResult, ...]
    state: SequencerState
