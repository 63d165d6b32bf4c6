"""Transport interfaces."""

from __future__ import annotations

from typing import Protocol

from hidclock.core.model import HidInterfaceInfo


class HidHandle(Protocol):
    def send_feature_report(self, data: bytes) -> int:
        """Send a feature report (report ID first) and return bytes written."""

    def get_feature_report(self, report_id: int, length: int) -> bytes:
        """Read a feature report of up to ``length`` bytes."""

    def close(self) -> None:
        """Release the interface."""


class HidTransport(Protocol):
    def enumerate(
        self,
        vendor_id: int = 0,
        product_id: int = 0,
    ) -> list[HidInterfaceInfo]:
        """List HID interfaces, optionally filtered by VID/PID (0 matches any)."""

    def open(self, info: HidInterfaceInfo) -> HidHandle:
        """Open an enumerated interface for exclusive use."""
