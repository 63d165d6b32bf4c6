"""Stable public API for building tooling on top of hidclock.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime

from hidclock.core.codec import encode_handshake_stage, encode_time_set
from hidclock.core.errors import (
    DeviceDiscoveryError,
    DeviceNotFound,
    DeviceOpenError,
    HidclockError,
    ProfileLoadError,
    ProfileValidationError,
    TransferError,
)
from hidclock.core.model import (
    CalendarFields,
    DeviceIdentity,
    DeviceProfile,
    HandshakeStage,
    HidInterfaceInfo,
    SequencerState,
    StageResult,
    SyncResult,
)
from hidclock.core.service import ClockService
from hidclock.transports.base import HidHandle, HidTransport

__all__ = [
    "HidclockError",
    "DeviceDiscoveryError",
    "DeviceNotFound",
    "DeviceOpenError",
    "ProfileLoadError",
    "ProfileValidationError",
    "TransferError",
    "CalendarFields",
    "DeviceIdentity",
    "DeviceProfile",
    "HandshakeStage",
    "HidInterfaceInfo",
    "SequencerState",
    "StageResult",
    "SyncResult",
    "HidHandle",
    "HidTransport",
    "encode_handshake_stage",
    "encode_time_set",
    "Client",
]


class Client:
    """Public client for interacting with hidclock core capabilities.

    A `Client` instance wraps profile loading, HID enumeration and interface
    selection, and the clock handshake behind a stable API intended for
    third-party tools (tray apps, services, scripts).
    """

    def __init__(
        self,
        *,
        transport: HidTransport | None = None,
        clock: Callable[[], datetime] | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self._service = ClockService(transport=transport, clock=clock, sleep=sleep)

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._service.load_warnings

    def list_profiles(self) -> list[DeviceProfile]:
        return self._service.list_profiles()

    def list_interfaces(self, identity: DeviceIdentity | None = None) -> list[HidInterfaceInfo]:
        return self._service.list_interfaces(identity)

    def scan(self, tokens: Sequence[str] | None = None) -> list[HidInterfaceInfo]:
        return self._service.scan(tokens)

    def resolve_interface(
        self,
        *,
        profile_id: str | None = None,
        identity: DeviceIdentity | None = None,
    ) -> HidInterfaceInfo:
        target = identity or self._service.get_profile(profile_id).identity
        return self._service.resolve_interface(target)

    def sync_time(
        self,
        *,
        profile_id: str | None = None,
        identity: DeviceIdentity | None = None,
    ) -> SyncResult:
        return self._service.sync_time(profile_id=profile_id, identity=identity)
