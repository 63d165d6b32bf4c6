"""Service layer used by CLI and the public API."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from datetime import datetime

from hidclock.core.codec import HANDSHAKE_STAGES, encode_stage
from hidclock.core.device_match import name_matches, select_interface
from hidclock.core.errors import DeviceOpenError, ProfileLoadError
from hidclock.core.model import (
    CalendarFields,
    DeviceIdentity,
    DeviceProfile,
    HidInterfaceInfo,
    SyncResult,
)
from hidclock.core.profile_loader import DEFAULT_PROFILE_ID, load_profiles
from hidclock.core.sequencer import HandshakeSequencer
from hidclock.transports.base import HidHandle, HidTransport
from hidclock.transports.hidapi import PERMISSION_HINT, HidApiTransport

LOGGER = logging.getLogger(__name__)


class ClockService:
    def __init__(
        self,
        *,
        transport: HidTransport | None = None,
        clock: Callable[[], datetime] | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        loaded = load_profiles()
        self.profiles = loaded.profiles
        self.load_warnings = loaded.warnings
        self.transport = transport or HidApiTransport()
        self._clock = clock or datetime.now
        self._sleep = sleep or time.sleep

    def list_profiles(self) -> list[DeviceProfile]:
        return sorted(self.profiles.values(), key=lambda p: p.id)

    def get_profile(self, profile_id: str | None = None) -> DeviceProfile:
        wanted = profile_id or DEFAULT_PROFILE_ID
        profile = self.profiles.get(wanted)
        if profile is None:
            raise ProfileLoadError(
                f"Unknown profile '{wanted}'. Use 'hidclock profiles' to inspect available profiles."
            )
        return profile

    def list_interfaces(self, identity: DeviceIdentity | None = None) -> list[HidInterfaceInfo]:
        if identity is None:
            return self.transport.enumerate()
        return self.transport.enumerate(identity.vendor_id, identity.product_id)

    def scan(self, tokens: Sequence[str] | None = None, profile_id: str | None = None) -> list[HidInterfaceInfo]:
        """List every HID interface whose product or manufacturer string contains a token."""
        if not tokens:
            tokens = self.get_profile(profile_id).name_contains
        return [info for info in self.list_interfaces() if name_matches(info, tokens)]

    def resolve_interface(self, identity: DeviceIdentity) -> HidInterfaceInfo:
        return select_interface(identity, self.list_interfaces(identity))

    def current_fields(self) -> CalendarFields:
        return CalendarFields.from_datetime(self._clock())

    def build_payloads(self, fields: CalendarFields | None = None) -> list[tuple[str, str]]:
        """Encode every handshake stage without touching hardware."""
        fields = fields or self.current_fields()
        return [(stage.name, encode_stage(stage, fields).hex()) for stage in HANDSHAKE_STAGES]

    def sync_time(
        self,
        profile_id: str | None = None,
        identity: DeviceIdentity | None = None,
        on_found: Callable[[HidInterfaceInfo], None] | None = None,
    ) -> SyncResult:
        profile = self.get_profile(profile_id)
        target = identity or profile.identity
        info = self.resolve_interface(target)
        LOGGER.info("Found target interface %s (%s)", info.display_name, target.describe())
        if on_found is not None:
            on_found(info)

        handle = self._open(info)
        try:
            sequencer = HandshakeSequencer(
                handle,
                delay_s=profile.inter_stage_delay_s,
                sleep=self._sleep,
            )
            fields = self.current_fields()
            stages = sequencer.run(fields)
        finally:
            handle.close()

        return SyncResult(
            profile=profile,
            interface=info,
            fields=fields,
            stages=stages,
            state=sequencer.state,
        )

    def _open(self, info: HidInterfaceInfo) -> HidHandle:
        try:
            return self.transport.open(info)
        except DeviceOpenError:
            raise
        except OSError as exc:
            raise DeviceOpenError(f"Failed to open device: {exc}. {PERMISSION_HINT}") from exc
