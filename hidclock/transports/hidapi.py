"""HID transport implementation using the ``hid`` module from hidapi."""

from __future__ import annotations

import logging
from typing import Any

from hidclock.core.errors import DeviceDiscoveryError, DeviceOpenError
from hidclock.core.model import HidInterfaceInfo

LOGGER = logging.getLogger(__name__)

PERMISSION_HINT = (
    "On Linux, try running with 'sudo' or install a udev rule granting "
    "access to the hidraw device."
)


def _load_backend() -> Any:
    try:
        import hid  # type: ignore
    except ImportError as exc:
        raise DeviceDiscoveryError(
            "HID transport requires 'hidapi'. Install dependency and retry."
        ) from exc
    return hid


class HidApiHandle:
    def __init__(self, device: Any, info: HidInterfaceInfo) -> None:
        self._device = device
        self.info = info

    def send_feature_report(self, data: bytes) -> int:
        return self._device.send_feature_report(list(data))

    def get_feature_report(self, report_id: int, length: int) -> bytes:
        return bytes(self._device.get_feature_report(report_id, length))

    def close(self) -> None:
        self._device.close()

    def __enter__(self) -> HidApiHandle:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class HidApiTransport:
    def enumerate(self, vendor_id: int = 0, product_id: int = 0) -> list[HidInterfaceInfo]:
        hid = _load_backend()
        try:
            entries = hid.enumerate(vendor_id, product_id)
        except OSError as exc:
            raise DeviceDiscoveryError(f"HID enumeration failed: {exc}") from exc
        return [HidInterfaceInfo.from_hidapi(entry) for entry in entries]

    def open(self, info: HidInterfaceInfo) -> HidApiHandle:
        hid = _load_backend()
        device = hid.device()
        try:
            device.open_path(info.path)
        except OSError as exc:
            raise DeviceOpenError(
                f"Failed to open device {info.path.decode('utf-8', errors='replace')}: {exc}. "
                f"{PERMISSION_HINT}"
            ) from exc
        LOGGER.debug("Opened %s", info.path)
        return HidApiHandle(device, info)
