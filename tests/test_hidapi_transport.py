from __future__ import annotations

import sys
import types

import pytest

from hidclock.core.errors import DeviceDiscoveryError, DeviceOpenError
from hidclock.transports.hidapi import HidApiTransport


class FakeDevice:
    def __init__(self, fail_open: bool = False) -> None:
        self.fail_open = fail_open
        self.sent: list[list[int]] = []
        self.closed = False

    def open_path(self, path: bytes) -> None:
        if self.fail_open:
            raise OSError("open failed")

    def send_feature_report(self, data: list[int]) -> int:
        self.sent.append(data)
        return len(data)

    def get_feature_report(self, report_id: int, length: int) -> list[int]:
        return [report_id] + [0] * (length - 1)

    def close(self) -> None:
        self.closed = True


def _install_hid(monkeypatch: pytest.MonkeyPatch, device: FakeDevice) -> None:
    entries = [
        {
            "path": b"/dev/hidraw3",
            "vendor_id": 0x0C45,
            "product_id": 0x8009,
            "interface_number": 3,
            "usage_page": 0xFF00,
            "usage": 1,
            "product_string": "AJAZZ AK820 Pro",
            "manufacturer_string": None,
            "serial_number": None,
        }
    ]
    module = types.SimpleNamespace(
        enumerate=lambda vid=0, pid=0: entries,
        device=lambda: device,
    )
    monkeypatch.setitem(sys.modules, "hid", module)


def test_enumerate_builds_descriptors(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_hid(monkeypatch, FakeDevice())

    interfaces = HidApiTransport().enumerate(0x0C45, 0x8009)

    assert len(interfaces) == 1
    assert interfaces[0].interface_number == 3
    assert interfaces[0].path == b"/dev/hidraw3"
    assert interfaces[0].manufacturer_string == ""


def test_handle_round_trip(monkeypatch: pytest.MonkeyPatch) -> None:
    device = FakeDevice()
    _install_hid(monkeypatch, device)
    transport = HidApiTransport()
    info = transport.enumerate()[0]

    with transport.open(info) as handle:
        assert handle.send_feature_report(b"\x00\x04\x18") == 3
        assert handle.get_feature_report(0, 65) == bytes(65)

    assert device.sent == [[0x00, 0x04, 0x18]]
    assert device.closed


def test_open_failure_suggests_sudo(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_hid(monkeypatch, FakeDevice(fail_open=True))
    transport = HidApiTransport()

    with pytest.raises(DeviceOpenError) as exc:
        transport.open(transport.enumerate()[0])

    assert "sudo" in str(exc.value)


def test_missing_backend_raises_clean_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "hid", None)

    with pytest.raises(DeviceDiscoveryError):
        HidApiTransport().enumerate()
