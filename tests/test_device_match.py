from __future__ import annotations

import pytest

from fakes import iface
from hidclock.core.device_match import matches_identity, name_matches, select_interface
from hidclock.core.errors import DeviceNotFound
from hidclock.core.model import DeviceIdentity

TARGET = DeviceIdentity(vendor_id=0x0C45, product_id=0x8009, interface_number=3)


def test_wrong_interface_is_not_found() -> None:
    with pytest.raises(DeviceNotFound) as exc:
        select_interface(TARGET, [iface(0)])

    assert "interface 3 is not exposed" in str(exc.value)
    assert "found interfaces: 0" in str(exc.value)


def test_unique_match_is_returned() -> None:
    interfaces = [iface(0), iface(3)]
    assert select_interface(TARGET, interfaces) is interfaces[1]


def test_missing_device_message_differs() -> None:
    with pytest.raises(DeviceNotFound) as exc:
        select_interface(TARGET, [iface(3, vendor_id=0x046D)])

    assert "Could not find target device" in str(exc.value)
    assert "VID=0c45, PID=8009, Interface=3" in str(exc.value)


def test_ambiguous_match_is_rejected() -> None:
    with pytest.raises(DeviceNotFound) as exc:
        select_interface(TARGET, [iface(3), iface(3)])

    assert "Multiple interfaces" in str(exc.value)


def test_empty_enumeration() -> None:
    with pytest.raises(DeviceNotFound):
        select_interface(TARGET, [])


def test_matches_identity_requires_all_fields() -> None:
    assert matches_identity(iface(3), TARGET)
    assert not matches_identity(iface(0), TARGET)
    assert not matches_identity(iface(3, product_id=0x8008), TARGET)


def test_name_matches_is_case_insensitive() -> None:
    assert name_matches(iface(3, product="AJAZZ AK820 Pro"), ("ajazz",))
    assert name_matches(iface(3, product="Keyboard"), ("sonix",))
    assert not name_matches(iface(3, product="Keyboard"), ("ajazz",))
