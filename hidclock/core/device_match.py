"""Interface selection for composite HID devices."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from hidclock.core.errors import DeviceNotFound
from hidclock.core.model import DeviceIdentity, HidInterfaceInfo


def _same_device(info: HidInterfaceInfo, identity: DeviceIdentity) -> bool:
    return info.vendor_id == identity.vendor_id and info.product_id == identity.product_id


def matches_identity(info: HidInterfaceInfo, identity: DeviceIdentity) -> bool:
    return _same_device(info, identity) and info.interface_number == identity.interface_number


def name_matches(info: HidInterfaceInfo, tokens: Sequence[str]) -> bool:
    haystack = f"{info.manufacturer_string} {info.product_string}".lower()
    return any(token.lower() in haystack for token in tokens if token)


def select_interface(
    identity: DeviceIdentity,
    interfaces: Iterable[HidInterfaceInfo],
) -> HidInterfaceInfo:
    """Return the single interface matching vendor, product and interface number.

    Vendor commands sent to the keyboard or consumer-control interface of the
    same device are silently dropped, so a VID/PID match on the wrong
    interface is reported as not found rather than used. Several identical
    matches are ambiguous and also rejected.
    """
    same_device = [info for info in interfaces if _same_device(info, identity)]
    if not same_device:
        raise DeviceNotFound(
            f"Could not find target device ({identity.describe()}). "
            "Ensure the keyboard is connected and the identifiers are correct."
        )

    candidates = [info for info in same_device if info.interface_number == identity.interface_number]
    if not candidates:
        seen = ", ".join(str(n) for n in sorted({info.interface_number for info in same_device}))
        raise DeviceNotFound(
            f"Device VID={identity.vendor_id:04x}, PID={identity.product_id:04x} is connected "
            f"but interface {identity.interface_number} is not exposed (found interfaces: {seen}). "
            "Check the interface number for this model."
        )

    if len(candidates) > 1:
        paths = ", ".join(info.path.decode("utf-8", errors="replace") or "<no-path>" for info in candidates)
        raise DeviceNotFound(
            f"Multiple interfaces match {identity.describe()}: {paths}. "
            "Disconnect the extra devices and retry."
        )

    return candidates[0]
