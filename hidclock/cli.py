"""Typer CLI entrypoint."""

from __future__ import annotations

import logging

import typer

from hidclock.core.device_match import matches_identity
from hidclock.core.errors import HidclockError
from hidclock.core.model import DeviceIdentity, HidInterfaceInfo
from hidclock.core.profile_loader import parse_usb_id
from hidclock.core.service import ClockService

app = typer.Typer(help="Sync the onboard clock of USB HID keyboards via vendor feature reports")


def _configure_logging(verbose: int) -> None:
    if verbose >= 2:
        logging.basicConfig(level=logging.DEBUG, format="[%(levelname)s] %(name)s: %(message)s")
    elif verbose == 1:
        logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)


def _build_service() -> ClockService:
    service = ClockService()
    for warning in getattr(service, "load_warnings", ()):
        typer.echo(f"Warning: {warning}", err=True)
    return service


def _identity_override(
    profile_identity: DeviceIdentity,
    vid: str | None,
    pid: str | None,
    interface: int | None,
) -> DeviceIdentity | None:
    if vid is None and pid is None and interface is None:
        return None
    return DeviceIdentity(
        vendor_id=parse_usb_id(vid, context="--vid") if vid else profile_identity.vendor_id,
        product_id=parse_usb_id(pid, context="--pid") if pid else profile_identity.product_id,
        interface_number=profile_identity.interface_number if interface is None else interface,
    )


def _describe(info: HidInterfaceInfo) -> str:
    return (
        f"{info.vendor_id:04x}:{info.product_id:04x} if={info.interface_number} "
        f"usage={info.usage_page:04x}:{info.usage:04x} {info.display_name} "
        f"[{info.path.decode('utf-8', errors='replace')}]"
    )


@app.command("sync")
def sync_time(
    profile: str | None = typer.Option(None, "--profile", help="Profile ID"),
    vid: str | None = typer.Option(None, "--vid", help="Vendor ID override (hex)"),
    pid: str | None = typer.Option(None, "--pid", help="Product ID override (hex)"),
    interface: int | None = typer.Option(None, "--interface", help="Interface number override"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the stage payloads and exit"),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Increase log verbosity"),
) -> None:
    """Set the keyboard clock to the current local time."""
    _configure_logging(verbose)
    try:
        service = _build_service()
        if dry_run:
            for name, payload_hex in service.build_payloads():
                typer.echo(f"{name}: {payload_hex}")
            return

        target_profile = service.get_profile(profile)
        identity = _identity_override(target_profile.identity, vid, pid, interface)
        result = service.sync_time(
            profile_id=target_profile.id,
            identity=identity,
            on_found=lambda info: typer.echo(f"Found target device interface: {info.display_name}"),
        )
        target = identity or target_profile.identity
        typer.echo(
            f"Clock set to {result.fields.isoformat()} on {result.interface.display_name} "
            f"({target.describe()})"
        )
    except HidclockError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("devices")
def list_devices(
    profile: str | None = typer.Option(None, "--profile", help="Profile ID"),
    show_all: bool = typer.Option(False, "--all", help="List every HID interface"),
) -> None:
    """List HID interfaces of the target keyboard and mark the vendor interface."""
    try:
        service = _build_service()
        target = service.get_profile(profile)
        interfaces = service.list_interfaces(None if show_all else target.identity)
        if not interfaces:
            typer.echo("No HID devices found")
            return

        for info in interfaces:
            marker = "*" if matches_identity(info, target.identity) else " "
            typer.echo(f"{marker} {_describe(info)}")
    except HidclockError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("scan")
def scan_devices(
    tokens: list[str] | None = typer.Argument(None, help="Name fragments to look for"),
    profile: str | None = typer.Option(None, "--profile", help="Profile ID"),
) -> None:
    """Find HID devices whose product name contains the given fragments."""
    try:
        service = _build_service()
        found = service.scan(tokens, profile_id=profile)
        if not found:
            typer.echo("No matching devices found")
            raise typer.Exit(code=1)

        for info in found:
            typer.echo(_describe(info))
    except HidclockError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("profiles")
def list_profiles() -> None:
    """List available device profiles."""
    try:
        service = _build_service()
        for item in service.list_profiles():
            typer.echo(f"{item.id}: {item.name} ({item.identity.describe()})")
    except HidclockError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
