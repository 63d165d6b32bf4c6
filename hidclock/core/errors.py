"""Domain-specific errors for hidclock."""


class HidclockError(Exception):
    """Base error for hidclock."""


class ProfileValidationError(HidclockError):
    """Raised when a profile file does not conform to schema or semantics."""


class ProfileLoadError(HidclockError):
    """Raised when loading profile sources fails."""


class DeviceDiscoveryError(HidclockError):
    """Raised when the HID backend is unavailable or enumeration fails."""


class DeviceNotFound(HidclockError):
    """Raised when no single interface matches the target identity."""


class DeviceOpenError(HidclockError):
    """Raised when the matched interface cannot be opened."""


class TransferError(HidclockError):
    """Raised when a SET or GET feature report fails during the handshake."""

    def __init__(self, stage: int, message: str, *, stage_name: str | None = None) -> None:
        self.stage = stage
        self.stage_name = stage_name
        label = f"stage {stage}" if stage_name is None else f"stage {stage} ({stage_name})"
        super().__init__(f"Handshake failed at {label}: {message}")
