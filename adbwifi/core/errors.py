"""Domain-specific errors for adbwifi."""

from typing import List, Optional


class AdbWifiError(Exception):
    """Base error for adbwifi."""

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.hint = hint


class BridgeUnavailableError(AdbWifiError):
    """Raised when the adb binary cannot be found or spawned."""


class DeviceCommandError(AdbWifiError):
    """Raised when a command ran but the device rejected or failed it."""


class CommandTimeoutError(AdbWifiError):
    """Raised when a command that must complete did not answer in time."""


class DeviceSelectionError(AdbWifiError):
    """Raised when device selection cannot resolve a single target."""


class NoDeviceError(DeviceSelectionError):
    """Raised when no ready device is attached."""


class AmbiguousDeviceError(DeviceSelectionError):
    """Raised when several ready devices are attached and none is selected."""

    def __init__(self, serials: List[str]):
        super().__init__(
            f"Multiple devices connected: {', '.join(serials)}",
            hint="Select a device explicitly with: adbwifi device select <serial>",
        )
        self.serials = serials


class ProtocolError(AdbWifiError):
    """Raised when a structured payload is malformed or missing."""


class RequestCancelledError(AdbWifiError):
    """Raised when the caller cancels a pending companion request."""


class WifiCommandError(DeviceCommandError):
    """Raised when a WiFi command fails on the device."""
