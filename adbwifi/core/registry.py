"""
Device discovery, selection and identity cache.
"""

import threading
from typing import Dict, List, Optional, Tuple

from loguru import logger
from pydantic import BaseModel

from adbwifi.core.errors import (
    AdbWifiError,
    AmbiguousDeviceError,
    DeviceCommandError,
    NoDeviceError,
)
from adbwifi.core.executor import AdbExecutor

READY = "device"
UNKNOWN = "Unknown"
MIN_SDK = 30

# Property name -> DeviceInfo field
IDENTITY_PROPS = {
    "ro.product.model": "model",
    "ro.product.brand": "brand",
    "ro.product.manufacturer": "manufacturer",
    "ro.build.version.release": "android_version",
    "ro.build.version.sdk": "sdk_version",
    "ro.build.id": "build_id",
}

INLINE_KEYS = {
    "product": "product",
    "model": "model",
    "device": "device",
    "transport_id": "transport_id",
}


class Device(BaseModel):
    """One attached device as reported by ``adb devices -l``."""

    serial: str
    state: str  # 'device', 'offline', 'unauthorized', 'no permissions'
    product: Optional[str] = None
    model: Optional[str] = None
    device: Optional[str] = None
    transport_id: Optional[str] = None

    @property
    def ready(self) -> bool:
        return self.state == READY


class DeviceInfo(BaseModel):
    """Cached identity of a ready device."""

    serial: str
    model: str = UNKNOWN
    brand: str = UNKNOWN
    manufacturer: str = UNKNOWN
    android_version: str = UNKNOWN
    sdk_version: int = 0
    build_id: str = UNKNOWN


class DeviceListing(BaseModel):
    """Device merged with its cached identity, if any."""

    device: Device
    info: Optional[DeviceInfo] = None
    selected: bool = False


class VersionCheck(BaseModel):
    supported: bool
    sdk_version: int
    message: str


def parse_device_list(output: str) -> List[Device]:
    """
    Parse ``adb devices -l`` output.

    Args:
        output: Raw listing; each line is ``serial state [key:value ...]``

    Returns:
        List of Device objects
    """
    devices: List[Device] = []

    for line in output.splitlines():
        line = line.strip()
        if not line or line.startswith("List of devices") or line.startswith("*"):
            continue

        parts = line.split()
        if len(parts) < 2:
            continue

        serial, state = parts[0], parts[1]
        extras = parts[2:]
        # "no permissions" is the only two-word state
        if state == "no" and extras and extras[0] == "permissions":
            state = "no permissions"
            extras = extras[1:]

        fields: Dict[str, str] = {}
        for token in extras:
            key, sep, value = token.partition(":")
            if sep and key in INLINE_KEYS:
                fields[INLINE_KEYS[key]] = value

        devices.append(Device(serial=serial, state=state, **fields))

    return devices


class DeviceRegistry:
    """Discover attached devices and own the selection state and identity cache."""

    def __init__(self, executor: AdbExecutor, min_sdk: int = MIN_SDK):
        self.executor = executor
        self.selection = executor.selection
        self.min_sdk = min_sdk
        self._info: Dict[str, DeviceInfo] = {}
        self._lock = threading.RLock()

    @property
    def selected(self) -> Optional[str]:
        return self.selection.get()

    def enumerate(self) -> List[Device]:
        """List every attached device with its raw state."""
        result = self.executor.execute(["devices", "-l"], unscoped=True)
        if not result.success:
            raise DeviceCommandError(f"Failed to list devices: {result.stderr}")
        return parse_device_list(result.stdout)

    def refresh(self) -> List[Device]:
        """
        Re-enumerate and reconcile the identity cache and selection.

        Newly ready devices are queried and cached, vanished devices are
        evicted, and a vanished selection is cleared rather than retargeted.
        """
        devices = self.enumerate()
        present = {d.serial for d in devices}

        with self._lock:
            for device in devices:
                if device.ready and device.serial not in self._info:
                    try:
                        info, answered = self._query_info(device.serial)
                    except AdbWifiError as e:
                        logger.warning(f"Could not read identity of {device.serial}: {e}")
                        continue
                    if answered:
                        self._info[device.serial] = info
                    else:
                        logger.warning(f"No identity property of {device.serial} could be read")

            for serial in list(self._info):
                if serial not in present:
                    logger.debug(f"Evicting disconnected device {serial}")
                    del self._info[serial]

            current = self.selection.get()
            if current and current not in present:
                logger.info(f"Selected device {current} disappeared; clearing selection")
                self.selection.clear_if(current)

        return devices

    def list_devices(self) -> List[DeviceListing]:
        """Refresh and return each device merged with its cached info."""
        devices = self.refresh()
        current = self.selection.get()
        return [
            DeviceListing(
                device=device,
                info=self._info.get(device.serial),
                selected=device.serial == current,
            )
            for device in devices
        ]

    def select(self, serial: Optional[str]) -> None:
        """Select a device; the serial need not be known yet."""
        if serial is not None and serial not in self._info:
            logger.debug(f"Selecting {serial} before it has been enumerated")
        self.selection.set(serial)

    def ensure_selected(self) -> str:
        """
        Return the selected serial, auto-selecting the only ready device.

        Raises:
            NoDeviceError: No ready device is attached
            AmbiguousDeviceError: More than one ready device and none selected
        """
        with self._lock:
            current = self.selection.get()
            if current:
                return current

            devices = self.refresh()
            ready = [d for d in devices if d.ready]

            if not ready:
                unauthorized = [d.serial for d in devices if d.state == "unauthorized"]
                hint = "Connect an Android device with USB debugging enabled."
                if unauthorized:
                    hint = (
                        f"Accept the USB debugging prompt on {', '.join(unauthorized)} "
                        "and try again."
                    )
                raise NoDeviceError("No Android devices connected", hint=hint)

            if len(ready) > 1:
                raise AmbiguousDeviceError([d.serial for d in ready])

            serial = ready[0].serial
            logger.info(f"Auto-selected the only connected device: {serial}")
            self.selection.set(serial)
            return serial

    def cached_info(self, serial: str) -> Optional[DeviceInfo]:
        with self._lock:
            return self._info.get(serial)

    def get_device_info(self, serial: Optional[str] = None) -> DeviceInfo:
        """Query identity properties of ``serial`` (default: the selected device)."""
        target = serial or self.ensure_selected()
        info, answered = self._query_info(target)
        # Only a query that reached the device seeds the cache
        if answered:
            with self._lock:
                self._info[target] = info
        return info

    def check_version(self) -> VersionCheck:
        """Compare the selected device's SDK level with the supported minimum."""
        serial = self.ensure_selected()
        info = self.cached_info(serial) or self.get_device_info(serial)
        version = info.sdk_version

        if version < self.min_sdk:
            return VersionCheck(
                supported=False,
                sdk_version=version,
                message=(
                    f"Android SDK {version} detected. This tool requires SDK "
                    f"{self.min_sdk} or higher for full functionality."
                ),
            )

        return VersionCheck(
            supported=True,
            sdk_version=version,
            message=f"Android SDK {version} detected. Full functionality available.",
        )

    def _query_info(self, serial: str) -> Tuple[DeviceInfo, bool]:
        """Read identity properties; the flag tells whether any read succeeded."""
        values: Dict[str, str] = {}
        answered = False
        for prop, field in IDENTITY_PROPS.items():
            result = self.executor.shell(f"getprop {prop}", serial=serial)
            answered = answered or result.success
            values[field] = result.stdout.strip() if result.success else ""

        try:
            sdk_version = int(values.pop("sdk_version") or 0)
        except ValueError:
            sdk_version = 0

        info = DeviceInfo(
            serial=serial,
            sdk_version=sdk_version,
            **{field: value or UNKNOWN for field, value in values.items()},
        )
        return info, answered
