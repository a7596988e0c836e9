"""
Core functionality components.
"""

from adbwifi.core.config import AppConfig
from adbwifi.core.detector import SystemDetector, SystemInfo
from adbwifi.core.executor import AdbExecutor, CommandResult
from adbwifi.core.registry import Device, DeviceInfo, DeviceRegistry
from adbwifi.core.selection import SelectionState

__all__ = [
    "AppConfig",
    "SystemDetector",
    "SystemInfo",
    "AdbExecutor",
    "CommandResult",
    "Device",
    "DeviceInfo",
    "DeviceRegistry",
    "SelectionState",
]
