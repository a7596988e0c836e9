"""
adbwifi - WiFi control and diagnostics for Android devices over adb
"""

from adbwifi.__version__ import __version__
from adbwifi.core.config import AppConfig
from adbwifi.core.executor import AdbExecutor
from adbwifi.core.registry import DeviceRegistry

__all__ = [
    "AppConfig",
    "AdbExecutor",
    "DeviceRegistry",
    "__version__",
]
