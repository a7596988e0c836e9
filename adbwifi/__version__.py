"""Version information for adbwifi."""

__version__ = "1.0.0"
__version_info__ = (1, 0, 0)

# Release information
__author__ = "adbwifi contributors"
__license__ = "MIT"
__description__ = "WiFi configuration and diagnostics for Android devices over adb"
