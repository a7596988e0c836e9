"""
WiFi control and text-protocol parsers.
"""

from adbwifi.wifi.commands import WifiCommands
from adbwifi.wifi.models import SavedNetwork, ScanResult, WifiConnectionResult, WifiStatus
from adbwifi.wifi.parsers import (
    SECURITY_MARKERS,
    classify_security,
    parse_saved_networks,
    parse_scan_results,
    parse_wifi_status,
)

__all__ = [
    "WifiCommands",
    "SavedNetwork",
    "ScanResult",
    "WifiConnectionResult",
    "WifiStatus",
    "SECURITY_MARKERS",
    "classify_security",
    "parse_saved_networks",
    "parse_scan_results",
    "parse_wifi_status",
]
