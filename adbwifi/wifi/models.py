"""
WiFi records produced by the parsers and commands.
"""

from typing import Optional

from pydantic import BaseModel

HIDDEN_SSID = "<hidden>"
UNKNOWN_SSID = "Unknown"

# Security types accepted by `cmd wifi connect-network`
SECURITY_TYPES = ("open", "owe", "wpa2", "wpa3")


class ScanResult(BaseModel):
    """One access point seen in a scan."""

    ssid: str
    bssid: str
    frequency: Optional[int] = None  # MHz
    rssi: Optional[int] = None  # dBm
    security: str = "Open"
    capabilities: str = ""


class SavedNetwork(BaseModel):
    network_id: int
    ssid: str


class WifiStatus(BaseModel):
    """
    Point-in-time WiFi state.

    ``connected`` and ``ssid`` come from different lines of the dump and may
    disagree while the supplicant is changing state.
    """

    enabled: bool
    connected: bool = False
    ssid: Optional[str] = None
    bssid: Optional[str] = None
    ip_address: Optional[str] = None
    link_speed: Optional[int] = None  # Mbps
    rssi: Optional[int] = None
    frequency: Optional[int] = None


class WifiConnectionResult(BaseModel):
    success: bool
    ssid: str
    error: Optional[str] = None
    status: Optional[WifiStatus] = None
