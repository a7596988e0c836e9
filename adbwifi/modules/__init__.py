"""
Network diagnostics probes run on the device.
"""

from adbwifi.modules.base import (
    BaseProbe,
    CaptivePortalResult,
    ConnectivityResult,
    DnsResult,
    InterfaceInfo,
    PingResult,
)
from adbwifi.modules.captive import CaptivePortalProbe
from adbwifi.modules.connectivity import InternetProbe, PingProbe
from adbwifi.modules.dns import DnsProbe
from adbwifi.modules.interface import InterfaceProbe

__all__ = [
    "BaseProbe",
    "CaptivePortalResult",
    "ConnectivityResult",
    "DnsResult",
    "InterfaceInfo",
    "PingResult",
    "CaptivePortalProbe",
    "InternetProbe",
    "PingProbe",
    "DnsProbe",
    "InterfaceProbe",
]
