"""
Base probe class and result models.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from pydantic import BaseModel

from adbwifi.core.executor import AdbExecutor


class PingResult(BaseModel):
    host: str
    alive: bool = False
    time: Optional[float] = None  # average round trip, ms
    packet_loss: Optional[float] = None  # percent
    output: str = ""


class DnsResult(BaseModel):
    hostname: str
    addresses: List[str] = []
    source: Optional[str] = None  # resolver tier that answered
    error: Optional[str] = None


class ConnectivityResult(BaseModel):
    has_internet: bool
    latency: Optional[float] = None  # ms
    endpoint: Optional[str] = None
    error: Optional[str] = None


class CaptivePortalResult(BaseModel):
    is_captive: bool
    portal_url: Optional[str] = None
    status_code: Optional[int] = None
    error: Optional[str] = None


class InterfaceInfo(BaseModel):
    interface: str
    ip_address: Optional[str] = None
    gateway: Optional[str] = None
    dns: Optional[List[str]] = None


class BaseProbe(ABC):
    """Base class for all on-device network probes."""

    def __init__(self, executor: AdbExecutor):
        self.executor = executor

    @abstractmethod
    def run(self, *args, **kwargs) -> BaseModel:
        """
        Run the probe on the selected device.

        Returns:
            The probe's result record
        """
        pass

    @abstractmethod
    def parse_output(self, output: str) -> Any:
        """
        Parse command output.

        Args:
            output: Raw command output

        Returns:
            Parsed values
        """
        pass
