"""
Network interface information (address, gateway, DNS servers).
"""

import re
import shlex
from typing import Optional

from adbwifi.modules.base import BaseProbe, InterfaceInfo
from adbwifi.wifi.parsers import parse_inet_address


class InterfaceProbe(BaseProbe):
    """Read the address, default gateway and DNS servers of an interface."""

    def run(self, interface: str = "wlan0") -> InterfaceInfo:
        info = InterfaceInfo(interface=interface)

        ip_result = self.executor.shell(f'ip addr show {shlex.quote(interface)} | grep "inet "')
        if ip_result.success:
            info.ip_address = self.parse_output(ip_result.stdout)

        gw_result = self.executor.shell("ip route | grep default")
        if gw_result.success:
            match = re.search(r"via\s+(\d{1,3}(?:\.\d{1,3}){3})", gw_result.stdout)
            if match:
                info.gateway = match.group(1)

        dns_result = self.executor.shell("getprop net.dns1 && getprop net.dns2")
        if dns_result.success:
            servers = [line.strip() for line in dns_result.stdout.splitlines() if line.strip()]
            if servers:
                info.dns = servers

        return info

    def parse_output(self, output: str) -> Optional[str]:
        return parse_inet_address(output)
