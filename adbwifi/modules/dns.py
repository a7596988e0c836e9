"""
DNS resolution from the device.
"""

import re
import shlex
from typing import List

from adbwifi.modules.base import BaseProbe, DnsResult

IPV4_PATTERN = re.compile(r"^\d{1,3}(?:\.\d{1,3}){3}$")
NSLOOKUP_ADDRESS = re.compile(r"Address(?:\s+\d+)?:\s*([0-9a-f.:]+)", re.IGNORECASE)
GETENT_ADDRESS = re.compile(r"^(\d{1,3}(?:\.\d{1,3}){3})(?:\s|$)", re.MULTILINE)
PING_ADDRESS = re.compile(r"\((\d{1,3}(?:\.\d{1,3}){3})\)")


class DnsProbe(BaseProbe):
    """
    Resolve a hostname on the device.

    Tiers are tried in order and the first one that yields an address wins:
    nslookup, then getent, then the address ping reports it is pinging.
    """

    def run(self, hostname: str) -> DnsResult:
        dns_result = DnsResult(hostname=hostname)
        quoted = shlex.quote(hostname)

        tiers = (
            ("nslookup", f"nslookup {quoted}", self.parse_output),
            ("getent", f"getent hosts {quoted}", self.parse_getent),
            ("ping", f"ping -c 1 {quoted}", self.parse_ping),
        )

        for source, command, parser in tiers:
            result = self.executor.shell(command)
            if not result.success:
                continue
            addresses = parser(result.stdout)
            if addresses:
                dns_result.addresses = addresses
                dns_result.source = source
                return dns_result

        dns_result.error = "DNS lookup failed"
        return dns_result

    def parse_output(self, output: str) -> List[str]:
        """Parse nslookup output, keeping IPv4 answers only."""
        addresses: List[str] = []
        in_answer = False

        for line in output.splitlines():
            # The resolver's own "Address:" line precedes the first "Name:"
            if "Name:" in line:
                in_answer = True
            if not in_answer:
                continue
            match = NSLOOKUP_ADDRESS.search(line)
            if match and IPV4_PATTERN.match(match.group(1)):
                addresses.append(match.group(1))

        return addresses

    def parse_getent(self, output: str) -> List[str]:
        match = GETENT_ADDRESS.search(output)
        return [match.group(1)] if match else []

    def parse_ping(self, output: str) -> List[str]:
        match = PING_ADDRESS.search(output)
        return [match.group(1)] if match else []
