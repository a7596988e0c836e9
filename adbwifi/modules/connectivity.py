"""
Connectivity probes (ping, internet reachability).
"""

import re
import shlex
import time
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from adbwifi.modules.base import BaseProbe, ConnectivityResult, PingResult

TOTAL_LOSS_MARKER = "100% packet loss"

# (url, expected status code), tried in order
INTERNET_ENDPOINTS: List[Tuple[str, int]] = [
    ("https://www.google.com/generate_204", 204),
    ("https://connectivitycheck.gstatic.com/generate_204", 204),
    ("https://www.cloudflare.com/cdn-cgi/trace", 200),
]
FALLBACK_PING_HOST = "8.8.8.8"


def http_status_command(url: str) -> str:
    return (
        'curl -s -o /dev/null -w "%{http_code}" '
        f"--connect-timeout 5 --max-time 10 {shlex.quote(url)}"
    )


def parse_http_code(output: str) -> Optional[int]:
    try:
        return int(output.strip().splitlines()[0])
    except (IndexError, ValueError):
        return None


class PingProbe(BaseProbe):
    """Ping a host from the device."""

    def run(self, host: str, count: int = 4) -> PingResult:
        result = self.executor.shell(f"ping -c {int(count)} -W 5 {shlex.quote(host)}")

        ping_result = PingResult(host=host, output=result.stdout or result.stderr)

        if result.success:
            # Alive unless every packet was lost
            ping_result.alive = TOTAL_LOSS_MARKER not in result.stdout
            metrics = self.parse_output(result.stdout)
            ping_result.time = metrics.get("avg_latency")
            ping_result.packet_loss = metrics.get("packet_loss")

        logger.debug(f"Ping {host}: alive={ping_result.alive} avg={ping_result.time}")
        return ping_result

    def parse_output(self, output: str) -> Dict[str, Any]:
        """Parse ping output."""
        metrics: Dict[str, Any] = {}

        # rtt min/avg/max/mdev = 10.123/15.456/20.789/2.345 ms
        avg_match = re.search(r"avg[^=]*=\s*[\d.]+/([\d.]+)", output)
        if avg_match:
            metrics["avg_latency"] = float(avg_match.group(1))

        loss_match = re.search(r"(\d+(?:\.\d+)?)%\s*packet loss", output)
        if loss_match:
            metrics["packet_loss"] = float(loss_match.group(1))

        return metrics


class InternetProbe(BaseProbe):
    """Check internet reachability through a list of HTTP endpoints."""

    def __init__(self, executor, endpoints: Optional[List[Tuple[str, int]]] = None):
        super().__init__(executor)
        self.endpoints = endpoints if endpoints is not None else INTERNET_ENDPOINTS

    def run(self) -> ConnectivityResult:
        for url, expected in self.endpoints:
            start = time.monotonic()
            result = self.executor.shell(http_status_command(url))
            latency = (time.monotonic() - start) * 1000

            if not result.success:
                logger.debug(f"Probe {url} failed: {result.stderr}")
                continue

            code = self.parse_output(result.stdout)
            if code is None:
                continue
            if code == expected or 200 <= code < 400:
                return ConnectivityResult(
                    has_internet=True,
                    latency=round(latency, 1),
                    endpoint=url,
                )
            logger.debug(f"Probe {url} returned HTTP {code}")

        ping = PingProbe(self.executor).run(FALLBACK_PING_HOST, count=1)
        if ping.alive:
            return ConnectivityResult(
                has_internet=True,
                latency=ping.time,
                endpoint=f"{FALLBACK_PING_HOST} (ping)",
            )

        return ConnectivityResult(
            has_internet=False,
            error="Failed to reach any internet endpoints",
        )

    def parse_output(self, output: str) -> Optional[int]:
        return parse_http_code(output)
