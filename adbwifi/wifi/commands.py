"""
WiFi control through `cmd wifi` on the selected device.
"""

import shlex
import time
from typing import List, Optional

from loguru import logger

from adbwifi.core.errors import WifiCommandError
from adbwifi.core.executor import AdbExecutor
from adbwifi.wifi.models import (
    SECURITY_TYPES,
    SavedNetwork,
    ScanResult,
    WifiConnectionResult,
    WifiStatus,
)
from adbwifi.wifi.parsers import (
    parse_inet_address,
    parse_saved_networks,
    parse_scan_results,
    parse_wifi_status,
)

STATUS_DUMP_COMMAND = (
    'dumpsys wifi | grep -E '
    '"mWifiInfo|Wi-Fi is|current SSID|IP address|Link speed|Frequency|RSSI"'
)
DISCONNECT_MODES = ("toggle", "forget")


class WifiCommands:
    """WiFi operations against the currently selected device."""

    def __init__(
        self,
        executor: AdbExecutor,
        scan_settle: float = 2.0,
        connect_settle: float = 3.0,
        toggle_settle: float = 1.0,
    ):
        self.executor = executor
        self.selection = executor.selection
        self.scan_settle = scan_settle
        self.connect_settle = connect_settle
        self.toggle_settle = toggle_settle

    def _run(self, command: str, action: str) -> str:
        result = self.executor.shell(command)
        if not result.success:
            raise WifiCommandError(f"Failed to {action}: {result.stderr or result.stdout}")
        return result.stdout

    def is_enabled(self) -> bool:
        output = self._run("cmd wifi status", "get WiFi status")
        return "wifi is enabled" in output.lower()

    def set_enabled(self, enabled: bool) -> None:
        with self.selection.exclusive():
            self._set_enabled(enabled)

    def _set_enabled(self, enabled: bool) -> None:
        state = "enabled" if enabled else "disabled"
        self._run(
            f"cmd wifi set-wifi-enabled {state}",
            "enable WiFi" if enabled else "disable WiFi",
        )
        logger.info(f"WiFi {state}")

    def start_scan(self) -> None:
        self._run("cmd wifi start-scan", "start scan")

    def get_scan_results(self) -> List[ScanResult]:
        return parse_scan_results(self._run("cmd wifi list-scan-results", "get scan results"))

    def scan(self) -> List[ScanResult]:
        """Trigger a scan, give the radio time to finish, and read the results."""
        self.start_scan()
        time.sleep(self.scan_settle)
        results = self.get_scan_results()
        logger.info(f"Scan found {len(results)} access point(s)")
        return results

    def connect(
        self,
        ssid: str,
        security: str,
        password: Optional[str] = None,
    ) -> WifiConnectionResult:
        """
        Connect to a WPA2/WPA3/Open/OWE network and verify the association.

        Args:
            ssid: Network name
            security: One of 'open', 'owe', 'wpa2', 'wpa3'
            password: Passphrase; required for wpa2/wpa3

        Returns:
            WifiConnectionResult; a rejected or unverified connection is
            reported with success=False rather than raised
        """
        security = security.lower()
        if security not in SECURITY_TYPES:
            return WifiConnectionResult(
                success=False,
                ssid=ssid,
                error=f"Unsupported security type '{security}'. Use one of: {', '.join(SECURITY_TYPES)}",
            )
        if security in ("wpa2", "wpa3") and not password:
            return WifiConnectionResult(
                success=False,
                ssid=ssid,
                error="Password is required for WPA2/WPA3 networks",
            )

        command = f"cmd wifi connect-network {shlex.quote(ssid)} {security}"
        with_secret = bool(password) and security not in ("open", "owe")
        if with_secret:
            command += f" {shlex.quote(password)}"

        with self.selection.exclusive():
            result = self.executor.shell(command, sensitive=with_secret)
            if not result.success or "error" in result.stdout.lower():
                return WifiConnectionResult(
                    success=False,
                    ssid=ssid,
                    error=result.stderr or result.stdout or "Connection failed",
                )

            time.sleep(self.connect_settle)
            status = self.get_status()

        connected = status.connected and status.ssid == ssid
        if connected:
            logger.info(f"Connected to {ssid}")
        else:
            logger.warning(f"Could not verify connection to {ssid}")

        return WifiConnectionResult(
            success=connected,
            ssid=ssid,
            error=None if connected else "Failed to verify connection",
            status=status,
        )

    def disconnect(self, mode: str = "toggle") -> None:
        """
        Disconnect from the current network.

        Args:
            mode: 'toggle' turns WiFi off and on again and keeps the saved
                network; 'forget' removes the saved entry of the current ssid
        """
        if mode not in DISCONNECT_MODES:
            raise WifiCommandError(f"Unknown disconnect mode '{mode}'")

        with self.selection.exclusive():
            if mode == "forget":
                status = self.get_status()
                if not status.connected or not status.ssid:
                    raise WifiCommandError("Not connected to any network")
                current = next(
                    (n for n in self.list_saved_networks() if n.ssid == status.ssid),
                    None,
                )
                if current is None:
                    raise WifiCommandError(f'Could not find saved network for "{status.ssid}"')
                self._forget(current.network_id)
            else:
                self._set_enabled(False)
                time.sleep(self.toggle_settle)
                self._set_enabled(True)

    def list_saved_networks(self) -> List[SavedNetwork]:
        return parse_saved_networks(self._run("cmd wifi list-networks", "list networks"))

    def forget_network(self, network_id: int) -> None:
        with self.selection.exclusive():
            self._forget(network_id)

    def _forget(self, network_id: int) -> None:
        self._run(f"cmd wifi forget-network {int(network_id)}", "forget network")
        logger.info(f"Forgot network {network_id}")

    def get_status(self) -> WifiStatus:
        # The status dump is advisory; a failed read leaves fields unset
        status_result = self.executor.shell("cmd wifi status")
        dumpsys_result = self.executor.shell(STATUS_DUMP_COMMAND)
        return parse_wifi_status(status_result.stdout, dumpsys_result.stdout)

    def get_ip_address(self, interface: str = "wlan0") -> Optional[str]:
        result = self.executor.shell(f'ip addr show {shlex.quote(interface)} | grep "inet "')
        if not result.success:
            return None
        return parse_inet_address(result.stdout)
