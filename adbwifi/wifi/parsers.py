"""
Parsers for `cmd wifi` and `dumpsys wifi` text output.

Parsers never raise: a line that does not fit is dropped, a field that is
not found is left unset.
"""

import re
from typing import List, Optional, Tuple

from adbwifi.wifi.models import HIDDEN_SSID, UNKNOWN_SSID, SavedNetwork, ScanResult, WifiStatus

# Evaluated top to bottom; capability strings carry several overlapping markers
SECURITY_MARKERS: Tuple[Tuple[str, str], ...] = (
    ("SAE", "SAE"),
    ("WPA3", "WPA3"),
    ("WPA2", "WPA2"),
    ("WPA", "WPA"),
    ("WEP", "WEP"),
    ("OWE", "OWE"),
)
OPEN_LABEL = "Open"

BSSID_PATTERN = re.compile(r"^([0-9a-f]{2}:){5}[0-9a-f]{2}$", re.IGNORECASE)
FREQUENCY_PATTERN = re.compile(r"^\d{4,5}$")
RSSI_PATTERN = re.compile(r"^-?\d{1,3}$")
SCAN_HEADER_TOKEN = "BSSID"

# Status dump fields
STATUS_SSID = re.compile(r"(?<![A-Za-z])SSID:\s*[\"']?([^\"',\n]+)[\"']?", re.IGNORECASE)
STATUS_BSSID = re.compile(r"BSSID:\s*([0-9a-f:]{17})", re.IGNORECASE)
STATUS_IP = re.compile(r"IP(?:\s+address)?:\s*/?(\d{1,3}(?:\.\d{1,3}){3})", re.IGNORECASE)
STATUS_LINK_SPEED = re.compile(r"Link\s+speed:\s*(\d+)", re.IGNORECASE)
STATUS_RSSI = re.compile(r"RSSI:\s*(-?\d+)", re.IGNORECASE)
STATUS_FREQUENCY = re.compile(r"Frequency:\s*(\d+)", re.IGNORECASE)
CONNECTED_MARKERS = (
    re.compile(r"state:\s*COMPLETED"),
    re.compile(r"\bCONNECTED\b"),
)
ABSENT_SSIDS = {"", "<none>", "none", "<unknown ssid>"}

# Saved network listing
SAVED_ID = re.compile(r"\b(?:Network\s+)?ID\b:?\s*(\d+)", re.IGNORECASE)
SAVED_SSID = re.compile(r"SSID:?\s*[\"']?([^\"'\n]+)[\"']?", re.IGNORECASE)
SAVED_ROW = re.compile(r"^(\d+)\s+(\S.*)$")

INET_ADDRESS = re.compile(r"inet\s+(\d{1,3}(?:\.\d{1,3}){3})")


def classify_security(flags: str) -> str:
    """Return the most specific security label found in a capability string."""
    for marker, label in SECURITY_MARKERS:
        if marker in flags:
            return label
    return OPEN_LABEL


def parse_scan_line(line: str) -> Optional[ScanResult]:
    """
    Parse one row of `cmd wifi list-scan-results`.

    Format: ``BSSID  Frequency  RSSI  Age(sec)  SSID  [Flags]``
    """
    line = line.strip()
    if not line:
        return None

    bracket = line.find("[")
    main_part = line if bracket == -1 else line[:bracket]
    flags = "" if bracket == -1 else line[bracket:].strip()

    parts = main_part.split()
    if not parts or not BSSID_PATTERN.match(parts[0]):
        return None

    frequency = int(parts[1]) if len(parts) > 1 and FREQUENCY_PATTERN.match(parts[1]) else None
    rssi = int(parts[2]) if len(parts) > 2 and RSSI_PATTERN.match(parts[2]) else None
    # parts[3] is the age of the result; ignored
    ssid = " ".join(parts[4:])

    return ScanResult(
        ssid=ssid or HIDDEN_SSID,
        bssid=parts[0],
        frequency=frequency,
        rssi=rssi,
        security=classify_security(flags),
        capabilities=flags,
    )


def parse_scan_results(output: str) -> List[ScanResult]:
    results: List[ScanResult] = []
    lines = output.splitlines()

    if lines and SCAN_HEADER_TOKEN in lines[0]:
        lines = lines[1:]

    for line in lines:
        record = parse_scan_line(line)
        if record is not None:
            results.append(record)

    return results


def parse_wifi_status(status_output: str, dumpsys_output: str) -> WifiStatus:
    """
    Build a WifiStatus from `cmd wifi status` and a filtered `dumpsys wifi`.

    Each field is matched independently over the whole dump.
    """
    status = WifiStatus(enabled="wifi is enabled" in status_output.lower())
    dump = dumpsys_output

    status.connected = any(marker.search(dump) for marker in CONNECTED_MARKERS)

    match = STATUS_SSID.search(dump)
    if match:
        ssid = match.group(1).strip()
        if ssid.lower() not in ABSENT_SSIDS:
            status.ssid = ssid

    match = STATUS_BSSID.search(dump)
    if match:
        status.bssid = match.group(1)

    match = STATUS_IP.search(dump)
    if match:
        status.ip_address = match.group(1)

    match = STATUS_LINK_SPEED.search(dump)
    if match:
        status.link_speed = int(match.group(1))

    match = STATUS_RSSI.search(dump)
    if match:
        status.rssi = int(match.group(1))

    match = STATUS_FREQUENCY.search(dump)
    if match:
        status.frequency = int(match.group(1))

    return status


def parse_saved_networks(output: str) -> List[SavedNetwork]:
    """
    Parse `cmd wifi list-networks`.

    Accepts ``Network ID: 3 SSID: "Home"`` style lines as well as the
    tabular ``3  Home  wpa2-psk`` rows newer platforms print.
    """
    networks: List[SavedNetwork] = []

    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue

        row = SAVED_ROW.match(line)
        if row:
            columns = re.split(r"\s{2,}|\t", row.group(2).strip())
            ssid = columns[0].strip().strip("\"'")
            networks.append(SavedNetwork(
                network_id=int(row.group(1)),
                ssid=ssid or UNKNOWN_SSID,
            ))
            continue

        id_match = SAVED_ID.search(line)
        if id_match:
            ssid_match = SAVED_SSID.search(line[id_match.end():]) or SAVED_SSID.search(line)
            ssid = ssid_match.group(1).strip() if ssid_match else ""
            networks.append(SavedNetwork(
                network_id=int(id_match.group(1)),
                ssid=ssid or UNKNOWN_SSID,
            ))

    return networks


def parse_inet_address(output: str) -> Optional[str]:
    """Return the first IPv4 ``inet`` address in `ip addr` output."""
    match = INET_ADDRESS.search(output)
    return match.group(1) if match else None
