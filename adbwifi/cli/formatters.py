"""
Rich formatting utilities for CLI output.
"""

from typing import Optional, Sequence

from pydantic import BaseModel
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from adbwifi.core.detector import SystemInfo
from adbwifi.core.errors import AdbWifiError
from adbwifi.core.registry import DeviceInfo, DeviceListing, VersionCheck
from adbwifi.modules.base import CaptivePortalResult, ConnectivityResult, PingResult
from adbwifi.wifi.models import SavedNetwork, ScanResult, WifiStatus


def _status_icon_and_color(ok: bool) -> tuple[str, str]:
    return ("✓", "green") if ok else ("✗", "red")


def _value(value) -> str:
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value) if value else "-"
    return escape(str(value))


def print_system_info(system_info: SystemInfo, console: Console) -> None:
    """Print detected host information."""
    table = Table(title="Host", show_header=False, box=None)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Operating System", system_info.os_type)
    table.add_row("Platform", system_info.platform)
    table.add_row("Python Version", system_info.python_version)
    table.add_row("adb", system_info.adb_path or "[red]not found[/red]")

    console.print()
    console.print(table)


def format_devices(listings: Sequence[DeviceListing], console: Console) -> None:
    """Show attached devices, marking the selected one."""
    if not listings:
        console.print("[yellow]No devices attached.[/yellow]")
        return

    table = Table(title="Devices", show_header=True, box=None, padding=(0, 2))
    table.add_column("", style="green")
    table.add_column("Serial", style="cyan")
    table.add_column("State", style="white")
    table.add_column("Model", style="white")
    table.add_column("Android", style="white")

    for listing in listings:
        device = listing.device
        state_color = "green" if device.ready else "yellow"
        info = listing.info
        table.add_row(
            "*" if listing.selected else "",
            device.serial,
            f"[{state_color}]{device.state}[/{state_color}]",
            info.model if info else (device.model or "-"),
            f"{info.android_version} (SDK {info.sdk_version})" if info else "-",
        )

    console.print()
    console.print(table)


def format_device_info(info: DeviceInfo, check: Optional[VersionCheck], console: Console) -> None:
    ok = check.supported if check else True
    _, color = _status_icon_and_color(ok)

    lines = [
        f"[bold]Serial:[/bold] {info.serial}",
        f"[bold]Model:[/bold] {escape(info.model)}",
        f"[bold]Brand:[/bold] {escape(info.brand)}",
        f"[bold]Manufacturer:[/bold] {escape(info.manufacturer)}",
        f"[bold]Android:[/bold] {info.android_version} (SDK {info.sdk_version})",
        f"[bold]Build:[/bold] {escape(info.build_id)}",
    ]
    if check:
        lines.append(f"\n[{color}]{check.message}[/{color}]")

    console.print()
    console.print(Panel("\n".join(lines), title="Device", border_style=color, expand=False))


def _signal_color(rssi: Optional[int]) -> str:
    if rssi is None:
        return "white"
    if rssi >= -60:
        return "green"
    if rssi >= -75:
        return "yellow"
    return "red"


def format_scan_results(networks: Sequence[ScanResult], console: Console) -> None:
    """Show scan results, strongest first."""
    if not networks:
        console.print("[yellow]No networks found.[/yellow]")
        return

    table = Table(title=f"Networks ({len(networks)})", show_header=True, box=None, padding=(0, 2))
    table.add_column("SSID", style="cyan")
    table.add_column("BSSID", style="white")
    table.add_column("Signal", style="white", justify="right")
    table.add_column("Freq", style="white", justify="right")
    table.add_column("Security", style="white")

    for network in networks:
        color = _signal_color(network.rssi)
        signal = f"{network.rssi} dBm" if network.rssi is not None else "-"
        freq = f"{network.frequency} MHz" if network.frequency is not None else "-"
        table.add_row(
            escape(network.ssid),
            network.bssid,
            f"[{color}]{signal}[/{color}]",
            freq,
            network.security,
        )

    console.print()
    console.print(table)


def format_status(status: WifiStatus, console: Console) -> None:
    icon, color = _status_icon_and_color(status.connected)
    if not status.enabled:
        icon, color = "○", "yellow"

    lines = [f"[bold]WiFi:[/bold] {'enabled' if status.enabled else 'disabled'}"]
    lines.append(f"[bold]Connected:[/bold] [{color}]{_value(status.connected)}[/{color}]")
    for label, value in (
        ("SSID", status.ssid),
        ("BSSID", status.bssid),
        ("IP address", status.ip_address),
        ("Link speed", f"{status.link_speed} Mbps" if status.link_speed is not None else None),
        ("RSSI", f"{status.rssi} dBm" if status.rssi is not None else None),
        ("Frequency", f"{status.frequency} MHz" if status.frequency is not None else None),
    ):
        if value is not None:
            lines.append(f"[bold]{label}:[/bold] {escape(str(value))}")

    console.print()
    console.print(Panel("\n".join(lines), title=f"{icon} WiFi Status", border_style=color, expand=False))


def format_saved_networks(networks: Sequence[SavedNetwork], console: Console) -> None:
    if not networks:
        console.print("[yellow]No saved networks.[/yellow]")
        return

    table = Table(title="Saved Networks", show_header=True, box=None, padding=(0, 2))
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("SSID", style="white")
    for network in networks:
        table.add_row(str(network.network_id), escape(network.ssid))

    console.print()
    console.print(table)


def format_record(
    title: str,
    record: BaseModel,
    ok: bool,
    console: Console,
) -> None:
    """
    Show any result record as a key/value panel.

    ``error`` and ``hint`` fields are pulled out of the table and printed
    below it; unset fields are skipped.
    """
    icon, color = _status_icon_and_color(ok)
    data = record.model_dump(exclude_none=True)
    error = data.pop("error", None)
    hint = data.pop("hint", None)
    output = data.pop("output", None)

    lines = [
        f"[bold]{key.replace('_', ' ').capitalize()}:[/bold] {_value(value)}"
        for key, value in data.items()
    ]
    if error:
        lines.append(f"\n[red]{escape(error)}[/red]")

    console.print()
    console.print(Panel("\n".join(lines), title=f"{icon} {title}", border_style=color, expand=False))

    if output and not ok:
        console.print(Panel(escape(output[:500]), title="Raw Output", border_style="dim"))
    if hint:
        console.print(f"[dim]Hint: {escape(hint)}[/dim]")

    interpretation = get_interpretation(record)
    if interpretation:
        console.print()
        console.print(Panel(interpretation, title="💡 What this means", border_style="dim"))


def get_interpretation(record: BaseModel) -> str:
    """
    Plain-language reading of a diagnostics record.
    Returns empty string if no interpretation is available.
    """
    if isinstance(record, PingResult):
        if not record.alive:
            return (
                "In plain terms: the device got no replies. "
                "The host may be down or blocking ping, or the device has no route to it."
            )
        if record.packet_loss:
            return (
                f"In plain terms: some packets were lost ({record.packet_loss:g}%), "
                "so the WiFi link or the path beyond it is unstable."
            )
        if record.time is not None and record.time >= 100:
            return (
                f"In plain terms: the host answers but delay is high (around {record.time:.0f} ms). "
                "Weak signal or a congested access point are common causes."
            )
        return "In plain terms: the host is reachable from the device with normal delay."

    if isinstance(record, ConnectivityResult):
        if record.has_internet:
            return "In plain terms: the device can reach the internet through its current network."
        return (
            "In plain terms: the device could not reach any internet endpoint. "
            "Check that it is connected to WiFi and that the network is not behind a login page."
        )

    if isinstance(record, CaptivePortalResult):
        if record.error:
            return ""
        if record.is_captive:
            return (
                "In plain terms: this network wants you to sign in on a web page "
                "before it lets traffic through."
            )
        return "In plain terms: no sign-in page is intercepting traffic on this network."

    return ""


def format_error(error: Exception, console: Console) -> None:
    """Print an error with its hint and a short "What to try" list."""
    console.print(f"\n[bold red]Error:[/bold red] {escape(str(error))}")
    hint = getattr(error, "hint", None)
    if hint:
        console.print(f"[dim]Hint: {escape(hint)}[/dim]")
    guidance = get_error_guidance(error)
    if guidance:
        console.print(Panel("\n".join(guidance), title="What to try", border_style="yellow", expand=False))


def get_error_guidance(exception: Exception) -> list[str]:
    """
    Return actionable suggestions for common failures.
    """
    if not isinstance(exception, AdbWifiError):
        return ["• Run with [cyan]-v[/cyan] for detailed logs."]

    msg = str(exception).lower()
    lines: list[str] = []
    if "timeout" in msg or "timed out" in msg:
        lines.append("• The device may be busy or asleep; unlock it and try again.")
        lines.append("• Check the connection with [cyan]adbwifi device list[/cyan].")
    elif "unauthorized" in msg or "no android devices" in msg:
        lines.append("• Enable USB debugging in Developer options.")
        lines.append("• Reconnect the cable and accept the debugging prompt.")
    elif "companion" in msg:
        lines.append("• Check the companion app with [cyan]adbwifi enterprise check[/cyan].")
    elif "multiple devices" in msg:
        lines.append("• Pass [cyan]--serial[/cyan] or set ADBWIFI_SERIAL.")
    else:
        lines.append("• Run with [cyan]-v[/cyan] for detailed logs.")
    return lines
