"""
Main CLI application using Typer.
"""

import json
import sys
import threading
import time
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import Any, Callable, Optional

import questionary
import typer
from loguru import logger
from pydantic import BaseModel, ValidationError
from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.spinner import Spinner

from adbwifi.cli.formatters import (
    format_device_info,
    format_devices,
    format_error,
    format_record,
    format_saved_networks,
    format_scan_results,
    format_status,
    print_system_info,
)
from adbwifi.core.config import AppConfig, load_config_file
from adbwifi.core.detector import SystemDetector
from adbwifi.core.errors import (
    AdbWifiError,
    AmbiguousDeviceError,
    DeviceSelectionError,
    NoDeviceError,
)
from adbwifi.core.executor import AdbExecutor
from adbwifi.core.registry import DeviceRegistry
from adbwifi.enterprise.bridge import EnterpriseBridge
from adbwifi.enterprise.models import EapConfig
from adbwifi.modules.captive import CaptivePortalProbe
from adbwifi.modules.connectivity import InternetProbe, PingProbe
from adbwifi.modules.dns import DnsProbe
from adbwifi.modules.interface import InterfaceProbe
from adbwifi.storage.csv_handler import CSVHandler
from adbwifi.storage.logger import setup_logging
from adbwifi.wifi.commands import WifiCommands
from adbwifi.wifi.models import SECURITY_TYPES

app = typer.Typer(
    name="adbwifi",
    help="WiFi control and diagnostics for Android devices over adb",
    add_completion=False,
)
device_app = typer.Typer(help="List and select attached devices")
wifi_app = typer.Typer(help="Control the WiFi radio and networks")
enterprise_app = typer.Typer(help="802.1X networks and certificates via the companion app")
diag_app = typer.Typer(help="Network diagnostics run on the device")

app.add_typer(device_app, name="device")
app.add_typer(wifi_app, name="wifi")
app.add_typer(enterprise_app, name="enterprise")
app.add_typer(diag_app, name="diag")

console = Console()


class Services:
    """Objects shared by the commands of one invocation."""

    def __init__(self, config: AppConfig, executor: AdbExecutor):
        self.config = config
        self.executor = executor
        self.registry = DeviceRegistry(executor, min_sdk=config.min_sdk)
        if config.serial:
            self.registry.select(config.serial)
        self.wifi = WifiCommands(
            executor,
            scan_settle=config.scan_settle_seconds,
            connect_settle=config.connect_settle_seconds,
            toggle_settle=config.toggle_settle_seconds,
        )
        self.bridge = EnterpriseBridge(
            executor,
            package=config.companion_package,
            timeout=config.enterprise_timeout,
            poll_interval=config.poll_interval,
        )


def _init_context(
    serial: Optional[str] = None,
    adb_path: Optional[str] = None,
    verbose: bool = False,
    log_dir: Optional[Path] = None,
) -> Services:
    """
    Build config, logging and the device stack.
    Command-line options win over ~/.adbwifi.yaml or ./.adbwifi.yaml, which
    win over ADBWIFI_* variables.
    """
    overrides: dict[str, Any] = {}
    if serial:
        overrides["serial"] = serial
    if adb_path:
        overrides["adb_path"] = adb_path
    if verbose:
        overrides["verbose"] = True

    file_cfg = load_config_file()
    config = AppConfig(**{**file_cfg, **overrides})

    app_logger = setup_logging(log_dir, config.verbose)
    executor = AdbExecutor(
        config.adb_path,
        app_logger=app_logger,
        timeout=config.command_timeout,
        wait_timeout=config.wait_timeout,
    )
    return Services(config, executor)


def _format_option():
    return typer.Option(
        "rich",
        "--format",
        "-f",
        help="Output format: 'rich' (default) or 'json'",
    )


def _save_option():
    return typer.Option(
        False,
        "--save",
        help="Save the result as CSV and metadata under the output directory",
    )


def _output_json(payload: Any) -> None:
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(mode="json", exclude_none=True)
    elif isinstance(payload, list):
        payload = [p.model_dump(mode="json", exclude_none=True) if isinstance(p, BaseModel) else p for p in payload]
    typer.echo(json.dumps(payload, indent=2))


@contextmanager
def _handle_errors(output_format: str = "rich"):
    """Turn domain errors into a printed message and exit code 1."""
    try:
        yield
    except AdbWifiError as e:
        logger.debug(f"{type(e).__name__}: {e}")
        if output_format == "json":
            _output_json({"success": False, "error": str(e), "hint": e.hint})
        else:
            format_error(e, console)
        raise typer.Exit(1)


def _run_in_background(
    text: str,
    func: Callable[[], Any],
    show: bool = True,
    cancel: Optional[threading.Event] = None,
) -> Any:
    """
    Run ``func`` on a worker thread behind a spinner.

    With a ``cancel`` event, Ctrl+C sets the event and waits for the worker
    to wind down instead of abandoning it.
    """
    holder: dict[str, Any] = {}

    def _run() -> None:
        try:
            holder["result"] = func()
        except Exception as e:
            holder["error"] = e

    worker = threading.Thread(target=_run, daemon=True)
    worker.start()
    spinner = (
        Live(Spinner("dots", text=f"[dim]{text}[/dim]"), console=console, refresh_per_second=8, transient=True)
        if show
        else nullcontext()
    )
    try:
        with spinner:
            while worker.is_alive():
                worker.join(timeout=0.05)
    except KeyboardInterrupt:
        if cancel is None:
            raise
        console.print("[yellow]Cancelling…[/yellow]")
        cancel.set()
        worker.join()

    if "error" in holder:
        raise holder["error"]
    return holder.get("result")


def _read_pem(path: Optional[Path]) -> Optional[str]:
    if path is None:
        return None
    try:
        return path.read_text()
    except OSError as e:
        console.print(f"[bold red]Error:[/bold red] Could not read {path}: {e}")
        raise typer.Exit(1)


def _finish(ok: bool) -> None:
    if not ok:
        raise typer.Exit(1)


@app.callback(invoke_without_command=True)
def _default(
    ctx: typer.Context,
    serial: Optional[str] = typer.Option(
        None,
        "--serial",
        "-s",
        help="Device serial to target (default: the only connected device)",
    ),
    adb_path: Optional[str] = typer.Option(
        None,
        "--adb",
        help="Path to the adb binary",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
    log_dir: Optional[Path] = typer.Option(
        None,
        "--log-dir",
        help="Also write rotating log files to this directory",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
):
    """
    adbwifi - WiFi control and diagnostics for Android devices over adb.
    """
    if version:
        from adbwifi import __version__
        console.print(f"adbwifi {__version__}")
        raise typer.Exit(0)
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit(0)
    ctx.obj = _init_context(serial=serial, adb_path=adb_path, verbose=verbose, log_dir=log_dir)


@app.command()
def health(
    ctx: typer.Context,
    output_format: str = _format_option(),
):
    """
    Check that adb answers and report the attached devices.
    """
    services: Services = ctx.obj
    system_info = SystemDetector().detect_system(services.config.adb_path)
    adb_ok = services.executor.check_adb()

    report: dict[str, Any] = {
        "status": "ok" if adb_ok else "unavailable",
        "adb": adb_ok,
        "adb_path": system_info.adb_path,
        "devices": [],
        "selected": None,
    }
    if adb_ok:
        with _handle_errors(output_format):
            listings = services.registry.list_devices()
        report["devices"] = [
            {"serial": listing.device.serial, "state": listing.device.state}
            for listing in listings
        ]
        report["selected"] = services.registry.selected

    if output_format == "json":
        _output_json(report)
    else:
        print_system_info(system_info, console)
        color = "green" if adb_ok else "red"
        console.print(f"\n[bold]adb:[/bold] [{color}]{report['status']}[/{color}]")
        if adb_ok:
            console.print(f"[bold]Devices:[/bold] {len(report['devices'])}")
        else:
            missing = SystemDetector().check_required_tools(["adb"])
            for tool in missing:
                console.print(f"  • {tool.name}: {tool.suggestion}")

    _finish(adb_ok)


# ---------------------------------------------------------------------------
# device
# ---------------------------------------------------------------------------


@device_app.command("list")
def device_list(
    ctx: typer.Context,
    output_format: str = _format_option(),
):
    """List attached devices."""
    services: Services = ctx.obj
    with _handle_errors(output_format):
        listings = services.registry.list_devices()

    if output_format == "json":
        _output_json(listings)
    else:
        format_devices(listings, console)


@device_app.command("select")
def device_select(
    ctx: typer.Context,
    serial: Optional[str] = typer.Argument(None, help="Device serial (prompted when omitted)"),
    output_format: str = _format_option(),
):
    """
    Select a device and show its identity.
    """
    services: Services = ctx.obj
    registry = services.registry

    with _handle_errors(output_format):
        listings = registry.list_devices()
        ready = [listing.device.serial for listing in listings if listing.device.ready]

        if serial is None:
            if not ready:
                raise NoDeviceError(
                    "No Android devices connected",
                    hint="Connect an Android device with USB debugging enabled.",
                )
            if len(ready) == 1:
                serial = ready[0]
            elif sys.stdin.isatty() and output_format != "json":
                serial = questionary.select("Select a device:", choices=ready).ask()
                if serial is None:
                    raise typer.Exit(1)
            else:
                raise AmbiguousDeviceError(ready)
        elif serial not in ready:
            raise DeviceSelectionError(
                f"Device {serial} is not connected or not ready",
                hint="Run: adbwifi device list",
            )

        registry.select(serial)
        info = registry.get_device_info(serial)
        check = registry.check_version()

    if output_format == "json":
        _output_json({"selected": serial, "info": info.model_dump(mode="json"), "version": check.model_dump(mode="json")})
        return

    format_device_info(info, check, console)
    console.print(
        f"[dim]Selection lasts for one invocation. "
        f"Use --serial {serial} or export ADBWIFI_SERIAL={serial}[/dim]"
    )


@device_app.command("info")
def device_info(
    ctx: typer.Context,
    output_format: str = _format_option(),
):
    """Show identity and Android version of the selected device."""
    services: Services = ctx.obj
    with _handle_errors(output_format):
        info = services.registry.get_device_info()
        check = services.registry.check_version()

    if output_format == "json":
        _output_json({"info": info.model_dump(mode="json"), "version": check.model_dump(mode="json")})
    else:
        format_device_info(info, check, console)


# ---------------------------------------------------------------------------
# wifi
# ---------------------------------------------------------------------------


def _toggle(ctx: typer.Context, enabled: bool, output_format: str) -> None:
    services: Services = ctx.obj
    with _handle_errors(output_format):
        services.registry.ensure_selected()
        services.wifi.set_enabled(enabled)
        time.sleep(services.wifi.toggle_settle)
        now_enabled = services.wifi.is_enabled()

    state = "enabled" if enabled else "disabled"
    ok = now_enabled == enabled
    message = f"WiFi {state}" if ok else f"WiFi was not {state} yet; check the device"

    if output_format == "json":
        _output_json({"success": ok, "enabled": now_enabled, "message": message})
    else:
        color = "green" if ok else "yellow"
        console.print(f"[{color}]{message}[/{color}]")
    _finish(ok)


@wifi_app.command("enable")
def wifi_enable(ctx: typer.Context, output_format: str = _format_option()):
    """Turn WiFi on."""
    _toggle(ctx, True, output_format)


@wifi_app.command("disable")
def wifi_disable(ctx: typer.Context, output_format: str = _format_option()):
    """Turn WiFi off."""
    _toggle(ctx, False, output_format)


@wifi_app.command("status")
def wifi_status(
    ctx: typer.Context,
    output_format: str = _format_option(),
):
    """Show the radio state and the current connection."""
    services: Services = ctx.obj
    with _handle_errors(output_format):
        services.registry.ensure_selected()
        status = services.wifi.get_status()

    if output_format == "json":
        _output_json(status)
    else:
        format_status(status, console)


@wifi_app.command("scan")
def wifi_scan(
    ctx: typer.Context,
    output_format: str = _format_option(),
):
    """
    Scan for nearby networks, strongest first.
    """
    services: Services = ctx.obj
    with _handle_errors(output_format):
        services.registry.ensure_selected()
        networks = _run_in_background(
            "Scanning…",
            services.wifi.scan,
            show=output_format != "json",
        )

    networks = sorted(
        networks,
        key=lambda n: n.rssi if n.rssi is not None else -1000,
        reverse=True,
    )

    if output_format == "json":
        _output_json({"count": len(networks), "networks": [n.model_dump(mode="json") for n in networks]})
    else:
        format_scan_results(networks, console)


@wifi_app.command("connect")
def wifi_connect(
    ctx: typer.Context,
    ssid: str = typer.Argument(..., help="Network name"),
    security: str = typer.Option(
        "wpa2",
        "--security",
        "-t",
        help=f"Security type: {', '.join(SECURITY_TYPES)}",
    ),
    password: Optional[str] = typer.Option(
        None,
        "--password",
        "-p",
        help="Passphrase (prompted for WPA2/WPA3 when omitted on a terminal)",
    ),
    output_format: str = _format_option(),
):
    """
    Connect to a WPA2, WPA3, open or OWE network.
    """
    services: Services = ctx.obj
    security = security.lower()
    if password is None and security in ("wpa2", "wpa3") and sys.stdin.isatty() and output_format != "json":
        password = questionary.password(f"Password for {ssid}:").ask()

    with _handle_errors(output_format):
        services.registry.ensure_selected()
        result = _run_in_background(
            f"Connecting to {escape(ssid)}…",
            lambda: services.wifi.connect(ssid, security, password),
            show=output_format != "json",
        )

    if output_format == "json":
        _output_json(result)
    elif result.success:
        console.print(f"[green]✓ Connected to {escape(ssid)}[/green]")
        if result.status:
            format_status(result.status, console)
    else:
        console.print(f"[red]✗ Could not connect to {escape(ssid)}: {escape(result.error or '')}[/red]")
    _finish(result.success)


@wifi_app.command("disconnect")
def wifi_disconnect(
    ctx: typer.Context,
    mode: str = typer.Option(
        "toggle",
        "--mode",
        "-m",
        help="'toggle' cycles the radio and keeps the network; 'forget' removes it",
    ),
    output_format: str = _format_option(),
):
    """Disconnect from the current network."""
    services: Services = ctx.obj
    with _handle_errors(output_format):
        services.registry.ensure_selected()
        services.wifi.disconnect(mode)

    message = "Disconnected and forgot the network" if mode == "forget" else "Disconnected"
    if output_format == "json":
        _output_json({"success": True, "mode": mode, "message": message})
    else:
        console.print(f"[green]{message}[/green]")


@wifi_app.command("saved")
def wifi_saved(
    ctx: typer.Context,
    output_format: str = _format_option(),
):
    """List saved networks."""
    services: Services = ctx.obj
    with _handle_errors(output_format):
        services.registry.ensure_selected()
        networks = services.wifi.list_saved_networks()

    if output_format == "json":
        _output_json(networks)
    else:
        format_saved_networks(networks, console)


@wifi_app.command("forget")
def wifi_forget(
    ctx: typer.Context,
    network_id: int = typer.Argument(..., help="Network id from 'adbwifi wifi saved'"),
    output_format: str = _format_option(),
):
    """Remove a saved network."""
    services: Services = ctx.obj
    with _handle_errors(output_format):
        services.registry.ensure_selected()
        services.wifi.forget_network(network_id)

    if output_format == "json":
        _output_json({"success": True, "network_id": network_id})
    else:
        console.print(f"[green]Forgot network {network_id}[/green]")


# ---------------------------------------------------------------------------
# enterprise
# ---------------------------------------------------------------------------


@enterprise_app.command("check")
def enterprise_check(
    ctx: typer.Context,
    output_format: str = _format_option(),
):
    """Check that the companion app is installed on the device."""
    services: Services = ctx.obj
    with _handle_errors(output_format):
        services.registry.ensure_selected()
        installed = services.bridge.is_companion_installed()

    if output_format == "json":
        _output_json({
            "installed": installed,
            "package": services.bridge.package,
            "hint": None if installed else services.bridge.install_hint,
        })
    elif installed:
        console.print(f"[green]✓ Companion app {services.bridge.package} is installed[/green]")
    else:
        console.print(f"[red]✗ Companion app {services.bridge.package} is not installed[/red]")
        console.print(f"[dim]Hint: {services.bridge.install_hint}[/dim]")
    _finish(installed)


@enterprise_app.command("connect")
def enterprise_connect(
    ctx: typer.Context,
    ssid: str = typer.Argument(..., help="Network name"),
    method: str = typer.Option(..., "--method", "-m", help="EAP method: peap, ttls or tls"),
    identity: str = typer.Option(..., "--identity", "-i", help="User identity"),
    domain: str = typer.Option(..., "--domain", "-d", help="Server domain suffix to match"),
    password: Optional[str] = typer.Option(None, "--password", "-p", help="Password (PEAP/TTLS)"),
    phase2: Optional[str] = typer.Option(None, "--phase2", help="Phase 2 method: mschapv2, pap, gtc, none"),
    anonymous_identity: Optional[str] = typer.Option(None, "--anonymous-identity", help="Outer identity"),
    ca_cert: Optional[Path] = typer.Option(None, "--ca-cert", help="CA certificate (PEM file)"),
    client_cert: Optional[Path] = typer.Option(None, "--client-cert", help="Client certificate (PEM file, TLS)"),
    private_key: Optional[Path] = typer.Option(None, "--private-key", help="Private key (PEM file, TLS)"),
    private_key_password: Optional[str] = typer.Option(None, "--private-key-password", help="Private key password"),
    output_format: str = _format_option(),
):
    """
    Connect to an 802.1X network through the companion app.
    """
    services: Services = ctx.obj
    try:
        config = EapConfig(
            ssid=ssid,
            eap_method=method.lower(),
            identity=identity,
            domain_suffix_match=domain,
            password=password,
            phase2_method=phase2.lower() if phase2 else None,
            anonymous_identity=anonymous_identity,
            ca_certificate=_read_pem(ca_cert),
            client_certificate=_read_pem(client_cert),
            private_key=_read_pem(private_key),
            private_key_password=private_key_password,
        )
    except ValidationError as e:
        console.print(f"[bold red]Invalid enterprise settings:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    cancel = threading.Event()
    with _handle_errors(output_format):
        services.registry.ensure_selected()
        result = _run_in_background(
            f"Waiting for the companion app to join {escape(ssid)}…",
            lambda: services.bridge.connect_enterprise(config, cancel),
            show=output_format != "json",
            cancel=cancel,
        )

    if output_format == "json":
        _output_json(result)
    else:
        format_record("Enterprise Connection", result, result.success, console)
    _finish(result.success)


@enterprise_app.command("install-cert")
def enterprise_install_cert(
    ctx: typer.Context,
    cert_file: Path = typer.Argument(..., help="Certificate (PEM file)"),
    alias: str = typer.Option(..., "--alias", "-a", help="Name to store the certificate under"),
    cert_type: str = typer.Option("ca", "--type", "-t", help="Certificate type: ca or client"),
    private_key: Optional[Path] = typer.Option(None, "--private-key", help="Private key (PEM file, client certificates)"),
    private_key_password: Optional[str] = typer.Option(None, "--private-key-password", help="Private key password"),
    output_format: str = _format_option(),
):
    """Install a CA or client certificate through the companion app."""
    services: Services = ctx.obj
    certificate = _read_pem(cert_file)
    key = _read_pem(private_key)

    cancel = threading.Event()
    with _handle_errors(output_format):
        services.registry.ensure_selected()
        result = _run_in_background(
            "Installing certificate…",
            lambda: services.bridge.install_certificate(
                certificate,
                alias,
                cert_type.lower(),
                private_key=key,
                private_key_password=private_key_password,
                cancel=cancel,
            ),
            show=output_format != "json",
            cancel=cancel,
        )

    if output_format == "json":
        _output_json(result)
    else:
        format_record("Certificate Install", result, result.success, console)
    _finish(result.success)


@enterprise_app.command("list-certs")
def enterprise_list_certs(
    ctx: typer.Context,
    output_format: str = _format_option(),
):
    """List certificates installed by the companion app."""
    services: Services = ctx.obj
    cancel = threading.Event()
    with _handle_errors(output_format):
        services.registry.ensure_selected()
        result = _run_in_background(
            "Listing certificates…",
            lambda: services.bridge.list_certificates(cancel),
            show=output_format != "json",
            cancel=cancel,
        )

    if output_format == "json":
        _output_json(result)
    else:
        format_record("Certificates", result, result.success, console)
    _finish(result.success)


@enterprise_app.command("remove")
def enterprise_remove(
    ctx: typer.Context,
    ssid: str = typer.Argument(..., help="Network name"),
    output_format: str = _format_option(),
):
    """Remove an enterprise network suggestion."""
    services: Services = ctx.obj
    cancel = threading.Event()
    with _handle_errors(output_format):
        services.registry.ensure_selected()
        result = _run_in_background(
            f"Removing {escape(ssid)}…",
            lambda: services.bridge.remove_suggestion(ssid, cancel),
            show=output_format != "json",
            cancel=cancel,
        )

    if output_format == "json":
        _output_json(result)
    else:
        format_record("Suggestion Removal", result, result.success, console)
    _finish(result.success)


# ---------------------------------------------------------------------------
# diag
# ---------------------------------------------------------------------------


def _save_record(
    services: Services,
    probe: str,
    target: str,
    record: BaseModel,
    ok: bool,
    raw_output: str = "",
) -> Path:
    """Write one diagnostics record to a fresh run directory."""
    run_dir = services.config.create_run_dir(probe)
    csv_handler = CSVHandler(run_dir / "results.csv")
    rows = csv_handler.write_record(probe, target, record, "success" if ok else "failure")
    if raw_output:
        (run_dir / "raw_output" / f"{probe}.txt").write_text(raw_output)

    services.config.save_metadata(
        run_dir,
        {
            "probe": probe,
            "target": target,
            "device": services.registry.selected,
            "status": "success" if ok else "failure",
            "result": record.model_dump(mode="json"),
        },
    )
    logger.info(f"Saved {rows} row(s) to {run_dir}")
    return run_dir


def _report(
    services: Services,
    title: str,
    probe: str,
    target: str,
    record: BaseModel,
    ok: bool,
    output_format: str,
    save: bool,
    raw_output: str = "",
) -> None:
    if output_format == "json":
        _output_json(record)
    else:
        format_record(title, record, ok, console)

    if save:
        run_dir = _save_record(services, probe, target, record, ok, raw_output)
        if output_format != "json":
            console.print(f"[dim]Saved to {run_dir}[/dim]")


@diag_app.command("ping")
def diag_ping(
    ctx: typer.Context,
    host: str = typer.Argument(..., help="Host name or address"),
    count: int = typer.Option(4, "--count", "-c", help="Number of echo requests"),
    output_format: str = _format_option(),
    save: bool = _save_option(),
):
    """Ping a host from the device."""
    services: Services = ctx.obj
    with _handle_errors(output_format):
        serial = services.registry.ensure_selected()
        result = _run_in_background(
            f"Pinging {escape(host)}…",
            lambda: PingProbe(services.executor).run(host, count=count),
            show=output_format != "json",
        )

    logger.debug(f"Ping from {serial} to {host}: alive={result.alive}")
    _report(services, "Ping", "ping", host, result, result.alive, output_format, save, result.output)
    _finish(result.alive)


@diag_app.command("dns")
def diag_dns(
    ctx: typer.Context,
    hostname: str = typer.Argument(..., help="Host name to resolve"),
    output_format: str = _format_option(),
    save: bool = _save_option(),
):
    """Resolve a host name on the device."""
    services: Services = ctx.obj
    with _handle_errors(output_format):
        services.registry.ensure_selected()
        result = _run_in_background(
            f"Resolving {escape(hostname)}…",
            lambda: DnsProbe(services.executor).run(hostname),
            show=output_format != "json",
        )

    ok = bool(result.addresses)
    _report(services, "DNS Lookup", "dns", hostname, result, ok, output_format, save)
    _finish(ok)


@diag_app.command("internet")
def diag_internet(
    ctx: typer.Context,
    output_format: str = _format_option(),
    save: bool = _save_option(),
):
    """Check whether the device can reach the internet."""
    services: Services = ctx.obj
    with _handle_errors(output_format):
        services.registry.ensure_selected()
        result = _run_in_background(
            "Checking internet access…",
            InternetProbe(services.executor).run,
            show=output_format != "json",
        )

    _report(
        services, "Internet", "internet", result.endpoint or "-", result,
        result.has_internet, output_format, save,
    )
    _finish(result.has_internet)


@diag_app.command("captive")
def diag_captive(
    ctx: typer.Context,
    output_format: str = _format_option(),
    save: bool = _save_option(),
):
    """Detect a captive portal on the current network."""
    services: Services = ctx.obj
    with _handle_errors(output_format):
        services.registry.ensure_selected()
        probe = CaptivePortalProbe(services.executor)
        result = _run_in_background(
            "Checking for a captive portal…",
            probe.run,
            show=output_format != "json",
        )

    ok = result.error is None
    _report(services, "Captive Portal", "captive", probe.url, result, ok, output_format, save)
    _finish(ok)


@diag_app.command("interface")
def diag_interface(
    ctx: typer.Context,
    interface: str = typer.Option("wlan0", "--interface", "-i", help="Network interface"),
    output_format: str = _format_option(),
    save: bool = _save_option(),
):
    """Show address, gateway and DNS servers of an interface."""
    services: Services = ctx.obj
    with _handle_errors(output_format):
        services.registry.ensure_selected()
        result = InterfaceProbe(services.executor).run(interface)

    ok = result.ip_address is not None
    _report(services, "Interface", "interface", interface, result, ok, output_format, save)
    _finish(ok)
