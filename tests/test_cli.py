"""Tests for the Typer CLI with a scripted device behind it."""
import json

import pytest
from typer.testing import CliRunner

from adbwifi import __version__
from adbwifi.cli import main as cli
from adbwifi.core.config import AppConfig
from fakes import devices_output, fail

runner = CliRunner()

SCAN_OUTPUT = (
    "BSSID Frequency RSSI Age(sec) SSID Flags\n"
    "84:18:3a:06:be:58 2412 -71 17.210 Weak [WPA2-PSK-CCMP][ESS]\n"
    "a0:b1:c2:d3:e4:f5 5180 -48 3.002 Strong [RSN-SAE-CCMP][ESS]\n"
)


@pytest.fixture
def device(executor, tmp_path, monkeypatch):
    """Wire the CLI to the scripted executor."""

    def fake_init(serial=None, **_kwargs):
        config = AppConfig(
            serial=serial,
            output_dir=tmp_path / "runs",
            scan_settle_seconds=0,
            connect_settle_seconds=0,
            toggle_settle_seconds=0,
            enterprise_timeout=0.2,
            poll_interval=0.01,
        )
        return cli.Services(config, executor)

    monkeypatch.setattr(cli, "_init_context", fake_init)
    executor.on("getprop ro.product.model", "Pixel 6")
    executor.on("getprop ro.build.version.sdk", "33")
    return executor


def single_device(executor):
    executor.on("devices -l", devices_output("emulator-5554 device model:Pixel_6"))


def two_devices(executor):
    executor.on("devices -l", devices_output("emulator-5554 device", "R58M123ABC device"))


def test_version():
    result = runner.invoke(cli.app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_device_list_json(device):
    two_devices(device)
    result = runner.invoke(cli.app, ["device", "list", "--format", "json"])

    assert result.exit_code == 0
    listings = json.loads(result.stdout)
    assert [item["device"]["serial"] for item in listings] == ["emulator-5554", "R58M123ABC"]
    assert listings[0]["info"]["model"] == "Pixel 6"


def test_device_list_rich(device):
    single_device(device)
    result = runner.invoke(cli.app, ["device", "list"])

    assert result.exit_code == 0
    assert "emulator-5554" in result.output


def test_ambiguous_selection_exits_with_hint(device):
    two_devices(device)
    result = runner.invoke(cli.app, ["wifi", "status", "-f", "json"])

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["success"] is False
    assert "emulator-5554" in payload["error"]
    assert "R58M123ABC" in payload["error"]
    assert payload["hint"]


def test_serial_option_targets_device(device):
    two_devices(device)
    device.on("cmd wifi status", "Wifi is enabled")
    result = runner.invoke(cli.app, ["--serial", "R58M123ABC", "wifi", "status", "-f", "json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout)["enabled"] is True
    assert {target for _line, target in device.calls} == {"R58M123ABC"}


def test_wifi_scan_sorted_by_signal(device):
    single_device(device)
    device.on("list-scan-results", SCAN_OUTPUT)
    result = runner.invoke(cli.app, ["wifi", "scan", "-f", "json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["count"] == 2
    assert [n["ssid"] for n in payload["networks"]] == ["Strong", "Weak"]
    assert payload["networks"][0]["security"] == "SAE"


def test_wifi_connect_without_password_fails(device):
    single_device(device)
    result = runner.invoke(cli.app, ["wifi", "connect", "HomeNet", "-f", "json"])

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["error"] == "Password is required for WPA2/WPA3 networks"
    assert not any("connect-network" in line for line in device.commands)


def test_wifi_enable(device):
    single_device(device)
    device.on("cmd wifi status", "Wifi is enabled")
    result = runner.invoke(cli.app, ["wifi", "enable", "-f", "json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout)["message"] == "WiFi enabled"
    assert "shell cmd wifi set-wifi-enabled enabled" in device.commands


def test_wifi_command_failure_exits_1(device):
    single_device(device)
    device.on("list-networks", fail("cmd: Can't find service: wifi"))
    result = runner.invoke(cli.app, ["wifi", "saved"])

    assert result.exit_code == 1
    assert "Failed to list networks" in result.output


def test_enterprise_connect_missing_password_issues_no_commands(device):
    result = runner.invoke(cli.app, [
        "--serial", "emulator-5554",
        "enterprise", "connect", "CorpNet",
        "--method", "peap",
        "--identity", "alice",
        "--domain", "corp.example.com",
        "-f", "json",
    ])

    assert result.exit_code == 1
    assert json.loads(result.stdout)["error"] == "Password is required for EAP-PEAP/TTLS"
    assert device.calls == []


def test_enterprise_connect_invalid_method(device):
    result = runner.invoke(cli.app, [
        "enterprise", "connect", "CorpNet",
        "--method", "leap",
        "--identity", "alice",
        "--domain", "corp.example.com",
    ])

    assert result.exit_code == 1
    assert "Invalid enterprise settings" in result.output
    assert device.calls == []


def test_enterprise_check_not_installed(device):
    single_device(device)
    device.on("pm list packages", "")
    result = runner.invoke(cli.app, ["enterprise", "check", "-f", "json"])

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["installed"] is False
    assert payload["hint"]


def test_diag_ping_save(device, tmp_path):
    single_device(device)
    device.on(
        "ping -c 2",
        "PING 8.8.8.8 (8.8.8.8) 56(84) bytes of data.\n"
        "2 packets transmitted, 2 received, 0% packet loss, time 1001ms\n"
        "rtt min/avg/max/mdev = 10.000/12.500/15.000/2.500 ms",
    )
    result = runner.invoke(cli.app, ["diag", "ping", "8.8.8.8", "--count", "2", "--save", "-f", "json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout)["time"] == 12.5

    run_dirs = list((tmp_path / "runs").iterdir())
    assert len(run_dirs) == 1
    run_dir = run_dirs[0]
    metadata = json.loads((run_dir / "metadata.json").read_text())
    assert metadata["probe"] == "ping"
    assert metadata["device"] == "emulator-5554"
    assert "alive" in (run_dir / "results.csv").read_text()
    assert "rtt min/avg/max" in (run_dir / "raw_output" / "ping.txt").read_text()


def test_diag_captive_rich(device):
    single_device(device)
    device.on("-o /dev/null", "204\n")
    result = runner.invoke(cli.app, ["diag", "captive"])

    assert result.exit_code == 0
    assert "Captive Portal" in result.output


def test_health_json(device):
    single_device(device)
    device.on("version", "Android Debug Bridge version 1.0.41")
    result = runner.invoke(cli.app, ["health", "-f", "json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["status"] == "ok"
    assert payload["devices"] == [{"serial": "emulator-5554", "state": "device"}]


def test_device_select_unknown_serial(device):
    single_device(device)
    result = runner.invoke(cli.app, ["device", "select", "R58M123ABC", "-f", "json"])

    assert result.exit_code == 1
    assert "R58M123ABC" in json.loads(result.stdout)["error"]


def test_device_select_single_device(device):
    single_device(device)
    result = runner.invoke(cli.app, ["device", "select", "-f", "json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["selected"] == "emulator-5554"
    assert payload["version"]["supported"] is True


def test_diag_interface_without_address_exits_1(device):
    single_device(device)
    device.on("ip addr show", fail("Device \"rmnet9\" does not exist."))
    result = runner.invoke(cli.app, ["diag", "interface", "-i", "rmnet9", "-f", "json"])

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["interface"] == "rmnet9"
    assert "ip_address" not in payload
