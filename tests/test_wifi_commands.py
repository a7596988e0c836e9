"""Tests for WifiCommands against a scripted device."""
import pytest

from adbwifi.core.errors import WifiCommandError
from adbwifi.wifi.commands import WifiCommands
from fakes import fail

CONNECTED_DUMP = (
    'mWifiInfo SSID: "HomeNet", BSSID: 84:18:3a:06:be:58, '
    "Supplicant state: COMPLETED, RSSI: -51, Link speed: 144Mbps, Frequency: 2412MHz\n"
    "IP address: /192.168.1.42"
)
IDLE_DUMP = "mWifiInfo SSID: <unknown ssid>, Supplicant state: DISCONNECTED"


@pytest.fixture
def wifi(executor):
    executor.selection.set("emulator-5554")
    return WifiCommands(executor, scan_settle=2.0, connect_settle=3.0, toggle_settle=1.0)


def test_is_enabled(executor, wifi):
    executor.on("cmd wifi status", "Wifi is enabled")
    assert wifi.is_enabled() is True


def test_set_enabled_failure_raises(executor, wifi):
    executor.on("set-wifi-enabled", fail("Permission denial"))
    with pytest.raises(WifiCommandError) as exc_info:
        wifi.set_enabled(True)
    assert "Permission denial" in str(exc_info.value)


def test_scan_waits_then_reads(executor, wifi, no_sleep):
    executor.on(
        "list-scan-results",
        "BSSID Frequency RSSI Age(sec) SSID Flags\n"
        "84:18:3a:06:be:58 2412 -51 17.210 HomeNet [WPA2-PSK-CCMP][ESS]",
    )
    results = wifi.scan()

    assert executor.shell_commands == ["cmd wifi start-scan", "cmd wifi list-scan-results"]
    assert no_sleep == [2.0]
    assert [r.ssid for r in results] == ["HomeNet"]
    # Every command targets the selected device
    assert {target for _line, target in executor.calls} == {"emulator-5554"}


def test_connect_wpa2_verified(executor, wifi, no_sleep):
    executor.on("connect-network", "")
    executor.on("cmd wifi status", "Wifi is enabled")
    executor.on("dumpsys wifi", CONNECTED_DUMP)

    result = wifi.connect("HomeNet", "WPA2", "pa$$ word")

    assert result.success is True
    assert result.error is None
    assert result.status.ip_address == "192.168.1.42"
    assert executor.shell_commands[0] == "cmd wifi connect-network HomeNet wpa2 'pa$$ word'"
    assert no_sleep == [3.0]


def test_connect_quotes_ssid(executor, wifi, no_sleep):
    executor.on("dumpsys wifi", IDLE_DUMP)
    wifi.connect("Cafe; reboot", "open")
    assert executor.shell_commands[0] == "cmd wifi connect-network 'Cafe; reboot' open"


def test_connect_open_ignores_password(executor, wifi, no_sleep):
    executor.on("dumpsys wifi", IDLE_DUMP)
    wifi.connect("Cafe", "owe", "unused")
    assert executor.shell_commands[0] == "cmd wifi connect-network Cafe owe"


def test_connect_not_verified(executor, wifi, no_sleep):
    executor.on("dumpsys wifi", IDLE_DUMP)
    result = wifi.connect("HomeNet", "wpa3", "secret")

    assert result.success is False
    assert result.error == "Failed to verify connection"


def test_connect_rejected_by_device(executor, wifi, no_sleep):
    executor.on("connect-network", "Error: invalid network configuration")
    result = wifi.connect("HomeNet", "wpa2", "secret")

    assert result.success is False
    assert "invalid network configuration" in result.error
    assert no_sleep == []


def test_connect_requires_password(executor, wifi):
    result = wifi.connect("HomeNet", "wpa2")
    assert result.success is False
    assert result.error == "Password is required for WPA2/WPA3 networks"
    assert executor.calls == []


def test_connect_unknown_security(executor, wifi):
    result = wifi.connect("HomeNet", "wep", "secret")
    assert result.success is False
    assert "Unsupported security type" in result.error
    assert executor.calls == []


def test_disconnect_toggle(executor, wifi, no_sleep):
    wifi.disconnect()
    assert executor.shell_commands == [
        "cmd wifi set-wifi-enabled disabled",
        "cmd wifi set-wifi-enabled enabled",
    ]
    assert no_sleep == [1.0]


def test_disconnect_forget(executor, wifi):
    executor.on("cmd wifi status", "Wifi is enabled")
    executor.on("dumpsys wifi", CONNECTED_DUMP)
    executor.on("list-networks", "Network Id  SSID  Security type\n3  HomeNet  wpa2-psk")

    wifi.disconnect("forget")

    assert executor.shell_commands[-1] == "cmd wifi forget-network 3"


def test_disconnect_forget_not_connected(executor, wifi):
    executor.on("dumpsys wifi", IDLE_DUMP)
    with pytest.raises(WifiCommandError, match="Not connected to any network"):
        wifi.disconnect("forget")


def test_disconnect_forget_not_saved(executor, wifi):
    executor.on("dumpsys wifi", CONNECTED_DUMP)
    executor.on("list-networks", "0  Other  open")
    with pytest.raises(WifiCommandError, match='Could not find saved network for "HomeNet"'):
        wifi.disconnect("forget")


def test_disconnect_unknown_mode(wifi):
    with pytest.raises(WifiCommandError):
        wifi.disconnect("airplane")


def test_status_dump_failure_leaves_fields_unset(executor, wifi):
    executor.on("cmd wifi status", "Wifi is enabled")
    executor.on("dumpsys wifi", fail("dumpsys: permission denied"))

    status = wifi.get_status()
    assert status.enabled is True
    assert status.connected is False
    assert status.ssid is None


def test_get_ip_address(executor, wifi):
    executor.on("ip addr show", "    inet 10.0.0.7/24 brd 10.0.0.255 scope global wlan0")
    assert wifi.get_ip_address() == "10.0.0.7"
