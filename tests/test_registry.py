"""Tests for device enumeration, selection and the identity cache."""
import pytest

from adbwifi.core.errors import AmbiguousDeviceError, DeviceCommandError, NoDeviceError
from adbwifi.core.registry import DeviceRegistry, parse_device_list
from fakes import devices_output, fail, ok


def script_identity(executor, model="Pixel 6", sdk="33"):
    executor.on("getprop ro.product.model", model)
    executor.on("getprop ro.product.brand", "google")
    executor.on("getprop ro.product.manufacturer", "Google")
    executor.on("getprop ro.build.version.release", "13")
    executor.on("getprop ro.build.version.sdk", sdk)
    executor.on("getprop ro.build.id", "TQ3A.230805.001")


def test_parse_device_list():
    output = devices_output(
        "* daemon not running; starting now at tcp:5037",
        "emulator-5554          device product:sdk_gphone64 model:sdk_gphone64 device:emu64 transport_id:1",
        "R58M123ABC             unauthorized usb:1-1 transport_id:2",
        "0123456789             no permissions (user in plugdev group); see [http://developer.android.com/tools/device.html]",
        "lonely",
    )
    devices = parse_device_list(output)

    assert [d.serial for d in devices] == ["emulator-5554", "R58M123ABC", "0123456789"]
    assert devices[0].ready is True
    assert devices[0].model == "sdk_gphone64"
    assert devices[0].transport_id == "1"
    assert devices[1].state == "unauthorized"
    assert devices[1].ready is False
    assert devices[2].state == "no permissions"


def test_parse_device_list_empty():
    assert parse_device_list(devices_output()) == []


def test_auto_selects_single_ready_device(executor):
    """Scenario: one ready device is selected without an explicit choice."""
    executor.on("devices -l", devices_output(
        "emulator-5554 device model:sdk_gphone64",
        "R58M123ABC unauthorized",
    ))
    script_identity(executor)
    registry = DeviceRegistry(executor)

    assert registry.ensure_selected() == "emulator-5554"
    assert registry.selected == "emulator-5554"


def test_ambiguity_names_both_serials(executor):
    executor.on("devices -l", devices_output(
        "emulator-5554 device",
        "R58M123ABC device",
    ))
    script_identity(executor)
    registry = DeviceRegistry(executor)

    with pytest.raises(AmbiguousDeviceError) as exc_info:
        registry.ensure_selected()

    message = str(exc_info.value)
    assert "emulator-5554" in message
    assert "R58M123ABC" in message
    assert exc_info.value.serials == ["emulator-5554", "R58M123ABC"]
    assert registry.selected is None


def test_no_device(executor):
    executor.on("devices -l", devices_output())
    registry = DeviceRegistry(executor)

    with pytest.raises(NoDeviceError):
        registry.ensure_selected()


def test_unauthorized_device_hint(executor):
    executor.on("devices -l", devices_output("R58M123ABC unauthorized"))
    registry = DeviceRegistry(executor)

    with pytest.raises(NoDeviceError) as exc_info:
        registry.ensure_selected()
    assert "R58M123ABC" in exc_info.value.hint


def test_explicit_selection_skips_enumeration(executor):
    registry = DeviceRegistry(executor)
    registry.select("R58M123ABC")

    assert registry.ensure_selected() == "R58M123ABC"
    assert executor.commands == []


def test_enumeration_failure(executor):
    executor.on("devices -l", fail("cannot connect to daemon"))
    registry = DeviceRegistry(executor)

    with pytest.raises(DeviceCommandError):
        registry.enumerate()


def test_refresh_caches_info_with_explicit_serial(executor):
    executor.on("devices -l", devices_output("emulator-5554 device", "R58M123ABC device"))
    script_identity(executor)
    registry = DeviceRegistry(executor)
    registry.select("R58M123ABC")

    registry.refresh()

    info = registry.cached_info("emulator-5554")
    assert info.model == "Pixel 6"
    assert info.sdk_version == 33
    # Identity queries target each device directly and leave the selection alone
    targets = {target for line, target in executor.calls if "getprop" in line}
    assert targets == {"emulator-5554", "R58M123ABC"}
    assert registry.selected == "R58M123ABC"


def test_refresh_evicts_and_clears_vanished_selection(executor):
    executor.on(
        "devices -l",
        devices_output("emulator-5554 device", "R58M123ABC device"),
        devices_output("emulator-5554 device"),
    )
    script_identity(executor)
    registry = DeviceRegistry(executor)
    registry.select("R58M123ABC")

    registry.refresh()
    assert registry.cached_info("R58M123ABC") is not None

    registry.refresh()
    assert registry.cached_info("R58M123ABC") is None
    assert registry.cached_info("emulator-5554") is not None
    assert registry.selected is None


def test_list_devices_marks_selection(executor):
    executor.on("devices -l", devices_output("emulator-5554 device", "R58M123ABC offline"))
    script_identity(executor)
    registry = DeviceRegistry(executor)
    registry.select("emulator-5554")

    listings = registry.list_devices()

    assert [listing.selected for listing in listings] == [True, False]
    assert listings[0].info.model == "Pixel 6"
    assert listings[1].info is None


def test_device_info_fallbacks(executor):
    executor.on("getprop ro.product.model", fail())
    executor.on("getprop ro.build.version.sdk", "S")
    registry = DeviceRegistry(executor)
    registry.select("emulator-5554")

    info = registry.get_device_info()

    assert info.serial == "emulator-5554"
    assert info.model == "Unknown"
    assert info.brand == "Unknown"  # unmatched commands answer with empty output
    assert info.sdk_version == 0


def test_unreadable_identity_is_not_cached(executor):
    executor.on("devices -l", devices_output("emulator-5554 device"))
    executor.on("getprop", fail("error: closed"))
    registry = DeviceRegistry(executor)

    registry.refresh()
    assert registry.cached_info("emulator-5554") is None
    assert registry.get_device_info("emulator-5554").model == "Unknown"
    assert registry.cached_info("emulator-5554") is None

    # Once the device answers, the next refresh queries and caches it
    executor.rules = [(f, r) for f, r in executor.rules if f != "getprop"]
    script_identity(executor)
    registry.refresh()
    assert registry.cached_info("emulator-5554").model == "Pixel 6"


def test_check_version_supported(executor):
    script_identity(executor, sdk="33")
    registry = DeviceRegistry(executor)
    registry.select("emulator-5554")

    check = registry.check_version()
    assert check.supported is True
    assert check.sdk_version == 33


def test_check_version_too_old(executor):
    script_identity(executor, sdk="29")
    registry = DeviceRegistry(executor)
    registry.select("emulator-5554")

    check = registry.check_version()
    assert check.supported is False
    assert check.message == (
        "Android SDK 29 detected. This tool requires SDK 30 or higher for full functionality."
    )


def test_check_version_uses_configured_minimum(executor):
    script_identity(executor, sdk="31")
    registry = DeviceRegistry(executor, min_sdk=33)
    registry.select("emulator-5554")

    check = registry.check_version()
    assert check.supported is False
    assert "requires SDK 33 or higher" in check.message


def test_selection_lock_is_per_device(executor):
    registry = DeviceRegistry(executor)
    selection = registry.selection

    assert selection.device_lock("a") is selection.device_lock("a")
    assert selection.device_lock("a") is not selection.device_lock("b")
    with selection.exclusive("a") as locked:
        assert locked == "a"
        assert selection.device_lock("a").locked()
    assert not selection.device_lock("a").locked()


def test_exclusive_without_selection_holds_no_lock(executor):
    registry = DeviceRegistry(executor)
    with registry.selection.exclusive() as locked:
        assert locked is None


def test_scripted_reply_order(executor):
    executor.on("getprop ro.build.id", ok("first"), ok("second"))
    assert executor.shell("getprop ro.build.id").stdout == "first"
    assert executor.shell("getprop ro.build.id").stdout == "second"
    assert executor.shell("getprop ro.build.id").stdout == "second"
