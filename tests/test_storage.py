"""Tests for CSV result persistence and logging setup."""
from loguru import logger

from adbwifi.modules.base import DnsResult
from adbwifi.storage.csv_handler import CSVHandler
from adbwifi.storage.logger import setup_logging


def test_write_record_one_row_per_field(tmp_path):
    handler = CSVHandler(tmp_path / "results.csv")
    record = DnsResult(hostname="example.com", addresses=["93.184.216.34", "93.184.216.35"], source="nslookup")

    rows = handler.write_record("dns", "example.com", record, "success")

    assert rows == 3  # error is unset and skipped
    results = handler.read_results()
    assert [r["metric"] for r in results] == ["hostname", "addresses", "source"]
    assert results[1]["value"] == "93.184.216.34;93.184.216.35"
    assert all(r["probe"] == "dns" and r["status"] == "success" for r in results)


def test_existing_csv_is_appended(tmp_path):
    path = tmp_path / "results.csv"
    CSVHandler(path).write_record("dns", "a", DnsResult(hostname="a"), "failure")
    CSVHandler(path).write_record("dns", "b", DnsResult(hostname="b"), "failure")

    assert [r["target"] for r in CSVHandler(path).read_results()] == ["a", "b"]


def test_read_results_missing_file(tmp_path):
    handler = CSVHandler(tmp_path / "results.csv")
    (tmp_path / "results.csv").unlink()
    assert handler.read_results() == []


def test_setup_logging_writes_files(tmp_path):
    log_dir = tmp_path / "logs"
    setup_logging(log_dir, verbose=True)
    logger.info("selected emulator-5554")
    logger.error("bridge down")
    # Closing the sinks flushes them
    logger.remove()

    assert "selected emulator-5554" in (log_dir / "adbwifi.log").read_text()
    errors = (log_dir / "adbwifi_errors.log").read_text()
    assert "bridge down" in errors
    assert "selected emulator-5554" not in errors
