"""
Configuration management.
"""

from pathlib import Path
from datetime import datetime
from typing import Any, Optional
import json

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_FILE_NAME = ".adbwifi.yaml"

# Keys accepted from the YAML file and the type they are coerced to
FILE_KEYS = {
    "adb_path": str,
    "serial": str,
    "command_timeout": int,
    "wait_timeout": int,
    "scan_settle_seconds": float,
    "connect_settle_seconds": float,
    "toggle_settle_seconds": float,
    "enterprise_timeout": float,
    "poll_interval": float,
    "min_sdk": int,
    "companion_package": str,
    "host": str,
    "port": int,
    "verbose": bool,
}


def load_config_file() -> dict[str, Any]:
    """
    Load optional config from ~/.adbwifi.yaml or ./.adbwifi.yaml.
    Returns only the keys that are present and valid so callers can use
    their own defaults for the rest.
    """
    result: dict[str, Any] = {}
    candidates = [
        Path.home() / CONFIG_FILE_NAME,
        Path.cwd() / CONFIG_FILE_NAME,
    ]
    raw: dict[str, Any] = {}
    for path in candidates:
        if path.exists():
            try:
                with open(path, "r", encoding="utf-8") as f:
                    raw = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError):
                raw = {}
            break
    if not isinstance(raw, dict) or not raw:
        return result
    if "output_dir" in raw:
        result["output_dir"] = Path(raw["output_dir"]).expanduser().resolve()
    for key, cast in FILE_KEYS.items():
        if key not in raw:
            continue
        try:
            result[key] = cast(raw[key])
        except (TypeError, ValueError):
            pass
    return result


class AppConfig(BaseSettings):
    """Application configuration; every field can be set via ADBWIFI_<NAME>."""

    model_config = SettingsConfigDict(env_prefix="ADBWIFI_")

    adb_path: str = "adb"
    serial: Optional[str] = None
    command_timeout: int = 30
    wait_timeout: int = 120
    scan_settle_seconds: float = 2.0
    connect_settle_seconds: float = 3.0
    toggle_settle_seconds: float = 1.0
    enterprise_timeout: float = 30.0
    poll_interval: float = 0.5
    min_sdk: int = 30
    companion_package: str = "com.example.wifimcpcompanion"
    # Controller-facing listener; unused by the device layer
    host: str = "0.0.0.0"
    port: int = 3000
    output_dir: Path = Field(default=Path("output"))
    verbose: bool = False

    @field_validator('output_dir', mode='before')
    @classmethod
    def validate_output_dir(cls, v):
        """Validate and convert output_dir to Path."""
        if v is None:
            return Path("output")
        if isinstance(v, str):
            return Path(v)
        if isinstance(v, Path):
            return v
        return Path("output")

    def model_post_init(self, __context):
        """Resolve output directory to an absolute path."""
        self.output_dir = self.output_dir.resolve()

    def create_run_dir(self, name: str) -> Path:
        """Create a timestamped directory for one saved run."""
        timestamp = datetime.now().strftime("%Y-%m-%d_%H%M%S")
        run_dir = self.output_dir / f"{timestamp}_{name}"
        run_dir.mkdir(parents=True, exist_ok=True)

        (run_dir / "raw_output").mkdir(exist_ok=True)

        return run_dir

    def save_metadata(self, run_dir: Path, metadata: dict):
        """Save run metadata to JSON file."""
        metadata_file = run_dir / "metadata.json"

        metadata["timestamp"] = datetime.now().isoformat()

        with open(metadata_file, "w") as f:
            json.dump(metadata, f, indent=2, default=str)
