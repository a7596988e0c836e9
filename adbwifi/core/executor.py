"""
Command execution engine for the adb debug bridge.
"""

import subprocess
import time
from typing import List, Optional

from loguru import logger
from pydantic import BaseModel

from adbwifi.core.errors import BridgeUnavailableError, CommandTimeoutError, DeviceCommandError
from adbwifi.core.selection import SelectionState

DEFAULT_TIMEOUT = 30
WAIT_TIMEOUT = 120


class CommandResult(BaseModel):
    """Result of an adb invocation."""

    command: str
    success: bool
    stdout: str
    stderr: str
    exit_code: int
    duration: float = 0.0
    timed_out: bool = False


class AdbExecutor:
    """Execute adb commands against the selected device."""

    def __init__(
        self,
        adb_path: str = "adb",
        selection: Optional[SelectionState] = None,
        app_logger=None,
        timeout: float = DEFAULT_TIMEOUT,
        wait_timeout: float = WAIT_TIMEOUT,
    ):
        self.adb_path = adb_path
        self.timeout = timeout
        self.selection = selection if selection is not None else SelectionState()
        self.logger = app_logger if app_logger is not None else logger
        self.wait_timeout = wait_timeout

    def execute(
        self,
        args: List[str],
        timeout: Optional[float] = None,
        serial: Optional[str] = None,
        unscoped: bool = False,
        sensitive: bool = False,
    ) -> CommandResult:
        """
        Execute an adb command.

        Args:
            args: adb arguments (without the binary or ``-s``)
            timeout: Timeout in seconds (default: the executor's timeout)
            serial: Explicit target; reserved for the device registry,
                every other caller targets the current selection
            unscoped: Do not add ``-s`` at all
            sensitive: The last argument carries secrets; it is redacted
                from logs and from the returned command string

        Returns:
            CommandResult object

        Raises:
            BridgeUnavailableError: adb is missing or could not be spawned
        """
        timeout = timeout if timeout is not None else self.timeout
        command = [self.adb_path]
        if not unscoped:
            target = serial if serial is not None else self.selection.get()
            if target:
                command.extend(["-s", target])
        command.extend(args)

        start_time = time.time()
        shown = command[:-1] + ["<redacted>"] if sensitive else command
        cmd_str = " ".join(shown)

        self.logger.info(f"Executing command: {cmd_str}")

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=timeout,
            )

        except subprocess.TimeoutExpired:
            duration = time.time() - start_time
            self.logger.error(f"Command timed out after {timeout}s: {cmd_str}")

            return CommandResult(
                command=cmd_str,
                success=False,
                stdout="",
                stderr=f"Command timed out after {timeout} seconds",
                exit_code=-1,
                duration=duration,
                timed_out=True,
            )

        except OSError as e:
            self.logger.error(f"Could not run adb: {cmd_str} - {e}")
            raise BridgeUnavailableError(
                f"adb is not available ({self.adb_path}): {e}",
                hint="Install Android SDK Platform Tools or point --adb at the adb binary.",
            ) from e

        duration = time.time() - start_time

        command_result = CommandResult(
            command=cmd_str,
            success=(result.returncode == 0),
            stdout=(result.stdout or "").strip(),
            stderr=(result.stderr or "").strip(),
            exit_code=result.returncode,
            duration=duration,
        )

        self.logger.info(
            f"Command completed: {cmd_str} "
            f"(return code: {result.returncode}, duration: {duration:.2f}s)"
        )

        return command_result

    def shell(
        self,
        command: str,
        timeout: Optional[float] = None,
        serial: Optional[str] = None,
        sensitive: bool = False,
    ) -> CommandResult:
        """Run ``command`` in the device shell."""
        return self.execute(["shell", command], timeout=timeout, serial=serial, sensitive=sensitive)

    def check_adb(self) -> bool:
        """Check whether the adb binary answers."""
        try:
            return self.execute(["version"], unscoped=True).success
        except BridgeUnavailableError:
            return False

    def wait_for_device(self, timeout: Optional[float] = None) -> None:
        result = self.execute(["wait-for-device"], timeout=timeout or self.wait_timeout)
        if result.timed_out:
            raise CommandTimeoutError(f"Timeout waiting for device: {result.stderr}")
        if not result.success:
            raise DeviceCommandError(f"wait-for-device failed: {result.stderr}")

    def forward(self, local_port: int, remote_port: int) -> None:
        """Forward a host TCP port to the device."""
        result = self.execute(["forward", f"tcp:{local_port}", f"tcp:{remote_port}"])
        if not result.success:
            raise DeviceCommandError(f"Failed to setup port forwarding: {result.stderr}")

    def reverse(self, remote_port: int, local_port: int) -> None:
        """Forward a device TCP port back to the host."""
        result = self.execute(["reverse", f"tcp:{remote_port}", f"tcp:{local_port}"])
        if not result.success:
            raise DeviceCommandError(f"Failed to setup reverse port forwarding: {result.stderr}")

    def remove_forward(self, local_port: int) -> None:
        self.execute(["forward", "--remove", f"tcp:{local_port}"])

    def remove_reverse(self, remote_port: int) -> None:
        self.execute(["reverse", "--remove", f"tcp:{remote_port}"])
