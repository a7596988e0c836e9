"""Scripted adb executor used in place of a device."""
from collections import deque
from typing import Callable, List, Optional, Union
from unittest.mock import MagicMock

from adbwifi.core.executor import AdbExecutor, CommandResult

Reply = Union[CommandResult, str, Callable[[str], CommandResult]]


def ok(stdout: str = "") -> CommandResult:
    return CommandResult(command="", success=True, stdout=stdout, stderr="", exit_code=0)


def fail(stderr: str = "error", exit_code: int = 1) -> CommandResult:
    return CommandResult(command="", success=False, stdout="", stderr=stderr, exit_code=exit_code)


class ScriptedExecutor(AdbExecutor):
    """
    AdbExecutor whose replies come from rules instead of a device.

    A rule maps a command fragment to one or more replies. The first rule
    whose fragment occurs in the command line wins; its replies are consumed
    in order and the last one repeats. Unmatched commands succeed with
    empty output.
    """

    def __init__(self):
        super().__init__(adb_path="adb", app_logger=MagicMock())
        self.rules: List[tuple] = []
        self.calls: List[tuple] = []  # (command line, target serial)

    def on(self, fragment: str, *replies: Reply) -> "ScriptedExecutor":
        self.rules.append((fragment, deque(replies or (ok(),))))
        return self

    def execute(self, args, timeout=None, serial=None, unscoped=False, sensitive=False) -> CommandResult:
        target: Optional[str] = None if unscoped else (serial if serial is not None else self.selection.get())
        line = " ".join(args)
        self.calls.append((line, target))

        for fragment, replies in self.rules:
            if fragment in line:
                reply = replies.popleft() if len(replies) > 1 else replies[0]
                if callable(reply):
                    reply = reply(line)
                if isinstance(reply, str):
                    reply = ok(reply)
                return reply.model_copy(update={"command": line})
        return ok().model_copy(update={"command": line})

    @property
    def commands(self) -> List[str]:
        return [line for line, _ in self.calls]

    @property
    def shell_commands(self) -> List[str]:
        return [line[len("shell "):] for line, _ in self.calls if line.startswith("shell ")]


def devices_output(*rows: str) -> str:
    return "\n".join(["List of devices attached", *rows, ""])

