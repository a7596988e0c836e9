"""
Host system and tool detection.
"""

import platform
import shutil
import socket
import sys
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class SystemInfo(BaseModel):
    """Host system information model."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    os_type: str  # 'Linux', 'Darwin', 'Windows'
    platform: str
    python_version: str
    hostname: str
    adb_path: Optional[str] = None


class MissingTool(BaseModel):
    """Information about a missing tool."""

    name: str
    suggestion: str


class SystemDetector:
    """Detect host information and availability of the adb binary."""

    def detect_system(self, adb: str = "adb") -> SystemInfo:
        """Detect current system information."""
        return SystemInfo(
            os_type=platform.system(),
            platform=platform.platform(),
            python_version=sys.version.split()[0],
            hostname=socket.gethostname(),
            adb_path=self.get_tool_path(adb),
        )

    def check_required_tools(self, tools: List[str]) -> List[MissingTool]:
        """Check if required tools are available."""
        missing = []
        os_type = platform.system()

        for tool in tools:
            if not self._is_tool_available(self._get_tool_name(tool, os_type)):
                missing.append(MissingTool(
                    name=tool,
                    suggestion=self._get_installation_suggestion(tool, os_type)
                ))

        return missing

    def _get_tool_name(self, tool: str, os_type: str) -> str:
        """Get OS-specific tool name."""
        if os_type == "Windows" and tool == "adb":
            return "adb.exe"
        return tool

    def _is_tool_available(self, tool: str) -> bool:
        """Check if a tool is available in PATH (or is an existing path)."""
        return shutil.which(tool) is not None

    def _get_installation_suggestion(self, tool: str, os_type: str) -> str:
        """Get installation suggestion for a missing tool."""
        suggestions = {
            "Linux": {
                "adb": "sudo apt-get install android-tools-adb (or install Android SDK Platform Tools)",
            },
            "Darwin": {
                "adb": "brew install --cask android-platform-tools",
            },
            "Windows": {
                "adb": "winget install Google.PlatformTools (or install Android SDK Platform Tools)",
            },
        }

        if os_type in suggestions and tool in suggestions[os_type]:
            return suggestions[os_type][tool]

        return f"Please install {tool} manually"

    def get_tool_path(self, tool: str) -> Optional[str]:
        """Get the full path to a tool."""
        return shutil.which(self._get_tool_name(tool, platform.system()))
