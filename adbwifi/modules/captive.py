"""
Captive portal detection.
"""

import shlex
from typing import Optional, Tuple

from loguru import logger

from adbwifi.modules.base import BaseProbe, CaptivePortalResult

CAPTIVE_CHECK_URL = "http://connectivitycheck.gstatic.com/generate_204"
CONTENT_PREFIX_BYTES = 200


class CaptivePortalProbe(BaseProbe):
    """
    Detect a captive portal from the device.

    204 means no portal, a 301/302 with a redirect target means a portal at
    that target, and a 200 is a portal only if it carries a body. Anything
    else is reported as no portal.
    """

    def __init__(self, executor, url: str = CAPTIVE_CHECK_URL):
        super().__init__(executor)
        self.url = url

    def run(self) -> CaptivePortalResult:
        result = self.executor.shell(
            'curl -s -o /dev/null -w "%{http_code}\\n%{redirect_url}" '
            f"--connect-timeout 5 --max-time 10 -L {shlex.quote(self.url)}"
        )

        if not result.success:
            return CaptivePortalResult(
                is_captive=False,
                error="Failed to check captive portal",
            )

        code, redirect_url = self.parse_output(result.stdout)
        if code is None:
            return CaptivePortalResult(
                is_captive=False,
                error=f"Unexpected probe output: {result.stdout[:80]!r}",
            )

        if code == 204:
            return CaptivePortalResult(is_captive=False, status_code=code)

        if code in (301, 302) and redirect_url:
            logger.info(f"Captive portal redirect to {redirect_url}")
            return CaptivePortalResult(
                is_captive=True,
                portal_url=redirect_url,
                status_code=code,
            )

        if code == 200:
            content = self.executor.shell(
                f"curl -s --connect-timeout 5 --max-time 10 {shlex.quote(self.url)} "
                f"| head -c {CONTENT_PREFIX_BYTES}"
            )
            if content.success and content.stdout:
                logger.info("Captive portal served a page instead of 204")
                return CaptivePortalResult(
                    is_captive=True,
                    portal_url=self.url,
                    status_code=code,
                )

        return CaptivePortalResult(is_captive=False, status_code=code)

    def parse_output(self, output: str) -> Tuple[Optional[int], str]:
        """Split ``<status>\\n<redirect url>`` into its parts."""
        lines = output.strip().splitlines()
        try:
            code = int(lines[0].strip())
        except (IndexError, ValueError):
            return None, ""
        redirect_url = lines[1].strip() if len(lines) > 1 else ""
        return code, redirect_url
