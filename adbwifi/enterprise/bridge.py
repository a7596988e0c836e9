"""
File-drop protocol with the on-device companion agent.

The shell cannot configure 802.1X networks or install certificates, so those
requests are handed to a privileged companion app:

1. the request is written as JSON to a file in shared storage,
2. a targeted broadcast tells the app's receiver where the file is,
3. the result file is polled until the app writes its answer.

Each request carries a ``requestId``. A result carrying a different id is
ignored; a result without one is accepted, since older agents do not echo it.
"""

import json
import shlex
import threading
import time
import uuid
from typing import Any, Dict, Optional

from loguru import logger
from pydantic import ValidationError

from adbwifi.core.errors import (
    AdbWifiError,
    CommandTimeoutError,
    DeviceCommandError,
    ProtocolError,
    RequestCancelledError,
)
from adbwifi.core.executor import AdbExecutor
from adbwifi.enterprise.models import (
    BridgeResult,
    CertificateInstallResult,
    CertificateListResult,
    EapConfig,
    EnterpriseConnectionResult,
    SuggestionRemovalResult,
)

COMPANION_PACKAGE = "com.example.wifimcpcompanion"
RECEIVER = ".AdbBridgeReceiver"
COMMAND_FILE = "/sdcard/Download/wifi_mcp_command.json"
RESULT_FILE = "/sdcard/Download/wifi_mcp_result.json"
RESULT_TIMEOUT = 30.0
POLL_INTERVAL = 0.5

# action tag -> broadcast action suffix
ACTIONS = {
    "connect_enterprise": "CONNECT_ENTERPRISE",
    "install_certificate": "INSTALL_CERTIFICATE",
    "list_certificates": "LIST_CERTIFICATES",
    "disconnect": "DISCONNECT",
}


class EnterpriseBridge:
    """Exchange requests with the companion agent through shared storage."""

    def __init__(
        self,
        executor: AdbExecutor,
        package: str = COMPANION_PACKAGE,
        timeout: float = RESULT_TIMEOUT,
        poll_interval: float = POLL_INTERVAL,
    ):
        self.executor = executor
        self.selection = executor.selection
        self.package = package
        self.timeout = timeout
        self.poll_interval = poll_interval

    @property
    def install_hint(self) -> str:
        return f"Install the companion app ({self.package}) on the device, e.g. adb install companion.apk"

    def is_companion_installed(self) -> bool:
        result = self.executor.shell(f"pm list packages {shlex.quote(self.package)}")
        expected = f"package:{self.package}"
        return any(line.strip() == expected for line in result.stdout.splitlines())

    def connect_enterprise(
        self,
        config: EapConfig,
        cancel: Optional[threading.Event] = None,
    ) -> EnterpriseConnectionResult:
        """Ask the companion agent to join an 802.1X network."""
        error = self._validate_eap(config)
        if error:
            return EnterpriseConnectionResult(
                success=False,
                ssid=config.ssid,
                eap_method=config.eap_method,
                error=error,
            )

        payload = config.model_dump(by_alias=True, exclude_none=True)
        try:
            reply = self._exchange("connect_enterprise", payload, cancel)
        except AdbWifiError as e:
            return EnterpriseConnectionResult(
                success=False,
                ssid=config.ssid,
                eap_method=config.eap_method,
                error=str(e),
                hint=e.hint,
            )

        return EnterpriseConnectionResult(
            success=reply.success,
            ssid=config.ssid,
            eap_method=config.eap_method,
            message=reply.message,
            error=None if reply.success else reply.message or "Connection failed",
        )

    def install_certificate(
        self,
        certificate: str,
        alias: str,
        cert_type: str,
        private_key: Optional[str] = None,
        private_key_password: Optional[str] = None,
        cancel: Optional[threading.Event] = None,
    ) -> CertificateInstallResult:
        """Install a CA or client certificate through the companion agent."""
        error = None
        if cert_type not in ("ca", "client"):
            error = f"Unknown certificate type: {cert_type}"
        elif not certificate.strip():
            error = "Certificate content is empty"
        elif cert_type == "client" and not private_key:
            error = "Private key is required for client certificates"

        if error:
            return CertificateInstallResult(success=False, alias=alias, type=cert_type, error=error)

        payload: Dict[str, Any] = {"certificate": certificate, "alias": alias, "type": cert_type}
        if private_key:
            payload["privateKey"] = private_key
        if private_key_password:
            payload["privateKeyPassword"] = private_key_password

        try:
            reply = self._exchange("install_certificate", payload, cancel)
        except AdbWifiError as e:
            return CertificateInstallResult(
                success=False, alias=alias, type=cert_type, error=str(e), hint=e.hint,
            )

        return CertificateInstallResult(
            success=reply.success,
            alias=alias,
            type=cert_type,
            message=reply.message,
            error=None if reply.success else reply.message or "Installation failed",
        )

    def list_certificates(self, cancel: Optional[threading.Event] = None) -> CertificateListResult:
        try:
            reply = self._exchange("list_certificates", {}, cancel)
        except AdbWifiError as e:
            return CertificateListResult(success=False, error=str(e), hint=e.hint)

        return CertificateListResult(
            success=reply.success,
            certificates=reply.certificates,
            error=None if reply.success else reply.message,
        )

    def remove_suggestion(
        self,
        ssid: str,
        cancel: Optional[threading.Event] = None,
    ) -> SuggestionRemovalResult:
        """Remove the network suggestion the agent added for ``ssid``."""
        try:
            reply = self._exchange("disconnect", {"ssid": ssid}, cancel)
        except AdbWifiError as e:
            return SuggestionRemovalResult(success=False, ssid=ssid, error=str(e), hint=e.hint)

        return SuggestionRemovalResult(
            success=reply.success,
            ssid=ssid,
            message=reply.message,
            error=None if reply.success else reply.message,
        )

    @staticmethod
    def _validate_eap(config: EapConfig) -> Optional[str]:
        if config.eap_method in ("peap", "ttls") and not config.password:
            return "Password is required for EAP-PEAP/TTLS"
        if config.eap_method == "tls" and not (config.client_certificate and config.private_key):
            return "Client certificate and private key are required for EAP-TLS"
        return None

    def _exchange(
        self,
        action: str,
        fields: Dict[str, Any],
        cancel: Optional[threading.Event] = None,
    ) -> BridgeResult:
        """
        Run one request/result exchange with the companion agent.

        Raises:
            ProtocolError: Agent missing or the result is not a valid record
            DeviceCommandError: Writing the request or broadcasting failed
            CommandTimeoutError: No result within the timeout
            RequestCancelledError: ``cancel`` was set while polling
        """
        if not self.is_companion_installed():
            raise ProtocolError(
                f"Companion app not installed. Please install {self.package}",
                hint=self.install_hint,
            )

        request_id = uuid.uuid4().hex
        payload = {
            "action": action,
            "timestamp": int(time.time() * 1000),
            "requestId": request_id,
            **fields,
        }

        # Every step targets the locked device even if the selection moves
        with self.selection.exclusive() as serial:
            # A stale result must never answer this request
            self.executor.shell(f"rm -f {RESULT_FILE}", serial=serial)

            self._write_request(payload, serial)
            self._trigger(action, serial)
            logger.info(f"Sent {action} request {request_id} to {self.package}")

            return self._wait_for_result(request_id, serial, cancel)

    def _write_request(self, payload: Dict[str, Any], serial: Optional[str] = None) -> None:
        encoded = json.dumps(payload)
        result = self.executor.shell(
            f"echo {shlex.quote(encoded)} > {COMMAND_FILE}",
            serial=serial,
            sensitive=True,
        )
        if not result.success:
            raise DeviceCommandError(f"Failed to write command file: {result.stderr}")

    def _trigger(self, action: str, serial: Optional[str] = None) -> None:
        result = self.executor.shell(
            f"am broadcast -a {self.package}.{ACTIONS[action]} "
            f"-n {self.package}/{RECEIVER} "
            f"--es config_file {COMMAND_FILE}",
            serial=serial,
        )
        if not result.success:
            raise DeviceCommandError(f"Failed to send broadcast: {result.stderr}")

    def _wait_for_result(
        self,
        request_id: str,
        serial: Optional[str] = None,
        cancel: Optional[threading.Event] = None,
    ) -> BridgeResult:
        cancel = cancel or threading.Event()
        deadline = time.monotonic() + self.timeout

        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.warning(f"No result for request {request_id} after {self.timeout}s")
                raise CommandTimeoutError(
                    f"Timeout waiting for companion result after {self.timeout:g} seconds"
                )

            if cancel.wait(min(self.poll_interval, remaining)):
                logger.info(f"Request {request_id} cancelled")
                raise RequestCancelledError("Request cancelled before the companion answered")

            read = self.executor.shell(f"cat {RESULT_FILE} 2>/dev/null", serial=serial)
            if not read.success or not read.stdout.strip():
                continue

            try:
                data = json.loads(read.stdout)
            except json.JSONDecodeError:
                # Agent may still be writing
                continue
            if not isinstance(data, dict):
                continue

            reply_id = data.get("requestId")
            if reply_id and reply_id != request_id:
                logger.warning(f"Ignoring result for another request ({reply_id})")
                continue

            self.executor.shell(f"rm -f {RESULT_FILE}", serial=serial)

            try:
                return BridgeResult.model_validate(data)
            except ValidationError as e:
                raise ProtocolError(f"Malformed companion result: {e}") from e
