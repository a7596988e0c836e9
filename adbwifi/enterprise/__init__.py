"""
Enterprise WiFi through the on-device companion agent.
"""

from adbwifi.enterprise.bridge import COMMAND_FILE, RESULT_FILE, EnterpriseBridge
from adbwifi.enterprise.models import (
    BridgeResult,
    CertificateInstallResult,
    CertificateListResult,
    EapConfig,
    EnterpriseConnectionResult,
    SuggestionRemovalResult,
)

__all__ = [
    "COMMAND_FILE",
    "RESULT_FILE",
    "EnterpriseBridge",
    "BridgeResult",
    "CertificateInstallResult",
    "CertificateListResult",
    "EapConfig",
    "EnterpriseConnectionResult",
    "SuggestionRemovalResult",
]
