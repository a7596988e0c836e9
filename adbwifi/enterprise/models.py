"""
Enterprise (802.1X / EAP) request and result records.

Field aliases are the keys the companion agent reads from the request file
and writes to the result file.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

EapMethod = Literal["peap", "ttls", "tls"]
Phase2Method = Literal["mschapv2", "pap", "gtc", "none"]
CertificateType = Literal["ca", "client"]


class EapConfig(BaseModel):
    """Credentials and trust settings for an enterprise network."""

    model_config = ConfigDict(populate_by_name=True)

    ssid: str
    eap_method: EapMethod = Field(alias="eapMethod")
    identity: str
    domain_suffix_match: str = Field(alias="domainSuffixMatch")
    phase2_method: Optional[Phase2Method] = Field(default=None, alias="phase2Method")
    password: Optional[str] = None
    anonymous_identity: Optional[str] = Field(default=None, alias="anonymousIdentity")
    ca_certificate: Optional[str] = Field(default=None, alias="caCertificate")  # PEM
    client_certificate: Optional[str] = Field(default=None, alias="clientCertificate")  # PEM, EAP-TLS
    private_key: Optional[str] = Field(default=None, alias="privateKey")  # PEM, EAP-TLS
    private_key_password: Optional[str] = Field(default=None, alias="privateKeyPassword")


class BridgeResult(BaseModel):
    """Decoded contents of the companion agent's result file."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    success: bool = False
    message: Optional[str] = None
    action: Optional[str] = None
    timestamp: Optional[int] = None
    request_id: Optional[str] = Field(default=None, alias="requestId")
    certificates: List[str] = []

    @field_validator("certificates", mode="before")
    @classmethod
    def split_certificate_list(cls, value):
        """Accept the agent's `"[a, b]"` rendering of a list as well as a JSON array."""
        if isinstance(value, str):
            inner = value.strip().removeprefix("[").removesuffix("]")
            return [alias.strip() for alias in inner.split(",") if alias.strip()]
        return value


class EnterpriseConnectionResult(BaseModel):
    success: bool
    ssid: str
    eap_method: str
    message: Optional[str] = None
    error: Optional[str] = None
    hint: Optional[str] = None


class CertificateInstallResult(BaseModel):
    success: bool
    alias: str
    type: str
    message: Optional[str] = None
    error: Optional[str] = None
    hint: Optional[str] = None


class CertificateListResult(BaseModel):
    success: bool
    certificates: List[str] = []
    error: Optional[str] = None
    hint: Optional[str] = None


class SuggestionRemovalResult(BaseModel):
    success: bool
    ssid: str
    message: Optional[str] = None
    error: Optional[str] = None
    hint: Optional[str] = None
