"""Certificate data models."""

from datetime import datetime, timedelta
from typing import Literal, Optional

from pydantic import BaseModel, Field

from .ca import KeyConfig, Subject

# v3_req profile applied to server certificates
DEFAULT_KEY_USAGE = ["digitalSignature", "nonRepudiation", "keyEncipherment"]
DEFAULT_EXTENDED_KEY_USAGE = ["serverAuth"]


class ServerCertConfig(BaseModel):
    """Server certificate record, saved next to the issued files."""

    type: Literal["server_cert"] = "server_cert"
    created_at: datetime = Field(default_factory=datetime.now)
    server_name: str
    fqdn: str
    subject: Subject
    sans: list[str] = Field(default_factory=list)
    key_config: KeyConfig
    validity_days: int = Field(..., gt=0)
    not_before: datetime = Field(default_factory=datetime.now)
    not_after: Optional[datetime] = None
    serial_number: Optional[str] = None
    issuing_ca: str  # Path to the issuing CA certificate
    fingerprint_sha256: Optional[str] = None
    key_usage: list[str] = Field(default_factory=lambda: DEFAULT_KEY_USAGE.copy())
    extended_key_usage: list[str] = Field(default_factory=lambda: DEFAULT_EXTENDED_KEY_USAGE.copy())

    def model_post_init(self, __context):
        """Calculate not_after if not set."""
        if self.not_after is None:
            self.not_after = self.not_before + timedelta(days=self.validity_days)


class CertCreateRequest(BaseModel):
    """Request model for issuing a server certificate."""

    server_name: str = Field(..., min_length=1)
    key_config: KeyConfig = KeyConfig(key_size=2048)
    validity_days: int = Field(3650, gt=0)


class CertResponse(BaseModel):
    """Response model for certificate operations."""

    fqdn: str
    path: str
    key_file: str
    csr_file: str
    cert_file: str
    subject: Subject
    not_before: datetime
    not_after: datetime
    serial_number: Optional[str] = None
    fingerprint_sha256: Optional[str] = None


class VerificationResult(BaseModel):
    """Outcome of verifying certificates against a CA bundle."""

    ok: bool
    details: list[str] = Field(default_factory=list)

    def summary(self) -> str:
        """Multi-line summary in `<name>: <status>` form."""
        return "\n".join(self.details)
