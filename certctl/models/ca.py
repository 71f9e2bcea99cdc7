"""CA data models."""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class KeyAlgorithm(str, Enum):
    """Supported key algorithms."""

    RSA = "RSA"


class CAType(str, Enum):
    """CA types."""

    ROOT_CA = "root_ca"
    INTERMEDIATE_CA = "intermediate_ca"


class Subject(BaseModel):
    """Certificate subject information."""

    common_name: str = Field(..., min_length=1)
    organization: Optional[str] = None
    organizational_unit: Optional[str] = None
    country: Optional[str] = Field(None, min_length=2, max_length=2)
    state: Optional[str] = None
    locality: Optional[str] = None
    email_address: Optional[str] = None


class KeyConfig(BaseModel):
    """Key configuration."""

    algorithm: KeyAlgorithm = KeyAlgorithm.RSA
    key_size: int = Field(4096, ge=2048)


class CAConfig(BaseModel):
    """Record of a created CA certificate."""

    type: CAType
    created_at: datetime = Field(default_factory=datetime.now)
    subject: Subject
    key_config: KeyConfig
    validity_days: int = Field(..., gt=0)
    not_before: datetime = Field(default_factory=datetime.now)
    not_after: Optional[datetime] = None
    serial_number: Optional[str] = None
    key_file: str
    cert_file: str
    fingerprint_sha256: Optional[str] = None

    def model_post_init(self, __context):
        """Calculate not_after if not set."""
        if self.not_after is None:
            self.not_after = self.not_before + timedelta(days=self.validity_days)


class CAHierarchyRequest(BaseModel):
    """Request model for creating a root CA and its intermediate."""

    ca_subject: Subject
    intermediate_subject: Subject
    ca_key_config: KeyConfig = KeyConfig()
    intermediate_key_config: KeyConfig = KeyConfig()
    ca_validity_days: int = Field(365, gt=0)
    intermediate_validity_days: int = Field(365, gt=0)


class CAHierarchyResponse(BaseModel):
    """Response model for the CA hierarchy."""

    root: CAConfig
    intermediate: CAConfig
    bundle_file: str
    intermediate_csr_file: str
