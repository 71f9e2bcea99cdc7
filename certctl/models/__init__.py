"""Data models for certctl."""

from .ca import CAConfig, CAHierarchyRequest, CAHierarchyResponse, CAType, KeyAlgorithm, KeyConfig, Subject
from .certificate import CertCreateRequest, CertResponse, ServerCertConfig, VerificationResult
from .config import AppConfig

__all__ = [
    "KeyAlgorithm",
    "Subject",
    "KeyConfig",
    "CAConfig",
    "CAType",
    "CAHierarchyRequest",
    "CAHierarchyResponse",
    "CertCreateRequest",
    "CertResponse",
    "ServerCertConfig",
    "VerificationResult",
    "AppConfig",
]
