"""Service layer for business logic."""

from .ca_service import CAService
from .cert_service import CertificateService, VerificationError
from .crypto_service import CryptoService
from .deploy_service import DeployService
from .parser_service import CertificateParser
from .remote_service import CommandError, RemoteService
from .yaml_service import YAMLService

__all__ = [
    "YAMLService",
    "CryptoService",
    "CertificateParser",
    "CAService",
    "CertificateService",
    "DeployService",
    "RemoteService",
    "CommandError",
    "VerificationError",
]
