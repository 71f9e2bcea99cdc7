"""Certificate management service."""

import logging
from datetime import datetime
from pathlib import Path

from certctl.models.certificate import CertCreateRequest, CertResponse, ServerCertConfig, VerificationResult
from certctl.models.config import PathSettings
from certctl.services.crypto_service import CryptoService
from certctl.services.parser_service import CertificateParser
from certctl.services.yaml_service import YAMLService
from certctl.utils.file_utils import FileUtils
from certctl.utils.validators import build_fqdn

logger = logging.getLogger("certctl")


class VerificationError(Exception):
    """An issued certificate did not verify against the CA bundle."""

    def __init__(self, fqdn: str, result: VerificationResult):
        self.fqdn = fqdn
        self.result = result
        super().__init__(f"SSL Certificate verification for {fqdn} failed")


class CertificateService:
    """Service for server certificate issuance."""

    def __init__(self, paths: PathSettings, domain: str, crypto_service: CryptoService):
        """
        Initialize certificate service.

        Args:
            paths: Locations of CA and certificate material
            domain: Base domain appended to server names
            crypto_service: Crypto service instance
        """
        self.paths = paths
        self.domain = domain
        self.crypto_service = crypto_service

    def fqdn(self, server_name: str) -> str:
        """Fully-qualified name ``<server>.<domain>``."""
        return build_fqdn(server_name, self.domain)

    def cert_dir(self, fqdn: str) -> Path:
        return Path(self.paths.certs_dir) / fqdn

    def cert_files(self, fqdn: str) -> tuple[Path, Path, Path]:
        """Return (key, csr, certificate) paths for ``fqdn``."""
        cert_dir = self.cert_dir(fqdn)
        return cert_dir / f"{fqdn}.key", cert_dir / f"{fqdn}.csr", cert_dir / f"{fqdn}.crt"

    def create_server_certificate(self, request: CertCreateRequest) -> CertResponse:
        """
        Issue a server certificate signed by the intermediate CA and verify it.

        The subject copies country, state, locality, organization, unit and
        email from the intermediate certificate; the common name becomes
        ``<server>.<domain>``.

        Args:
            request: Certificate creation request

        Returns:
            Certificate response

        Raises:
            FileNotFoundError: If the intermediate CA material or bundle is missing
            VerificationError: If the certificate does not verify against the bundle
        """
        fqdn = self.fqdn(request.server_name)
        cert_dir = self.cert_dir(fqdn)
        key_path, csr_path, cert_path = self.cert_files(fqdn)

        FileUtils.require_files(self.paths.intermediate_cert, self.paths.intermediate_key, self.paths.ca_bundle)

        existed = cert_dir.exists()
        if cert_path.exists():
            logger.warning(f"Replacing existing certificate for {fqdn}")

        try:
            FileUtils.ensure_directory(cert_dir)

            int_cert = self.crypto_service.load_certificate(self.paths.intermediate_cert)
            int_key = self.crypto_service.load_private_key(self.paths.intermediate_key)
            subject = CertificateParser.inherit_subject(int_cert, fqdn)
            logger.debug(f"Subject for {fqdn}: {subject.model_dump(exclude_none=True)}")

            key = self.crypto_service.generate_private_key(request.key_config)
            self.crypto_service.save_private_key(key, key_path)

            csr = self.crypto_service.build_csr(key, subject)
            self.crypto_service.save_csr(csr, csr_path)

            cert = self.crypto_service.sign_server_csr(csr, int_cert, int_key, request.validity_days, [fqdn])
            self.crypto_service.save_certificate(cert, cert_path)

            result = self.verify_certificate(cert_path)
            if not result.ok:
                raise VerificationError(fqdn, result)

            cert_info = CertificateParser.describe_certificate(cert)
            cert_config = ServerCertConfig(
                server_name=request.server_name,
                fqdn=fqdn,
                subject=subject,
                sans=[fqdn],
                key_config=request.key_config,
                validity_days=request.validity_days,
                created_at=datetime.now(),
                not_before=cert_info["not_before"],
                not_after=cert_info["not_after"],
                serial_number=cert_info["serial_number"],
                issuing_ca=str(self.paths.intermediate_cert),
                fingerprint_sha256=cert_info["fingerprint_sha256"],
            )
            YAMLService.save_config_yaml(cert_dir / "config.yaml", cert_config.model_dump())

            logger.info(f"Created server certificate for '{fqdn}' (Serial: {cert_config.serial_number})")

            return self._build_cert_response(cert_config, cert_dir)

        except VerificationError:
            # Keep the files so the failure can be inspected
            raise
        except Exception as e:
            # Rollback on error
            if not existed:
                FileUtils.delete_directory(cert_dir, ignore_errors=True)
            logger.error(f"Failed to create certificate for {fqdn}: {e}")
            raise

    def verify_certificate(self, cert_path: Path) -> VerificationResult:
        """
        Verify the intermediate certificate and ``cert_path`` against the CA bundle.

        Args:
            cert_path: Server certificate to verify

        Returns:
            Verification result
        """
        bundle = CertificateParser.load_bundle(self.paths.ca_bundle)
        targets = [
            (str(self.paths.intermediate_cert), self.crypto_service.load_certificate(self.paths.intermediate_cert)),
            (str(cert_path), self.crypto_service.load_certificate(cert_path)),
        ]
        result = CertificateParser.verify_against_bundle(bundle, targets)
        if not result.ok:
            logger.error(f"Verification failed:\n{result.summary()}")
        return result

    def _build_cert_response(self, cert_config: ServerCertConfig, cert_dir: Path) -> CertResponse:
        key_path, csr_path, cert_path = self.cert_files(cert_config.fqdn)
        return CertResponse(
            fqdn=cert_config.fqdn,
            path=str(cert_dir),
            key_file=str(key_path),
            csr_file=str(csr_path),
            cert_file=str(cert_path),
            subject=cert_config.subject,
            not_before=cert_config.not_before,
            not_after=cert_config.not_after,
            serial_number=cert_config.serial_number,
            fingerprint_sha256=cert_config.fingerprint_sha256,
        )
