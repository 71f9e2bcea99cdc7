"""CA management service."""

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from certctl.models.ca import CAConfig, CAHierarchyRequest, CAHierarchyResponse, CAType, KeyConfig
from certctl.models.config import PathSettings
from certctl.services.crypto_service import CryptoService
from certctl.services.parser_service import CertificateParser
from certctl.services.yaml_service import YAMLService
from certctl.utils.file_utils import FileUtils
from certctl.utils.validators import validate_common_name

logger = logging.getLogger("certctl")


class CAService:
    """Service for the root CA, its intermediate and the CA bundle."""

    def __init__(self, paths: PathSettings, crypto_service: CryptoService):
        """
        Initialize CA service.

        Args:
            paths: Locations of CA material
            crypto_service: Crypto service instance
        """
        self.paths = paths
        self.crypto_service = crypto_service

    def exists(self) -> bool:
        """Whether CA material is already present."""
        return self.paths.ca_key.exists() or self.paths.ca_cert.exists()

    def create_hierarchy(self, request: CAHierarchyRequest, overwrite: bool = False) -> CAHierarchyResponse:
        """
        Create a new root CA, an intermediate CA signed by it and the CA bundle.

        Writes the CA key and certificate, the intermediate key, CSR and
        certificate, then concatenates both certificates into the bundle.

        Args:
            request: Subjects, key sizes and validity periods
            overwrite: Delete the existing CA set first, then create a new one

        Returns:
            Created hierarchy

        Raises:
            ValueError: If CA already exists and overwrite is False
        """
        validate_common_name(request.ca_subject.common_name)
        validate_common_name(request.intermediate_subject.common_name)

        if self.exists():
            if not overwrite:
                raise ValueError(f"CA already exists: {self.paths.ca_cert}")
            self._remove_material()

        paths = self.paths
        created: List[Path] = []

        try:
            FileUtils.ensure_directory(Path(paths.ca_dir))

            # 1. Root CA key and self-signed certificate
            ca_key = self.crypto_service.generate_private_key(request.ca_key_config)
            self.crypto_service.save_private_key(ca_key, paths.ca_key)
            created.append(paths.ca_key)

            ca_cert = self.crypto_service.create_self_signed_ca(ca_key, request.ca_subject, request.ca_validity_days)
            self.crypto_service.save_certificate(ca_cert, paths.ca_cert)
            created.append(paths.ca_cert)
            logger.info(f"Created CA certificate '{request.ca_subject.common_name}' at {paths.ca_cert}")

            # 2. Intermediate key, CSR and certificate signed by the root
            int_key = self.crypto_service.generate_private_key(request.intermediate_key_config)
            self.crypto_service.save_private_key(int_key, paths.intermediate_key)
            created.append(paths.intermediate_key)

            csr = self.crypto_service.build_csr(int_key, request.intermediate_subject)
            self.crypto_service.save_csr(csr, paths.intermediate_csr)
            created.append(paths.intermediate_csr)

            int_cert = self.crypto_service.sign_intermediate_csr(
                csr, ca_cert, ca_key, request.intermediate_validity_days
            )
            self.crypto_service.save_certificate(int_cert, paths.intermediate_cert)
            created.append(paths.intermediate_cert)
            logger.info(
                f"Created intermediate certificate '{request.intermediate_subject.common_name}' "
                f"at {paths.intermediate_cert}"
            )

            # 3. Bundle: CA certificate followed by intermediate certificate
            FileUtils.concatenate_files([paths.ca_cert, paths.intermediate_cert], paths.ca_bundle)
            created.append(paths.ca_bundle)

            root_config = self._build_ca_config(
                CAType.ROOT_CA, request.ca_key_config, request.ca_validity_days, paths.ca_key, paths.ca_cert
            )
            int_config = self._build_ca_config(
                CAType.INTERMEDIATE_CA,
                request.intermediate_key_config,
                request.intermediate_validity_days,
                paths.intermediate_key,
                paths.intermediate_cert,
            )
            response = CAHierarchyResponse(
                root=root_config,
                intermediate=int_config,
                bundle_file=str(paths.ca_bundle),
                intermediate_csr_file=str(paths.intermediate_csr),
            )

            YAMLService.save_config_yaml(paths.hierarchy_record, response.model_dump())

            logger.info(f"Created CA bundle at {paths.ca_bundle}")
            return response

        except Exception as e:
            # Rollback files written by this call
            for path in created:
                path.unlink(missing_ok=True)
            logger.error(f"Failed to create CA hierarchy: {e}")
            raise

    def _remove_material(self) -> None:
        """Delete the whole existing CA set so old and new files never mix."""
        paths = self.paths
        for path in (
            paths.ca_key,
            paths.ca_cert,
            paths.intermediate_key,
            paths.intermediate_csr,
            paths.intermediate_cert,
            paths.ca_bundle,
            paths.hierarchy_record,
        ):
            path.unlink(missing_ok=True)
        logger.warning(f"Removed existing CA material in {paths.ca_dir}")

    def _build_ca_config(
        self, ca_type: CAType, key_config: KeyConfig, validity_days: int, key_path: Path, cert_path: Path
    ) -> CAConfig:
        """Build a CA record from the certificate written to ``cert_path``."""
        cert_info = CertificateParser.parse_certificate(cert_path)
        return CAConfig(
            type=ca_type,
            created_at=datetime.now(),
            subject=cert_info["subject"],
            key_config=key_config,
            validity_days=validity_days,
            not_before=cert_info["not_before"],
            not_after=cert_info["not_after"],
            serial_number=cert_info["serial_number"],
            key_file=str(key_path),
            cert_file=str(cert_path),
            fingerprint_sha256=cert_info["fingerprint_sha256"],
        )

    def get_hierarchy(self) -> CAHierarchyResponse:
        """
        Load the CA hierarchy record.

        Raises:
            ValueError: If no CA has been created
        """
        record = self.paths.hierarchy_record
        if not record.exists():
            raise ValueError(f"CA not found: {record}")

        return CAHierarchyResponse(**YAMLService.load_config_yaml(record))

    def list_trusted_cas(self, system_bundle: Optional[Path] = None) -> List[str]:
        """
        List the subjects of all certificates in the system trust bundle.

        Args:
            system_bundle: Bundle path, the configured system bundle if omitted

        Returns:
            ``subject=...`` lines in bundle order

        Raises:
            FileNotFoundError: If the bundle does not exist
        """
        bundle_path = system_bundle or Path(self.paths.system_ca_bundle)
        certs = CertificateParser.load_bundle(bundle_path, skip_invalid=True)
        logger.debug(f"Loaded {len(certs)} certificates from {bundle_path}")
        return [CertificateParser.format_subject(cert) for cert in certs]
