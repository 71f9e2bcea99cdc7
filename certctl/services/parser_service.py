"""Certificate parsing and verification service."""

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa

from certctl.models.ca import Subject
from certctl.models.certificate import VerificationResult

logger = logging.getLogger("certctl")


class CertificateParser:
    """Service for parsing and verifying X.509 certificates."""

    @staticmethod
    def split_pem_bundle(pem_bundle: str) -> List[str]:
        """
        Split a string containing multiple PEM certificates into a list.

        Args:
            pem_bundle: A string containing one or more PEM-encoded certificates.

        Returns:
            A list of individual PEM certificate strings.
        """
        cert_pattern = r"-----BEGIN CERTIFICATE-----(?:.|\n)+?-----END CERTIFICATE-----"
        return re.findall(cert_pattern, pem_bundle)

    @staticmethod
    def load_bundle(bundle_path: Path, skip_invalid: bool = False) -> List[x509.Certificate]:
        """
        Load every certificate of a PEM bundle file.

        Args:
            bundle_path: Path to the bundle
            skip_invalid: Log and skip certificates that cannot be parsed

        Returns:
            Certificates in file order

        Raises:
            FileNotFoundError: If bundle not found
            ValueError: If a certificate cannot be parsed and skip_invalid is False
        """
        if not bundle_path.exists():
            raise FileNotFoundError(f"Certificate bundle not found: {bundle_path}")

        with open(bundle_path, "r", encoding="utf-8") as f:
            pem_bundle = f.read()

        certs = []
        for i, pem in enumerate(CertificateParser.split_pem_bundle(pem_bundle)):
            try:
                certs.append(x509.load_pem_x509_certificate(pem.encode("utf-8")))
            except ValueError as e:
                if not skip_invalid:
                    raise ValueError(f"Failed to parse certificate #{i + 1} in {bundle_path}: {e}")
                logger.warning(f"Skipping certificate #{i + 1} in {bundle_path}: {e}")
        return certs

    @staticmethod
    def parse_certificate(cert_path: Path) -> Dict[str, Any]:
        """
        Parse X.509 Certificate from file and extract all relevant data.

        Args:
            cert_path: Path to certificate file

        Returns:
            Dictionary with parsed certificate data

        Raises:
            FileNotFoundError: If certificate file not found
            ValueError: If certificate cannot be parsed
        """
        if not cert_path.exists():
            raise FileNotFoundError(f"Certificate not found: {cert_path}")

        try:
            with open(cert_path, "rb") as f:
                cert = x509.load_pem_x509_certificate(f.read())
        except ValueError as e:
            logger.error(f"Error parsing certificate {cert_path}: {e}")
            raise ValueError(f"Failed to parse certificate: {e}")

        return CertificateParser.describe_certificate(cert)

    @staticmethod
    def describe_certificate(cert: x509.Certificate) -> Dict[str, Any]:
        """
        Extract the fields kept in metadata records.

        Args:
            cert: Certificate object

        Returns:
            Dictionary with subject, issuer, validity, serial and fingerprint
        """
        public_key = cert.public_key()
        return {
            "subject": CertificateParser.extract_subject(cert.subject),
            "issuer": CertificateParser.extract_subject(cert.issuer),
            "not_before": cert.not_valid_before_utc,
            "not_after": cert.not_valid_after_utc,
            "serial_number": format(cert.serial_number, "X"),
            "public_key_size": public_key.key_size if isinstance(public_key, rsa.RSAPublicKey) else None,
            "fingerprint_sha256": cert.fingerprint(hashes.SHA256()).hex(":").upper(),
            "is_ca": CertificateParser.is_ca(cert),
        }

    @staticmethod
    def extract_subject(name: x509.Name) -> Dict[str, Optional[str]]:
        """
        Extract Subject/Issuer DN.

        Args:
            name: X.509 Name object

        Returns:
            Dictionary with subject fields, None where absent
        """

        def get_attribute(oid):
            attrs = name.get_attributes_for_oid(oid)
            return attrs[0].value if attrs else None

        return {
            "common_name": get_attribute(x509.NameOID.COMMON_NAME),
            "organization": get_attribute(x509.NameOID.ORGANIZATION_NAME),
            "organizational_unit": get_attribute(x509.NameOID.ORGANIZATIONAL_UNIT_NAME),
            "country": get_attribute(x509.NameOID.COUNTRY_NAME),
            "state": get_attribute(x509.NameOID.STATE_OR_PROVINCE_NAME),
            "locality": get_attribute(x509.NameOID.LOCALITY_NAME),
            "email_address": get_attribute(x509.NameOID.EMAIL_ADDRESS),
        }

    @staticmethod
    def inherit_subject(cert: x509.Certificate, common_name: str) -> Subject:
        """
        Build a subject from a certificate's subject with the common name replaced.

        Args:
            cert: Certificate whose C/ST/L/O/OU/emailAddress are copied
            common_name: New common name

        Returns:
            Subject for a certificate issued under ``cert``
        """
        fields = CertificateParser.extract_subject(cert.subject)
        fields["common_name"] = common_name
        return Subject(**fields)

    @staticmethod
    def format_subject(cert: x509.Certificate) -> str:
        """Format a certificate subject as an OpenSSL-style ``subject=`` line."""
        return f"subject={cert.subject.rfc4514_string()}"

    @staticmethod
    def is_ca(cert: x509.Certificate) -> bool:
        """
        Check if certificate is a CA.

        Args:
            cert: Certificate object

        Returns:
            True if CA, False otherwise
        """
        try:
            bc = cert.extensions.get_extension_for_oid(x509.ExtensionOID.BASIC_CONSTRAINTS)
            return bc.value.ca
        except x509.ExtensionNotFound:
            return False

    @staticmethod
    def verify_against_bundle(
        bundle: List[x509.Certificate], targets: List[Tuple[str, x509.Certificate]]
    ) -> VerificationResult:
        """
        Verify certificates against a CA bundle.

        Every target must chain, through certificates of the bundle, to a
        self-signed certificate that is itself in the bundle. Each link must
        carry a valid signature, each issuer must be a CA and every
        certificate on the path must be inside its validity window.

        Args:
            bundle: Trusted certificates (root first, then intermediates)
            targets: (name, certificate) pairs to verify

        Returns:
            Verification result with one ``<name>: OK`` or ``<name>: error ...`` line per target
        """
        details = []
        ok = True

        for name, cert in targets:
            error = CertificateParser._verify_path(bundle, cert)
            if error:
                ok = False
                details.append(f"{name}: error: {error}")
            else:
                details.append(f"{name}: OK")

        return VerificationResult(ok=ok, details=details)

    @staticmethod
    def _verify_path(bundle: List[x509.Certificate], cert: x509.Certificate) -> Optional[str]:
        """Walk from ``cert`` up to a trusted root. Returns an error message or None."""
        now = datetime.now(timezone.utc)
        current = cert
        depth = 0

        # A path can never be longer than the bundle plus the target itself
        while depth <= len(bundle):
            subject = current.subject.rfc4514_string()
            if now < current.not_valid_before_utc:
                return f"certificate is not yet valid ({subject})"
            if now > current.not_valid_after_utc:
                return f"certificate has expired ({subject})"

            if current.subject == current.issuer:
                if current not in bundle:
                    return f"self-signed certificate is not trusted ({subject})"
                try:
                    current.verify_directly_issued_by(current)
                except (ValueError, TypeError, InvalidSignature):
                    return f"root certificate signature failure ({subject})"
                return None

            issuer = CertificateParser._find_issuer(bundle, current)
            if issuer is None:
                return f"unable to get local issuer certificate ({current.issuer.rfc4514_string()})"
            if not CertificateParser.is_ca(issuer):
                return f"issuer is not a CA ({issuer.subject.rfc4514_string()})"

            current = issuer
            depth += 1

        return "certificate chain too long"

    @staticmethod
    def _find_issuer(bundle: List[x509.Certificate], cert: x509.Certificate) -> Optional[x509.Certificate]:
        """Find the bundle certificate whose key signed ``cert``."""
        for candidate in bundle:
            if candidate.subject != cert.issuer:
                continue
            try:
                cert.verify_directly_issued_by(candidate)
                return candidate
            except (ValueError, TypeError, InvalidSignature) as e:
                logger.debug(f"Candidate issuer {candidate.subject.rfc4514_string()} rejected: {e}")
        return None
