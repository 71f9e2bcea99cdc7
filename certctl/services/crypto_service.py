"""Key, CSR and certificate generation service."""

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from certctl.models.ca import KeyAlgorithm, KeyConfig, Subject
from certctl.utils.file_utils import FileUtils

logger = logging.getLogger("certctl")

# Subject attribute order used for leaf certificates: /C/ST/L/O/OU/CN/emailAddress
SUBJECT_OIDS = [
    ("country", NameOID.COUNTRY_NAME),
    ("state", NameOID.STATE_OR_PROVINCE_NAME),
    ("locality", NameOID.LOCALITY_NAME),
    ("organization", NameOID.ORGANIZATION_NAME),
    ("organizational_unit", NameOID.ORGANIZATIONAL_UNIT_NAME),
    ("common_name", NameOID.COMMON_NAME),
    ("email_address", NameOID.EMAIL_ADDRESS),
]


class CryptoService:
    """Service for building keys, requests and certificates with the cryptography library."""

    def __init__(self, hash_algorithm: Optional[hashes.HashAlgorithm] = None):
        """
        Initialize crypto service.

        Args:
            hash_algorithm: Signature hash, SHA-256 if omitted
        """
        self.hash_algorithm = hash_algorithm or hashes.SHA256()

    def generate_private_key(self, key_config: KeyConfig) -> rsa.RSAPrivateKey:
        """
        Generate a private key.

        Args:
            key_config: Key configuration

        Returns:
            Generated private key
        """
        if key_config.algorithm != KeyAlgorithm.RSA:
            raise ValueError(f"Unsupported key algorithm: {key_config.algorithm}")

        logger.info(f"Generating {key_config.key_size}-bit RSA private key")
        return rsa.generate_private_key(public_exponent=65537, key_size=key_config.key_size)

    @staticmethod
    def build_name(subject: Subject) -> x509.Name:
        """
        Build an X.509 name, skipping empty fields.

        Args:
            subject: Subject information

        Returns:
            X.509 Name in /C/ST/L/O/OU/CN/emailAddress order
        """
        attributes = []
        for field, oid in SUBJECT_OIDS:
            value = getattr(subject, field)
            if value:
                attributes.append(x509.NameAttribute(oid, value))
        return x509.Name(attributes)

    def build_csr(self, private_key, subject: Subject) -> x509.CertificateSigningRequest:
        """
        Create a certificate signing request.

        Args:
            private_key: Key whose public half goes in the request
            subject: Requested subject

        Returns:
            Signed CSR
        """
        return (
            x509.CertificateSigningRequestBuilder()
            .subject_name(self.build_name(subject))
            .sign(private_key, self.hash_algorithm)
        )

    def create_self_signed_ca(self, private_key, subject: Subject, validity_days: int) -> x509.Certificate:
        """
        Create a self-signed root CA certificate.

        Args:
            private_key: CA private key
            subject: CA subject (also used as issuer)
            validity_days: Validity period in days

        Returns:
            Root CA certificate
        """
        name = self.build_name(subject)
        public_key = private_key.public_key()
        builder = (
            self._base_builder(name, name, public_key, validity_days)
            .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
            .add_extension(self._ca_key_usage(), critical=True)
            .add_extension(x509.SubjectKeyIdentifier.from_public_key(public_key), critical=False)
            .add_extension(x509.AuthorityKeyIdentifier.from_issuer_public_key(public_key), critical=False)
        )
        return builder.sign(private_key, self.hash_algorithm)

    def sign_intermediate_csr(
        self, csr: x509.CertificateSigningRequest, ca_cert: x509.Certificate, ca_key, validity_days: int
    ) -> x509.Certificate:
        """
        Sign an intermediate CA request with the root CA.

        Args:
            csr: Intermediate CSR
            ca_cert: Issuing CA certificate
            ca_key: Issuing CA private key
            validity_days: Validity period in days

        Returns:
            Intermediate CA certificate
        """
        self._check_csr(csr)
        public_key = csr.public_key()
        builder = (
            self._base_builder(csr.subject, ca_cert.subject, public_key, validity_days)
            .add_extension(x509.BasicConstraints(ca=True, path_length=0), critical=True)
            .add_extension(self._ca_key_usage(), critical=True)
            .add_extension(x509.SubjectKeyIdentifier.from_public_key(public_key), critical=False)
            .add_extension(x509.AuthorityKeyIdentifier.from_issuer_public_key(ca_key.public_key()), critical=False)
        )
        return builder.sign(ca_key, self.hash_algorithm)

    def sign_server_csr(
        self,
        csr: x509.CertificateSigningRequest,
        ca_cert: x509.Certificate,
        ca_key,
        validity_days: int,
        sans: list[str],
    ) -> x509.Certificate:
        """
        Sign a server request with the intermediate CA using the v3_req profile.

        Args:
            csr: Server CSR
            ca_cert: Issuing CA certificate
            ca_key: Issuing CA private key
            validity_days: Validity period in days
            sans: DNS Subject Alternative Names

        Returns:
            Server certificate
        """
        self._check_csr(csr)
        public_key = csr.public_key()
        builder = (
            self._base_builder(csr.subject, ca_cert.subject, public_key, validity_days)
            .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
            .add_extension(
                x509.KeyUsage(
                    digital_signature=True,
                    content_commitment=True,
                    key_encipherment=True,
                    data_encipherment=False,
                    key_agreement=False,
                    key_cert_sign=False,
                    crl_sign=False,
                    encipher_only=False,
                    decipher_only=False,
                ),
                critical=True,
            )
            .add_extension(x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]), critical=False)
            .add_extension(x509.SubjectKeyIdentifier.from_public_key(public_key), critical=False)
            .add_extension(x509.AuthorityKeyIdentifier.from_issuer_public_key(ca_key.public_key()), critical=False)
        )
        if sans:
            builder = builder.add_extension(
                x509.SubjectAlternativeName([x509.DNSName(san) for san in sans]), critical=False
            )
        return builder.sign(ca_key, self.hash_algorithm)

    def _base_builder(self, subject: x509.Name, issuer: x509.Name, public_key, validity_days: int):
        now = datetime.now(timezone.utc)
        return (
            x509.CertificateBuilder()
            .subject_name(subject)
            .issuer_name(issuer)
            .public_key(public_key)
            .serial_number(x509.random_serial_number())
            .not_valid_before(now)
            .not_valid_after(now + timedelta(days=validity_days))
        )

    @staticmethod
    def _ca_key_usage() -> x509.KeyUsage:
        return x509.KeyUsage(
            digital_signature=True,
            content_commitment=False,
            key_encipherment=False,
            data_encipherment=False,
            key_agreement=False,
            key_cert_sign=True,
            crl_sign=True,
            encipher_only=False,
            decipher_only=False,
        )

    @staticmethod
    def _check_csr(csr: x509.CertificateSigningRequest) -> None:
        if not csr.is_signature_valid:
            raise ValueError("CSR signature is invalid")

    @staticmethod
    def save_private_key(private_key, path: Path) -> None:
        """Write an unencrypted PEM private key (traditional OpenSSL format)."""
        pem = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        )
        FileUtils.write_private_key(path, pem)

    @staticmethod
    def save_csr(csr: x509.CertificateSigningRequest, path: Path) -> None:
        FileUtils.write_binary_file(path, csr.public_bytes(serialization.Encoding.PEM))

    @staticmethod
    def save_certificate(cert: x509.Certificate, path: Path) -> None:
        FileUtils.write_binary_file(path, cert.public_bytes(serialization.Encoding.PEM))

    @staticmethod
    def load_private_key(path: Path):
        """
        Load an unencrypted PEM private key.

        Raises:
            FileNotFoundError: If key file not found
        """
        if not path.exists():
            raise FileNotFoundError(f"Private key not found: {path}")
        return serialization.load_pem_private_key(FileUtils.read_binary_file(path), password=None)

    @staticmethod
    def load_certificate(path: Path) -> x509.Certificate:
        """
        Load a PEM certificate.

        Raises:
            FileNotFoundError: If certificate file not found
        """
        if not path.exists():
            raise FileNotFoundError(f"Certificate not found: {path}")
        return x509.load_pem_x509_certificate(FileUtils.read_binary_file(path))
