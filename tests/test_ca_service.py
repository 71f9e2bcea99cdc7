"""Tests for CA service."""

import os
import stat
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes

from certctl.services.parser_service import CertificateParser


def load(path):
    return x509.load_pem_x509_certificate(Path(path).read_bytes())


@pytest.mark.unit
class TestCAService:
    """Test CA service operations."""

    def test_create_hierarchy(self, ca_service, created_hierarchy):
        """Test creating the CA, intermediate and bundle."""
        paths = ca_service.paths

        for path in (
            paths.ca_key,
            paths.ca_cert,
            paths.intermediate_key,
            paths.intermediate_csr,
            paths.intermediate_cert,
            paths.ca_bundle,
            paths.hierarchy_record,
        ):
            assert path.exists(), path

        assert created_hierarchy.root.subject.common_name == "Test Root CA"
        assert created_hierarchy.intermediate.subject.common_name == "Test Intermediate CA"
        assert created_hierarchy.bundle_file == str(paths.ca_bundle)

    def test_root_is_self_signed(self, ca_service, created_hierarchy):
        root = load(ca_service.paths.ca_cert)

        assert root.issuer == root.subject
        root.verify_directly_issued_by(root)
        assert CertificateParser.is_ca(root)

    def test_intermediate_signed_by_root(self, ca_service, created_hierarchy):
        root = load(ca_service.paths.ca_cert)
        intermediate = load(ca_service.paths.intermediate_cert)

        assert intermediate.issuer == root.subject
        intermediate.verify_directly_issued_by(root)

        bc = intermediate.extensions.get_extension_for_oid(x509.ExtensionOID.BASIC_CONSTRAINTS).value
        assert bc.ca is True
        assert bc.path_length == 0

    def test_subject_fields(self, ca_service, created_hierarchy):
        """Test that all subject fields are written to the certificates."""
        info = CertificateParser.parse_certificate(ca_service.paths.intermediate_cert)

        assert info["subject"]["organization"] == "Test Intermediate Org"
        assert info["subject"]["country"] == "US"
        assert info["subject"]["email_address"] == "pki@example.com"
        assert info["issuer"]["common_name"] == "Test Root CA"

    def test_bundle_order(self, ca_service, created_hierarchy):
        """Test that the bundle holds the CA certificate followed by the intermediate."""
        bundle = CertificateParser.load_bundle(ca_service.paths.ca_bundle)

        assert len(bundle) == 2
        assert bundle[0] == load(ca_service.paths.ca_cert)
        assert bundle[1] == load(ca_service.paths.intermediate_cert)

    def test_private_keys_are_owner_only(self, ca_service, created_hierarchy):
        for key in (ca_service.paths.ca_key, ca_service.paths.intermediate_key):
            assert stat.S_IMODE(os.stat(key).st_mode) == 0o600

    def test_create_duplicate_fails(self, ca_service, created_hierarchy, sample_hierarchy_request):
        """Test that creating a CA over an existing one fails."""
        fingerprint = created_hierarchy.root.fingerprint_sha256

        with pytest.raises(ValueError, match="CA already exists"):
            ca_service.create_hierarchy(sample_hierarchy_request)

        assert ca_service.get_hierarchy().root.fingerprint_sha256 == fingerprint

    def test_create_with_overwrite(self, ca_service, created_hierarchy, sample_hierarchy_request):
        replaced = ca_service.create_hierarchy(sample_hierarchy_request, overwrite=True)

        assert replaced.root.fingerprint_sha256 != created_hierarchy.root.fingerprint_sha256
        on_disk = load(ca_service.paths.ca_cert).fingerprint(hashes.SHA256()).hex(":").upper()
        assert on_disk == replaced.root.fingerprint_sha256

    def test_get_hierarchy(self, ca_service, created_hierarchy):
        hierarchy = ca_service.get_hierarchy()

        assert hierarchy.root.serial_number == created_hierarchy.root.serial_number
        assert hierarchy.intermediate.subject.common_name == "Test Intermediate CA"
        assert hierarchy.root.not_after > hierarchy.root.not_before

    def test_get_hierarchy_without_ca_fails(self, ca_service):
        with pytest.raises(ValueError, match="CA not found"):
            ca_service.get_hierarchy()

    def test_rollback_on_failure(self, ca_service, sample_hierarchy_request, monkeypatch):
        """Test that files written by a failed creation are removed."""

        def fail(*args, **kwargs):
            raise RuntimeError("signing failed")

        monkeypatch.setattr(ca_service.crypto_service, "sign_intermediate_csr", fail)

        with pytest.raises(RuntimeError, match="signing failed"):
            ca_service.create_hierarchy(sample_hierarchy_request)

        assert not ca_service.exists()
        assert not ca_service.paths.intermediate_key.exists()
        assert not ca_service.paths.intermediate_csr.exists()

    def test_failed_overwrite_leaves_no_mixed_set(
        self, ca_service, created_hierarchy, sample_hierarchy_request, monkeypatch
    ):
        """Test that a failed overwrite does not leave the old intermediate or bundle behind."""

        def fail(*args, **kwargs):
            raise RuntimeError("signing failed")

        monkeypatch.setattr(ca_service.crypto_service, "sign_intermediate_csr", fail)

        with pytest.raises(RuntimeError, match="signing failed"):
            ca_service.create_hierarchy(sample_hierarchy_request, overwrite=True)

        paths = ca_service.paths
        for path in (
            paths.ca_key,
            paths.ca_cert,
            paths.intermediate_key,
            paths.intermediate_csr,
            paths.intermediate_cert,
            paths.ca_bundle,
            paths.hierarchy_record,
        ):
            assert not path.exists(), path

    def test_empty_common_name_fails(self, ca_service, sample_hierarchy_request):
        sample_hierarchy_request.ca_subject.common_name = "   "

        with pytest.raises(ValueError, match="Common name cannot be empty"):
            ca_service.create_hierarchy(sample_hierarchy_request)

        assert not ca_service.exists()

    def test_list_trusted_cas(self, ca_service, created_hierarchy):
        """Test listing subjects of every certificate in a trust bundle."""
        subjects = ca_service.list_trusted_cas(ca_service.paths.ca_bundle)

        assert len(subjects) == 2
        assert all(line.startswith("subject=") for line in subjects)
        assert "CN=Test Root CA" in subjects[0]
        assert "CN=Test Intermediate CA" in subjects[1]

    def test_list_trusted_cas_skips_unparseable(self, work_dir, ca_service, created_hierarchy):
        """Test that one corrupt certificate does not hide the rest of the trust store."""
        root_pem, intermediate_pem = CertificateParser.split_pem_bundle(ca_service.paths.ca_bundle.read_text())
        broken = "-----BEGIN CERTIFICATE-----\nnot base64\n-----END CERTIFICATE-----"
        bundle = work_dir / "tls-ca-bundle.pem"
        bundle.write_text("\n".join([root_pem, broken, intermediate_pem]) + "\n")

        subjects = ca_service.list_trusted_cas(bundle)

        assert len(subjects) == 2
        assert "CN=Test Root CA" in subjects[0]
        assert "CN=Test Intermediate CA" in subjects[1]

    def test_list_trusted_cas_missing_bundle(self, ca_service):
        with pytest.raises(FileNotFoundError):
            ca_service.list_trusted_cas()
