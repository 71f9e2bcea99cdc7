"""Pytest configuration and shared fixtures."""

import logging
import shutil
import subprocess
import tempfile
from datetime import datetime
from pathlib import Path

import pytest

from certctl.models.ca import CAHierarchyRequest, KeyConfig, Subject
from certctl.models.certificate import CertCreateRequest
from certctl.models.config import AppConfig, CertDefaults, PathSettings, RemoteSettings, SubjectDefaults
from certctl.services.ca_service import CAService
from certctl.services.cert_service import CertificateService
from certctl.services.crypto_service import CryptoService
from certctl.services.deploy_service import DeployService
from certctl.services.remote_service import RemoteService
from certctl.services.yaml_service import YAMLService


@pytest.fixture(scope="session")
def test_data_dir():
    """Create a temporary directory for test data."""
    temp_dir = tempfile.mkdtemp(prefix="certctl_test_")
    yield Path(temp_dir)
    # Cleanup
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def work_dir(test_data_dir):
    """Create a fresh working directory for each test."""
    path = test_data_dir / f"work_{datetime.now().timestamp()}"
    path.mkdir(parents=True, exist_ok=True)
    yield path
    # Cleanup after test
    if path.exists():
        shutil.rmtree(path, ignore_errors=True)


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop handlers installed by setup_logger so each test starts clean."""
    yield
    logger = logging.getLogger("certctl")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def app_config(work_dir):
    """Application configuration rooted in the test directory (2048-bit keys for speed)."""
    return AppConfig(
        domain="example.com",
        paths=PathSettings(
            certs_dir=str(work_dir / "certs"),
            ca_dir=str(work_dir / "certs" / "CA"),
            system_ca_bundle=str(work_dir / "tls-ca-bundle.pem"),
        ),
        subject_defaults=SubjectDefaults(
            country="US",
            state="California",
            locality="San Francisco",
            organizational_unit="IT Department",
            email_address="admin@example.com",
        ),
        defaults=CertDefaults(ca_key_size=2048, intermediate_key_size=2048, server_key_size=2048),
        remote=RemoteSettings(),
    )


@pytest.fixture
def config_file(work_dir, app_config):
    """Write the test configuration to a YAML file."""
    path = work_dir / "config.yaml"
    YAMLService.save_yaml(path, app_config.model_dump())
    return path


@pytest.fixture
def crypto_service():
    """Create crypto service instance."""
    return CryptoService()


@pytest.fixture
def ca_service(app_config, crypto_service):
    """Create CA service instance with test directory."""
    return CAService(app_config.paths, crypto_service)


@pytest.fixture
def cert_service(app_config, crypto_service):
    """Create Certificate service instance with test directory."""
    return CertificateService(app_config.paths, app_config.domain, crypto_service)


@pytest.fixture
def remote_service(app_config):
    return RemoteService(app_config.remote)


@pytest.fixture
def deploy_service(app_config, remote_service, cert_service):
    return DeployService(app_config, remote_service, cert_service)


@pytest.fixture
def sample_ca_subject():
    """Create a sample CA subject."""
    return Subject(
        common_name="Test Root CA",
        organization="Test Organization",
        organizational_unit="Test Unit",
        country="US",
        state="California",
        locality="San Francisco",
        email_address="pki@example.com",
    )


@pytest.fixture
def sample_intermediate_subject():
    """Create a sample intermediate subject."""
    return Subject(
        common_name="Test Intermediate CA",
        organization="Test Intermediate Org",
        organizational_unit="Test Unit",
        country="US",
        state="California",
        locality="San Francisco",
        email_address="pki@example.com",
    )


@pytest.fixture
def sample_hierarchy_request(sample_ca_subject, sample_intermediate_subject):
    """Create a sample CA hierarchy request."""
    return CAHierarchyRequest(
        ca_subject=sample_ca_subject,
        intermediate_subject=sample_intermediate_subject,
        ca_key_config=KeyConfig(key_size=2048),
        intermediate_key_config=KeyConfig(key_size=2048),
        ca_validity_days=365,
        intermediate_validity_days=365,
    )


@pytest.fixture
def created_hierarchy(ca_service, sample_hierarchy_request):
    """Create a test CA and intermediate and return the hierarchy."""
    return ca_service.create_hierarchy(sample_hierarchy_request)


@pytest.fixture
def created_cert(cert_service, created_hierarchy):
    """Issue a server certificate for web01."""
    return cert_service.create_server_certificate(CertCreateRequest(server_name="web01"))


@pytest.fixture
def foreign_bundle(work_dir, crypto_service, sample_hierarchy_request):
    """Create an unrelated CA hierarchy with the same names and return its bundle."""
    other = CAService(PathSettings(ca_dir=str(work_dir / "other_ca")), crypto_service)
    other.create_hierarchy(sample_hierarchy_request)
    return other.paths.ca_bundle


class CommandRecorder:
    """Stand-in for subprocess.run that records argument lists."""

    def __init__(self):
        self.commands = []
        self.kwargs = []
        self.returncode = 0
        self.exception = None

    def __call__(self, command, **kwargs):
        self.commands.append(list(command))
        self.kwargs.append(kwargs)
        if self.exception is not None:
            raise self.exception
        return subprocess.CompletedProcess(command, self.returncode, stdout="", stderr="")


@pytest.fixture
def fake_run(monkeypatch):
    """Record external commands instead of running them."""
    recorder = CommandRecorder()
    monkeypatch.setattr("certctl.services.remote_service.subprocess.run", recorder)
    return recorder
