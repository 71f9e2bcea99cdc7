"""Application configuration models."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class PathSettings(BaseModel):
    """Local paths for generated material and the system trust store."""

    certs_dir: str = "./certs"
    ca_dir: str = "./certs/CA"
    ca_name: str = "RootCA"
    intermediate_name: str = "RootCA_-_Intermediate"
    bundle_name: str = "RootCA-All.pem"
    system_ca_bundle: str = "/etc/pki/ca-trust/extracted/pem/tls-ca-bundle.pem"

    @property
    def ca_key(self) -> Path:
        return Path(self.ca_dir) / f"{self.ca_name}.key"

    @property
    def ca_cert(self) -> Path:
        return Path(self.ca_dir) / f"{self.ca_name}.crt"

    @property
    def intermediate_key(self) -> Path:
        return Path(self.ca_dir) / f"{self.intermediate_name}.key"

    @property
    def intermediate_csr(self) -> Path:
        return Path(self.ca_dir) / f"{self.intermediate_name}.csr"

    @property
    def intermediate_cert(self) -> Path:
        return Path(self.ca_dir) / f"{self.intermediate_name}.crt"

    @property
    def ca_bundle(self) -> Path:
        return Path(self.ca_dir) / self.bundle_name

    @property
    def hierarchy_record(self) -> Path:
        return Path(self.ca_dir) / "hierarchy.yaml"


class SubjectDefaults(BaseModel):
    """Subject fields applied to the CA and intermediate certificates."""

    country: Optional[str] = Field(None, min_length=2, max_length=2)
    state: Optional[str] = None
    locality: Optional[str] = None
    organizational_unit: Optional[str] = None
    email_address: Optional[str] = None


class CertDefaults(BaseModel):
    """Key sizes and validity periods."""

    ca_key_size: int = 4096
    ca_validity_days: int = 365
    intermediate_key_size: int = 4096
    intermediate_validity_days: int = 365
    server_key_size: int = 2048
    server_validity_days: int = 3650


class RemoteSettings(BaseModel):
    """SSH/SCP settings for remote hosts."""

    user: str = "root"
    port: int = 22
    identity_file: Optional[str] = None
    ssh_options: list[str] = Field(default_factory=list)
    timeout: Optional[int] = None
    ssl_dir: str = "/etc/ssl/"
    trust_anchors: str = "/etc/pki/ca-trust/source/anchors/"
    copy_script: bool = True
    # None selects the bundled trust helper
    script_source: Optional[str] = None
    script_dest: str = "/usr/bin/certctl-trust"
    install_command: str = "python3 /usr/bin/certctl-trust 4"
    create_dirs: bool = True


class TrustSettings(BaseModel):
    """Local trust store settings."""

    update_command: list[str] = Field(default_factory=lambda: ["update-ca-trust"])


class LoggingSettings(BaseModel):
    """Logging settings."""

    level: str = "INFO"
    console_level: str = "WARNING"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


class AppConfig(BaseModel):
    """Main application configuration."""

    domain: str = "example.com"
    paths: PathSettings = PathSettings()
    subject_defaults: SubjectDefaults = SubjectDefaults()
    defaults: CertDefaults = CertDefaults()
    remote: RemoteSettings = RemoteSettings()
    trust: TrustSettings = TrustSettings()
    logging: LoggingSettings = LoggingSettings()
