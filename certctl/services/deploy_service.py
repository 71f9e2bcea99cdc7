"""CA bundle and certificate distribution service."""

import logging
import posixpath
from pathlib import Path

from certctl import trust_helper
from certctl.models.config import AppConfig
from certctl.services.cert_service import CertificateService
from certctl.services.remote_service import RemoteService
from certctl.utils.file_utils import FileUtils

logger = logging.getLogger("certctl")


class DeployService:
    """Service for pushing trust anchors and server key pairs to remote hosts."""

    def __init__(self, config: AppConfig, remote_service: RemoteService, cert_service: CertificateService):
        """
        Initialize deploy service.

        Args:
            config: Application configuration
            remote_service: Remote command service
            cert_service: Certificate service (for certificate file locations)
        """
        self.config = config
        self.remote_service = remote_service
        self.cert_service = cert_service

    def deploy_ca(self, host: str) -> None:
        """
        Copy the CA bundle to the remote trust anchors and the trust helper to ``script_dest``.

        Raises:
            FileNotFoundError: If the CA bundle or script does not exist locally
            CommandError: If scp fails
        """
        remote = self.config.remote
        bundle = self.config.paths.ca_bundle
        script = self.script_path() if remote.copy_script else None

        FileUtils.require_files(bundle, *([script] if script else []))

        self.remote_service.copy_files(host, [str(bundle)], remote.trust_anchors)
        logger.info(f"Copied CA bundle to {host}:{remote.trust_anchors}")

        if script:
            self.remote_service.copy_files(host, [str(script)], remote.script_dest)
            logger.info(f"Copied {script.name} to {host}:{remote.script_dest}")

    def script_path(self) -> Path:
        """Local script copied by deploy_ca, the bundled trust helper unless configured."""
        if self.config.remote.script_source:
            return Path(self.config.remote.script_source).expanduser()
        return Path(trust_helper.__file__)

    def install_ca_remote(self, host: str) -> None:
        """
        Run the trust installation command on a remote host.

        Raises:
            CommandError: If ssh or the remote command fails
        """
        self.remote_service.run_remote(host, self.config.remote.install_command)
        logger.info(f"Ran '{self.config.remote.install_command}' on {host}")

    def install_ca_local(self) -> None:
        """
        Refresh the local trust store.

        Raises:
            CommandError: If the refresh command fails
        """
        self.remote_service.execute_command(list(self.config.trust.update_command))
        logger.info("Local CA trust updated")

    def deploy_certificate(self, host: str, server_name: str) -> str:
        """
        Copy a server's certificate and key to ``<ssl_dir>/<fqdn>/`` on a remote host.

        Args:
            host: Remote host
            server_name: Server IP or DNS sub-domain

        Returns:
            Remote directory the files were copied to

        Raises:
            FileNotFoundError: If the certificate was never created
            CommandError: If ssh or scp fails
        """
        fqdn = self.cert_service.fqdn(server_name)
        key_path, _, cert_path = self.cert_service.cert_files(fqdn)
        FileUtils.require_files(cert_path, key_path)

        remote_dir = posixpath.join(self.config.remote.ssl_dir, fqdn) + "/"
        if self.config.remote.create_dirs:
            self.remote_service.make_remote_directory(host, remote_dir)

        self.remote_service.copy_files(host, [str(cert_path), str(key_path)], remote_dir)
        logger.info(f"Deployed certificate for {fqdn} to {host}:{remote_dir}")
        return remote_dir

    def copy_public_key(self, host: str) -> None:
        """
        Install the local public key on a remote host for passwordless access.

        Raises:
            CommandError: If ssh-copy-id fails
        """
        self.remote_service.copy_public_key(host)
        logger.info(f"Copied public key to {host}")
