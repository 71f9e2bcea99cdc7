"""CLI dependencies."""

import logging
import os
from pathlib import Path
from typing import Optional

from certctl.models.config import AppConfig
from certctl.services.ca_service import CAService
from certctl.services.cert_service import CertificateService
from certctl.services.crypto_service import CryptoService
from certctl.services.deploy_service import DeployService
from certctl.services.remote_service import RemoteService
from certctl.services.yaml_service import YAMLService

logger = logging.getLogger("certctl")

DEFAULT_CONFIG_FILE = "config.yaml"


def get_config(config_path: Optional[Path] = None) -> AppConfig:
    """
    Get application configuration.

    Resolution order: explicit path, ``CERTCTL_CONFIG``, ``./config.yaml``.
    Without any file the built-in defaults are used.

    Args:
        config_path: Explicit configuration file

    Returns:
        Application configuration
    """
    path = Path(config_path or os.environ.get("CERTCTL_CONFIG") or DEFAULT_CONFIG_FILE)
    if not path.exists():
        if config_path:
            raise FileNotFoundError(f"Config file not found: {path}")
        logger.debug(f"No {path} found, using defaults")
        return AppConfig()

    config_data = YAMLService.load_yaml(path)
    return AppConfig(**config_data)


def get_crypto_service() -> CryptoService:
    return CryptoService()


def get_ca_service(config: AppConfig) -> CAService:
    """
    Get CA service instance.

    Args:
        config: Application configuration

    Returns:
        CA service
    """
    return CAService(config.paths, get_crypto_service())


def get_cert_service(config: AppConfig) -> CertificateService:
    """
    Get certificate service instance.

    Args:
        config: Application configuration

    Returns:
        Certificate service
    """
    return CertificateService(config.paths, config.domain, get_crypto_service())


def get_remote_service(config: AppConfig) -> RemoteService:
    return RemoteService(config.remote)


def get_deploy_service(config: AppConfig) -> DeployService:
    """
    Get deploy service instance.

    Args:
        config: Application configuration

    Returns:
        Deploy service
    """
    return DeployService(config, get_remote_service(config), get_cert_service(config))
