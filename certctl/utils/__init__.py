"""Utility modules."""

from .file_utils import FileUtils
from .logger import setup_logger
from .validators import build_fqdn, validate_common_name, validate_host, validate_server_name

__all__ = ["FileUtils", "setup_logger", "build_fqdn", "validate_common_name", "validate_host", "validate_server_name"]
