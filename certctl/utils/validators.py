"""Input validation utilities."""

import re


def validate_server_name(name: str) -> str:
    """
    Validate a server IP or DNS sub-domain entered by the user.

    Args:
        name: Server name as typed

    Returns:
        The stripped server name

    Raises:
        ValueError: If the name is empty or not a valid DNS label sequence
    """
    name = name.strip().rstrip(".")
    if not name:
        raise ValueError("Server name cannot be empty")

    if not re.match(r"^[A-Za-z0-9]([A-Za-z0-9-]{0,61}[A-Za-z0-9])?(\.[A-Za-z0-9]([A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*$", name):
        raise ValueError(f"Invalid server name: {name}")

    return name


def build_fqdn(server_name: str, domain: str) -> str:
    """
    Append the base domain to a server name.

    Example:
        >>> build_fqdn("web01", "example.com")
        'web01.example.com'
    """
    fqdn = f"{validate_server_name(server_name)}.{domain.strip('.')}"
    validate_domain(fqdn)
    return fqdn


def validate_host(host: str) -> str:
    """
    Validate a remote host (hostname or IP address).

    Raises:
        ValueError: If host is empty or contains characters unsafe for ssh targets
    """
    host = host.strip()
    if not host:
        raise ValueError("Remote host cannot be empty")

    # '@' and whitespace would change the meaning of user@host, '-' would be read as an option
    if host.startswith("-") or not host.strip("[]") or not re.match(r"^[A-Za-z0-9.:\-\[\]]+$", host):
        raise ValueError(f"Invalid remote host: {host}")

    return host


def validate_common_name(cn: str) -> None:
    """
    Validate common name format.

    Raises:
        ValueError: If common name is invalid
    """
    if not cn or len(cn.strip()) == 0:
        raise ValueError("Common name cannot be empty")

    if len(cn) > 64:
        raise ValueError("Common name too long (max 64 characters)")


def validate_domain(domain: str) -> None:
    """
    Validate domain name format.

    Raises:
        ValueError: If domain is invalid
    """
    domain_pattern = r"^([a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)*[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?$"

    if not re.match(domain_pattern, domain) or len(domain) > 253:
        raise ValueError(f"Invalid domain format: {domain}")
