"""Interactive SSL certificate management menu."""

import logging
from pathlib import Path
from typing import Callable, Optional

import click

from certctl.cli.dependencies import (
    get_ca_service,
    get_cert_service,
    get_config,
    get_deploy_service,
)
from certctl.models.ca import CAHierarchyRequest, KeyConfig, Subject
from certctl.models.certificate import CertCreateRequest
from certctl.models.config import AppConfig
from certctl.services.cert_service import VerificationError
from certctl.services.remote_service import CommandError
from certctl.utils.logger import setup_logger

logger = logging.getLogger("certctl")


def _prompt_host() -> str:
    return click.prompt("Enter remote host")


def _prompt_server() -> str:
    return click.prompt("Enter server IP or DNS sub domain")


def list_ca(config: AppConfig) -> None:
    for line in get_ca_service(config).list_trusted_cas():
        click.echo(line)


def deploy_ca(config: AppConfig) -> None:
    host = _prompt_host()
    get_deploy_service(config).deploy_ca(host)
    click.echo(f"CA bundle has been deployed to {host}.")


def install_ca(config: AppConfig) -> None:
    host = _prompt_host()
    get_deploy_service(config).install_ca_remote(host)
    click.echo("Installation script has been executed on the remote server.")


def install_ca_local(config: AppConfig) -> None:
    get_deploy_service(config).install_ca_local()
    click.echo("Local CA trust has been updated.")


def create_ssl_cert(config: AppConfig) -> None:
    server_name = _prompt_server()
    request = CertCreateRequest(
        server_name=server_name,
        key_config=KeyConfig(key_size=config.defaults.server_key_size),
        validity_days=config.defaults.server_validity_days,
    )
    cert = get_cert_service(config).create_server_certificate(request)

    for key, value in cert.subject.model_dump(exclude_none=True).items():
        click.echo(f"{key},{value}")
    click.echo(f"SSL Certificate for {cert.fqdn} has been created and verified successfully.")


def deploy_ssl_cert(config: AppConfig) -> None:
    host = _prompt_host()
    server_name = _prompt_server()
    deploy_service = get_deploy_service(config)
    deploy_service.deploy_certificate(host, server_name)
    click.echo(f"SSL Certificate for {deploy_service.cert_service.fqdn(server_name)} has been deployed to the server.")


def copy_public_key(config: AppConfig) -> None:
    host = _prompt_host()
    get_deploy_service(config).copy_public_key(host)
    click.echo("Public key has been copied to the remote host for passwordless access.")


def create_ca_cert(config: AppConfig) -> None:
    ca_organization = click.prompt("Enter CA Organization Name")
    ca_common_name = click.prompt("Enter CA Common Name")
    int_organization = click.prompt("Enter Intermediate Organization Name")
    int_common_name = click.prompt("Enter Intermediate Common Name")

    ca_service = get_ca_service(config)
    overwrite = False
    if ca_service.exists():
        click.confirm(f"A CA already exists at {config.paths.ca_dir}. Delete it and create a new one?", abort=True)
        overwrite = True

    defaults = config.subject_defaults.model_dump()
    request = CAHierarchyRequest(
        ca_subject=Subject(organization=ca_organization, common_name=ca_common_name, **defaults),
        intermediate_subject=Subject(organization=int_organization, common_name=int_common_name, **defaults),
        ca_key_config=KeyConfig(key_size=config.defaults.ca_key_size),
        intermediate_key_config=KeyConfig(key_size=config.defaults.intermediate_key_size),
        ca_validity_days=config.defaults.ca_validity_days,
        intermediate_validity_days=config.defaults.intermediate_validity_days,
    )
    ca_service.create_hierarchy(request, overwrite=overwrite)
    click.echo("New CA certificate and intermediate certificate have been created.")


ACTIONS: dict[int, tuple[str, Callable[[AppConfig], None]]] = {
    1: ("List Certificate Authorities", list_ca),
    2: ("Deploy CA to Remote Server", deploy_ca),
    3: ("Install CA on Remote Server", install_ca),
    4: ("Install CA locally/Update CA Trust", install_ca_local),
    5: ("Create SSL Certificate", create_ssl_cert),
    6: ("Deploy SSL Certificate to Server", deploy_ssl_cert),
    7: ("Copy Public key to Remote Server", copy_public_key),
    8: ("Create CA and Intermediate CA", create_ca_cert),
}


def resolve_choice(choice: str) -> Optional[tuple[str, Callable[[AppConfig], None]]]:
    """Map a menu choice to its action, None when out of range or not a number."""
    try:
        return ACTIONS.get(int(choice.strip()))
    except ValueError:
        return None


def show_menu() -> str:
    click.echo("SSL Certificate Management Menu:")
    for number, (label, _) in ACTIONS.items():
        click.echo(f"{number}. {label}")
    return click.prompt("Enter choice", default="", show_default=False)


@click.command(context_settings={"help_option_names": ["-h", "--help"], "ignore_unknown_options": True})
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Configuration file (default: $CERTCTL_CONFIG or ./config.yaml).",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to the console.")
@click.argument("choice", required=False)
@click.pass_context
def main(ctx: click.Context, config_path: Optional[Path], verbose: bool, choice: Optional[str]) -> None:
    """
    Manage a private CA and deploy SSL certificates.

    CHOICE selects an action (1-8); without it the menu is shown.
    """
    config = get_config(config_path)

    action = resolve_choice(choice if choice is not None else show_menu())
    if action is None:
        click.echo("Invalid choice. Exiting.")
        ctx.exit(1)

    setup_logger(config, verbose)
    label, handler = action

    try:
        handler(config)
    except CommandError as e:
        click.echo(f"Error occurred in {label}: {e.command_line}", err=True)
        ctx.exit(e.returncode)
    except VerificationError as e:
        click.echo(f"Error: SSL Certificate verification for {e.fqdn} failed.")
        click.echo(f"Details: {e.result.summary()}")
        ctx.exit(1)
    except (ValueError, FileNotFoundError) as e:
        logger.debug(f"{label} failed", exc_info=True)
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


if __name__ == "__main__":
    main()
