"""SSH/SCP command building and execution service."""

import logging
import shlex
import subprocess
from typing import Optional

from certctl.models.config import RemoteSettings
from certctl.utils.validators import validate_host

logger = logging.getLogger("certctl")


class CommandError(RuntimeError):
    """An external command exited with a non-zero status."""

    def __init__(self, command: list[str], returncode: int, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"Command failed with exit code {returncode}: {self.command_line}")

    @property
    def command_line(self) -> str:
        return shlex.join(self.command)


class RemoteService:
    """Service for running ssh, scp, ssh-copy-id and local commands."""

    def __init__(self, settings: Optional[RemoteSettings] = None):
        """
        Initialize remote service.

        Args:
            settings: Remote connection settings, defaults if omitted
        """
        self.settings = settings or RemoteSettings()

    def target(self, host: str) -> str:
        """Return ``user@host`` for a validated host, IPv6 addresses unbracketed."""
        return f"{self.settings.user}@{validate_host(host).strip('[]')}"

    def scp_target(self, host: str, remote_path: str) -> str:
        """Return ``user@host:path``, bracketing IPv6 addresses as scp requires."""
        host = validate_host(host).strip("[]")
        if ":" in host:
            host = f"[{host}]"
        return f"{self.settings.user}@{host}:{remote_path}"

    def _common_options(self) -> list[str]:
        options = []
        if self.settings.identity_file:
            options += ["-i", self.settings.identity_file]
        for option in self.settings.ssh_options:
            options += ["-o", option]
        return options

    def build_ssh_command(self, host: str, command: str) -> list[str]:
        """
        Build an ssh command running ``command`` on ``host``.

        Args:
            host: Remote host
            command: Remote shell command

        Returns:
            Argument list
        """
        return ["ssh", "-p", str(self.settings.port), *self._common_options(), self.target(host), command]

    def build_scp_command(self, sources: list[str], host: str, remote_path: str) -> list[str]:
        """
        Build an scp command copying local ``sources`` to ``host:remote_path``.

        Args:
            sources: Local files
            host: Remote host
            remote_path: Destination path on the remote host

        Returns:
            Argument list
        """
        return [
            "scp",
            "-P",
            str(self.settings.port),
            *self._common_options(),
            *sources,
            self.scp_target(host, remote_path),
        ]

    def build_copy_id_command(self, host: str) -> list[str]:
        """Build an ssh-copy-id command installing the local public key on ``host``."""
        command = ["ssh-copy-id", "-p", str(self.settings.port)]
        if self.settings.identity_file:
            command += ["-i", self.settings.identity_file]
        return command + [self.target(host)]

    def execute_command(self, command: list[str], capture_output: bool = False) -> subprocess.CompletedProcess:
        """
        Execute a command and fail on non-zero exit.

        Interactive commands keep the terminal (``capture_output=False``) so
        ssh can prompt for passwords and host key confirmation.

        Args:
            command: Argument list
            capture_output: Capture stdout/stderr instead of inheriting them

        Returns:
            Completed process

        Raises:
            CommandError: On non-zero exit, missing executable (127) or timeout (124)
        """
        logger.info(f"Executing: {shlex.join(command)}")

        try:
            result = subprocess.run(
                command,
                shell=False,
                capture_output=capture_output,
                text=True,
                timeout=self.settings.timeout,
            )
        except FileNotFoundError:
            logger.error(f"Command not found: {command[0]}")
            raise CommandError(command, 127, f"{command[0]}: command not found")
        except subprocess.TimeoutExpired:
            logger.error(f"Command timeout after {self.settings.timeout} seconds")
            raise CommandError(command, 124, "timeout")

        if result.returncode != 0:
            logger.error(f"Command failed ({result.returncode}): {shlex.join(command)}")
            raise CommandError(command, result.returncode, result.stderr or "")

        return result

    def copy_files(self, host: str, sources: list[str], remote_path: str) -> None:
        """Copy local files to a remote path."""
        self.execute_command(self.build_scp_command(sources, host, remote_path))

    def run_remote(self, host: str, command: str) -> None:
        """Run a shell command on a remote host."""
        self.execute_command(self.build_ssh_command(host, command))

    def make_remote_directory(self, host: str, remote_path: str) -> None:
        """Create a directory (and parents) on a remote host."""
        self.run_remote(host, f"mkdir -p {shlex.quote(remote_path)}")

    def copy_public_key(self, host: str) -> None:
        """Install the local public key in the remote authorized keys."""
        self.execute_command(self.build_copy_id_command(host))
