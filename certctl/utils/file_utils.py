"""File system utilities."""

import logging
import os
import shutil
from pathlib import Path

logger = logging.getLogger("certctl")


class FileUtils:
    """Utility class for file operations."""

    @staticmethod
    def ensure_directory(path: Path) -> None:
        """
        Ensure directory exists, create if not.

        Args:
            path: Directory path to ensure
        """
        path.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Ensured directory exists: {path}")

    @staticmethod
    def delete_directory(path: Path, ignore_errors: bool = False) -> None:
        """
        Delete directory and all contents.

        Args:
            path: Directory path to delete
            ignore_errors: Whether to ignore errors during deletion
        """
        if path.exists():
            shutil.rmtree(path, ignore_errors=ignore_errors)
            logger.info(f"Deleted directory: {path}")

    @staticmethod
    def read_binary_file(path: Path) -> bytes:
        """Read file contents as bytes."""
        with open(path, "rb") as f:
            return f.read()

    @staticmethod
    def write_binary_file(path: Path, content: bytes) -> None:
        """
        Write binary content to file.

        Args:
            path: File path to write
            content: Binary content to write
        """
        FileUtils.ensure_directory(path.parent)
        with open(path, "wb") as f:
            f.write(content)
        logger.debug(f"Wrote binary file: {path}")

    @staticmethod
    def write_private_key(path: Path, content: bytes) -> None:
        """
        Write private key material readable by the owner only.

        Args:
            path: Key file path
            content: PEM-encoded key
        """
        FileUtils.ensure_directory(path.parent)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "wb") as f:
            f.write(content)
        os.chmod(path, 0o600)
        logger.debug(f"Wrote private key: {path}")

    @staticmethod
    def concatenate_files(sources: list[Path], dst: Path) -> None:
        """
        Concatenate files into a single destination file.

        Args:
            sources: Files to concatenate, in order
            dst: Destination file
        """
        FileUtils.write_binary_file(dst, b"".join(FileUtils.read_binary_file(src) for src in sources))
        logger.debug(f"Concatenated {len(sources)} files into {dst}")

    @staticmethod
    def require_files(*paths: Path) -> None:
        """
        Ensure every given file exists.

        Raises:
            FileNotFoundError: For the first missing file
        """
        for path in paths:
            if not path.is_file():
                raise FileNotFoundError(f"File not found: {path}")
