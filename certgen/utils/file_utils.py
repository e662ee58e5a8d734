"""File system utilities."""

import logging
import shutil
from pathlib import Path

logger = logging.getLogger("certgen")


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
    def delete_directory(path: Path) -> None:
        """
        Delete directory and all contents.

        Args:
            path: Directory path to delete
        """
        if path.exists():
            shutil.rmtree(path)
            logger.info(f"Deleted directory: {path}")

    @staticmethod
    def copy_file(src: Path, dst: Path) -> None:
        """
        Copy file from source to destination.

        Args:
            src: Source file path
            dst: Destination file path
        """
        FileUtils.ensure_directory(dst.parent)
        shutil.copy2(src, dst)
        logger.debug(f"Copied file: {src} -> {dst}")

    @staticmethod
    def read_file(path: Path) -> str:
        """
        Read file contents as string.

        Args:
            path: File path to read

        Returns:
            File contents as string
        """
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    @staticmethod
    def read_binary_file(path: Path) -> bytes:
        """
        Read file contents as bytes.

        Args:
            path: File path to read

        Returns:
            File contents as bytes
        """
        with open(path, "rb") as f:
            return f.read()

    @staticmethod
    def write_file(path: Path, content: str) -> None:
        """
        Write string content to file, replacing anything already there.

        Args:
            path: File path to write
            content: Content to write
        """
        FileUtils.ensure_directory(path.parent)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        logger.debug(f"Wrote file: {path}")

    @staticmethod
    def touch(path: Path) -> None:
        """Create an empty file unless it already exists."""
        FileUtils.ensure_directory(path.parent)
        path.touch(exist_ok=True)

    @staticmethod
    def remove_files(*paths: Path) -> None:
        """Remove the given files, skipping the ones that are already gone."""
        for path in paths:
            path.unlink(missing_ok=True)
            logger.debug(f"Removed file: {path}")
