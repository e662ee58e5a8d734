"""OpenSSL command execution service."""

import logging
import os
import shutil
import subprocess
from functools import cached_property
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Type

from certgen.exceptions import BackendError
from certgen.models.openssl import OpenSSLCapabilities

logger = logging.getLogger("certgen")


class OpenSSLService:
    """Service for running the openssl binary that does all the cryptography."""

    @staticmethod
    def path_to_posix(path: Path) -> str:
        """
        Convert Path to absolute POSIX-style string (forward slashes) for MinGW OpenSSL compatibility.

        Args:
            path: Path object to convert

        Returns:
            Absolute path with forward slashes
        """
        absolute_path = path.resolve()
        return str(absolute_path).replace("\\", "/")

    @staticmethod
    def mask_command(args: Sequence[str]) -> str:
        """
        Render a command for logging with passwords replaced by ``***``.

        Args:
            args: Command arguments

        Returns:
            Printable command line
        """
        masked = []
        for arg in args:
            if arg.startswith("pass:"):
                masked.append("pass:***")
            else:
                masked.append(arg)
        return " ".join(masked)

    def __init__(self, openssl_path: Optional[str] = None, timeout: Optional[float] = None):
        """
        Initialize OpenSSL service.

        Args:
            openssl_path: Path to openssl binary. If None, uses 'openssl' from PATH.
            timeout: Seconds after which a single invocation is aborted, None waits forever

        Raises:
            RuntimeError: If no openssl_path is given and openssl is not in PATH
        """
        if openssl_path is None:
            if shutil.which("openssl") is None:
                raise RuntimeError(
                    "OpenSSL not found in PATH. Please install OpenSSL and ensure it's accessible via PATH.\n"
                    "Verify with: openssl version"
                )
            self.openssl_path = "openssl"
        else:
            self.openssl_path = openssl_path

        self.timeout = timeout
        logger.debug(f"Using OpenSSL command: {self.openssl_path}")

    @cached_property
    def capabilities(self) -> OpenSSLCapabilities:
        """Capabilities of the installed openssl, probed on first use only."""
        stdout = self.run(["version"], "version: can't query openssl version")
        capabilities = OpenSSLCapabilities.from_version_string(stdout)
        logger.info(f"Detected {capabilities.flavour} {'.'.join(map(str, capabilities.version))}")
        return capabilities

    def execute(self, args: Sequence[str]) -> Tuple[bool, str, str]:
        """
        Execute a single openssl command.

        Args:
            args: Arguments following the openssl binary (subcommand first)

        Returns:
            Tuple of (success, stdout, stderr)
        """
        command: List[str] = [self.openssl_path, *args]

        # Create environment without OPENSSL_CONF to avoid default config path issues
        env = os.environ.copy()
        env.pop("OPENSSL_CONF", None)

        logger.info(f"Executing: {self.mask_command(command)}")

        try:
            result = subprocess.run(command, shell=False, capture_output=True, text=True, timeout=self.timeout, env=env)
        except subprocess.TimeoutExpired:
            logger.error(f"Command timeout after {self.timeout} seconds")
            return False, "", f"Command timeout after {self.timeout} seconds"
        except OSError as e:
            logger.error(f"Command execution error: {e}")
            return False, "", str(e)

        if result.returncode != 0:
            logger.error(f"Command failed: {result.stderr.strip()}")
            return False, result.stdout, result.stderr

        return True, result.stdout, result.stderr

    def run(
        self,
        args: Sequence[str],
        error_message: str,
        error_class: Type[BackendError] = BackendError,
    ) -> str:
        """
        Execute an openssl command and raise if it fails.

        Args:
            args: Arguments following the openssl binary
            error_message: Message of the raised exception
            error_class: BackendError subclass to raise

        Returns:
            Standard output of the command

        Raises:
            BackendError: If the command fails
        """
        success, stdout, stderr = self.execute(args)
        if not success:
            raise error_class(
                f"{error_message}: {stderr.strip()}" if stderr.strip() else error_message,
                command=[self.openssl_path, *args],
                stderr=stderr,
            )
        return stdout

    def key_text(self, key_path: Path) -> Optional[str]:
        """
        Get the text dump of a private key.

        Args:
            key_path: Path to PEM private key

        Returns:
            Text dump, or None if it can't be produced
        """
        if not self.capabilities.has_pkey:
            return None

        success, stdout, _ = self.execute(["pkey", "-in", self.path_to_posix(key_path), "-noout", "-text"])
        return stdout if success else None

    def is_eddsa_key(self, key_path: Path) -> bool:
        """
        Check if the key uses an algorithm with a built-in hash (Ed25519, Ed448).

        Args:
            key_path: Path to PEM private key

        Returns:
            True for EdDSA keys
        """
        text = self.key_text(key_path)
        if not text:
            return False

        return any(line.upper().startswith(("ED25519", "ED448")) for line in text.splitlines())
