"""Directory-per-alias storage of keys, certificates and CA state."""

import logging
from pathlib import Path

from certgen.exceptions import ConfigError, PreconditionError
from certgen.models.certificate import AliasState
from certgen.models.config import FileNames
from certgen.utils.file_utils import FileUtils
from certgen.utils.validators import validate_alias

logger = logging.getLogger("certgen")


class AliasStore:
    """
    Maps alias names to directories below a base directory.

    Every alias holds at most one private key. Files are named after the
    configured FileNames, derived encodings are cached next to the originals.
    """

    def __init__(self, store_dir: Path, files: FileNames):
        self.store_dir = store_dir
        self.files = files

    def path(self, alias: str) -> Path:
        """Directory of an alias, which need not exist yet."""
        try:
            return validate_alias(self.store_dir, alias)
        except ValueError as e:
            raise ConfigError(str(e))

    def file(self, alias: str, name: str) -> Path:
        """Path of one of the FileNames entries (``key``, ``cert``, ...) of an alias."""
        return self.path(alias) / getattr(self.files, name)

    def key_path(self, alias: str) -> Path:
        return self.file(alias, "key")

    def cert_path(self, alias: str) -> Path:
        return self.file(alias, "cert")

    def temp_cert_path(self, alias: str) -> Path:
        return self.path(alias) / f"temp-{self.files.cert}"

    def csr_path(self, alias: str) -> Path:
        return self.file(alias, "csr")

    def config_path(self, alias: str) -> Path:
        return self.file(alias, "ca_config")

    def index_path(self, alias: str) -> Path:
        return self.file(alias, "ca_index")

    def serial_path(self, alias: str) -> Path:
        return self.file(alias, "ca_serial")

    def has_key(self, alias: str) -> bool:
        return self.key_path(alias).exists()

    def has_cert(self, alias: str) -> bool:
        return self.cert_path(alias).exists()

    def has_config(self, alias: str) -> bool:
        return self.config_path(alias).exists()

    def ensure(self, alias: str) -> Path:
        """Create the alias directory if needed and return it."""
        alias_dir = self.path(alias)
        FileUtils.ensure_directory(alias_dir)
        return alias_dir

    def state(self, alias: str) -> AliasState:
        """
        Infer the lifecycle state of an alias from the files it holds.

        Args:
            alias: Alias name

        Returns:
            NO_KEY, KEY_PRESENT, TEMP_CERT (an interrupted self signing) or FINAL
        """
        if not self.has_key(alias):
            return AliasState.NO_KEY
        if self.has_cert(alias):
            return AliasState.FINAL
        if self.temp_cert_path(alias).exists():
            return AliasState.TEMP_CERT
        return AliasState.KEY_PRESENT

    def reset_ledger(self, alias: str, first_serial: str) -> None:
        """
        Empty the CA index and restart serial numbering.

        Args:
            alias: Alias acting as CA
            first_serial: Serial (hex) the next certificate gets
        """
        FileUtils.remove_files(self.index_path(alias), self.serial_path(alias))
        FileUtils.touch(self.index_path(alias))
        FileUtils.write_file(self.serial_path(alias), f"{first_serial}\n")
        logger.debug(f"Reset CA ledger of '{alias}' to serial {first_serial}")

    def copy_key(self, alias: str, target: str) -> Path:
        """
        Create a new alias holding a copy of another alias's key.

        Args:
            alias: Source alias, must hold a key
            target: New alias, must not exist

        Returns:
            Path of the copied key

        Raises:
            PreconditionError: If source has no key
            ConfigError: If target already exists
        """
        if not self.has_key(alias):
            raise PreconditionError(f"key_copy: Source '{alias}' invalid, it holds no private key")

        target_dir = self.path(target)
        if target_dir.exists():
            raise ConfigError(f"key_copy: Destination '{target}' exists")

        target_dir.mkdir(parents=True)
        FileUtils.copy_file(self.key_path(alias), self.key_path(target))
        logger.info(f"Copied key of '{alias}' to '{target}'")
        return self.key_path(target)

    def delete(self, alias: str) -> None:
        """
        Remove an alias directory with everything in it.

        Args:
            alias: Alias name

        Raises:
            PreconditionError: If the directory doesn't hold a key, so it is not an alias
        """
        if not self.has_key(alias):
            raise PreconditionError(f"rm_alias: '{alias}' does not refer to a certgen alias directory")

        FileUtils.delete_directory(self.path(alias))
