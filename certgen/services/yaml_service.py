"""YAML file operations service."""

import logging
from pathlib import Path
from typing import Any, Dict

import yaml

from certgen.exceptions import ConfigError

logger = logging.getLogger("certgen")


class YAMLService:
    """Service for reading certgen settings files."""

    @staticmethod
    def load_yaml(file_path: Path) -> Dict[str, Any]:
        """
        Load YAML file and return as dictionary.

        Args:
            file_path: Path to YAML file

        Returns:
            Parsed YAML content as dictionary, empty for an empty file

        Raises:
            FileNotFoundError: If file doesn't exist
            ConfigError: If file is not valid YAML or not a mapping
        """
        if not file_path.exists():
            raise FileNotFoundError(f"YAML file not found: {file_path}")

        with open(file_path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                logger.error(f"Error parsing YAML file {file_path}: {e}")
                raise ConfigError(f"settings: invalid YAML in {file_path}: {e}")

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"settings: {file_path} must contain a mapping")

        logger.debug(f"Loaded YAML from: {file_path}")
        return data
