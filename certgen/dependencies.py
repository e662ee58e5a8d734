"""Construction of the configuration and the services."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import ValidationError

from certgen.exceptions import ConfigError
from certgen.models.config import ENVIRONMENT_OVERRIDES, CertgenConfig
from certgen.services.alias_store import AliasStore
from certgen.services.config_service import ConfigService
from certgen.services.export_service import ExportService
from certgen.services.key_service import KeyService
from certgen.services.openssl_service import OpenSSLService
from certgen.services.revocation_service import RevocationService
from certgen.services.signing_service import SigningService
from certgen.services.yaml_service import YAMLService

logger = logging.getLogger("certgen")

CONFIG_ENV = "CERTGEN_CONFIG"
DEFAULT_CONFIG_FILE = "certgen.yaml"


def find_config_file(config_path: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """
    Locate the settings file.

    Args:
        config_path: Explicit path, must exist when given

    Returns:
        Path of the settings file, None to use the defaults
    """
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"settings: {path} not found")
        return path

    env_path = os.environ.get(CONFIG_ENV)
    if env_path:
        path = Path(env_path)
        if not path.exists():
            raise ConfigError(f"settings: {path} from ${CONFIG_ENV} not found")
        return path

    default_path = Path(DEFAULT_CONFIG_FILE)
    return default_path if default_path.exists() else None


def apply_environment_overrides(data: Dict[str, Any], environ: Mapping[str, str]) -> Dict[str, Any]:
    """
    Overlay the x509* environment variables on loaded settings.

    Args:
        data: Settings as loaded from YAML
        environ: Environment to read

    Returns:
        The same dictionary, updated in place
    """
    for variable, (section, field) in ENVIRONMENT_OVERRIDES.items():
        value = environ.get(variable)
        if not value:
            continue
        # date(1) style format strings start with '+'
        if variable == "x509FORMAT":
            value = value.lstrip("+")

        target = data if section is None else data.setdefault(section, {})
        target[field] = value
        logger.debug(f"Setting {field} taken from ${variable}")
    return data


def get_config(
    config_path: Optional[Union[str, Path]] = None, environ: Optional[Mapping[str, str]] = None
) -> CertgenConfig:
    """
    Get certgen configuration.

    Args:
        config_path: YAML settings file, ``$CERTGEN_CONFIG`` or ``./certgen.yaml`` by default
        environ: Environment holding overrides, ``os.environ`` by default

    Returns:
        certgen configuration

    Raises:
        ConfigError: If the settings file is missing or invalid
    """
    path = find_config_file(config_path)
    data = YAMLService.load_yaml(path) if path is not None else {}
    apply_environment_overrides(data, os.environ if environ is None else environ)

    try:
        return CertgenConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"settings: {e}")


def get_alias_store(config: CertgenConfig) -> AliasStore:
    return AliasStore(Path(config.paths.store), config.files)


def get_openssl_service(config: CertgenConfig) -> OpenSSLService:
    """
    Get OpenSSL service instance.

    Args:
        config: certgen configuration

    Returns:
        OpenSSL service
    """
    return OpenSSLService(openssl_path=config.paths.openssl, timeout=config.command_timeout)


def get_config_service(config: CertgenConfig, store: AliasStore, openssl_service: OpenSSLService) -> ConfigService:
    return ConfigService(config, store, openssl_service)


def get_key_service(config: CertgenConfig, store: AliasStore, openssl_service: OpenSSLService) -> KeyService:
    return KeyService(config, store, openssl_service)


def get_signing_service(config: CertgenConfig, store: AliasStore, openssl_service: OpenSSLService) -> SigningService:
    """
    Get signing service instance.

    Args:
        config: certgen configuration
        store: Alias store
        openssl_service: OpenSSL service

    Returns:
        Signing service
    """
    return SigningService(config, store, openssl_service, get_config_service(config, store, openssl_service))


def get_export_service(store: AliasStore, openssl_service: OpenSSLService) -> ExportService:
    return ExportService(store, openssl_service)


def get_revocation_service(
    config: CertgenConfig, store: AliasStore, openssl_service: OpenSSLService
) -> RevocationService:
    return RevocationService(config, store, openssl_service)
