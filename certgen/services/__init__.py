"""Service layer wrapping the openssl binary."""

from .alias_store import AliasStore
from .config_service import ConfigService
from .export_service import ExportService
from .key_service import KeyService
from .openssl_service import OpenSSLService
from .parser_service import CertificateParser
from .revocation_service import RevocationService
from .signing_service import SigningService
from .yaml_service import YAMLService

__all__ = [
    "AliasStore",
    "CertificateParser",
    "ConfigService",
    "ExportService",
    "KeyService",
    "OpenSSLService",
    "RevocationService",
    "SigningService",
    "YAMLService",
]
