"""certgen - X.509 keys and certificates for testing, generated with the openssl binary."""

from .exceptions import (
    BackendError,
    CertgenError,
    ConfigError,
    KeyGenError,
    OptionParseError,
    PreconditionError,
)
from .models.config import CertgenConfig
from .toolkit import CertGen

__version__ = "1.0.0"

__all__ = [
    "CertGen",
    "CertgenConfig",
    "CertgenError",
    "OptionParseError",
    "ConfigError",
    "PreconditionError",
    "BackendError",
    "KeyGenError",
]
