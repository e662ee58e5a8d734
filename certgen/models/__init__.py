"""Data models for certgen."""

from .certificate import (
    AliasState,
    CertRole,
    CertSignRequest,
    OCSPNoCheck,
    SelfSignRequest,
    SignaturePadding,
    SigningConfigRequest,
)
from .config import CertgenConfig, FileNames
from .crl import CRLRequest, RevocationEntry, RevocationReason, RevokeRequest
from .export import CertExportRequest, KeyExportRequest
from .key import KeyAlgorithm, KeyCopyRequest, KeyGenRequest
from .openssl import OpenSSLCapabilities

__all__ = [
    "AliasState",
    "CertRole",
    "CertSignRequest",
    "OCSPNoCheck",
    "SelfSignRequest",
    "SignaturePadding",
    "SigningConfigRequest",
    "CertgenConfig",
    "FileNames",
    "CRLRequest",
    "RevocationEntry",
    "RevocationReason",
    "RevokeRequest",
    "CertExportRequest",
    "KeyExportRequest",
    "KeyAlgorithm",
    "KeyCopyRequest",
    "KeyGenRequest",
    "OpenSSLCapabilities",
]
