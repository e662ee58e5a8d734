"""Public entry points of certgen."""

import functools
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from certgen.dependencies import (
    get_alias_store,
    get_config,
    get_export_service,
    get_key_service,
    get_openssl_service,
    get_revocation_service,
    get_signing_service,
)
from certgen.exceptions import CertgenError, OptionParseError
from certgen.models.certificate import AliasState, CertSignRequest, SelfSignRequest
from certgen.models.config import CertgenConfig
from certgen.models.crl import CRLRequest, RevocationEntry, RevokeRequest
from certgen.models.export import CertExportRequest, KeyExportRequest
from certgen.models.key import KeyCopyRequest, KeyGenRequest
from certgen.services.openssl_service import OpenSSLService
from certgen.services.parser_service import CertificateParser
from certgen.utils.logger import setup_logger

logger = logging.getLogger("certgen")

RequestT = TypeVar("RequestT", bound=BaseModel)


def operation(func):
    """Log failures of a public operation before handing them to the caller."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except CertgenError as e:
            logger.error(str(e))
            raise

    return wrapper


def parse_options(op: str, model: Type[RequestT], **options: Any) -> RequestT:
    """
    Build a request model from keyword options.

    Raises:
        OptionParseError: If an option is unknown or has the wrong type
    """
    try:
        return model(**options)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'options'}: {error['msg']}" for error in e.errors()
        )
        raise OptionParseError(f"{op}: {problems}")


class CertGen:
    """
    Generates keys and certificates for testing with the openssl binary.

    Every alias is a directory below the store directory holding one private
    key, its certificate and the files needed to use it as a CA. Operations
    return paths (or text) and raise a ``CertgenError`` subclass on failure.

    Example::

        certgen = CertGen()
        certgen.key_gen("ca")
        certgen.self_sign("ca")
        certgen.key_gen("server")
        certgen.cert_sign("server", ca_alias="ca", subject_alt_name=["DNS.1 = localhost"])
    """

    def __init__(
        self,
        config: Optional[CertgenConfig] = None,
        config_path: Optional[Union[str, Path]] = None,
        openssl_service: Optional[OpenSSLService] = None,
    ):
        """
        Set up the services.

        Args:
            config: Ready configuration, loaded from settings and environment when None
            config_path: Settings file to load when no config is given
            openssl_service: Backend to use instead of one built from the config
        """
        self.config = config if config is not None else get_config(config_path)
        setup_logger(self.config)

        self.store = get_alias_store(self.config)
        self.openssl_service = openssl_service or get_openssl_service(self.config)
        self.key_service = get_key_service(self.config, self.store, self.openssl_service)
        self.signing_service = get_signing_service(self.config, self.store, self.openssl_service)
        self.export_service = get_export_service(self.store, self.openssl_service)
        self.revocation_service = get_revocation_service(self.config, self.store, self.openssl_service)

    @operation
    def key_gen(self, alias: str, **options: Any) -> Path:
        """
        Generate a private key for an alias.

        Options: ``type`` (RSA, DSA, ECDSA, RSA-PSS, ED25519, ED448), ``size``
        (bits or curve name), ``params`` (alias to reuse DSA parameters from),
        ``conservative``, ``anti_conservative`` and ``gen_opts``.
        """
        request = parse_options("key_gen", KeyGenRequest, alias=alias, **options)
        return self.key_service.generate(request)

    @operation
    def self_sign(self, alias: str, **options: Any) -> Path:
        """Create a self signed certificate for the key of an alias."""
        request = parse_options("self_sign", SelfSignRequest, alias=alias, **options)
        return self.signing_service.self_sign(request)

    @operation
    def cert_sign(self, alias: str, ca_alias: str, **options: Any) -> Path:
        """Create a certificate for the key of an alias, signed by ``ca_alias``."""
        request = parse_options("cert_sign", CertSignRequest, alias=alias, ca_alias=ca_alias, **options)
        return self.signing_service.cert_sign(request)

    @operation
    def key_copy(self, alias: str, target: str) -> Path:
        """Create alias ``target`` holding the same key as ``alias``."""
        request = parse_options("key_copy", KeyCopyRequest, alias=alias, target=target)
        return self.store.copy_key(request.alias, request.target)

    @operation
    def key(self, alias: str, **options: Any) -> Path:
        """
        Path of the private key of an alias.

        With ``der``, ``pkcs8`` or ``pkcs12`` a converted copy is made on first
        use and reused afterwards.
        """
        request = parse_options("key", KeyExportRequest, alias=alias, **options)
        return self.export_service.key(request)

    @operation
    def cert(self, alias: str, **options: Any) -> Path:
        """Path of the certificate of an alias, optionally converted to ``der`` or ``pkcs12``."""
        request = parse_options("cert", CertExportRequest, alias=alias, **options)
        return self.export_service.cert(request)

    @operation
    def dump_cert(self, alias: str) -> str:
        return self.export_service.dump_cert(alias)

    @operation
    def rm_alias(self, alias: str) -> None:
        """Remove an alias with everything it holds."""
        self.store.delete(alias)

    @operation
    def revoke(self, alias: str, ca_alias: str, **options: Any) -> None:
        """
        Revoke the certificate of an alias in the index of the CA that issued it.

        Accepts at most one of ``crl_reason``, ``crl_compromise_time`` and
        ``crl_ca_compromise_time``.
        """
        request = parse_options("revoke", RevokeRequest, alias=alias, ca_alias=ca_alias, **options)
        self.revocation_service.revoke(request)

    @operation
    def gen_crl(self, ca_alias: str, **options: Any) -> Path:
        request = parse_options("gen_crl", CRLRequest, ca_alias=ca_alias, **options)
        return self.revocation_service.gen_crl(request)

    @operation
    def list_revoked(self, ca_alias: str) -> List[RevocationEntry]:
        return self.revocation_service.list_revoked(ca_alias)

    @operation
    def describe_cert(self, alias: str) -> Dict[str, Any]:
        """Parsed fields of the certificate of an alias."""
        return CertificateParser.parse_certificate(self.store.cert_path(alias))

    def alias_state(self, alias: str) -> AliasState:
        return self.store.state(alias)
