"""Key and certificate export service."""

import logging
from pathlib import Path
from typing import List

from certgen.exceptions import BackendError, ConfigError, PreconditionError
from certgen.models.export import CertExportRequest, KeyExportRequest
from certgen.services.alias_store import AliasStore
from certgen.services.openssl_service import OpenSSLService
from certgen.utils.file_utils import FileUtils

logger = logging.getLogger("certgen")


class ExportService:
    """
    Service converting keys and certificates to other encodings.

    Converted files are cached in the alias directory. An existing file is
    returned as is, even when the key or certificate changed since; remove
    it to get a fresh copy.
    """

    def __init__(self, store: AliasStore, openssl_service: OpenSSLService):
        self.store = store
        self.openssl_service = openssl_service

    def key(self, request: KeyExportRequest) -> Path:
        """
        Get the private key of an alias, converting it when asked to.

        Args:
            request: Alias and target encoding

        Returns:
            Path of the PEM key or of its converted copy

        Raises:
            ConfigError: If mutually exclusive encodings are requested
            PreconditionError: If a conversion is needed and the key is missing
            BackendError: If the conversion fails
        """
        if request.der and request.pkcs12:
            raise ConfigError("key: Can't export PKCS#12 and DER together")
        if request.pkcs12 and request.pkcs8:
            raise ConfigError("key: Can't export PKCS#12 and PKCS#8 together")

        alias = request.alias
        key_path = self.store.key_path(alias)
        if not (request.der or request.pkcs8 or request.pkcs12):
            return key_path

        if request.der and request.pkcs8:
            target = self.store.file(alias, "pkcs8_der_key")
            build = self._pkcs8_args
        elif request.der:
            target = self.store.file(alias, "der_key")
            build = self._der_key_args
        elif request.pkcs12:
            target = self.store.file(alias, "pkcs12")
            build = self._key_pkcs12_args
        else:
            target = self.store.file(alias, "pkcs8_key")
            build = self._pkcs8_args

        if target.exists():
            return target

        if not key_path.exists():
            raise PreconditionError(f"key: alias '{alias}' holds no private key")
        if request.pkcs12 and request.with_cert and not self.store.has_cert(alias):
            raise PreconditionError(f"key: alias '{alias}' holds no certificate to include")

        self._convert(build(request, target), target, "key: Key export failed")
        return target

    def cert(self, request: CertExportRequest) -> Path:
        """
        Get the certificate of an alias, converting it when asked to.

        Args:
            request: Alias and target encoding

        Returns:
            Path of the PEM certificate or of its converted copy

        Raises:
            ConfigError: If DER and PKCS#12 are requested together
            PreconditionError: If a conversion is needed and the certificate is missing
            BackendError: If the conversion fails
        """
        if request.der and request.pkcs12:
            raise ConfigError("cert: Can't export PKCS#12 and DER together")

        alias = request.alias
        cert_path = self.store.cert_path(alias)
        if not (request.der or request.pkcs12):
            return cert_path

        target = self.store.file(alias, "der_cert" if request.der else "pkcs12")
        if target.exists():
            return target

        if not cert_path.exists():
            raise PreconditionError(f"cert: alias '{alias}' holds no certificate")

        posix = OpenSSLService.path_to_posix
        if request.der:
            args = ["x509", "-in", posix(cert_path), "-outform", "DER", "-out", posix(target)]
            self._convert(args, target, "cert: File conversion failed")
            return target

        caps = self.openssl_service.capabilities
        args = [
            "pkcs12",
            "-export",
            "-out",
            posix(target),
            "-in",
            posix(cert_path),
            "-caname",
            alias,
            "-nokeys",
            "-passout",
            f"pass:{request.password}",
            "-certpbe",
            caps.pkcs12_cert_pbe,
        ]
        # NSS only understands MD5 and SHA1 MACs
        if caps.pkcs12_macalg:
            args += ["-macalg", "SHA1"]
        self._convert(args, target, "cert: File conversion failed", reliable_status=caps.pkcs12_reliable_status)
        return target

    def dump_cert(self, alias: str) -> str:
        """Text form of the certificate of an alias, as printed by ``openssl x509 -text``."""
        cert_path = self.store.cert_path(alias)
        if not cert_path.exists():
            raise PreconditionError(f"dump_cert: alias '{alias}' holds no certificate")

        return self.openssl_service.run(
            ["x509", "-in", OpenSSLService.path_to_posix(cert_path), "-noout", "-text"],
            "dump_cert: can't print certificate",
        )

    def _pkcs8_args(self, request: KeyExportRequest, target: Path) -> List[str]:
        posix = OpenSSLService.path_to_posix
        args = ["pkcs8", "-topk8", "-in", posix(self.store.key_path(request.alias)), "-nocrypt"]
        if request.der:
            args += ["-outform", "DER"]
        return args + ["-out", posix(target)]

    def _der_key_args(self, request: KeyExportRequest, target: Path) -> List[str]:
        posix = OpenSSLService.path_to_posix
        key_path = self.store.key_path(request.alias)
        if self.openssl_service.capabilities.has_pkey:
            return ["pkey", "-in", posix(key_path), "-outform", "DER", "-out", posix(target)]

        # no pkey subcommand, EC keys can't be converted there at all
        pem = FileUtils.read_file(key_path)
        if self.store.file(request.alias, "dsa_params").exists():
            command = "dsa"
        elif "BEGIN RSA PRIVATE KEY" in pem or "BEGIN PRIVATE KEY" in pem:
            command = "rsa"
        else:
            raise ConfigError("key: Private key in unknown format")
        return [command, "-in", posix(key_path), "-outform", "DER", "-out", posix(target)]

    def _key_pkcs12_args(self, request: KeyExportRequest, target: Path) -> List[str]:
        posix = OpenSSLService.path_to_posix
        caps = self.openssl_service.capabilities
        alias = request.alias

        args = [
            "pkcs12",
            "-export",
            "-out",
            posix(target),
            "-passout",
            f"pass:{request.password}",
            "-inkey",
            posix(self.store.key_path(alias)),
            "-name",
            alias,
            "-keypbe",
            caps.pkcs12_key_pbe,
        ]
        # NSS only understands MD5 and SHA1 MACs
        if caps.pkcs12_macalg:
            args += ["-macalg", "SHA1"]

        if request.with_cert:
            args += ["-in", posix(self.store.cert_path(alias)), "-caname", alias, "-certpbe", caps.pkcs12_cert_pbe]
        else:
            if not caps.pkcs12_nocerts:
                raise ConfigError(
                    "key: Export without certificate unsupported with this version of OpenSSL, try with_cert"
                )
            args.append("-nocerts")
        return args

    def _convert(self, args: List[str], target: Path, error_message: str, reliable_status: bool = True) -> None:
        logger.debug(f"Exporting {target}")
        if reliable_status:
            self.openssl_service.run(args, error_message)
            return

        # old releases return garbage exit codes from pkcs12, judge by the output file
        self.openssl_service.execute(args)
        if not target.exists():
            raise BackendError(error_message, command=[self.openssl_service.openssl_path, *args])
