"""Synthesis of the openssl CA configuration file."""

import logging
from pathlib import Path
from typing import List, Optional

from certgen.exceptions import ConfigError
from certgen.models.certificate import SigningConfigRequest
from certgen.models.config import CertgenConfig
from certgen.services.alias_store import AliasStore
from certgen.services.openssl_service import OpenSSLService
from certgen.utils.dates import format_date, resolve_date
from certgen.utils.file_utils import FileUtils
from certgen.utils.validators import validate_dn_fragment

logger = logging.getLogger("certgen")

# digest name openssl ca expects for algorithms with a built-in hash
NULL_DIGEST = "null"

_OID_SECTION = """oid_section = new_oids

[ new_oids ]
ocspSigning = 1.3.6.1.5.5.7.3.9
noCheck = 1.3.6.1.5.5.7.48.1.5

"""


class ConfigService:
    """
    Builds the ``ca.cnf`` of an alias.

    The same file drives CSR generation (``[ req ]``) and signing through
    ``openssl ca`` (``[ ca_cnf ]`` and the ``[ v3_ext ]`` extension section).
    Every call replaces the previous file completely.
    """

    def __init__(self, config: CertgenConfig, store: AliasStore, openssl_service: OpenSSLService):
        self.config = config
        self.store = store
        self.openssl_service = openssl_service

    def generate(self, alias: str, request: SigningConfigRequest, eddsa: Optional[bool] = None) -> Path:
        """
        Write the CA config of an alias and initialise its CA ledger if absent.

        Args:
            alias: Alias whose key signs, its directory must exist
            request: DN, validity and extensions to put in the config
            eddsa: Whether the signing key is EdDSA, looked up from the key when None

        Returns:
            Path of the written config file

        Raises:
            ConfigError: If the alias doesn't exist, DN is empty or a date is invalid
        """
        alias_dir = self.store.path(alias)
        if not alias_dir.is_dir():
            raise ConfigError(f"gen_config: to gen config, the directory '{alias}' must be present")
        if not request.dn:
            raise ConfigError("gen_config: at least one element in DN must be present")
        for fragment in request.dn:
            try:
                validate_dn_fragment(fragment)
            except ValueError as e:
                raise ConfigError(f"gen_config: {e}")

        not_before = self._format_date(request.not_before or "now", "notBefore")
        not_after = self._format_date(request.not_after or "1 year", "notAfter")
        digest = self._digest(alias, request.md, eddsa)
        extended_key_usage = self._normalize_eku(request.extended_key_usage)

        self._init_ledger(alias)

        content = self._render(alias, request, digest, not_before, not_after, extended_key_usage)
        config_path = self.store.config_path(alias)
        FileUtils.write_file(config_path, content)

        logger.debug(f"Generated CA config: {config_path}")
        return config_path

    def _format_date(self, value, option: str) -> str:
        try:
            resolved = resolve_date(value)
        except ValueError as e:
            raise ConfigError(f"gen_config: {option} date value is invalid: {e}")

        date_format = self.config.date_format or self.openssl_service.capabilities.date_format
        return format_date(resolved, date_format.lstrip("+"))

    def _digest(self, alias: str, md, eddsa: Optional[bool]) -> str:
        if eddsa is None:
            eddsa = self.openssl_service.is_eddsa_key(self.store.key_path(alias))
        # EdDSA signatures have the hash built in, openssl refuses any explicit one
        if eddsa:
            if md:
                logger.debug(f"Ignoring digest '{md}' for EdDSA key of '{alias}'")
            return NULL_DIGEST

        return md or self.openssl_service.capabilities.default_digest

    def _normalize_eku(self, extended_key_usage: str) -> str:
        if extended_key_usage and self.openssl_service.capabilities.uppercase_ocsp_signing:
            return extended_key_usage.replace("ocspSigning", "OCSPSigning")
        return extended_key_usage

    def _init_ledger(self, alias: str) -> None:
        FileUtils.touch(self.store.index_path(alias))
        FileUtils.write_file(self.store.path(alias) / f"{self.config.files.ca_index}.attr", "unique_subject = no\n")

        serial_path = self.store.serial_path(alias)
        if not serial_path.exists():
            FileUtils.write_file(serial_path, f"{self.config.first_serial}\n")

        crl_number_path = self.store.file(alias, "crl_number")
        if not crl_number_path.exists():
            FileUtils.write_file(crl_number_path, "01\n")

    def _render(
        self,
        alias: str,
        request: SigningConfigRequest,
        digest: str,
        not_before: str,
        not_after: str,
        extended_key_usage: str,
    ) -> str:
        posix = OpenSSLService.path_to_posix
        alias_dir = self.store.path(alias)

        lines: List[str] = []
        if self.openssl_service.capabilities.needs_oid_section:
            lines.append(_OID_SECTION.rstrip("\n"))
            lines.append("")

        lines += [
            "[ ca ]",
            "default_ca = ca_cnf",
            "",
            "[ ca_cnf ]",
            f"default_md = {digest}",
            f"default_startdate = {not_before}",
            f"default_enddate   = {not_after}",
            f"default_crl_days = {self.config.crl_days}",
            "policy = policy_anything",
            "preserve = yes",
            "email_in_dn = no",
            "unique_subject = no",
            f"database = {posix(self.store.index_path(alias))}",
            f"serial = {posix(self.store.serial_path(alias))}",
            f"crlnumber = {posix(self.store.file(alias, 'crl_number'))}",
            f"new_certs_dir = {posix(alias_dir)}/",
            "",
            "[ policy_anything ]",
            "commonName              = optional",
            "",
            "[ req ]",
            "prompt = no",
            "distinguished_name = cert_req",
            "",
            "[ cert_req ]",
        ]
        lines += request.dn
        lines += ["", "[ v3_ext ]"]

        if request.basic_constraints:
            lines.append(f"basicConstraints = {request.basic_constraints}")
        if request.basic_key_usage:
            lines.append(f"keyUsage = {request.basic_key_usage}")
        if extended_key_usage:
            lines.append(f"extendedKeyUsage = {extended_key_usage}")
        if request.subject_key_identifier:
            lines.append("subjectKeyIdentifier = hash")
        if request.authority_key_identifier:
            lines.append(f"authorityKeyIdentifier = {request.authority_key_identifier}")
        if request.subject_alt_name:
            critical = "critical," if request.subject_alt_name_critical else ""
            lines.append(f"subjectAltName = {critical}@alt_name")
        if request.authority_info_access:
            lines.append(f"authorityInfoAccess = {','.join(request.authority_info_access)}")
        lines += request.x509v3_extensions

        if request.subject_alt_name:
            lines += ["", "[ alt_name ]"]
            lines += request.subject_alt_name

        return "\n".join(lines) + "\n"
