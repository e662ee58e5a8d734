"""Certificate signing service."""

import logging
from pathlib import Path
from typing import List, Union

from certgen.exceptions import ConfigError, PreconditionError
from certgen.models.certificate import (
    CA_SIGNED_ROLE_DEFAULTS,
    SELF_SIGNED_ROLE_DEFAULTS,
    AliasState,
    CertRole,
    CertSignRequest,
    OCSPNoCheck,
    RoleDefaults,
    SelfSignRequest,
    SignaturePadding,
    SigningConfigRequest,
)
from certgen.models.config import CertgenConfig
from certgen.services.alias_store import AliasStore
from certgen.services.config_service import ConfigService
from certgen.services.openssl_service import OpenSSLService
from certgen.utils.name_constraints import build_name_constraints

logger = logging.getLogger("certgen")

SignRequest = Union[SelfSignRequest, CertSignRequest]


class SigningService:
    """
    Service issuing certificates through ``openssl ca``.

    Self signed certificates go through three passes so the final certificate
    gets the configured first serial and an Authority Key Identifier pointing
    to itself. Certificates signed by another alias need a single pass.
    """

    def __init__(
        self,
        config: CertgenConfig,
        store: AliasStore,
        openssl_service: OpenSSLService,
        config_service: ConfigService,
    ):
        self.config = config
        self.store = store
        self.openssl_service = openssl_service
        self.config_service = config_service

    def self_sign(self, request: SelfSignRequest) -> Path:
        """
        Create a self signed certificate for the key of an alias.

        Args:
            request: Signing options

        Returns:
            Path of the final certificate

        Raises:
            OptionParseError, ConfigError: If the options are invalid
            PreconditionError: If the alias holds no key
            BackendError: If any openssl invocation fails
        """
        op = "self_sign"
        alias = request.alias
        if not self.store.has_key(alias):
            raise PreconditionError(f"{op}: private key '{alias}' has not yet been generated")

        role = self._validate(op, request)
        config_request = self._signing_config(request, SELF_SIGNED_ROLE_DEFAULTS[role])

        posix = OpenSSLService.path_to_posix
        key = posix(self.store.key_path(alias))
        cert_path = self.store.cert_path(alias)
        temp_cert_path = self.store.temp_cert_path(alias)
        csr = posix(self.store.csr_path(alias))
        sig_options = self._sig_options(request)

        # one key lookup serves every config pass
        eddsa = self.openssl_service.is_eddsa_key(self.store.key_path(alias))

        self._log_state(alias, AliasState.KEY_PRESENT)
        cnf = posix(self.config_service.generate(alias, config_request, eddsa))
        self.openssl_service.run(
            ["req", "-x509", "-new", "-key", key, "-out", posix(temp_cert_path), "-batch", "-config", cnf]
            + sig_options,
            f"{op}: temporary certificate generation failed",
        )
        self.openssl_service.run(
            ["x509", "-x509toreq", "-signkey", key, "-out", csr, "-in", posix(temp_cert_path)],
            f"{op}: certificate signing request failed",
        )
        self._log_state(alias, AliasState.TEMP_CERT)

        ca_args = [
            "ca",
            "-config",
            cnf,
            "-batch",
            "-keyfile",
            key,
            "-cert",
            posix(temp_cert_path),
            "-in",
            csr,
            "-out",
            posix(cert_path),
        ] + self._ca_options(request)

        # temporary and final certificate must get the same serial
        self.store.reset_ledger(alias, self.config.first_serial)
        self.openssl_service.run(ca_args, f"{op}: signing the certificate failed")
        cert_path.replace(temp_cert_path)
        self._log_state(alias, AliasState.SERIAL_CORRECTED)

        if not request.no_auth_key_id and not request.no_subj_key_id:
            config_request.authority_key_identifier = "keyid,issuer"
        self.store.reset_ledger(alias, self.config.first_serial)
        self.config_service.generate(alias, config_request, eddsa)
        self.openssl_service.run(ca_args, f"{op}: signing the certificate failed")

        temp_cert_path.unlink(missing_ok=True)
        self._log_state(alias, AliasState.FINAL)
        return cert_path

    def cert_sign(self, request: CertSignRequest) -> Path:
        """
        Create a certificate for the key of an alias, signed by another alias.

        Args:
            request: Signing options, ``ca_alias`` names the issuer

        Returns:
            Path of the issued certificate

        Raises:
            OptionParseError, ConfigError: If the options are invalid
            PreconditionError: If either key or the issuer certificate is missing
            BackendError: If any openssl invocation fails
        """
        op = "cert_sign"
        alias, ca_alias = request.alias, request.ca_alias
        if alias == ca_alias:
            raise ConfigError(f"{op}: alias and CA alias are the same, use self_sign instead")
        if not self.store.has_key(alias):
            raise PreconditionError(f"{op}: Private key to be signed does not exist")
        if not self.store.has_key(ca_alias):
            raise PreconditionError(f"{op}: CA private key does not exist")
        if not self.store.has_cert(ca_alias):
            raise PreconditionError(f"{op}: CA certificate does not exist")

        role = self._validate(op, request)
        config_request = self._signing_config(request, CA_SIGNED_ROLE_DEFAULTS[role])

        config_request.subject_alt_name = list(request.subject_alt_name)
        config_request.subject_alt_name_critical = request.subject_alt_name_critical
        if request.ocsp_responder_uri:
            config_request.authority_info_access.append(f"OCSP;URI:{request.ocsp_responder_uri}")
        # DER:05:00 is the DER encoding of NULL
        if request.ocsp_no_check == OCSPNoCheck.PLAIN:
            config_request.x509v3_extensions.append("noCheck=DER:05:00")
        elif request.ocsp_no_check == OCSPNoCheck.CRITICAL:
            config_request.x509v3_extensions.append("noCheck=critical,DER:05:00")
        if not request.no_auth_key_id:
            config_request.authority_key_identifier = "keyid,issuer"

        posix = OpenSSLService.path_to_posix
        eddsa = self.openssl_service.is_eddsa_key(self.store.key_path(ca_alias))
        cnf = posix(self.config_service.generate(ca_alias, config_request, eddsa))
        csr = posix(self.store.csr_path(alias))

        self.openssl_service.run(
            ["req", "-new", "-batch", "-key", posix(self.store.key_path(alias)), "-out", csr, "-config", cnf],
            f"{op}: Certificate Signing Request generation failed",
        )

        cert_path = self.store.cert_path(alias)
        self.openssl_service.run(
            [
                "ca",
                "-config",
                cnf,
                "-batch",
                "-keyfile",
                posix(self.store.key_path(ca_alias)),
                "-cert",
                posix(self.store.cert_path(ca_alias)),
                "-in",
                csr,
                "-out",
                posix(cert_path),
            ]
            + self._ca_options(request),
            f"{op}: Signing of the certificate failed",
        )

        logger.info(f"Issued certificate for '{alias}' signed by '{ca_alias}'")
        return cert_path

    def _validate(self, op: str, request: SignRequest) -> CertRole:
        """Check option combinations that don't depend on the role defaults."""
        try:
            role = CertRole(request.role)
        except ValueError:
            raise ConfigError(f"{op}: Unknown role: '{request.role}'")

        if request.version == 1:
            explicit = request.explicit_extension_options()
            if explicit:
                raise ConfigError(
                    f"{op}: Can't create version 1 certificate with extensions: {', '.join(explicit)}"
                )

        pss = request.padding == SignaturePadding.PSS
        if request.pss_salt_len is not None and not pss:
            raise ConfigError(f"{op}: pss_salt_len is only applicable to pss padding")
        if request.pss_mgf1_md and not pss:
            raise ConfigError(f"{op}: pss_mgf1_md is only applicable to pss padding")

        if request.ca_true and request.ca_false:
            raise ConfigError(f"{op}: ca_true and ca_false are mutually exclusive")
        if request.no_basic_constraints and (request.ca_true or request.ca_false or request.bc_critical):
            raise ConfigError(f"{op}: no_basic_constraints can't be combined with other basic constraints options")

        if request.bc_path_len is not None:
            if request.no_basic_constraints or request.ca_false:
                raise ConfigError(f"{op}: Path len can be specified only with ca_true option")
            if role != CertRole.CA and not request.ca_true:
                raise ConfigError(f"{op}: Only ca role uses CA:TRUE constraint, use ca_true to override")

        return role

    def _signing_config(self, request: SignRequest, defaults: RoleDefaults) -> SigningConfigRequest:
        """Merge explicit options over the role defaults."""
        dn = list(request.dn)
        if request.common_name:
            dn.append(f"CN = {request.common_name}")
        if not dn:
            dn = [defaults.dn]

        extensions: List[str] = []
        name_constraints = build_name_constraints(
            request.nc_permit, request.nc_exclude, critical=not request.nc_not_critical
        )
        if name_constraints:
            extensions.append(f"nameConstraints={name_constraints}")

        return SigningConfigRequest(
            dn=dn,
            md=request.md,
            not_before=request.not_before if request.not_before is not None else defaults.not_before,
            not_after=request.not_after if request.not_after is not None else defaults.not_after,
            basic_constraints=self._basic_constraints(request, defaults),
            basic_key_usage=self._pick(request.basic_key_usage, defaults.basic_key_usage),
            extended_key_usage=self._pick(request.extended_key_usage, defaults.extended_key_usage),
            subject_key_identifier=not request.no_subj_key_id,
            x509v3_extensions=extensions,
        )

    @staticmethod
    def _pick(explicit, default) -> str:
        # None means not given, empty string means explicitly no extension
        if explicit is not None:
            return explicit
        return default or ""

    @staticmethod
    def _basic_constraints(request: SignRequest, defaults: RoleDefaults) -> str:
        if request.no_basic_constraints:
            return ""

        if request.ca_true or request.ca_false:
            value = "CA:TRUE" if request.ca_true else "CA:FALSE"
            if request.bc_critical:
                value = f"critical, {value}"
        else:
            value = defaults.basic_constraints or ""
            if value and request.bc_critical and not value.startswith("critical"):
                value = f"critical, {value}"

        if value and request.bc_path_len is not None:
            value = f"{value}, pathlen: {request.bc_path_len}"
        return value

    @staticmethod
    def _sig_options(request: SignRequest) -> List[str]:
        options: List[str] = []
        if request.padding is not None:
            options += ["-sigopt", f"rsa_padding_mode:{request.padding.value}"]
        if request.pss_salt_len is not None:
            options += ["-sigopt", f"rsa_pss_saltlen:{request.pss_salt_len}"]
        if request.pss_mgf1_md:
            options += ["-sigopt", f"rsa_mgf1_md:{request.pss_mgf1_md}"]
        return options

    def _ca_options(self, request: SignRequest) -> List[str]:
        options = ["-preserveDN"]
        if request.version == 3:
            options += ["-extensions", "v3_ext"]
        return options + self._sig_options(request)

    @staticmethod
    def _log_state(alias: str, state: AliasState) -> None:
        logger.debug(f"Alias '{alias}' is now in state {state.value}")

