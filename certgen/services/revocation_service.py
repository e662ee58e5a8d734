"""Certificate revocation and CRL service."""

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Union

from certgen.exceptions import ConfigError, PreconditionError
from certgen.models.config import CertgenConfig
from certgen.models.crl import CRLRequest, RevocationEntry, RevocationReason, RevokeRequest
from certgen.services.alias_store import AliasStore
from certgen.services.openssl_service import OpenSSLService
from certgen.utils.dates import format_date, resolve_date
from certgen.utils.file_utils import FileUtils

logger = logging.getLogger("certgen")

GENERALIZED_TIME = "%Y%m%d%H%M%SZ"

_COMPROMISE_REASONS = {
    "keyTime": RevocationReason.KEY_COMPROMISE.value,
    "CAkeyTime": RevocationReason.CA_COMPROMISE.value,
}


class RevocationService:
    """Service recording revocations in the CA index of an alias and publishing CRLs."""

    def __init__(self, config: CertgenConfig, store: AliasStore, openssl_service: OpenSSLService):
        self.config = config
        self.store = store
        self.openssl_service = openssl_service

    def revoke(self, request: RevokeRequest) -> None:
        """
        Mark a certificate as revoked in the index of the CA that issued it.

        Args:
            request: Certificate alias, CA alias and at most one reason

        Raises:
            ConfigError: If more than one reason is given or a time is invalid
            PreconditionError: If the CA or the certificate is missing
            BackendError: If openssl refuses the revocation
        """
        reasons = [
            value
            for value in (request.crl_reason, request.crl_compromise_time, request.crl_ca_compromise_time)
            if value is not None
        ]
        if len(reasons) > 1:
            raise ConfigError(
                "revoke: crl_reason, crl_compromise_time, and crl_ca_compromise_time are mutually exclusive; choose one"
            )

        options: List[str] = []
        if request.crl_reason is not None:
            options = ["-crl_reason", request.crl_reason.value]
        elif request.crl_compromise_time is not None:
            options = ["-crl_compromise", self._generalized_time(request.crl_compromise_time)]
        elif request.crl_ca_compromise_time is not None:
            options = ["-crl_CA_compromise", self._generalized_time(request.crl_ca_compromise_time)]

        self._check_ca("revoke", request.ca_alias)
        cert_path = self.store.cert_path(request.alias)
        if not cert_path.exists():
            raise PreconditionError(f"revoke: certificate '{request.alias}' does not exist")

        self.openssl_service.run(
            self._ca_args(request.ca_alias) + ["-revoke", OpenSSLService.path_to_posix(cert_path)] + options,
            "revoke: Failed to revoke certificate",
        )
        logger.info(f"Revoked certificate '{request.alias}' issued by '{request.ca_alias}'")

    def gen_crl(self, request: CRLRequest) -> Path:
        """
        Generate a CRL listing every certificate revoked by a CA alias.

        Args:
            request: CA alias and optional validity in days

        Returns:
            Path of the PEM CRL

        Raises:
            PreconditionError: If the CA is missing
            BackendError: If openssl fails
        """
        self._check_ca("gen_crl", request.ca_alias)
        crl_path = self.store.file(request.ca_alias, "crl")
        crl_number_path = self.store.file(request.ca_alias, "crl_number")
        # CAs configured before CRL support have no counter yet
        if not crl_number_path.exists():
            FileUtils.write_file(crl_number_path, "01\n")

        days = request.days or self.config.crl_days
        self.openssl_service.run(
            self._ca_args(request.ca_alias)
            + ["-gencrl", "-crldays", str(days), "-out", OpenSSLService.path_to_posix(crl_path)],
            "gen_crl: Failed to generate CRL",
        )
        logger.info(f"Generated CRL for '{request.ca_alias}' valid for {days} days")
        return crl_path

    def list_revoked(self, ca_alias: str) -> List[RevocationEntry]:
        """
        List the revoked entries in the CA index of an alias.

        Index lines are tab separated: status, expiry, revocation[,reason], serial, file, subject.
        """
        index_path = self.store.index_path(ca_alias)
        if not index_path.exists():
            return []

        entries = []
        for line in FileUtils.read_file(index_path).splitlines():
            fields = line.split("\t")
            if len(fields) < 6 or fields[0] != "R":
                continue
            revoked_at, _, reason = fields[2].partition(",")
            # compromise revocations are stored as keyTime,<time> or CAkeyTime,<time>
            reason, _, compromised_at = reason.partition(",")
            entries.append(
                RevocationEntry(
                    serial_number=fields[3],
                    revoked_at=revoked_at,
                    reason=_COMPROMISE_REASONS.get(reason, reason) or None,
                    compromised_at=compromised_at or None,
                    subject=fields[5],
                )
            )
        return entries

    def _check_ca(self, op: str, ca_alias: str) -> None:
        if not self.store.has_key(ca_alias):
            raise PreconditionError(f"{op}: CA private key does not exist")
        if not self.store.has_cert(ca_alias):
            raise PreconditionError(f"{op}: CA certificate does not exist")
        if not self.store.has_config(ca_alias):
            raise PreconditionError(f"{op}: CA configuration does not exist")

    def _ca_args(self, ca_alias: str) -> List[str]:
        posix = OpenSSLService.path_to_posix
        return [
            "ca",
            "-config",
            posix(self.store.config_path(ca_alias)),
            "-batch",
            "-keyfile",
            posix(self.store.key_path(ca_alias)),
            "-cert",
            posix(self.store.cert_path(ca_alias)),
        ]

    @staticmethod
    def _generalized_time(value: Union[datetime, str]) -> str:
        try:
            return format_date(resolve_date(value), GENERALIZED_TIME)
        except ValueError as e:
            raise ConfigError(f"revoke: invalid compromise time: {e}")
