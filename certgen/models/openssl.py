"""Capabilities of the installed openssl binary."""

import re
from typing import Tuple

from pydantic import BaseModel

_VERSION_PATTERN = re.compile(r"(OpenSSL|LibreSSL)\s+(\d+)\.(\d+)\.(\d+)")


class OpenSSLCapabilities(BaseModel):
    """
    Syntax variants supported by one openssl release.

    Built once from the output of ``openssl version`` and consulted by the
    services instead of matching version strings on every call.
    """

    flavour: str = "OpenSSL"
    version: Tuple[int, int, int] = (3, 0, 0)
    version_text: str = ""

    @classmethod
    def from_version_string(cls, text: str) -> "OpenSSLCapabilities":
        """
        Parse ``openssl version`` output.

        Unrecognised output is treated as a current OpenSSL release.

        Args:
            text: Output of ``openssl version``

        Returns:
            Capabilities of that release
        """
        match = _VERSION_PATTERN.search(text)
        if match is None:
            return cls(version_text=text.strip())

        flavour, major, minor, patch = match.groups()
        return cls(flavour=flavour, version=(int(major), int(minor), int(patch)), version_text=text.strip())

    @property
    def is_openssl(self) -> bool:
        return self.flavour == "OpenSSL"

    @property
    def is_0_9(self) -> bool:
        return self.is_openssl and self.version[:2] == (0, 9)

    @property
    def is_0_9_7(self) -> bool:
        return self.is_openssl and self.version == (0, 9, 7)

    @property
    def is_pre_1_1(self) -> bool:
        return self.is_openssl and self.version[:2] in ((0, 9), (1, 0))

    @property
    def date_format(self) -> str:
        """strftime format of start and end dates in the CA config."""
        return "%y%m%d%H%M%SZ" if self.is_0_9 else "%Y%m%d%H%M%SZ"

    @property
    def default_digest(self) -> str:
        return "sha1" if self.is_0_9_7 else "sha256"

    @property
    def needs_oid_section(self) -> bool:
        """Old releases don't know the ocspSigning and noCheck OIDs by name."""
        return self.is_pre_1_1

    @property
    def uppercase_ocsp_signing(self) -> bool:
        """Since 1.1.x only the ``OCSPSigning`` spelling of the EKU works."""
        return not self.is_pre_1_1

    @property
    def has_pkey(self) -> bool:
        return not self.is_0_9

    @property
    def pkcs12_macalg(self) -> bool:
        return not self.is_0_9

    @property
    def pkcs12_key_pbe(self) -> str:
        # NSS doesn't support encryption stronger than 3DES in PKCS#12 files
        return "PBE-SHA1-3DES" if self.is_0_9 else "DES-EDE3-CBC"

    @property
    def pkcs12_cert_pbe(self) -> str:
        return "PBE-SHA1-3DES" if self.is_0_9_7 else "NONE"

    @property
    def pkcs12_nocerts(self) -> bool:
        return not self.is_0_9_7

    @property
    def pkcs12_reliable_status(self) -> bool:
        return not self.is_0_9_7
