"""Certificate signing models."""

from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

DateValue = Union[datetime, str]


class CertRole(str, Enum):
    """General purpose of a certificate, drives the default extensions."""

    CA = "ca"
    WEBSERVER = "webserver"
    WEBCLIENT = "webclient"
    NONE = "none"


class SignaturePadding(str, Enum):
    """RSA signature padding modes."""

    PKCS1 = "pkcs1"
    X931 = "x931"
    PSS = "pss"


class OCSPNoCheck(str, Enum):
    """Whether and how to add the id-pkix-ocsp-nocheck extension."""

    NONE = "none"
    PLAIN = "plain"
    CRITICAL = "critical"


class AliasState(str, Enum):
    """Lifecycle of an alias directory."""

    NO_KEY = "no_key"
    KEY_PRESENT = "key_present"
    TEMP_CERT = "temp_cert"
    SERIAL_CORRECTED = "serial_corrected"
    FINAL = "final"


class RoleDefaults(BaseModel):
    """Defaults a role supplies when the caller does not override them."""

    dn: str
    not_before: Optional[str] = None
    not_after: Optional[str] = None
    basic_constraints: Optional[str] = None
    basic_key_usage: Optional[str] = None
    extended_key_usage: Optional[str] = None


_CA_VALIDITY = {"not_before": "5 years ago", "not_after": "10 years"}
_CA_KEY_USAGE = "critical, keyCertSign, cRLSign"
_SERVER_KEY_USAGE = "critical, digitalSignature, keyEncipherment, keyAgreement"
_CLIENT_KEY_USAGE = "digitalSignature, keyEncipherment"

SELF_SIGNED_ROLE_DEFAULTS = {
    CertRole.CA: RoleDefaults(
        dn="O = Example CA", basic_constraints="critical, CA:TRUE", basic_key_usage=_CA_KEY_USAGE, **_CA_VALIDITY
    ),
    CertRole.WEBSERVER: RoleDefaults(
        dn="CN = localhost",
        basic_constraints="critical, CA:FALSE",
        basic_key_usage=_SERVER_KEY_USAGE,
        extended_key_usage="serverAuth",
    ),
    CertRole.WEBCLIENT: RoleDefaults(
        dn="CN = John Smith",
        basic_constraints="critical, CA:FALSE",
        basic_key_usage=_CLIENT_KEY_USAGE,
        extended_key_usage="clientAuth,emailProtection",
    ),
    CertRole.NONE: RoleDefaults(dn="O = Unknown use cert", basic_constraints="critical, CA:FALSE"),
}

CA_SIGNED_ROLE_DEFAULTS = {
    CertRole.CA: RoleDefaults(
        dn="O = Example intermediate CA",
        basic_constraints="critical, CA:TRUE",
        basic_key_usage=_CA_KEY_USAGE,
        **_CA_VALIDITY,
    ),
    CertRole.WEBSERVER: RoleDefaults(
        dn="CN = localhost",
        basic_constraints="critical, CA:FALSE",
        basic_key_usage=_SERVER_KEY_USAGE,
        extended_key_usage="serverAuth",
    ),
    CertRole.WEBCLIENT: RoleDefaults(
        dn="CN = John Smith",
        basic_constraints="critical, CA:FALSE",
        basic_key_usage=_CLIENT_KEY_USAGE,
        extended_key_usage="clientAuth,emailProtection",
    ),
    CertRole.NONE: RoleDefaults(dn="O = No role cert", basic_constraints="critical, CA:FALSE"),
}


class SigningConfigRequest(BaseModel):
    """Fully resolved input of the CA config file synthesis."""

    model_config = ConfigDict(extra="forbid")

    dn: List[str] = Field(default_factory=list)
    md: Optional[str] = None
    not_before: Optional[DateValue] = None
    not_after: Optional[DateValue] = None
    basic_key_usage: str = ""
    basic_constraints: str = ""
    subject_key_identifier: bool = False
    authority_key_identifier: str = ""
    subject_alt_name: List[str] = Field(default_factory=list)
    subject_alt_name_critical: bool = False
    authority_info_access: List[str] = Field(default_factory=list)
    extended_key_usage: str = ""
    x509v3_extensions: List[str] = Field(default_factory=list)


class _SignRequest(BaseModel):
    """Options shared by self signing and CA signing."""

    model_config = ConfigDict(extra="forbid")

    alias: str = Field(..., min_length=1)
    role: str = CertRole.CA.value
    version: Literal[1, 3] = 3
    common_name: Optional[str] = None
    dn: List[str] = Field(default_factory=list)
    not_before: Optional[DateValue] = None
    not_after: Optional[DateValue] = None
    basic_key_usage: Optional[str] = None
    extended_key_usage: Optional[str] = None
    ca_true: bool = False
    ca_false: bool = False
    no_basic_constraints: bool = False
    bc_path_len: Optional[int] = Field(default=None, ge=0)
    bc_critical: bool = False
    nc_permit: List[str] = Field(default_factory=list)
    nc_exclude: List[str] = Field(default_factory=list)
    nc_not_critical: bool = False
    md: Optional[str] = None
    padding: Optional[SignaturePadding] = None
    pss_salt_len: Optional[int] = None
    pss_mgf1_md: Optional[str] = None
    no_auth_key_id: bool = False
    no_subj_key_id: bool = False

    @field_validator("role", mode="before")
    @classmethod
    def _lower_role(cls, value):
        # unknown roles are a semantic error, reported by the signing service
        if isinstance(value, str):
            return value.lower()
        return value

    @field_validator("version", mode="before")
    @classmethod
    def _int_version(cls, value):
        if isinstance(value, str) and value.isdigit():
            return int(value)
        return value

    def explicit_extension_options(self) -> List[str]:
        """Names of extension options the caller set explicitly."""
        names = [
            "basic_key_usage",
            "extended_key_usage",
            "ca_true",
            "ca_false",
            "bc_path_len",
            "bc_critical",
            "nc_permit",
            "nc_exclude",
        ]
        return [name for name in names if getattr(self, name) not in (None, False, "", [])]


class SelfSignRequest(_SignRequest):
    """Options for a self signed certificate."""


class CertSignRequest(_SignRequest):
    """Options for a certificate signed by another alias."""

    ca_alias: str = Field(..., min_length=1)
    role: str = CertRole.WEBSERVER.value
    subject_alt_name: List[str] = Field(default_factory=list)
    subject_alt_name_critical: bool = False
    ocsp_responder_uri: Optional[str] = None
    ocsp_no_check: OCSPNoCheck = OCSPNoCheck.NONE

    def explicit_extension_options(self) -> List[str]:
        names = super().explicit_extension_options()
        if self.subject_alt_name:
            names.append("subject_alt_name")
        if self.ocsp_responder_uri:
            names.append("ocsp_responder_uri")
        if self.ocsp_no_check != OCSPNoCheck.NONE:
            names.append("ocsp_no_check")
        return names
