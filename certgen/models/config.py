"""certgen configuration models."""

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FileNames(BaseModel):
    """Names of the files kept inside every alias directory."""

    model_config = ConfigDict(extra="forbid")

    key: str = "key.pem"
    der_key: str = "key.key"
    cert: str = "cert.pem"
    der_cert: str = "cert.crt"
    pkcs8_key: str = "pkcs8.pem"
    pkcs8_der_key: str = "pkcs8.key"
    pkcs12: str = "bundle.p12"
    csr: str = "request.csr"
    ca_config: str = "ca.cnf"
    ca_index: str = "index.txt"
    ca_serial: str = "serial"
    crl: str = "crl.pem"
    crl_number: str = "crlnumber"
    dsa_params: str = "dsa_params.pem"


class PathSettings(BaseModel):
    """Path settings."""

    model_config = ConfigDict(extra="forbid")

    store: str = "."
    openssl: Optional[str] = None


class LoggingSettings(BaseModel):
    """Logging settings."""

    model_config = ConfigDict(extra="forbid")

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


class CertgenConfig(BaseModel):
    """Main certgen configuration, fixed once the services are built."""

    model_config = ConfigDict(extra="forbid")

    paths: PathSettings = Field(default_factory=PathSettings)
    files: FileNames = Field(default_factory=FileNames)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    first_serial: str = "01"
    # strftime format for dates in the CA config, probed from openssl when unset
    date_format: Optional[str] = None
    # upper bound for each DSA conservative/anti-conservative regeneration loop
    dsa_max_attempts: int = Field(default=100, gt=0)
    command_timeout: Optional[float] = Field(default=None, gt=0)
    crl_days: int = Field(default=30, gt=0)

    @field_validator("first_serial")
    @classmethod
    def _check_first_serial(cls, value: str) -> str:
        if not re.match(r"^[0-9A-Fa-f]+$", value):
            raise ValueError(f"Serial number must be a non-negative hex number: {value}")
        # openssl ca only reads serial files holding whole bytes
        return value.upper().zfill(len(value) + len(value) % 2)


# legacy environment variable -> (section, field)
ENVIRONMENT_OVERRIDES = {
    "x509PKEY": ("files", "key"),
    "x509DERKEY": ("files", "der_key"),
    "x509CERT": ("files", "cert"),
    "x509DERCERT": ("files", "der_cert"),
    "x509PKCS8KEY": ("files", "pkcs8_key"),
    "x509PKCS8DERKEY": ("files", "pkcs8_der_key"),
    "x509PKCS12": ("files", "pkcs12"),
    "x509CSR": ("files", "csr"),
    "x509CACNF": ("files", "ca_config"),
    "x509CAINDEX": ("files", "ca_index"),
    "x509CASERIAL": ("files", "ca_serial"),
    "x509FIRSTSERIAL": (None, "first_serial"),
    "x509FORMAT": (None, "date_format"),
    "x509OPENSSL": ("paths", "openssl"),
}
