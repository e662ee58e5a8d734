"""Export models for keys and certificates."""

from pydantic import BaseModel, ConfigDict, Field


class KeyExportRequest(BaseModel):
    """Options for fetching the key of an alias, optionally in another encoding."""

    model_config = ConfigDict(extra="forbid")

    alias: str = Field(..., min_length=1)
    der: bool = False
    pkcs8: bool = False
    pkcs12: bool = False
    with_cert: bool = False
    password: str = ""


class CertExportRequest(BaseModel):
    """Options for fetching the certificate of an alias."""

    model_config = ConfigDict(extra="forbid")

    alias: str = Field(..., min_length=1)
    der: bool = False
    pkcs12: bool = False
    password: str = ""
