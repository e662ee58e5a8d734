"""Revocation models."""

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RevocationReason(str, Enum):
    """CRL reason codes accepted by openssl ca -crl_reason."""

    UNSPECIFIED = "unspecified"
    KEY_COMPROMISE = "keyCompromise"
    CA_COMPROMISE = "CACompromise"
    AFFILIATION_CHANGED = "affiliationChanged"
    SUPERSEDED = "superseded"
    CESSATION_OF_OPERATION = "cessationOfOperation"
    CERTIFICATE_HOLD = "certificateHold"
    REMOVE_FROM_CRL = "removeFromCRL"


_REASONS_BY_LOWER_NAME = {reason.value.lower(): reason for reason in RevocationReason}


class RevokeRequest(BaseModel):
    """Options for revoking a certificate issued by a CA alias."""

    model_config = ConfigDict(extra="forbid")

    alias: str = Field(..., min_length=1)
    ca_alias: str = Field(..., min_length=1)
    crl_reason: Optional[RevocationReason] = None
    crl_compromise_time: Optional[Union[datetime, str]] = None
    crl_ca_compromise_time: Optional[Union[datetime, str]] = None

    @field_validator("crl_reason", mode="before")
    @classmethod
    def _match_reason(cls, value):
        # matching of reasons is case insensitive
        if isinstance(value, str) and not isinstance(value, RevocationReason):
            return _REASONS_BY_LOWER_NAME.get(value.lower(), value)
        return value


class CRLRequest(BaseModel):
    """Options for generating a CRL from a CA alias."""

    model_config = ConfigDict(extra="forbid")

    ca_alias: str = Field(..., min_length=1)
    days: Optional[int] = Field(default=None, gt=0)


class RevocationEntry(BaseModel):
    """Revoked certificate as recorded in the CA index."""

    serial_number: str = Field(..., description="Certificate serial number (hex)")
    revoked_at: str = Field(..., description="Revocation time as written by openssl")
    reason: Optional[str] = None
    compromised_at: Optional[str] = Field(default=None, description="Key or CA compromise time, if recorded")
    subject: str = ""
