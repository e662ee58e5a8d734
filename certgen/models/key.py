"""Key generation models."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class KeyAlgorithm(str, Enum):
    """Supported key algorithms."""

    RSA = "RSA"
    DSA = "DSA"
    ECDSA = "ECDSA"
    RSA_PSS = "RSA-PSS"
    ED25519 = "ED25519"
    ED448 = "ED448"


# default size (RSA, DSA, RSA-PSS) or curve (ECDSA)
DEFAULT_KEY_SIZE = {
    KeyAlgorithm.RSA: "2048",
    KeyAlgorithm.DSA: "2048",
    KeyAlgorithm.RSA_PSS: "2048",
    KeyAlgorithm.ECDSA: "prime256v1",
}


class KeyGenRequest(BaseModel):
    """Options for generating a key pair in an alias directory."""

    model_config = ConfigDict(extra="forbid")

    alias: str = Field(..., min_length=1)
    type: KeyAlgorithm = KeyAlgorithm.RSA
    # bit length for RSA/DSA/RSA-PSS, curve name for ECDSA
    size: Optional[str] = None
    # alias whose DSA parameters are reused
    params: Optional[str] = None
    conservative: bool = False
    anti_conservative: bool = False
    # passed to genpkey as -pkeyopt values
    gen_opts: List[str] = Field(default_factory=list)

    @field_validator("type", mode="before")
    @classmethod
    def _upper_type(cls, value):
        if isinstance(value, str):
            return value.upper()
        return value

    @field_validator("size", mode="before")
    @classmethod
    def _lower_size(cls, value):
        if isinstance(value, int):
            return str(value)
        if isinstance(value, str):
            return value.lower() or None
        return value

    @property
    def effective_size(self) -> str:
        """Requested size or the algorithm's default."""
        return self.size or DEFAULT_KEY_SIZE.get(self.type, "2048")


class KeyCopyRequest(BaseModel):
    """Options for copying a key into a fresh alias."""

    model_config = ConfigDict(extra="forbid")

    alias: str = Field(..., min_length=1)
    target: str = Field(..., min_length=1)
