"""Exception hierarchy for certgen operations."""

from typing import Optional, Sequence


class CertgenError(ValueError):
    """Base class for every error raised by certgen."""


class OptionParseError(CertgenError):
    """Malformed option syntax, detected before any side effect."""


class ConfigError(CertgenError):
    """Semantically invalid combination of otherwise well-formed options."""


class PreconditionError(CertgenError):
    """Referenced alias, key, certificate or configuration does not exist."""


class BackendError(CertgenError):
    """The external openssl invocation failed."""

    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.command = list(command) if command else []
        self.returncode = returncode
        self.stderr = stderr


class KeyGenError(BackendError):
    """Key or DSA parameter generation failed or never met its shaping predicate."""
