"""Key pair generation service."""

import logging
import re
from pathlib import Path
from typing import Callable, List

from cryptography.hazmat.primitives import serialization

from certgen.exceptions import ConfigError, KeyGenError, PreconditionError
from certgen.models.config import CertgenConfig
from certgen.models.key import KeyAlgorithm, KeyGenRequest
from certgen.services.alias_store import AliasStore
from certgen.services.openssl_service import OpenSSLService
from certgen.utils.file_utils import FileUtils

logger = logging.getLogger("certgen")

_HEX_BYTES = re.compile(r"^[0-9A-Fa-f]{2}(:[0-9A-Fa-f]{2})*:?$")


def _msb_set(value: int) -> bool:
    """True if the big-endian encoding of value starts with a byte >= 0x80."""
    return value.bit_length() % 8 == 0


def _low_top_nibble(value: int) -> bool:
    """True if the first hex digit of the byte encoding is 1, 2 or 3."""
    digits = format(value, "x")
    if len(digits) % 2:
        digits = "0" + digits
    return digits[0] in "123"


def _byte_length(value: int) -> int:
    return (value.bit_length() + 7) // 8


def _text_number(text: str, label: str) -> int:
    """
    Read a number from an openssl text dump.

    The value follows its label on lines of colon separated hex bytes.
    """
    digits = []
    collecting = False
    for line in text.splitlines():
        stripped = line.strip()
        if not collecting:
            collecting = stripped.upper().startswith(f"{label.upper()}:")
            continue
        if not _HEX_BYTES.match(stripped):
            break
        digits.append(stripped.replace(":", ""))

    if not digits:
        raise KeyGenError(f"key_gen: no {label} value in openssl output")
    return int("".join(digits), 16)


class KeyService:
    """Service creating the private key of an alias."""

    def __init__(self, config: CertgenConfig, store: AliasStore, openssl_service: OpenSSLService):
        self.config = config
        self.store = store
        self.openssl_service = openssl_service

    def generate(self, request: KeyGenRequest) -> Path:
        """
        Generate a key pair in the directory of an alias.

        The alias directory is created if missing. An alias that already holds
        a key is refused; remove it with rm_alias first.

        Args:
            request: Key generation options

        Returns:
            Path of the PEM private key

        Raises:
            ConfigError: If the alias holds a key or both DSA shaping modes are requested
            PreconditionError: If the alias to take DSA parameters from has none
            KeyGenError: If openssl fails or DSA shaping doesn't converge
        """
        if self.store.has_key(request.alias):
            raise ConfigError(f"key_gen: alias '{request.alias}' already holds a private key, use rm_alias first")

        if request.conservative and request.anti_conservative:
            raise ConfigError("key_gen: can't do conservative and anti-conservative at once")

        if request.params and request.type != KeyAlgorithm.DSA:
            raise ConfigError("key_gen: params can only be reused for DSA keys")

        params_path = None
        if request.params:
            params_path = self.store.file(request.params, "dsa_params")
            if not params_path.exists():
                raise PreconditionError(f"key_gen: alias '{request.params}' holds no DSA parameters")

        self.store.ensure(request.alias)
        key_path = self.store.key_path(request.alias)
        size = request.effective_size

        logger.info(f"Generating {request.type.value} key ({size}) for '{request.alias}'")

        if request.type == KeyAlgorithm.ECDSA:
            self._run(["ecparam", "-genkey", "-name", size, "-out", self._posix(key_path)])
        elif request.type == KeyAlgorithm.DSA:
            if params_path is None:
                params_path = self._generate_dsa_params(request)
            self._generate_dsa_key(request, params_path)
        elif request.type == KeyAlgorithm.RSA:
            self._run(["genrsa", "-out", self._posix(key_path), size])
        else:
            self._run(self._genpkey_args(request, key_path))

        return key_path

    def _genpkey_args(self, request: KeyGenRequest, key_path: Path) -> List[str]:
        args = ["genpkey", "-out", self._posix(key_path), "-algorithm", request.type.value]
        if request.type == KeyAlgorithm.RSA_PSS:
            args += ["-pkeyopt", f"rsa_keygen_bits:{request.effective_size}"]
        for option in request.gen_opts:
            args += ["-pkeyopt", option]
        return args

    def _generate_dsa_params(self, request: KeyGenRequest) -> Path:
        params_path = self.store.file(request.alias, "dsa_params")

        def attempt() -> bool:
            FileUtils.remove_files(params_path)
            self._run(
                ["dsaparam", "-out", self._posix(params_path), request.effective_size],
                "key_gen: Parameter generation failed",
            )
            g = self._load_dsa_generator(params_path)
            if request.conservative:
                return _msb_set(g)
            return _low_top_nibble(g)

        self._shape(request, "parameters", attempt)
        return params_path

    def _generate_dsa_key(self, request: KeyGenRequest, params_path: Path) -> None:
        key_path = self.store.key_path(request.alias)

        def attempt() -> bool:
            self._run(["gendsa", "-out", self._posix(key_path), self._posix(params_path)])
            numbers = self._load_dsa_key(key_path)
            y, p = numbers.y, numbers.parameter_numbers.p
            if request.conservative:
                # public value must be as long as the prime
                return _msb_set(y) and _byte_length(y) == _byte_length(p)
            return _low_top_nibble(y)

        self._shape(request, "key", attempt)

    def _shape(self, request: KeyGenRequest, what: str, attempt: Callable[[], bool]) -> None:
        """
        Repeat an attempt until it produces material of the requested shape.

        Without a shaping mode the first result is accepted.
        """
        if not (request.conservative or request.anti_conservative):
            attempt()
            return

        for attempt_number in range(1, self.config.dsa_max_attempts + 1):
            if attempt():
                logger.debug(f"DSA {what} for '{request.alias}' shaped after {attempt_number} attempt(s)")
                return

        mode = "conservative" if request.conservative else "anti-conservative"
        raise KeyGenError(f"key_gen: no {mode} DSA {what} found in {self.config.dsa_max_attempts} attempts")

    def _load_dsa_generator(self, params_path: Path) -> int:
        text = self._run(
            ["dsaparam", "-in", self._posix(params_path), "-noout", "-text"], "key_gen: can't read DSA parameters"
        )
        return _text_number(text, "G")

    def _load_dsa_key(self, key_path: Path):
        try:
            key = serialization.load_pem_private_key(FileUtils.read_binary_file(key_path), password=None)
            return key.private_numbers().public_numbers
        except (ValueError, TypeError, AttributeError) as e:
            raise KeyGenError(f"key_gen: can't read DSA key {key_path}: {e}")

    def _run(self, args: List[str], message: str = "key_gen: Key generation failed") -> str:
        return self.openssl_service.run(args, message, error_class=KeyGenError)

    @staticmethod
    def _posix(path: Path) -> str:
        return OpenSSLService.path_to_posix(path)
