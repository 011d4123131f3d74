"""Salted one-way hashing and verification of secret values.

Digests are self-describing so that a value hashed under one work factor can
still be verified after the configured work factor changes:

    $pbkdf2-sha256$<iterations>$<base64 salt>$<base64 derived key>
"""
import base64
import binascii
import os
from typing import Optional, Tuple

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .models import ErrorKind, HashResult, VerifyResult

SCHEME = "pbkdf2-sha256"
DEFAULT_ITERATIONS = 100000
DEFAULT_MAX_INPUT_BYTES = 4096
MIN_ITERATIONS = 1
MAX_ITERATIONS = 10_000_000
SALT_BYTES = 16
KEY_BYTES = 32


class SecretMemo:
    """Hashes secrets for durable storage and checks candidates against them.

    Instances only hold immutable settings, so one instance can be shared
    across threads and resources.
    """

    def __init__(self, iterations: int = DEFAULT_ITERATIONS,
                 max_input_bytes: int = DEFAULT_MAX_INPUT_BYTES):
        if not isinstance(iterations, int) or not MIN_ITERATIONS <= iterations <= MAX_ITERATIONS:
            raise ValueError(
                f"iterations must be an integer between {MIN_ITERATIONS} and {MAX_ITERATIONS}"
            )
        if not isinstance(max_input_bytes, int) or max_input_bytes < 1:
            raise ValueError("max_input_bytes must be a positive integer")
        self._iterations = iterations
        self._max_input_bytes = max_input_bytes

    @property
    def iterations(self) -> int:
        return self._iterations

    @property
    def max_input_bytes(self) -> int:
        return self._max_input_bytes

    def hash(self, value: str) -> HashResult:
        """
        Compute a salted digest of value suitable for long-term storage.

        Args:
            value: Secret value; the empty string is legal

        Returns:
            HashResult with the encoded digest, or an empty digest and
            ErrorKind.HASHING_FAILED if the input or the salt source is rejected
        """
        try:
            secret = self._encode(value)
            salt = os.urandom(SALT_BYTES)
            derived = _kdf(salt, self._iterations).derive(secret)
        except (TypeError, ValueError, OSError, NotImplementedError):
            return HashResult(digest="", error=ErrorKind.HASHING_FAILED)

        return HashResult(digest=_format_digest(self._iterations, salt, derived))

    def verify(self, candidate: str, digest: str) -> VerifyResult:
        """
        Check whether candidate hashes to digest under the digest's own settings.

        Args:
            candidate: Secret value to check
            digest: Previously stored digest

        Returns:
            VerifyResult. A digest that cannot be decoded yields
            ErrorKind.MALFORMED_DIGEST; a candidate that cannot be processed
            yields ErrorKind.HASHING_FAILED.
        """
        parsed = _parse_digest(digest)
        if parsed is None:
            return VerifyResult(matches=False, error=ErrorKind.MALFORMED_DIGEST)
        iterations, salt, expected = parsed

        try:
            secret = self._encode(candidate)
        except (TypeError, ValueError):
            return VerifyResult(matches=False, error=ErrorKind.HASHING_FAILED)

        try:
            _kdf(salt, iterations).verify(secret, expected)
        except InvalidKey:
            return VerifyResult(matches=False)
        except (TypeError, ValueError):
            return VerifyResult(matches=False, error=ErrorKind.HASHING_FAILED)
        return VerifyResult(matches=True)

    def _encode(self, value: str) -> bytes:
        if not isinstance(value, str):
            raise TypeError(f"secret value must be str, not {type(value).__name__}")
        secret = value.encode("utf-8")
        if len(secret) > self._max_input_bytes:
            raise ValueError(f"secret value exceeds {self._max_input_bytes} bytes")
        return secret


def _kdf(salt: bytes, iterations: int) -> PBKDF2HMAC:
    # A PBKDF2HMAC instance is single-use, so build one per derive/verify
    return PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_BYTES,
        salt=salt,
        iterations=iterations
    )


def _b64encode(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def _format_digest(iterations: int, salt: bytes, derived: bytes) -> str:
    return f"${SCHEME}${iterations}${_b64encode(salt)}${_b64encode(derived)}"


def _parse_digest(digest: str) -> Optional[Tuple[int, bytes, bytes]]:
    """Decode a digest into (iterations, salt, derived key), or None if malformed."""
    if not isinstance(digest, str) or not digest:
        return None

    parts = digest.split("$")
    if len(parts) != 5 or parts[0] != "" or parts[1] != SCHEME:
        return None

    iterations_text, salt_text, derived_text = parts[2], parts[3], parts[4]
    if not (iterations_text.isascii() and iterations_text.isdigit()):
        return None
    iterations = int(iterations_text)
    if not MIN_ITERATIONS <= iterations <= MAX_ITERATIONS:
        return None

    try:
        salt = base64.b64decode(salt_text, validate=True)
        derived = base64.b64decode(derived_text, validate=True)
    except (binascii.Error, ValueError):
        return None

    if not salt or len(derived) != KEY_BYTES:
        return None
    return iterations, salt, derived
