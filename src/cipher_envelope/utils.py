# -*- coding: utf-8 -*-
"""
RU: Утилиты envelope-подсистемы: RNG через HKDF-микширование, сравнение в
константное время, кодеки Base64 и приведение входных данных к bytes.

EN: Helpers shared by the engine, the codec, the encryptor and the decryptor.
"""
from __future__ import annotations

import base64
import binascii
import hmac
import logging
import os
import secrets
from typing import Final, Type, Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from cipher_envelope.core.exceptions import CryptoError, MalformedEnvelopeError

_LOGGER: Final = logging.getLogger(__name__)

_MAX_RANDOM_BYTES: Final[int] = 10 * 1024 * 1024
_DEGENERATE_CHECK_MIN: Final[int] = 8

BytesLike = Union[bytes, bytearray]


def generate_random_bytes(n: int) -> bytes:
    """
    Generate cryptographically secure random bytes.

    Uses dual-source XOR (os.urandom + secrets.token_bytes) mixed via HKDF-SHA256
    for defense-in-depth against RNG failures.

    Args:
        n: number of bytes to generate (0..10MiB); 0 yields ``b""``.

    Returns:
        Random bytes of requested length.

    Raises:
        ValueError: if n is out of range or the output is degenerate.
    """
    if not isinstance(n, int) or n < 0 or n > _MAX_RANDOM_BYTES:
        raise ValueError("Requested random size must be in 0..10MiB")
    if n == 0:
        return b""

    src1 = os.urandom(n)
    src2 = secrets.token_bytes(n)
    ikm = bytes(a ^ b for a, b in zip(src1, src2))
    salt = src2[:16]
    hkdf = HKDF(
        algorithm=hashes.SHA256(), length=n, salt=salt, info=b"CIPHER-ENVELOPE-RNG-v1"
    )
    out = hkdf.derive(ikm)

    if n >= _DEGENERATE_CHECK_MIN and all(b == out[0] for b in out):
        raise ValueError("Degenerate RNG output (all bytes equal)")

    _LOGGER.debug("Generated %d random bytes", n)
    return out


def secure_compare(a: BytesLike, b: BytesLike) -> bool:
    """
    Constant-time bytes comparison.

    Returns:
        True if sequences are equal, False otherwise.
    """
    return hmac.compare_digest(bytes(a), bytes(b))


def b64_encode(data: bytes) -> str:
    """Encode bytes to a base64 ASCII string (no newlines)."""
    return base64.b64encode(data).decode("ascii")


def b64_decode(text: Union[str, bytes]) -> bytes:
    """
    Decode a strict base64 string.

    Raises:
        MalformedEnvelopeError: on non-ASCII input or invalid base64.
    """
    try:
        raw = text.encode("ascii") if isinstance(text, str) else bytes(text)
        return base64.b64decode(raw, validate=True)
    except (UnicodeEncodeError, binascii.Error, ValueError, TypeError) as exc:
        raise MalformedEnvelopeError("Envelope is not valid base64") from exc


def ensure_bytes(
    value: object,
    error_cls: Type[CryptoError],
    name: str = "data",
) -> bytes:
    """
    Coerce ``str`` (UTF-8), ``bytes`` or ``bytearray`` into ``bytes``.

    Args:
        value: input supplied by the caller.
        error_cls: typed error raised for anything else.
        name: input name for the error message.

    Raises:
        error_cls: if ``value`` is not text or a byte sequence.
    """
    if isinstance(value, bytes):
        return value
    if isinstance(value, bytearray):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    raise error_cls(
        f"Invalid {name}. Must be str, bytes or bytearray, got {type(value).__name__}"
    )


__all__ = [
    "generate_random_bytes",
    "secure_compare",
    "b64_encode",
    "b64_decode",
    "ensure_bytes",
]
