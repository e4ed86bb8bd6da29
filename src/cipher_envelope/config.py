# -*- coding: utf-8 -*-
"""
RU: Параметры envelope-протокола: константы, опции вызова и профили.
EN: Envelope protocol parameters: defaults, per-call options and profiles.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, Optional

from cipher_envelope.algorithms.symmetric import MAX_TAG_LENGTH, MIN_GCM_TAG_LENGTH
from cipher_envelope.core.exceptions import InvalidParameterError
from cipher_envelope.core.metadata import WEAK_CIPHER_MARKERS

DEFAULT_HASH_METHOD: Final[str] = "sha256"
DEFAULT_HASH_LENGTH: Final[int] = 32
DEFAULT_CIPHER_LEGACY: Final[str] = "aes-256-ctr"
DEFAULT_CIPHER: Final[str] = "aes-256-gcm"
DEFAULT_TAG_LENGTH: Final[int] = 16

OUTPUT_ENCODINGS: Final[frozenset[str]] = frozenset({"base64", "raw"})


class EnvelopeFormat(str, Enum):
    """Wire layout of an encoded envelope."""

    # IV || hash || ciphertext, no header (interoperable with existing blobs)
    RAW = "raw"

    # "CE" || version || wire id || variant || body
    TAGGED = "tagged"


@dataclass(frozen=True)
class EnvelopeOptions:
    """
    Per-call options of Encryptor/Decryptor.

    Attributes:
        aad: Additional authenticated data (AEAD ciphers only).
        tag_length: Authentication tag length in bytes (AEAD only, 4..16).
        output_encoding: "base64" (str result) or "raw" (bytes result).
        iv: Pinned IV for this call; a fresh one is generated when None.

    Examples:
        >>> EnvelopeOptions().tag_length
        16
        >>> EnvelopeOptions(aad=b"header", output_encoding="raw").output_encoding
        'raw'
    """

    aad: bytes = b""
    tag_length: int = DEFAULT_TAG_LENGTH
    output_encoding: str = "base64"
    iv: Optional[bytes] = None

    def __post_init__(self) -> None:
        """Validate parameters."""
        if not isinstance(self.aad, (bytes, bytearray)):
            raise InvalidParameterError("aad", "must be bytes")
        if len(self.aad) > 0xFFFF:
            raise InvalidParameterError("aad", "must be at most 65535 bytes")
        if not MIN_GCM_TAG_LENGTH <= self.tag_length <= MAX_TAG_LENGTH:
            raise InvalidParameterError(
                "tag_length",
                f"must be between {MIN_GCM_TAG_LENGTH} and {MAX_TAG_LENGTH} bytes",
            )
        if self.output_encoding not in OUTPUT_ENCODINGS:
            raise InvalidParameterError(
                "output_encoding", f"must be one of {sorted(OUTPUT_ENCODINGS)}"
            )
        if self.iv is not None and not isinstance(self.iv, (bytes, bytearray)):
            raise InvalidParameterError("iv", "must be bytes")


class EnvelopeProfile(str, Enum):
    """Predefined cipher + wire format combinations."""

    # aes-256-ctr with the headerless layout of existing deployments
    COMPAT = "compat"

    # aes-256-gcm with the self-describing layout
    MODERN = "modern"


@dataclass(frozen=True)
class EnvelopeConfig:
    """
    Cipher and wire format used by an Encryptor/Decryptor pair.

    Examples:
        >>> cfg = EnvelopeConfig.from_profile(EnvelopeProfile.COMPAT)
        >>> cfg.cipher
        'aes-256-ctr'
        >>> cfg.envelope_format
        <EnvelopeFormat.RAW: 'raw'>
    """

    cipher: str = DEFAULT_CIPHER
    envelope_format: EnvelopeFormat = EnvelopeFormat.TAGGED
    tag_length: int = DEFAULT_TAG_LENGTH

    def __post_init__(self) -> None:
        """Validate parameters."""
        if not self.cipher:
            raise InvalidParameterError("cipher", "must not be empty")
        if not isinstance(self.envelope_format, EnvelopeFormat):
            raise InvalidParameterError("envelope_format", "must be an EnvelopeFormat")
        if not MIN_GCM_TAG_LENGTH <= self.tag_length <= MAX_TAG_LENGTH:
            raise InvalidParameterError(
                "tag_length",
                f"must be between {MIN_GCM_TAG_LENGTH} and {MAX_TAG_LENGTH} bytes",
            )

    @staticmethod
    def from_profile(profile: EnvelopeProfile) -> "EnvelopeConfig":
        """
        Create configuration from predefined profile.

        Examples:
            >>> EnvelopeConfig.from_profile(EnvelopeProfile.MODERN).cipher
            'aes-256-gcm'
        """
        return _PROFILE_PARAMS[profile]

    def options(self, **overrides: object) -> EnvelopeOptions:
        """EnvelopeOptions carrying this config's tag length."""
        params: dict[str, object] = {"tag_length": self.tag_length}
        params.update(overrides)
        return EnvelopeOptions(**params)  # type: ignore[arg-type]


_PROFILE_PARAMS: Final[dict[EnvelopeProfile, EnvelopeConfig]] = {
    EnvelopeProfile.COMPAT: EnvelopeConfig(
        cipher=DEFAULT_CIPHER_LEGACY,
        envelope_format=EnvelopeFormat.RAW,
    ),
    EnvelopeProfile.MODERN: EnvelopeConfig(
        cipher=DEFAULT_CIPHER,
        envelope_format=EnvelopeFormat.TAGGED,
    ),
}


__all__ = [
    "DEFAULT_CIPHER",
    "DEFAULT_CIPHER_LEGACY",
    "DEFAULT_HASH_LENGTH",
    "DEFAULT_HASH_METHOD",
    "DEFAULT_TAG_LENGTH",
    "OUTPUT_ENCODINGS",
    "WEAK_CIPHER_MARKERS",
    "EnvelopeConfig",
    "EnvelopeFormat",
    "EnvelopeOptions",
    "EnvelopeProfile",
]
