"""
Метаданные шифров и дайджестов.

EN: Immutable descriptions of every cipher and digest the engine knows about,
plus the name-based classification rules (AEAD detection, weak-cipher markers)
that the cipher suite relies on.

Example:
    >>> from cipher_envelope.core.metadata import is_authenticated_name
    >>> is_authenticated_name("aes-256-gcm")
    True
    >>> is_authenticated_name("aes-256-ctr")
    False
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Final, Iterable, Tuple

__all__ = [
    "AEAD_MARKERS",
    "WEAK_CIPHER_MARKERS",
    "CipherMetadata",
    "DigestMetadata",
    "SecurityLevel",
    "is_authenticated_name",
    "is_weak_name",
]

# Substrings that mark an AEAD mode inside an OpenSSL-style cipher name.
AEAD_MARKERS: Final[Tuple[str, ...]] = ("gcm", "ccm", "ocb", "siv", "poly1305")

# At least as early as Aug 2016 OpenSSL declared RC2, RC4, DES, 3DES and MD5
# based constructions weak; ECB is excluded as well.
WEAK_CIPHER_MARKERS: Final[Tuple[str, ...]] = ("rc2", "rc4", "des", "md5", "ecb")


# ==============================================================================
# ENUM: SECURITY LEVEL
# ==============================================================================


class SecurityLevel(str, Enum):
    """
    Уровень безопасности алгоритма.

    Градация:
        - BROKEN: Сломан, не использовать (ECB, MD5)
        - LEGACY: Устаревший, только для совместимости (SHA-1)
        - STANDARD: Стандартный (AES-CTR, AES-GCM, SHA-256)
        - HIGH: Повышенный (XChaCha20-Poly1305, SHA-512)
    """

    BROKEN = "broken"
    LEGACY = "legacy"
    STANDARD = "standard"
    HIGH = "high"

    def is_safe_for_new_systems(self) -> bool:
        """False для BROKEN и LEGACY, True для остальных."""
        return self not in (SecurityLevel.BROKEN, SecurityLevel.LEGACY)


# ==============================================================================
# DATACLASSES
# ==============================================================================


@dataclass(frozen=True)
class CipherMetadata:
    """
    Метаданные симметричного шифра.

    Attributes:
        name: Каноническое имя в стиле OpenSSL (например, "aes-256-ctr")
        wire_id: Стабильный однобайтовый идентификатор для tagged-envelope
        key_size: Размер ключа в байтах
        iv_size: Размер IV/nonce в байтах (0 для ECB)
        is_aead: Аутентифицированный режим
        security_level: Уровень безопасности
        library: Python библиотека, реализующая примитив
        block_size: Размер блока в байтах (для режимов с паддингом)
        padded: Режим использует PKCS#7 паддинг
        aliases: Короткие имена OpenSSL (например, "aes256")
        description: Краткое описание

    Example:
        >>> meta = CipherMetadata(
        ...     name="aes-256-ctr", wire_id=0x13, key_size=32, iv_size=16,
        ...     is_aead=False, security_level=SecurityLevel.STANDARD,
        ...     library="cryptography",
        ... )
        >>> meta.is_safe_for_production()
        True
    """

    name: str
    wire_id: int
    key_size: int
    iv_size: int
    is_aead: bool
    security_level: SecurityLevel
    library: str
    block_size: int = 16
    padded: bool = False
    aliases: Tuple[str, ...] = field(default_factory=tuple)
    description: str = ""

    def __post_init__(self) -> None:
        if self.name != self.name.lower():
            raise ValueError(f"Cipher name must be lower-case: {self.name}")
        if not 0 < self.wire_id < 256:
            raise ValueError(f"wire_id must fit one byte, got {self.wire_id}")
        if self.key_size <= 0:
            raise ValueError(f"key_size must be positive, got {self.key_size}")
        if self.iv_size < 0:
            raise ValueError(f"iv_size must be >= 0, got {self.iv_size}")
        if self.is_aead != is_authenticated_name(self.name):
            raise ValueError(f"AEAD flag of '{self.name}' disagrees with its name")

    def is_safe_for_production(self) -> bool:
        """Безопасен ли шифр для новых систем."""
        return self.security_level.is_safe_for_new_systems() and not is_weak_name(
            self.name
        )


@dataclass(frozen=True)
class DigestMetadata:
    """
    Метаданные алгоритма дайджеста.

    Attributes:
        name: Каноническое имя (например, "sha256")
        digest_size: Размер дайджеста в байтах
        security_level: Уровень безопасности
        library: "hashlib" или сторонняя библиотека
        aliases: Альтернативные имена
    """

    name: str
    digest_size: int
    security_level: SecurityLevel
    library: str = "hashlib"
    aliases: Tuple[str, ...] = field(default_factory=tuple)


# ==============================================================================
# NAME CLASSIFICATION
# ==============================================================================


def is_authenticated_name(name: str) -> bool:
    """
    Определить по имени, обозначает ли шифр AEAD-режим.

    Args:
        name: Имя шифра (регистр не важен)

    Returns:
        True если имя содержит маркер AEAD-режима

    Example:
        >>> is_authenticated_name("AES-128-GCM")
        True
        >>> is_authenticated_name("chacha20")
        False
    """
    lowered = name.lower()
    return any(marker in lowered for marker in AEAD_MARKERS)


def is_weak_name(name: str, markers: Iterable[str] = WEAK_CIPHER_MARKERS) -> bool:
    """True если имя шифра содержит один из маркеров слабых алгоритмов."""
    lowered = name.lower()
    return any(marker in lowered for marker in markers)
