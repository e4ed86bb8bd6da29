"""
Протокольные интерфейсы envelope-подсистемы.

EN: Structural contracts between the envelope core and its collaborators. The
core never imports a concrete primitive library; it talks to a
:class:`CipherEngineProtocol`. Encryptors and decryptors are described by
:class:`EncryptionProtocol` / :class:`DecryptionProtocol` so that callers can
swap implementations (for example a fake in tests).

All protocols are ``@runtime_checkable`` to support ``isinstance`` checks.
"""

from __future__ import annotations

from typing import FrozenSet, Optional, Protocol, Tuple, Union, runtime_checkable

BytesLike = Union[bytes, bytearray]
TextOrBytes = Union[str, bytes, bytearray]

__all__ = [
    "BytesLike",
    "TextOrBytes",
    "CipherEngineProtocol",
    "SymmetricPrimitiveProtocol",
    "DigestProtocol",
    "EncryptionProtocol",
    "DecryptionProtocol",
]


# ==============================================================================
# PRIMITIVES
# ==============================================================================


@runtime_checkable
class SymmetricPrimitiveProtocol(Protocol):
    """
    Протокол одного симметричного примитива (один шифр, один режим).

    Attributes:
        algorithm_name: Каноническое имя (например, "aes-256-gcm")
        key_size: Размер ключа в байтах
        iv_size: Размер IV в байтах
        is_aead: True для аутентифицированных режимов

    Keys passed to a primitive are already fitted to ``key_size``; IVs are
    already validated against ``iv_size``.
    """

    algorithm_name: str
    key_size: int
    iv_size: int
    is_aead: bool

    def encrypt(
        self,
        key: bytes,
        iv: bytes,
        data: bytes,
        *,
        aad: bytes = b"",
        tag_length: int = 16,
    ) -> Tuple[bytes, bytes]:
        """
        Зашифровать данные.

        Returns:
            Tuple[ciphertext, tag]; ``tag`` is ``b""`` for non-AEAD modes.
        """
        ...

    def decrypt(
        self,
        key: bytes,
        iv: bytes,
        data: bytes,
        *,
        tag: bytes = b"",
        aad: bytes = b"",
    ) -> bytes:
        """Расшифровать данные (для AEAD проверяет tag до возврата plaintext)."""
        ...


@runtime_checkable
class DigestProtocol(Protocol):
    """Протокол алгоритма дайджеста."""

    algorithm_name: str
    digest_size: int

    def hash(self, data: bytes) -> bytes:
        """One-shot digest of ``data`` (empty input allowed)."""
        ...


# ==============================================================================
# CIPHER ENGINE
# ==============================================================================


@runtime_checkable
class CipherEngineProtocol(Protocol):
    """
    Внешний коллаборатор: сырые операции шифрования, дайджеста и RNG.

    Example:
        >>> engine = CryptographyEngine()
        >>> isinstance(engine, CipherEngineProtocol)
        True
        >>> engine.cipher_iv_length("aes-256-ctr")
        16
    """

    def available_ciphers(
        self, include_aliases: bool = False, exclude_weak: bool = True
    ) -> FrozenSet[str]:
        """Имена шифров, поддерживаемых платформой."""
        ...

    def available_digests(self, include_aliases: bool = False) -> FrozenSet[str]:
        """Имена дайджестов, поддерживаемых платформой."""
        ...

    def cipher_iv_length(self, name: str) -> int:
        """Требуемая длина IV для шифра ``name``."""
        ...

    def is_authenticated(self, name: str) -> bool:
        """True если ``name`` обозначает AEAD-режим."""
        ...

    def wire_id(self, name: str) -> int:
        """Однобайтовый идентификатор шифра для tagged-envelope."""
        ...

    def secure_random_bytes(self, count: int) -> bytes:
        """Криптографически стойкие случайные байты."""
        ...

    def encrypt(
        self,
        data: bytes,
        name: str,
        key: BytesLike,
        iv: bytes,
        *,
        aad: bytes = b"",
        tag_length: int = 16,
    ) -> Tuple[bytes, bytes]:
        """Returns ``(ciphertext, tag)``."""
        ...

    def decrypt(
        self,
        data: bytes,
        name: str,
        key: BytesLike,
        iv: bytes,
        *,
        tag: bytes = b"",
        aad: bytes = b"",
    ) -> bytes:
        """Returns plaintext or raises ``DecryptionFailedError``."""
        ...

    def digest(
        self, data: bytes, name: str = "sha256", raw: bool = True
    ) -> Union[bytes, str]:
        """Raw bytes when ``raw`` else lower-case hex text."""
        ...


# ==============================================================================
# ENCRYPTION / DECRYPTION
# ==============================================================================


@runtime_checkable
class EncryptionProtocol(Protocol):
    """Протокол шифратора: plaintext + key -> envelope."""

    def encrypt(
        self, plaintext: TextOrBytes, key: TextOrBytes, options: Optional[object] = None
    ) -> Union[str, bytes]:
        ...


@runtime_checkable
class DecryptionProtocol(Protocol):
    """Протокол дешифратора: envelope + key -> plaintext."""

    def decrypt(
        self,
        envelope: Union[str, bytes],
        key: TextOrBytes,
        options: Optional[object] = None,
    ) -> bytes:
        ...
