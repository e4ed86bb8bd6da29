"""
Движок шифрования по умолчанию поверх ``cryptography``.

EN: :class:`CryptographyEngine` implements :class:`CipherEngineProtocol` on top
of the cipher catalog (:mod:`cipher_envelope.algorithms.symmetric`) and the
digest catalog (:mod:`cipher_envelope.algorithms.hashing`). It keeps the
behaviour of an OpenSSL ``EVP`` binding that envelope users rely on:

- Keys are fitted to the cipher key size: short keys are right-padded with NUL
  bytes, long keys are truncated. ``str`` keys are UTF-8 encoded.
- Names are case-insensitive; OpenSSL short aliases (``aes256``) resolve to
  their canonical names.
- Ciphers whose backing library is missing are not reported as available.

Example:
    >>> engine = CryptographyEngine()
    >>> "aes-256-ctr" in engine.available_ciphers()
    True
    >>> iv = engine.secure_random_bytes(engine.cipher_iv_length("aes-256-ctr"))
    >>> ct, _ = engine.encrypt(b"data", "aes-256-ctr", b"EncryptionKey", iv)
    >>> engine.decrypt(ct, "aes-256-ctr", b"EncryptionKey", iv)
    b'data'
"""

from __future__ import annotations

import logging
from typing import FrozenSet, Tuple, Union

from cipher_envelope.algorithms.hashing import (
    ALL_DIGEST_METADATA,
    canonical_digest_name,
    get_digest,
    is_digest_supported,
)
from cipher_envelope.algorithms.symmetric import (
    ALIASES,
    ALL_METADATA,
    MAX_TAG_LENGTH,
    get_algorithm,
    get_metadata,
    is_supported,
)
from cipher_envelope.core.exceptions import (
    CipherUnavailableError,
    DigestUnavailableError,
    InvalidIVError,
    InvalidKeyError,
)
from cipher_envelope.core.metadata import (
    CipherMetadata,
    is_authenticated_name,
    is_weak_name,
)
from cipher_envelope.core.protocols import BytesLike
from cipher_envelope.utils import ensure_bytes, generate_random_bytes

logger = logging.getLogger(__name__)

__all__ = ["CryptographyEngine", "fit_key"]


def fit_key(key: Union[str, BytesLike], key_size: int) -> bytes:
    """
    Подогнать ключ под размер ключа шифра (поведение OpenSSL EVP).

    Args:
        key: Ключ (str кодируется в UTF-8)
        key_size: Требуемый размер в байтах

    Returns:
        Ключ ровно ``key_size`` байт

    Raises:
        InvalidKeyError: Ключ не str/bytes/bytearray или пуст

    Example:
        >>> fit_key("EncryptionKey", 32)[:13]
        b'EncryptionKey'
        >>> len(fit_key("EncryptionKey", 32))
        32
    """
    raw = ensure_bytes(key, InvalidKeyError, "key")
    if not raw:
        raise InvalidKeyError("Key must not be empty")
    if len(raw) == key_size:
        return raw
    if len(raw) < key_size:
        logger.debug(f"Key padded with NUL bytes: {len(raw)} -> {key_size}")
        return raw.ljust(key_size, b"\x00")
    logger.debug(f"Key truncated: {len(raw)} -> {key_size}")
    return raw[:key_size]


class CryptographyEngine:
    """
    Реализация CipherEngineProtocol на ``cryptography``/``pycryptodome``.

    Instances are stateless and safe to share between suites and threads.
    """

    def available_ciphers(
        self, include_aliases: bool = False, exclude_weak: bool = True
    ) -> FrozenSet[str]:
        """
        Имена шифров, работающих на этой платформе.

        Args:
            include_aliases: Добавить короткие алиасы OpenSSL (``aes256``)
            exclude_weak: Исключить имена с маркерами rc2/rc4/des/md5/ecb

        Returns:
            frozenset lower-case имён
        """
        names = {m.name for m in ALL_METADATA if is_supported(m.name)}
        if include_aliases:
            names.update(alias for alias, target in ALIASES.items() if target in names)
        if exclude_weak:
            names = {n for n in names if not is_weak_name(n)}
        return frozenset(names)

    def available_digests(self, include_aliases: bool = False) -> FrozenSet[str]:
        """Имена дайджестов, доступных на этой платформе."""
        names = set()
        for meta in ALL_DIGEST_METADATA:
            if not is_digest_supported(meta.name):
                continue
            names.add(meta.name)
            if include_aliases:
                names.update(meta.aliases)
        return frozenset(names)

    def _metadata(self, name: str) -> CipherMetadata:
        try:
            metadata = get_metadata(name)
        except KeyError:
            raise CipherUnavailableError(name, reason="unknown cipher") from None
        if not is_supported(metadata.name):
            raise CipherUnavailableError(
                metadata.name, reason=f"{metadata.library} backend unavailable"
            )
        return metadata

    def cipher_iv_length(self, name: str) -> int:
        """
        Длина IV для шифра.

        Raises:
            CipherUnavailableError: Шифр неизвестен или не поддерживается
        """
        return self._metadata(name).iv_size

    def is_authenticated(self, name: str) -> bool:
        return is_authenticated_name(name)

    def wire_id(self, name: str) -> int:
        """Однобайтовый идентификатор шифра для tagged-envelope."""
        return self._metadata(name).wire_id

    def secure_random_bytes(self, count: int) -> bytes:
        return generate_random_bytes(count)

    def _check_iv(self, metadata: CipherMetadata, iv: bytes) -> None:
        if len(iv) != metadata.iv_size:
            raise InvalidIVError(
                f"IV must be {metadata.iv_size} bytes, got {len(iv)}",
                algorithm=metadata.name,
            )

    def encrypt(
        self,
        data: bytes,
        name: str,
        key: Union[str, BytesLike],
        iv: bytes,
        *,
        aad: bytes = b"",
        tag_length: int = MAX_TAG_LENGTH,
    ) -> Tuple[bytes, bytes]:
        """
        Зашифровать ``data`` шифром ``name``.

        Returns:
            Tuple[ciphertext, tag]; ``tag`` пуст для non-AEAD шифров

        Raises:
            CipherUnavailableError: Шифр не поддерживается
            InvalidIVError: Длина IV не совпадает с требуемой
            EncryptionFailedError: Примитив отказал
        """
        metadata = self._metadata(name)
        self._check_iv(metadata, iv)
        cipher = get_algorithm(metadata.name)
        return cipher.encrypt(
            fit_key(key, metadata.key_size),
            bytes(iv),
            bytes(data),
            aad=bytes(aad),
            tag_length=tag_length,
        )

    def decrypt(
        self,
        data: bytes,
        name: str,
        key: Union[str, BytesLike],
        iv: bytes,
        *,
        tag: bytes = b"",
        aad: bytes = b"",
    ) -> bytes:
        """
        Расшифровать ``data`` шифром ``name``.

        Raises:
            CipherUnavailableError: Шифр не поддерживается
            InvalidIVError: Длина IV не совпадает с требуемой
            DecryptionFailedError: Примитив отказал (включая неверный tag)
        """
        metadata = self._metadata(name)
        self._check_iv(metadata, iv)
        cipher = get_algorithm(metadata.name)
        return cipher.decrypt(
            fit_key(key, metadata.key_size),
            bytes(iv),
            bytes(data),
            tag=bytes(tag),
            aad=bytes(aad),
        )

    def digest(
        self, data: bytes, name: str = "sha256", raw: bool = True
    ) -> Union[bytes, str]:
        """
        Вычислить дайджест.

        Returns:
            bytes при ``raw=True``, иначе lower-case hex

        Raises:
            DigestUnavailableError: Дайджест неизвестен или не поддерживается
            DigestComputationError: Вычисление не удалось
        """
        canonical = canonical_digest_name(name)
        if canonical is None or not is_digest_supported(canonical):
            raise DigestUnavailableError(name)
        value = get_digest(canonical).hash(bytes(data))
        return value if raw else value.hex()
