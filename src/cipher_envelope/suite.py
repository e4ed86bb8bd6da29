"""
CipherSuite: выбранный шифр, его классификация и текущий IV.

EN: A suite is configured once with a cipher name and validates it against
the engine's available set. It knows the IV length and whether the cipher is
authenticated (AEAD), and it can hold a current IV for the stateful
``encrypt``/``decrypt`` calls.

Encryptor and Decryptor never touch the stored IV: they pass an explicit IV
per call (see :meth:`CipherSuite.generate_iv` and
:meth:`CipherSuite.validate_iv`). The stored IV exists for callers of the
suite's own ``encrypt``/``decrypt``, which are not thread-safe; use one suite
per caller in that mode.

Example:
    >>> suite = CipherSuite("aes-256-ctr")
    >>> suite.iv_length
    16
    >>> suite.is_authenticated
    False
    >>> len(suite.ensure_iv())
    16
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple, Union

from cipher_envelope.algorithms.hashing import canonical_digest_name
from cipher_envelope.config import DEFAULT_CIPHER, DEFAULT_HASH_METHOD, DEFAULT_TAG_LENGTH
from cipher_envelope.core.exceptions import (
    CipherUnavailableError,
    CryptoError,
    DigestComputationError,
    DigestUnavailableError,
    InvalidIVError,
)
from cipher_envelope.core.protocols import BytesLike, CipherEngineProtocol
from cipher_envelope.engine import CryptographyEngine

logger = logging.getLogger(__name__)

__all__ = ["CipherSuite"]


class CipherSuite:
    """
    Конфигурация шифра для одной криптографической сессии.

    Attributes:
        algorithm_name: Lower-case имя шифра
        iv_length: Длина IV в байтах (из движка)
        is_authenticated: True для AEAD-режимов
        wire_id: Идентификатор шифра для tagged-envelope
        iv: Текущий IV (``b""`` если не установлен)

    Raises:
        CipherUnavailableError: Шифр отсутствует в ``engine.available_ciphers()``
    """

    def __init__(
        self,
        algorithm_name: Optional[str] = None,
        engine: Optional[CipherEngineProtocol] = None,
    ) -> None:
        self._engine: CipherEngineProtocol = engine or CryptographyEngine()
        self._algorithm_name = ""
        self._iv_length = 0
        self._is_authenticated = False
        self._wire_id = 0
        self._iv = b""
        self.configure(DEFAULT_CIPHER if algorithm_name is None else algorithm_name)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def configure(self, algorithm_name: str) -> None:
        """
        Выбрать шифр.

        The name is lower-cased and must be among the engine's available
        ciphers (weak ciphers are never available). The current IV is reset.

        Raises:
            CipherUnavailableError: Шифр не поддерживается платформой
        """
        name = algorithm_name.strip().lower() if isinstance(algorithm_name, str) else ""
        if not name or name not in self._engine.available_ciphers(include_aliases=True):
            raise CipherUnavailableError(
                str(algorithm_name), reason="not in the platform's available ciphers"
            )

        self._algorithm_name = name
        self._is_authenticated = self._engine.is_authenticated(name)
        self._iv_length = self._engine.cipher_iv_length(name)
        self._wire_id = self._engine.wire_id(name)
        self._iv = b""
        logger.debug(
            f"CipherSuite configured: {name} "
            f"(iv_length={self._iv_length}, aead={self._is_authenticated})"
        )

    @property
    def engine(self) -> CipherEngineProtocol:
        return self._engine

    @property
    def algorithm_name(self) -> str:
        return self._algorithm_name

    @property
    def iv_length(self) -> int:
        return self._iv_length

    @property
    def is_authenticated(self) -> bool:
        return self._is_authenticated

    @property
    def wire_id(self) -> int:
        return self._wire_id

    @property
    def iv(self) -> bytes:
        return self._iv

    # ------------------------------------------------------------------
    # IV management
    # ------------------------------------------------------------------

    def generate_iv(self) -> bytes:
        """Свежий IV длины ``iv_length`` (не сохраняется в suite)."""
        return self._engine.secure_random_bytes(self._iv_length)

    def ensure_iv(self) -> bytes:
        """
        Сгенерировать IV, если он не установлен; иначе no-op.

        Returns:
            Текущий IV
        """
        if not self._iv:
            self._iv = self.generate_iv()
        return self._iv

    def validate_iv(self, iv: BytesLike) -> bytes:
        """
        Проверить IV без сохранения.

        Raises:
            InvalidIVError: IV пуст или его длина не равна ``iv_length``
        """
        if not isinstance(iv, (bytes, bytearray)) or not iv:
            raise InvalidIVError("IV is empty", algorithm=self._algorithm_name)
        if len(iv) != self._iv_length:
            raise InvalidIVError(
                f"IV must be {self._iv_length} bytes, got {len(iv)}",
                algorithm=self._algorithm_name,
            )
        return bytes(iv)

    def set_iv(self, iv: BytesLike) -> None:
        """
        Установить IV (например, извлечённый из envelope).

        Raises:
            InvalidIVError: IV пуст или его длина не равна ``iv_length``
        """
        self._iv = self.validate_iv(iv)

    def reset_iv(self) -> None:
        self._iv = b""

    # ------------------------------------------------------------------
    # Digest
    # ------------------------------------------------------------------

    def digest(
        self,
        data: BytesLike,
        algorithm_name: str = DEFAULT_HASH_METHOD,
        raw: bool = True,
    ) -> Union[bytes, str]:
        """
        Вычислить дайджест данных.

        Args:
            data: Данные (пустые допустимы)
            algorithm_name: Имя дайджеста (по умолчанию sha256)
            raw: bytes при True, hex-строка при False

        Raises:
            DigestUnavailableError: Дайджест не поддерживается
            DigestComputationError: Движок не смог вычислить дайджест
        """
        canonical = (
            canonical_digest_name(algorithm_name) if isinstance(algorithm_name, str) else None
        )
        if canonical is None or canonical not in self._engine.available_digests():
            raise DigestUnavailableError(str(algorithm_name))
        try:
            return self._engine.digest(bytes(data), canonical, raw)
        except CryptoError:
            raise
        except Exception as e:
            logger.error(f"{algorithm_name} digest failed: {e.__class__.__name__}")
            raise DigestComputationError(
                f"{algorithm_name} digest failed", algorithm=algorithm_name
            ) from e

    # ------------------------------------------------------------------
    # Stateful cipher calls
    # ------------------------------------------------------------------

    def encrypt(
        self,
        data: BytesLike,
        key: Union[str, BytesLike],
        *,
        aad: bytes = b"",
        tag_length: int = DEFAULT_TAG_LENGTH,
    ) -> Tuple[bytes, bytes]:
        """
        Зашифровать данные текущим IV (генерируется, если отсутствует).

        Returns:
            Tuple[ciphertext, tag]; ``tag`` пуст для non-AEAD шифров
        """
        iv = self.ensure_iv()
        return self._engine.encrypt(
            bytes(data),
            self._algorithm_name,
            key,
            iv,
            aad=aad,
            tag_length=tag_length,
        )

    def decrypt(
        self,
        data: BytesLike,
        key: Union[str, BytesLike],
        *,
        tag: bytes = b"",
        aad: bytes = b"",
    ) -> bytes:
        """
        Расшифровать данные текущим IV.

        Raises:
            InvalidIVError: IV не установлен
        """
        if not self._iv:
            raise InvalidIVError(
                "IV must be set before decryption", algorithm=self._algorithm_name
            )
        return self._engine.decrypt(
            bytes(data), self._algorithm_name, key, self._iv, tag=tag, aad=aad
        )

    def __repr__(self) -> str:
        return (
            f"CipherSuite(algorithm_name={self._algorithm_name!r}, "
            f"iv_length={self._iv_length}, aead={self._is_authenticated})"
        )
