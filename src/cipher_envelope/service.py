"""
Высокоуровневый API envelope-подсистемы.

EnvelopeService собирает CipherSuite, Encryptor и Decryptor по профилю или
конфигурации и ведёт аудит-лог операций через стандартный logging.

Example:
    >>> from cipher_envelope.service import EnvelopeService
    >>> from cipher_envelope.config import EnvelopeProfile
    >>>
    >>> service = EnvelopeService(profile=EnvelopeProfile.MODERN)
    >>> key = service.generate_key()
    >>> blob = service.encrypt(b"Secret document", key)
    >>> service.decrypt(blob, key)
    b'Secret document'
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple, Union

from cipher_envelope.algorithms.symmetric import get_metadata
from cipher_envelope.config import (
    DEFAULT_HASH_METHOD,
    EnvelopeConfig,
    EnvelopeProfile,
)
from cipher_envelope.core.exceptions import CryptoError
from cipher_envelope.core.protocols import CipherEngineProtocol, TextOrBytes
from cipher_envelope.decryption import Decryptor
from cipher_envelope.encryption import Encryptor
from cipher_envelope.suite import CipherSuite

__all__ = ["EnvelopeService", "create_pair"]

logger = logging.getLogger(__name__)

_audit_logger = logging.getLogger("audit.cipher_envelope")


def create_pair(
    config: Optional[EnvelopeConfig] = None,
    engine: Optional[CipherEngineProtocol] = None,
) -> Tuple[Encryptor, Decryptor]:
    """
    Создать связанную пару Encryptor/Decryptor с общим CipherSuite.

    Raises:
        CipherUnavailableError: Шифр конфигурации недоступен

    Example:
        >>> encryptor, decryptor = create_pair(
        ...     EnvelopeConfig.from_profile(EnvelopeProfile.COMPAT)
        ... )
        >>> decryptor.decrypt(encryptor.encrypt(b"x", b"k"), b"k")
        b'x'
    """
    cfg = config or EnvelopeConfig()
    suite = CipherSuite(cfg.cipher, engine=engine)
    return (
        Encryptor(suite, envelope_format=cfg.envelope_format),
        Decryptor(suite, envelope_format=cfg.envelope_format),
    )


class EnvelopeService:
    """
    Единая точка доступа к envelope-шифрованию.

    Args:
        profile: Профиль (по умолчанию MODERN), игнорируется при ``config``
        config: Явная конфигурация
        engine: Движок шифрования (по умолчанию CryptographyEngine)
    """

    def __init__(
        self,
        profile: EnvelopeProfile = EnvelopeProfile.MODERN,
        *,
        config: Optional[EnvelopeConfig] = None,
        engine: Optional[CipherEngineProtocol] = None,
    ) -> None:
        self._config = config or EnvelopeConfig.from_profile(profile)
        self._encryptor, self._decryptor = create_pair(self._config, engine)
        logger.info(
            f"EnvelopeService initialized: cipher={self._config.cipher}, "
            f"format={self._config.envelope_format.value}"
        )

    @property
    def config(self) -> EnvelopeConfig:
        return self._config

    @property
    def suite(self) -> CipherSuite:
        return self._encryptor.suite

    def encrypt(
        self,
        plaintext: TextOrBytes,
        key: TextOrBytes,
        *,
        aad: bytes = b"",
        output_encoding: str = "base64",
    ) -> Union[str, bytes]:
        """
        Зашифровать данные в envelope текущей конфигурации.

        Raises:
            CryptoError: Любая ошибка шифрования (см. Encryptor.encrypt)
        """
        options = self._config.options(aad=aad, output_encoding=output_encoding)
        try:
            envelope = self._encryptor.encrypt(plaintext, key, options)
        except CryptoError as e:
            _audit_logger.warning(f"encrypt failed: {e.__class__.__name__}")
            raise
        _audit_logger.info(f"encrypt: cipher={self._config.cipher}")
        return envelope

    def decrypt(
        self,
        envelope: Union[str, bytes],
        key: TextOrBytes,
        *,
        aad: bytes = b"",
        output_encoding: str = "base64",
    ) -> bytes:
        """
        Проверить и расшифровать envelope.

        Raises:
            CryptoError: Любая ошибка проверки или расшифровки
        """
        options = self._config.options(aad=aad, output_encoding=output_encoding)
        try:
            plaintext = self._decryptor.decrypt(envelope, key, options)
        except CryptoError as e:
            _audit_logger.warning(f"decrypt failed: {e.__class__.__name__}")
            raise
        _audit_logger.info(f"decrypt: cipher={self._config.cipher}")
        return plaintext

    def hash_data(self, data: bytes, algorithm: str = DEFAULT_HASH_METHOD) -> str:
        """Hex-дайджест данных."""
        return str(self.suite.digest(data, algorithm, raw=False))

    def generate_key(self) -> bytes:
        """Случайный ключ полного размера для текущего шифра."""
        key_size = get_metadata(self._config.cipher).key_size
        return self.suite.engine.secure_random_bytes(key_size)
