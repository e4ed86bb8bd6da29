"""
Encryptor: plaintext + key -> envelope.

Порядок шагов одного вызова:
    1. Привести plaintext и key к bytes
    2. Взять IV: ``options.iv`` (проверяется) или свежий IV на каждый вызов
    3. Зашифровать через движок suite
    4. non-AEAD: ``hash = SHA-256(ciphertext)`` -> PlainEnvelope
       AEAD: tag движка -> AeadEnvelope
    5. Сериализовать в настроенном формате

The suite's stored IV is never read or written, so two calls never share an
IV and one Encryptor may be used from several threads. The ``hash``, ``tag``
and ``iv`` accessors are per thread: each reports the last call made from the
current thread.

Example:
    >>> encryptor = Encryptor(CipherSuite("aes-256-ctr"))
    >>> blob = encryptor.encrypt("Test encryption of this string.", "EncryptionKey")
    >>> isinstance(blob, str)
    True
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional, Union

from cipher_envelope.config import DEFAULT_HASH_METHOD, EnvelopeFormat, EnvelopeOptions
from cipher_envelope.core.exceptions import (
    CryptoError,
    EncryptionFailedError,
    InvalidKeyError,
    InvalidPlaintextError,
)
from cipher_envelope.core.protocols import TextOrBytes
from cipher_envelope.envelope import AeadEnvelope, Envelope, PlainEnvelope, encode_envelope
from cipher_envelope.suite import CipherSuite
from cipher_envelope.utils import ensure_bytes

logger = logging.getLogger(__name__)

__all__ = ["EncryptionResult", "Encryptor"]


@dataclass(frozen=True)
class EncryptionResult:
    """
    Результат одного вызова шифрования.

    Attributes:
        envelope: Сериализованный envelope (str для base64, bytes для raw)
        iv: IV, сгенерированный (или переданный) для этого вызова
        ciphertext: Зашифрованные данные без IV/hash/tag
        hash: SHA-256(ciphertext) для non-AEAD, ``b""`` для AEAD
        tag: Authentication tag для AEAD, ``b""`` для non-AEAD
    """

    envelope: Union[str, bytes]
    iv: bytes
    ciphertext: bytes
    hash: bytes = b""
    tag: bytes = b""


class Encryptor:
    """
    Шифратор envelope-протокола.

    Args:
        suite: Настроенный CipherSuite
        envelope_format: Формат на проводе (по умолчанию RAW)
    """

    def __init__(
        self,
        suite: CipherSuite,
        *,
        envelope_format: Optional[EnvelopeFormat] = None,
    ) -> None:
        self._suite = suite
        self._format = envelope_format or EnvelopeFormat.RAW
        self._local = threading.local()

    @property
    def suite(self) -> CipherSuite:
        return self._suite

    @property
    def envelope_format(self) -> EnvelopeFormat:
        return self._format

    @property
    def _last(self) -> Optional[EncryptionResult]:
        return getattr(self._local, "result", None)

    @property
    def hash(self) -> bytes:
        """Integrity hash of the last non-AEAD encryption (``b""`` otherwise)."""
        return self._last.hash if self._last else b""

    @property
    def tag(self) -> bytes:
        """Authentication tag of the last AEAD encryption (``b""`` otherwise)."""
        return self._last.tag if self._last else b""

    @property
    def iv(self) -> bytes:
        """IV of the last encryption."""
        return self._last.iv if self._last else b""

    def encrypt(
        self,
        plaintext: TextOrBytes,
        key: TextOrBytes,
        options: Optional[EnvelopeOptions] = None,
    ) -> Union[str, bytes]:
        """
        Зашифровать plaintext в envelope.

        Returns:
            base64 str (по умолчанию) или bytes при ``output_encoding="raw"``

        Raises:
            InvalidPlaintextError: plaintext не str/bytes/bytearray
            InvalidKeyError: key не str/bytes/bytearray или пуст
            InvalidIVError: ``options.iv`` неверной длины
            CipherUnavailableError: Шифр недоступен
            DigestUnavailableError / DigestComputationError: Сбой дайджеста
            EncryptionFailedError: Примитив отказал
        """
        return self.encrypt_detailed(plaintext, key, options).envelope

    def encrypt_detailed(
        self,
        plaintext: TextOrBytes,
        key: TextOrBytes,
        options: Optional[EnvelopeOptions] = None,
    ) -> EncryptionResult:
        """Как :meth:`encrypt`, но возвращает IV, ciphertext, hash и tag."""
        opts = options or EnvelopeOptions()
        data = ensure_bytes(plaintext, InvalidPlaintextError, "plaintext")
        key_bytes = ensure_bytes(key, InvalidKeyError, "key")
        if not key_bytes:
            raise InvalidKeyError("Key must not be empty")

        suite = self._suite
        iv = suite.validate_iv(opts.iv) if opts.iv is not None else suite.generate_iv()

        try:
            ciphertext, tag = suite.engine.encrypt(
                data,
                suite.algorithm_name,
                key_bytes,
                iv,
                aad=bytes(opts.aad),
                tag_length=opts.tag_length,
            )
        except CryptoError:
            raise
        except Exception as e:
            logger.error(
                f"{suite.algorithm_name} engine failure: {e.__class__.__name__}"
            )
            raise EncryptionFailedError(
                "Cipher engine failed to encrypt", algorithm=suite.algorithm_name
            ) from e

        envelope: Envelope
        digest = b""
        if suite.is_authenticated:
            envelope = AeadEnvelope(
                iv=iv, tag=tag, ciphertext=ciphertext, aad=bytes(opts.aad)
            )
        else:
            digest = bytes(suite.digest(ciphertext, DEFAULT_HASH_METHOD, raw=True))
            envelope = PlainEnvelope(iv=iv, hash=digest, ciphertext=ciphertext)

        encoded = encode_envelope(
            envelope,
            fmt=self._format,
            wire_id=suite.wire_id,
            output_encoding=opts.output_encoding,
        )
        logger.debug(
            f"Encrypted {len(data)} bytes with {suite.algorithm_name} "
            f"({self._format.value}, ciphertext {len(ciphertext)} bytes)"
        )

        result = EncryptionResult(
            envelope=encoded, iv=iv, ciphertext=ciphertext, hash=digest, tag=tag
        )
        self._local.result = result
        return result
