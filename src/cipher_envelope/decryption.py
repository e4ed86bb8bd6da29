"""
Decryptor: envelope + key -> plaintext.

Состояния одного вызова::

    Received -> Decoded -> HashVerified -> Decrypted
    Received -> MalformedInput                      (MalformedEnvelopeError)
    Received -> Decoded -> HashMismatch             (InvalidHashError)

Any failure is final for that message; nothing is retried and no partial
plaintext is returned. For non-AEAD ciphers the integrity hash is compared in
constant time before the cipher is invoked. The IV extracted from the envelope
is length-checked and passed to the engine explicitly; the suite's stored IV
is left untouched.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from cipher_envelope.config import DEFAULT_HASH_METHOD, EnvelopeFormat, EnvelopeOptions
from cipher_envelope.core.exceptions import (
    CryptoError,
    DecryptionFailedError,
    InvalidHashError,
    InvalidKeyError,
)
from cipher_envelope.core.protocols import TextOrBytes
from cipher_envelope.envelope import AeadEnvelope, PlainEnvelope, decode_envelope
from cipher_envelope.suite import CipherSuite
from cipher_envelope.utils import ensure_bytes, secure_compare

logger = logging.getLogger(__name__)

__all__ = ["Decryptor"]


class Decryptor:
    """
    Дешифратор envelope-протокола.

    Must be configured with the same cipher (and format) that produced the
    envelope. TAGGED envelopes reject a different cipher with
    ``AlgorithmMismatchError``; RAW envelopes cannot detect it.

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

    @property
    def suite(self) -> CipherSuite:
        return self._suite

    @property
    def envelope_format(self) -> EnvelopeFormat:
        return self._format

    def decrypt(
        self,
        envelope: Union[str, bytes],
        key: TextOrBytes,
        options: Optional[EnvelopeOptions] = None,
    ) -> bytes:
        """
        Проверить и расшифровать envelope.

        Returns:
            Plaintext bytes

        Raises:
            MalformedEnvelopeError: base64 не декодируется или envelope короткий
            UnsupportedEnvelopeVersionError: Неизвестный заголовок (TAGGED)
            AlgorithmMismatchError: Envelope другого шифра (TAGGED)
            InvalidHashError: Целостность нарушена (non-AEAD)
            InvalidIVError: IV из envelope неверной длины
            DecryptionFailedError: Движок отклонил ciphertext/key/IV/tag
            InvalidKeyError: key не str/bytes/bytearray или пуст
        """
        opts = options or EnvelopeOptions()
        key_bytes = ensure_bytes(key, InvalidKeyError, "key")
        if not key_bytes:
            raise InvalidKeyError("Key must not be empty")

        suite = self._suite
        decoded = decode_envelope(
            envelope,
            iv_length=suite.iv_length,
            is_authenticated=suite.is_authenticated,
            fmt=self._format,
            wire_id=suite.wire_id,
            tag_length=opts.tag_length,
            output_encoding=opts.output_encoding,
            algorithm=suite.algorithm_name,
        )

        tag = b""
        aad = b""
        if isinstance(decoded, PlainEnvelope):
            self._verify_hash(decoded)
        elif isinstance(decoded, AeadEnvelope):
            tag = decoded.tag
            aad = self._resolve_aad(decoded, bytes(opts.aad))

        iv = suite.validate_iv(decoded.iv)
        try:
            plaintext = suite.engine.decrypt(
                decoded.ciphertext, suite.algorithm_name, key_bytes, iv, tag=tag, aad=aad
            )
        except CryptoError:
            raise
        except Exception as e:
            logger.error(
                f"{suite.algorithm_name} engine failure: {e.__class__.__name__}"
            )
            raise DecryptionFailedError(
                "Cipher engine failed to decrypt", algorithm=suite.algorithm_name
            ) from e

        logger.debug(
            f"Decrypted {len(decoded.ciphertext)} bytes with {suite.algorithm_name}"
        )
        return plaintext

    def _verify_hash(self, envelope: PlainEnvelope) -> None:
        calculated = self._suite.digest(envelope.ciphertext, DEFAULT_HASH_METHOD, raw=True)
        if not secure_compare(bytes(calculated), envelope.hash):
            logger.warning(
                f"Integrity check failed for {self._suite.algorithm_name} envelope "
                f"({len(envelope.ciphertext)} ciphertext bytes)"
            )
            raise InvalidHashError(
                "Envelope hash does not match its ciphertext",
                algorithm=self._suite.algorithm_name,
            )

    def _resolve_aad(self, envelope: AeadEnvelope, supplied: bytes) -> bytes:
        if self._format is not EnvelopeFormat.TAGGED:
            return supplied
        if supplied and not secure_compare(supplied, envelope.aad):
            logger.warning(
                f"AAD supplied for {self._suite.algorithm_name} differs from envelope"
            )
            raise DecryptionFailedError(
                "Supplied AAD does not match the envelope",
                algorithm=self._suite.algorithm_name,
            )
        return envelope.aad
