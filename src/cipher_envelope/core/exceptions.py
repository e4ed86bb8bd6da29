"""
Централизованные исключения пакета cipher_envelope.

EN: Typed exception hierarchy for the envelope protocol. Every failure of the
cipher suite, the envelope codec, the encryptor and the decryptor surfaces as a
subclass of :class:`CryptoError`, so callers can catch the whole family through
one type or handle a narrow case (tampering, malformed input, missing cipher).

Иерархия:
    CryptoError (базовое)
    ├── AlgorithmError
    │   ├── CipherUnavailableError
    │   └── AlgorithmMismatchError
    ├── HashError
    │   ├── DigestUnavailableError
    │   ├── DigestComputationError
    │   └── InvalidHashError
    ├── EncryptionError
    │   ├── EncryptionFailedError
    │   └── InvalidIVError
    ├── DecryptionError
    │   └── DecryptionFailedError
    ├── EnvelopeError
    │   └── MalformedEnvelopeError
    │       └── UnsupportedEnvelopeVersionError
    └── ValidationError
        ├── InvalidPlaintextError
        ├── InvalidKeyError
        └── InvalidParameterError

Security Note:
    Messages and context never carry keys, IVs, tags, hashes or plaintext.
    Only algorithm names, lengths and operation names are allowed.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

__all__: list[str] = [
    # Base exception
    "CryptoError",
    # Algorithm errors
    "AlgorithmError",
    "CipherUnavailableError",
    "AlgorithmMismatchError",
    # Hash errors
    "HashError",
    "DigestUnavailableError",
    "DigestComputationError",
    "InvalidHashError",
    # Encryption errors
    "EncryptionError",
    "EncryptionFailedError",
    "InvalidIVError",
    # Decryption errors
    "DecryptionError",
    "DecryptionFailedError",
    # Envelope errors
    "EnvelopeError",
    "MalformedEnvelopeError",
    "UnsupportedEnvelopeVersionError",
    # Validation errors
    "ValidationError",
    "InvalidPlaintextError",
    "InvalidKeyError",
    "InvalidParameterError",
    # Short names
    "CipherUnavailable",
    "DigestUnavailable",
    "DigestComputationFailed",
    "InvalidIV",
    "MalformedEnvelope",
    "InvalidHash",
    "DecryptionFailed",
    "InvalidPlaintext",
    "InvalidKeyOrData",
]


# ==============================================================================
# BASE EXCEPTION
# ==============================================================================


class CryptoError(Exception):
    """
    Базовое исключение для всех ошибок envelope-протокола.

    Attributes:
        message: Человекочитаемое сообщение об ошибке
        algorithm: Имя алгоритма, вызвавшего ошибку (опционально)
        context: Дополнительный контекст без секретов (опционально)

    Example:
        >>> try:
        ...     decryptor.decrypt(blob, key)
        ... except CryptoError as e:
        ...     logger.error("Envelope rejected: %s", e)
    """

    def __init__(
        self,
        message: str,
        *,
        algorithm: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.algorithm = algorithm
        self.context = context or {}

    def __str__(self) -> str:
        """
        Строковое представление исключения.

        Example:
            >>> str(CipherUnavailableError("Cipher is not available", algorithm="rc4"))
            'CipherUnavailableError: Cipher is not available [algorithm=rc4]'
        """
        parts = [self.__class__.__name__, ": ", self.message]

        if self.algorithm:
            parts.append(f" [algorithm={self.algorithm}]")

        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f" ({ctx_str})")

        return "".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"algorithm={self.algorithm!r}, "
            f"context={self.context!r})"
        )


# ==============================================================================
# ALGORITHM ERRORS
# ==============================================================================


class AlgorithmError(CryptoError):
    """Ошибки выбора или конфигурации алгоритма."""


class CipherUnavailableError(AlgorithmError):
    """
    Запрошенный шифр не поддерживается движком.

    Non-recoverable: the caller must pick a different algorithm.
    """

    def __init__(self, algorithm: str, *, reason: Optional[str] = None) -> None:
        context = {"reason": reason} if reason else None
        super().__init__(
            f"Cipher '{algorithm}' is not available",
            algorithm=algorithm,
            context=context,
        )


class AlgorithmMismatchError(AlgorithmError):
    """
    Envelope был создан другим алгоритмом, чем настроенный CipherSuite.

    Raised only for self-describing (tagged) envelopes, which carry the
    algorithm wire id.
    """

    def __init__(self, expected: str, actual_wire_id: int) -> None:
        super().__init__(
            "Envelope was produced by a different cipher",
            algorithm=expected,
            context={"envelope_wire_id": actual_wire_id},
        )
        self.expected = expected
        self.actual_wire_id = actual_wire_id


# ==============================================================================
# HASH ERRORS
# ==============================================================================


class HashError(CryptoError):
    """Ошибки вычисления или проверки дайджеста."""


class DigestUnavailableError(HashError):
    """Запрошенный алгоритм дайджеста не поддерживается."""

    def __init__(self, algorithm: str) -> None:
        super().__init__(f"Digest '{algorithm}' is not available", algorithm=algorithm)


class DigestComputationError(HashError):
    """Движок не смог вычислить дайджест."""


class InvalidHashError(HashError):
    """
    Проверка целостности не пройдена.

    Security-relevant: the envelope was corrupted or tampered with. Plaintext
    is never returned on this path.
    """


# ==============================================================================
# ENCRYPTION / DECRYPTION ERRORS
# ==============================================================================


class EncryptionError(CryptoError):
    """Базовая ошибка шифрования."""


class EncryptionFailedError(EncryptionError):
    """Примитив шифрования отклонил входные данные."""


class InvalidIVError(EncryptionError):
    """
    IV отсутствует или имеет неверную длину.

    Example:
        >>> raise InvalidIVError("IV must be 16 bytes", algorithm="aes-256-ctr")
    """


class DecryptionError(CryptoError):
    """Базовая ошибка расшифровки."""


class DecryptionFailedError(DecryptionError):
    """
    Примитив расшифровки отклонил ciphertext/key/IV.

    Includes authentication tag mismatches of AEAD ciphers and padding
    failures of block modes.
    """


# ==============================================================================
# ENVELOPE ERRORS
# ==============================================================================


class EnvelopeError(CryptoError):
    """Базовая ошибка формата envelope."""


class MalformedEnvelopeError(EnvelopeError):
    """
    Envelope не декодируется или короче минимально допустимой длины.

    Attributes:
        expected_min: Минимальная длина в байтах (если известна)
        actual: Фактическая длина в байтах (если известна)
    """

    def __init__(
        self,
        message: str,
        *,
        expected_min: Optional[int] = None,
        actual: Optional[int] = None,
        algorithm: Optional[str] = None,
    ) -> None:
        context: Dict[str, Any] = {}
        if expected_min is not None:
            context["expected_min"] = expected_min
        if actual is not None:
            context["actual"] = actual
        super().__init__(message, algorithm=algorithm, context=context)
        self.expected_min = expected_min
        self.actual = actual


class UnsupportedEnvelopeVersionError(MalformedEnvelopeError):
    """Неизвестная версия формата или отсутствует magic-заголовок."""


# ==============================================================================
# VALIDATION ERRORS
# ==============================================================================


class ValidationError(CryptoError):
    """Ошибки валидации входных параметров."""


class InvalidPlaintextError(ValidationError):
    """Plaintext не является bytes, bytearray или str."""


class InvalidKeyError(ValidationError):
    """Ключ не является bytes, bytearray или str, либо пуст."""


class InvalidParameterError(ValidationError):
    """
    Некорректный параметр (длина тега, кодировка вывода и т.д.).

    Attributes:
        parameter_name: Имя параметра
    """

    def __init__(self, parameter_name: str, reason: str) -> None:
        super().__init__(
            f"Invalid parameter '{parameter_name}': {reason}",
            context={"parameter": parameter_name},
        )
        self.parameter_name = parameter_name
        self.reason = reason


# ==============================================================================
# SHORT NAMES
# ==============================================================================

CipherUnavailable = CipherUnavailableError
DigestUnavailable = DigestUnavailableError
DigestComputationFailed = DigestComputationError
InvalidIV = InvalidIVError
MalformedEnvelope = MalformedEnvelopeError
InvalidHash = InvalidHashError
DecryptionFailed = DecryptionFailedError
InvalidPlaintext = InvalidPlaintextError
InvalidKeyOrData = InvalidKeyError
