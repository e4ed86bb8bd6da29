"""
Digest algorithms available to the cipher suite.

Этот модуль содержит хеш-алгоритмы для проверки целостности envelope:
- SHA-2: sha224, sha256, sha384, sha512 (NIST FIPS 180-4)
- SHA-3: sha3-256, sha3-512 (NIST FIPS 202)
- BLAKE: blake2b512, blake2s256 (RFC 7693), blake3
- Legacy: sha1, md5 (listed for compatibility, never the default)

The envelope integrity hash is always ``sha256`` (32 bytes). Other digests are
reachable through ``CipherSuite.digest`` for callers that fingerprint data.

Example:
    >>> from cipher_envelope.algorithms.hashing import get_digest
    >>> get_digest("sha256").hash(b"Hello, World!").hex()[:16]
    'dffd6021bb2bd5b0'
"""

from __future__ import annotations

import hashlib
import logging
from typing import Callable, Dict, Final, List, Optional

from cipher_envelope.core.exceptions import DigestComputationError
from cipher_envelope.core.metadata import DigestMetadata, SecurityLevel
from cipher_envelope.core.protocols import DigestProtocol

logger = logging.getLogger(__name__)

__all__ = [
    "Blake3Digest",
    "DIGESTS",
    "DIGEST_ALIASES",
    "ALL_DIGEST_METADATA",
    "canonical_digest_name",
    "get_digest",
    "is_digest_supported",
]


# ==============================================================================
# BASE CLASS FOR STDLIB HASHES
# ==============================================================================


class _StdlibDigest:
    """
    Базовый класс для дайджестов из hashlib.

    Attributes:
        _HASHLIB_NAME: Имя алгоритма для hashlib.new()
        algorithm_name: Каноническое имя алгоритма
        digest_size: Размер дайджеста в байтах
    """

    def __init__(self, metadata: DigestMetadata, hashlib_name: str) -> None:
        self.metadata = metadata
        self.algorithm_name = metadata.name
        self.digest_size = metadata.digest_size
        self._HASHLIB_NAME = hashlib_name

    def hash(self, data: bytes) -> bytes:
        """
        Хешировать данные (one-shot).

        Empty input is valid: an empty plaintext encrypted with a stream mode
        yields an empty ciphertext whose digest still guards the envelope.

        Raises:
            DigestComputationError: Если hashlib отказал
        """
        try:
            hasher = hashlib.new(self._HASHLIB_NAME)
            hasher.update(data)
            return hasher.digest()
        except Exception as exc:
            logger.error(
                f"{self.algorithm_name} hashing failed for {len(data)} bytes: "
                f"{exc.__class__.__name__}"
            )
            raise DigestComputationError(
                f"{self.algorithm_name} hashing failed", algorithm=self.algorithm_name
            ) from exc


class Blake3Digest:
    """
    BLAKE3 (2020) - parallelizable 256-bit digest.

    Требует установки библиотеки blake3:
        pip install blake3
    """

    def __init__(self, metadata: DigestMetadata) -> None:
        self.metadata = metadata
        self.algorithm_name = metadata.name
        self.digest_size = metadata.digest_size

    def hash(self, data: bytes) -> bytes:
        try:
            import blake3

            return bytes(blake3.blake3(data).digest())
        except ImportError as exc:
            raise DigestComputationError(
                "blake3 library not installed", algorithm="blake3"
            ) from exc
        except Exception as exc:
            raise DigestComputationError(
                "blake3 hashing failed", algorithm="blake3"
            ) from exc


# ==============================================================================
# METADATA REGISTRY
# ==============================================================================

_STDLIB_DIGESTS: Final[Dict[str, tuple]] = {
    # name: (hashlib name, size, level, aliases)
    "md5": ("md5", 16, SecurityLevel.BROKEN, ("MD5",)),
    "sha1": ("sha1", 20, SecurityLevel.LEGACY, ("SHA1", "sha-1")),
    "sha224": ("sha224", 28, SecurityLevel.STANDARD, ("SHA224", "sha-224")),
    "sha256": ("sha256", 32, SecurityLevel.STANDARD, ("SHA256", "sha-256")),
    "sha384": ("sha384", 48, SecurityLevel.HIGH, ("SHA384", "sha-384")),
    "sha512": ("sha512", 64, SecurityLevel.HIGH, ("SHA512", "sha-512")),
    "sha3-256": ("sha3_256", 32, SecurityLevel.STANDARD, ("SHA3-256",)),
    "sha3-512": ("sha3_512", 64, SecurityLevel.HIGH, ("SHA3-512",)),
    "blake2b512": ("blake2b", 64, SecurityLevel.HIGH, ("BLAKE2b512",)),
    "blake2s256": ("blake2s", 32, SecurityLevel.STANDARD, ("BLAKE2s256",)),
}

ALL_DIGEST_METADATA: List[DigestMetadata] = [
    DigestMetadata(
        name=name, digest_size=size, security_level=level, aliases=aliases
    )
    for name, (_, size, level, aliases) in _STDLIB_DIGESTS.items()
]
ALL_DIGEST_METADATA.append(
    DigestMetadata(
        name="blake3",
        digest_size=32,
        security_level=SecurityLevel.HIGH,
        library="blake3",
        aliases=("BLAKE3",),
    )
)

_DIGEST_METADATA_BY_NAME: Final[Dict[str, DigestMetadata]] = {
    m.name: m for m in ALL_DIGEST_METADATA
}

DIGEST_ALIASES: Final[Dict[str, str]] = {
    alias: m.name for m in ALL_DIGEST_METADATA for alias in m.aliases
}


def _stdlib_factory(name: str) -> Callable[[], DigestProtocol]:
    hashlib_name = _STDLIB_DIGESTS[name][0]
    return lambda: _StdlibDigest(_DIGEST_METADATA_BY_NAME[name], hashlib_name)


DIGESTS: Dict[str, Callable[[], DigestProtocol]] = {
    name: _stdlib_factory(name) for name in _STDLIB_DIGESTS
}
DIGESTS["blake3"] = lambda: Blake3Digest(_DIGEST_METADATA_BY_NAME["blake3"])


def canonical_digest_name(name: str) -> Optional[str]:
    """Каноническое имя дайджеста или None, если алгоритм неизвестен."""
    if name in _DIGEST_METADATA_BY_NAME:
        return name
    if name in DIGEST_ALIASES:
        return DIGEST_ALIASES[name]
    lowered = name.strip().lower()
    if lowered in _DIGEST_METADATA_BY_NAME:
        return lowered
    return DIGEST_ALIASES.get(lowered)


def get_digest(name: str) -> DigestProtocol:
    """
    Получить экземпляр дайджеста по имени или алиасу.

    Raises:
        KeyError: Если алгоритм не найден
    """
    canonical = canonical_digest_name(name)
    if canonical is None:
        raise KeyError(f"Digest '{name}' not found. Available: {sorted(DIGESTS)}")
    return DIGESTS[canonical]()


def is_digest_supported(name: str) -> bool:
    """True если дайджест известен и его библиотека доступна на платформе."""
    canonical = canonical_digest_name(name)
    if canonical is None:
        return False
    if canonical == "blake3":
        try:
            import blake3  # noqa: F401
        except ImportError:
            return False
        return True
    return _STDLIB_DIGESTS[canonical][0] in hashlib.algorithms_available
