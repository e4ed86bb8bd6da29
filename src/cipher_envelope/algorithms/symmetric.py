"""
Symmetric cipher catalog (OpenSSL-style names over ``cryptography``).

Реализует все шифры, которые может использовать CipherSuite:

**Non-AEAD (IV + external integrity hash):**
- aes-{128,192,256}-{cbc,ctr} - AES block modes (CBC padded, PKCS#7)
- camellia-{128,192,256}-cbc - Camellia CBC (PKCS#7)
- chacha20 - ChaCha20 stream cipher (16-byte IV: counter || nonce)

**AEAD (IV + authentication tag):**
- aes-{128,192,256}-gcm - AES Galois/Counter Mode, tag 4..16 bytes
- chacha20-poly1305 - RFC 8439
- xchacha20-poly1305 - 24-byte nonce variant (pycryptodome)

**Weak (listed, filtered out of the default availability set):**
- aes-{128,192,256}-ecb - no IV, deterministic

Example:
    >>> from cipher_envelope.algorithms.symmetric import get_algorithm
    >>> cipher = get_algorithm("aes-256-ctr")
    >>> ct, tag = cipher.encrypt(key, iv, b"Secret message")
    >>> cipher.decrypt(key, iv, ct)
    b'Secret message'

Compliance:
    - NIST FIPS 197 (AES)
    - NIST SP 800-38A (CBC, CTR modes)
    - NIST SP 800-38D (GCM mode)
    - RFC 3713 (Camellia)
    - RFC 8439 (ChaCha20, ChaCha20-Poly1305)
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Final, List, Optional, Tuple, cast

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, CipherAlgorithm, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import (
    ChaCha20Poly1305 as ChaCha20Poly1305Impl,
)

# Camellia moved to the decrepit namespace; older releases only have the primitives one
try:
    from cryptography.hazmat.decrepit.ciphers.algorithms import Camellia
except ImportError:
    Camellia = algorithms.Camellia  # type: ignore[misc]

# Pycryptodome (XChaCha20-Poly1305)
try:
    from Crypto.Cipher import ChaCha20_Poly1305 as XChaCha20Impl

    HAS_PYCRYPTODOME = True
except ImportError:
    HAS_PYCRYPTODOME = False

from cipher_envelope.core.exceptions import (
    DecryptionFailedError,
    EncryptionFailedError,
    InvalidParameterError,
)
from cipher_envelope.core.metadata import CipherMetadata, SecurityLevel
from cipher_envelope.core.protocols import SymmetricPrimitiveProtocol

logger = logging.getLogger(__name__)

__all__ = [
    "BlockModeCipher",
    "AESGCMCipher",
    "ChaCha20Cipher",
    "ChaCha20Poly1305Cipher",
    "XChaCha20Poly1305Cipher",
    "ALGORITHMS",
    "ALIASES",
    "ALL_METADATA",
    "MIN_GCM_TAG_LENGTH",
    "MAX_TAG_LENGTH",
    "canonical_name",
    "get_algorithm",
    "get_metadata",
    "is_supported",
]

MIN_GCM_TAG_LENGTH: Final[int] = 4
MAX_TAG_LENGTH: Final[int] = 16

_MODES: Final[Dict[str, Callable[[bytes], modes.Mode]]] = {
    "cbc": modes.CBC,
    "ctr": modes.CTR,
    "ecb": lambda iv: modes.ECB(),
}

_PADDED_MODES: Final[frozenset[str]] = frozenset({"cbc", "ecb"})


# ==============================================================================
# NON-AEAD CIPHERS
# ==============================================================================


class BlockModeCipher:
    """
    Block cipher in a classic (non-authenticated) mode.

    ⚠️  NOT AUTHENTICATED ENCRYPTION: confidentiality only. The envelope adds
    an integrity hash over the ciphertext.

    CBC and ECB use PKCS#7 padding (OpenSSL default); CTR is length-preserving.

    Example:
        >>> cipher = BlockModeCipher(get_metadata("aes-256-cbc"), algorithms.AES, "cbc")
        >>> ct, _ = cipher.encrypt(b"k" * 32, b"i" * 16, b"data")
        >>> len(ct)
        16
    """

    def __init__(
        self,
        metadata: CipherMetadata,
        algorithm: Callable[[bytes], CipherAlgorithm],
        mode: str,
    ) -> None:
        self.metadata = metadata
        self.algorithm_name = metadata.name
        self.key_size = metadata.key_size
        self.iv_size = metadata.iv_size
        self.is_aead = False
        self._algorithm = algorithm
        self._mode = mode
        self._padded = mode in _PADDED_MODES

    def _cipher(self, key: bytes, iv: bytes) -> Cipher:
        return Cipher(self._algorithm(key), _MODES[self._mode](iv))

    def encrypt(
        self,
        key: bytes,
        iv: bytes,
        data: bytes,
        *,
        aad: bytes = b"",
        tag_length: int = MAX_TAG_LENGTH,
    ) -> Tuple[bytes, bytes]:
        """Зашифровать данные (non-AEAD, ``aad`` и ``tag_length`` игнорируются)."""
        try:
            if self._padded:
                padder = padding.PKCS7(self.metadata.block_size * 8).padder()
                data = padder.update(data) + padder.finalize()
            encryptor = self._cipher(key, iv).encryptor()
            ciphertext = encryptor.update(data) + encryptor.finalize()
        except Exception as e:
            raise EncryptionFailedError(
                f"{self.algorithm_name} encryption failed", algorithm=self.algorithm_name
            ) from e
        logger.debug(f"{self.algorithm_name}: Encrypted {len(data)} bytes")
        return ciphertext, b""

    def decrypt(
        self,
        key: bytes,
        iv: bytes,
        data: bytes,
        *,
        tag: bytes = b"",
        aad: bytes = b"",
    ) -> bytes:
        """Расшифровать данные (non-AEAD)."""
        try:
            decryptor = self._cipher(key, iv).decryptor()
            plaintext = decryptor.update(data) + decryptor.finalize()
            if self._padded:
                unpadder = padding.PKCS7(self.metadata.block_size * 8).unpadder()
                plaintext = unpadder.update(plaintext) + unpadder.finalize()
        except Exception as e:
            raise DecryptionFailedError(
                f"{self.algorithm_name} decryption failed: bad key, IV or padding",
                algorithm=self.algorithm_name,
            ) from e
        return plaintext


class ChaCha20Cipher:
    """
    ChaCha20 stream cipher (non-AEAD).

    The 16-byte IV is the OpenSSL layout: 4-byte little-endian block counter
    followed by a 12-byte nonce.
    """

    def __init__(self, metadata: CipherMetadata) -> None:
        self.metadata = metadata
        self.algorithm_name = metadata.name
        self.key_size = metadata.key_size
        self.iv_size = metadata.iv_size
        self.is_aead = False

    def _cipher(self, key: bytes, iv: bytes) -> Cipher:
        return Cipher(algorithms.ChaCha20(key, iv), mode=None)

    def encrypt(
        self,
        key: bytes,
        iv: bytes,
        data: bytes,
        *,
        aad: bytes = b"",
        tag_length: int = MAX_TAG_LENGTH,
    ) -> Tuple[bytes, bytes]:
        try:
            encryptor = self._cipher(key, iv).encryptor()
            return encryptor.update(data) + encryptor.finalize(), b""
        except Exception as e:
            raise EncryptionFailedError(
                "chacha20 encryption failed", algorithm=self.algorithm_name
            ) from e

    def decrypt(
        self,
        key: bytes,
        iv: bytes,
        data: bytes,
        *,
        tag: bytes = b"",
        aad: bytes = b"",
    ) -> bytes:
        try:
            decryptor = self._cipher(key, iv).decryptor()
            return decryptor.update(data) + decryptor.finalize()
        except Exception as e:
            raise DecryptionFailedError(
                "chacha20 decryption failed", algorithm=self.algorithm_name
            ) from e


# ==============================================================================
# AEAD CIPHERS
# ==============================================================================


class AESGCMCipher:
    """
    AES-GCM (Galois/Counter Mode) - AEAD with a truncatable tag.

    Security Properties:
        - Nonce: 96 bits (12 bytes) - MUST be unique per key!
        - Tag: 4..16 bytes (16 recommended)

    Security Warning:
        ⚠️  CRITICAL: Nonce reuse with the same key is catastrophic.
    """

    def __init__(self, metadata: CipherMetadata) -> None:
        self.metadata = metadata
        self.algorithm_name = metadata.name
        self.key_size = metadata.key_size
        self.iv_size = metadata.iv_size
        self.is_aead = True

    def encrypt(
        self,
        key: bytes,
        iv: bytes,
        data: bytes,
        *,
        aad: bytes = b"",
        tag_length: int = MAX_TAG_LENGTH,
    ) -> Tuple[bytes, bytes]:
        """Зашифровать данные с AES-GCM."""
        if not MIN_GCM_TAG_LENGTH <= tag_length <= MAX_TAG_LENGTH:
            raise InvalidParameterError(
                "tag_length",
                f"GCM tag must be {MIN_GCM_TAG_LENGTH}..{MAX_TAG_LENGTH} bytes",
            )
        try:
            encryptor = Cipher(algorithms.AES(key), modes.GCM(iv)).encryptor()
            if aad:
                encryptor.authenticate_additional_data(aad)
            ciphertext = encryptor.update(data) + encryptor.finalize()
            tag = encryptor.tag[:tag_length]
        except Exception as e:
            raise EncryptionFailedError(
                f"{self.algorithm_name} encryption failed", algorithm=self.algorithm_name
            ) from e
        logger.debug(f"{self.algorithm_name}: Encrypted {len(data)} bytes")
        return ciphertext, tag

    def decrypt(
        self,
        key: bytes,
        iv: bytes,
        data: bytes,
        *,
        tag: bytes = b"",
        aad: bytes = b"",
    ) -> bytes:
        """Расшифровать данные с AES-GCM (tag проверяется в finalize)."""
        if not MIN_GCM_TAG_LENGTH <= len(tag) <= MAX_TAG_LENGTH:
            raise DecryptionFailedError(
                "GCM tag is missing or has an invalid length",
                algorithm=self.algorithm_name,
            )
        try:
            decryptor = Cipher(
                algorithms.AES(key), modes.GCM(iv, tag, min_tag_length=len(tag))
            ).decryptor()
            if aad:
                decryptor.authenticate_additional_data(aad)
            return decryptor.update(data) + decryptor.finalize()
        except Exception as e:
            raise DecryptionFailedError(
                f"{self.algorithm_name} decryption failed: invalid tag or key",
                algorithm=self.algorithm_name,
            ) from e


class ChaCha20Poly1305Cipher:
    """ChaCha20-Poly1305 (RFC 8439); the tag is always 16 bytes."""

    def __init__(self, metadata: CipherMetadata) -> None:
        self.metadata = metadata
        self.algorithm_name = metadata.name
        self.key_size = metadata.key_size
        self.iv_size = metadata.iv_size
        self.is_aead = True

    def encrypt(
        self,
        key: bytes,
        iv: bytes,
        data: bytes,
        *,
        aad: bytes = b"",
        tag_length: int = MAX_TAG_LENGTH,
    ) -> Tuple[bytes, bytes]:
        if tag_length != MAX_TAG_LENGTH:
            raise InvalidParameterError("tag_length", "Poly1305 tag is always 16 bytes")
        try:
            combined = ChaCha20Poly1305Impl(key).encrypt(iv, data, aad or None)
        except Exception as e:
            raise EncryptionFailedError(
                "chacha20-poly1305 encryption failed", algorithm=self.algorithm_name
            ) from e
        return combined[:-MAX_TAG_LENGTH], combined[-MAX_TAG_LENGTH:]

    def decrypt(
        self,
        key: bytes,
        iv: bytes,
        data: bytes,
        *,
        tag: bytes = b"",
        aad: bytes = b"",
    ) -> bytes:
        if len(tag) != MAX_TAG_LENGTH:
            raise DecryptionFailedError(
                "Poly1305 tag must be 16 bytes", algorithm=self.algorithm_name
            )
        try:
            return ChaCha20Poly1305Impl(key).decrypt(iv, data + tag, aad or None)
        except Exception as e:
            raise DecryptionFailedError(
                "chacha20-poly1305 decryption failed: invalid tag or key",
                algorithm=self.algorithm_name,
            ) from e


class XChaCha20Poly1305Cipher:
    """
    XChaCha20-Poly1305 - extended 192-bit nonce (pycryptodome).

    Random nonces are safe without a counter: collision risk is negligible.
    """

    def __init__(self, metadata: CipherMetadata) -> None:
        if not HAS_PYCRYPTODOME:
            raise RuntimeError("XChaCha20-Poly1305 requires pycryptodome")
        self.metadata = metadata
        self.algorithm_name = metadata.name
        self.key_size = metadata.key_size
        self.iv_size = metadata.iv_size
        self.is_aead = True

    def encrypt(
        self,
        key: bytes,
        iv: bytes,
        data: bytes,
        *,
        aad: bytes = b"",
        tag_length: int = MAX_TAG_LENGTH,
    ) -> Tuple[bytes, bytes]:
        if tag_length != MAX_TAG_LENGTH:
            raise InvalidParameterError("tag_length", "Poly1305 tag is always 16 bytes")
        try:
            cipher = XChaCha20Impl.new(key=key, nonce=iv)
            if aad:
                cipher.update(aad)
            ciphertext, tag = cipher.encrypt_and_digest(data)
        except Exception as e:
            raise EncryptionFailedError(
                "xchacha20-poly1305 encryption failed", algorithm=self.algorithm_name
            ) from e
        return ciphertext, tag

    def decrypt(
        self,
        key: bytes,
        iv: bytes,
        data: bytes,
        *,
        tag: bytes = b"",
        aad: bytes = b"",
    ) -> bytes:
        if len(tag) != MAX_TAG_LENGTH:
            raise DecryptionFailedError(
                "Poly1305 tag must be 16 bytes", algorithm=self.algorithm_name
            )
        try:
            cipher = XChaCha20Impl.new(key=key, nonce=iv)
            if aad:
                cipher.update(aad)
            return cast(bytes, cipher.decrypt_and_verify(data, tag))
        except Exception as e:
            raise DecryptionFailedError(
                "xchacha20-poly1305 decryption failed: invalid tag or key",
                algorithm=self.algorithm_name,
            ) from e


# ==============================================================================
# METADATA REGISTRY
# ==============================================================================


def _aes_metadata(bits: int, mode: str, wire_id: int) -> CipherMetadata:
    name = f"aes-{bits}-{mode}"
    aliases: Tuple[str, ...] = ()
    if mode == "cbc":
        aliases = (f"aes{bits}",)
    elif mode == "gcm":
        aliases = (f"id-aes{bits}-gcm",)
    return CipherMetadata(
        name=name,
        wire_id=wire_id,
        key_size=bits // 8,
        iv_size={"gcm": 12, "ecb": 0}.get(mode, 16),
        is_aead=mode == "gcm",
        security_level=SecurityLevel.BROKEN if mode == "ecb" else SecurityLevel.STANDARD,
        library="cryptography",
        padded=mode in _PADDED_MODES,
        aliases=aliases,
        description=f"AES-{bits} in {mode.upper()} mode",
    )


_AES_MODE_IDS: Final[Dict[str, int]] = {
    "cbc": 0x01,
    "ctr": 0x02,
    "gcm": 0x03,
    "ecb": 0x04,
}
_AES_KEY_IDS: Final[Dict[int, int]] = {128: 0x10, 192: 0x20, 256: 0x30}

AES_METADATA: List[CipherMetadata] = [
    _aes_metadata(bits, mode, key_id | mode_id)
    for bits, key_id in _AES_KEY_IDS.items()
    for mode, mode_id in _AES_MODE_IDS.items()
]

CAMELLIA_METADATA: List[CipherMetadata] = [
    CipherMetadata(
        name=f"camellia-{bits}-cbc",
        wire_id=0x40 | index,
        key_size=bits // 8,
        iv_size=16,
        is_aead=False,
        security_level=SecurityLevel.STANDARD,
        library="cryptography",
        padded=True,
        aliases=(f"camellia{bits}",),
        description=f"Camellia-{bits} in CBC mode",
    )
    for index, bits in enumerate((128, 192, 256), start=1)
]

CHACHA20_METADATA = CipherMetadata(
    name="chacha20",
    wire_id=0x51,
    key_size=32,
    iv_size=16,
    is_aead=False,
    security_level=SecurityLevel.STANDARD,
    library="cryptography",
    block_size=1,
    description="ChaCha20 stream cipher",
)

CHACHA20_POLY1305_METADATA = CipherMetadata(
    name="chacha20-poly1305",
    wire_id=0x52,
    key_size=32,
    iv_size=12,
    is_aead=True,
    security_level=SecurityLevel.STANDARD,
    library="cryptography",
    block_size=1,
    description="ChaCha20-Poly1305 AEAD (RFC 8439)",
)

XCHACHA20_POLY1305_METADATA = CipherMetadata(
    name="xchacha20-poly1305",
    wire_id=0x53,
    key_size=32,
    iv_size=24,
    is_aead=True,
    security_level=SecurityLevel.HIGH,
    library="pycryptodome",
    block_size=1,
    description="XChaCha20-Poly1305 AEAD with 192-bit nonce",
)

ALL_METADATA: List[CipherMetadata] = [
    *AES_METADATA,
    *CAMELLIA_METADATA,
    CHACHA20_METADATA,
    CHACHA20_POLY1305_METADATA,
    XCHACHA20_POLY1305_METADATA,
]

_METADATA_BY_NAME: Final[Dict[str, CipherMetadata]] = {m.name: m for m in ALL_METADATA}

assert len(_METADATA_BY_NAME) == len(ALL_METADATA), "Duplicate cipher names"
assert len({m.wire_id for m in ALL_METADATA}) == len(ALL_METADATA), "Duplicate wire ids"

ALIASES: Final[Dict[str, str]] = {
    alias: m.name for m in ALL_METADATA for alias in m.aliases
}


# ==============================================================================
# ALGORITHM REGISTRY & HELPERS
# ==============================================================================


def _block_factory(
    name: str, algorithm: Callable[[bytes], CipherAlgorithm]
) -> Callable[[], SymmetricPrimitiveProtocol]:
    mode = name.rsplit("-", 1)[1]
    return lambda: BlockModeCipher(_METADATA_BY_NAME[name], algorithm, mode)


def _gcm_factory(name: str) -> Callable[[], SymmetricPrimitiveProtocol]:
    return lambda: AESGCMCipher(_METADATA_BY_NAME[name])


ALGORITHMS: Dict[str, Callable[[], SymmetricPrimitiveProtocol]] = {}
for _meta in AES_METADATA:
    if _meta.is_aead:
        ALGORITHMS[_meta.name] = _gcm_factory(_meta.name)
    else:
        ALGORITHMS[_meta.name] = _block_factory(_meta.name, algorithms.AES)
for _meta in CAMELLIA_METADATA:
    ALGORITHMS[_meta.name] = _block_factory(_meta.name, Camellia)
ALGORITHMS["chacha20"] = lambda: ChaCha20Cipher(CHACHA20_METADATA)
ALGORITHMS["chacha20-poly1305"] = lambda: ChaCha20Poly1305Cipher(
    CHACHA20_POLY1305_METADATA
)
ALGORITHMS["xchacha20-poly1305"] = lambda: XChaCha20Poly1305Cipher(
    XCHACHA20_POLY1305_METADATA
)

assert set(ALGORITHMS) == set(_METADATA_BY_NAME), "Catalog and registry diverged"

_SUPPORT_CACHE: Dict[str, bool] = {}


def canonical_name(name: str) -> Optional[str]:
    """
    Привести имя шифра или его алиас к каноническому виду.

    Returns:
        Каноническое имя или None, если шифр неизвестен

    Example:
        >>> canonical_name("AES256")
        'aes-256-cbc'
    """
    lowered = name.strip().lower()
    if lowered in _METADATA_BY_NAME:
        return lowered
    return ALIASES.get(lowered)


def get_metadata(name: str) -> CipherMetadata:
    """
    Получить метаданные шифра по имени или алиасу.

    Raises:
        KeyError: Если шифр не найден
    """
    canonical = canonical_name(name)
    if canonical is None:
        raise KeyError(
            f"Cipher '{name}' not found. Available: {sorted(_METADATA_BY_NAME)}"
        )
    return _METADATA_BY_NAME[canonical]


def get_algorithm(name: str) -> SymmetricPrimitiveProtocol:
    """
    Получить экземпляр примитива по имени.

    Raises:
        KeyError: Если шифр не найден
        RuntimeError: Если библиотека примитива не установлена

    Example:
        >>> cipher = get_algorithm("aes-256-gcm")
        >>> cipher.iv_size
        12
    """
    metadata = get_metadata(name)
    try:
        return ALGORITHMS[metadata.name]()
    except RuntimeError as e:
        raise RuntimeError(
            f"Cannot initialize '{metadata.name}': {e}. Install required library."
        ) from e


def is_supported(name: str) -> bool:
    """
    Проверить, что примитив реально работает на этой платформе.

    Runs one probe encryption per cipher (cached). Some OpenSSL builds ship
    without Camellia or ChaCha20, and XChaCha20 needs pycryptodome.
    """
    metadata = get_metadata(name)
    cached = _SUPPORT_CACHE.get(metadata.name)
    if cached is not None:
        return cached

    try:
        cipher = get_algorithm(metadata.name)
        cipher.encrypt(bytes(metadata.key_size), b"\x01" * metadata.iv_size, b"probe")
        supported = True
    except (RuntimeError, UnsupportedAlgorithm, EncryptionFailedError) as e:
        logger.info(f"Cipher {metadata.name} unavailable on this platform: {e}")
        supported = False

    _SUPPORT_CACHE[metadata.name] = supported
    return supported


logger.debug(f"Loaded {len(ALL_METADATA)} symmetric cipher metadata objects")
