"""
Envelope-шифрование: IV, контроль целостности и ciphertext в одном blob.
EN: Symmetric encryption envelope protocol. A cipher primitive is wrapped with
IV management and integrity protection into one transportable blob.
"""

from .config import (
    DEFAULT_CIPHER,
    DEFAULT_CIPHER_LEGACY,
    DEFAULT_HASH_LENGTH,
    DEFAULT_HASH_METHOD,
    DEFAULT_TAG_LENGTH,
    EnvelopeConfig,
    EnvelopeFormat,
    EnvelopeOptions,
    EnvelopeProfile,
)
from .core.exceptions import (
    AlgorithmMismatchError,
    CipherUnavailableError,
    CryptoError,
    DecryptionFailedError,
    DigestComputationError,
    DigestUnavailableError,
    EncryptionFailedError,
    InvalidHashError,
    InvalidIVError,
    InvalidKeyError,
    InvalidParameterError,
    InvalidPlaintextError,
    MalformedEnvelopeError,
    UnsupportedEnvelopeVersionError,
)
from .decryption import Decryptor
from .encryption import EncryptionResult, Encryptor
from .engine import CryptographyEngine
from .envelope import AeadEnvelope, PlainEnvelope, decode, encode
from .service import EnvelopeService, create_pair
from .suite import CipherSuite

__version__ = "1.0.0"

__all__ = [
    # Defaults
    "DEFAULT_CIPHER",
    "DEFAULT_CIPHER_LEGACY",
    "DEFAULT_HASH_LENGTH",
    "DEFAULT_HASH_METHOD",
    "DEFAULT_TAG_LENGTH",
    # Configuration
    "EnvelopeConfig",
    "EnvelopeFormat",
    "EnvelopeOptions",
    "EnvelopeProfile",
    # Core
    "CipherSuite",
    "CryptographyEngine",
    "Encryptor",
    "EncryptionResult",
    "Decryptor",
    "EnvelopeService",
    "create_pair",
    # Codec
    "AeadEnvelope",
    "PlainEnvelope",
    "encode",
    "decode",
    # Errors
    "CryptoError",
    "AlgorithmMismatchError",
    "CipherUnavailableError",
    "DecryptionFailedError",
    "DigestComputationError",
    "DigestUnavailableError",
    "EncryptionFailedError",
    "InvalidHashError",
    "InvalidIVError",
    "InvalidKeyError",
    "InvalidParameterError",
    "InvalidPlaintextError",
    "MalformedEnvelopeError",
    "UnsupportedEnvelopeVersionError",
]
