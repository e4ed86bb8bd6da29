"""
Envelope codec: IV, integrity material and ciphertext in one blob.

Два варианта envelope:
    PlainEnvelope  - non-AEAD шифры: IV + SHA-256(ciphertext) + ciphertext
    AeadEnvelope   - AEAD шифры: IV + tag + ciphertext (+ AAD)

Два формата на проводе (:class:`EnvelopeFormat`):

RAW (positional, no header)::

    plain: IV (iv_length) || hash (32) || ciphertext
    aead:  IV (iv_length) || tag (tag_length) || ciphertext

TAGGED (self-describing)::

    "CE" || version (1) || wire id (1) || variant (1) || body
    plain body: IV || hash (32) || ciphertext
    aead body:  IV || tag_len (1) || tag || aad_len (uint16 BE) || aad || ciphertext

The RAW layout carries no algorithm or length information: the decoder must
be configured with the cipher that produced the blob. AAD is not embedded in
RAW AEAD envelopes and has to be supplied again on decryption.

Example:
    >>> blob = encode(b"\\x00" * 16, b"\\x11" * 32, b"ct")
    >>> decode(blob, 16)[2]
    b'ct'
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import Final, Optional, Tuple, Union

from cipher_envelope.config import (
    DEFAULT_HASH_LENGTH,
    DEFAULT_TAG_LENGTH,
    EnvelopeFormat,
)
from cipher_envelope.core.exceptions import (
    AlgorithmMismatchError,
    InvalidParameterError,
    MalformedEnvelopeError,
    UnsupportedEnvelopeVersionError,
)
from cipher_envelope.utils import b64_decode, b64_encode

logger = logging.getLogger(__name__)

__all__ = [
    "ENVELOPE_MAGIC",
    "ENVELOPE_VERSION",
    "AeadEnvelope",
    "Envelope",
    "PlainEnvelope",
    "decode",
    "decode_envelope",
    "encode",
    "encode_envelope",
]

ENVELOPE_MAGIC: Final[bytes] = b"CE"
ENVELOPE_VERSION: Final[int] = 1
VARIANT_PLAIN: Final[int] = 0
VARIANT_AEAD: Final[int] = 1

_HEADER: Final = struct.Struct(">2sBBB")
_AAD_LEN: Final = struct.Struct(">H")


# ==============================================================================
# ENVELOPE VARIANTS
# ==============================================================================


@dataclass(frozen=True)
class PlainEnvelope:
    """
    Envelope non-AEAD шифра.

    Attributes:
        iv: IV, использованный при шифровании
        hash: SHA-256 дайджест ciphertext (32 байта)
        ciphertext: Зашифрованные данные
    """

    iv: bytes
    hash: bytes
    ciphertext: bytes


@dataclass(frozen=True)
class AeadEnvelope:
    """
    Envelope AEAD шифра.

    Attributes:
        iv: Nonce/IV
        tag: Authentication tag
        ciphertext: Зашифрованные данные (без tag)
        aad: Additional authenticated data (не зашифрованы)
    """

    iv: bytes
    tag: bytes
    ciphertext: bytes
    aad: bytes = b""


Envelope = Union[PlainEnvelope, AeadEnvelope]


# ==============================================================================
# RAW NON-AEAD TRANSFORMS
# ==============================================================================


def encode(iv: bytes, hash: bytes, ciphertext: bytes) -> str:
    """Base64 of ``iv || hash || ciphertext``."""
    return b64_encode(bytes(iv) + bytes(hash) + bytes(ciphertext))


def decode(blob: Union[str, bytes], iv_length: int) -> Tuple[bytes, bytes, bytes]:
    """
    Split a base64 RAW envelope into ``(iv, hash, ciphertext)``.

    Raises:
        MalformedEnvelopeError: invalid base64 or fewer than
            ``iv_length + 32`` decoded bytes.
    """
    envelope = _split_plain(b64_decode(blob), iv_length)
    return envelope.iv, envelope.hash, envelope.ciphertext


def _require(data: bytes, minimum: int, what: str) -> None:
    if len(data) < minimum:
        raise MalformedEnvelopeError(
            f"{what} is too short", expected_min=minimum, actual=len(data)
        )


def _split_plain(data: bytes, iv_length: int) -> PlainEnvelope:
    hash_end = iv_length + DEFAULT_HASH_LENGTH
    _require(data, hash_end, "Envelope")
    return PlainEnvelope(
        iv=data[:iv_length],
        hash=data[iv_length:hash_end],
        ciphertext=data[hash_end:],
    )


# ==============================================================================
# SERIALIZATION
# ==============================================================================


def _serialize_raw(envelope: Envelope) -> bytes:
    if isinstance(envelope, PlainEnvelope):
        return envelope.iv + envelope.hash + envelope.ciphertext
    return envelope.iv + envelope.tag + envelope.ciphertext


def _serialize_tagged(envelope: Envelope, wire_id: int) -> bytes:
    if isinstance(envelope, PlainEnvelope):
        header = _HEADER.pack(ENVELOPE_MAGIC, ENVELOPE_VERSION, wire_id, VARIANT_PLAIN)
        return header + envelope.iv + envelope.hash + envelope.ciphertext

    if len(envelope.aad) > 0xFFFF:
        raise InvalidParameterError("aad", "must be at most 65535 bytes")
    header = _HEADER.pack(ENVELOPE_MAGIC, ENVELOPE_VERSION, wire_id, VARIANT_AEAD)
    return b"".join(
        (
            header,
            envelope.iv,
            bytes([len(envelope.tag)]),
            envelope.tag,
            _AAD_LEN.pack(len(envelope.aad)),
            envelope.aad,
            envelope.ciphertext,
        )
    )


def encode_envelope(
    envelope: Envelope,
    *,
    fmt: EnvelopeFormat = EnvelopeFormat.RAW,
    wire_id: Optional[int] = None,
    output_encoding: str = "base64",
) -> Union[str, bytes]:
    """
    Сериализовать envelope.

    Args:
        envelope: PlainEnvelope или AeadEnvelope
        fmt: RAW или TAGGED
        wire_id: Идентификатор шифра (обязателен для TAGGED)
        output_encoding: "base64" (str) или "raw" (bytes)

    Raises:
        InvalidParameterError: TAGGED без wire_id, неизвестная кодировка
    """
    if fmt is EnvelopeFormat.TAGGED:
        if wire_id is None:
            raise InvalidParameterError("wire_id", "required for tagged envelopes")
        data = _serialize_tagged(envelope, wire_id)
    else:
        data = _serialize_raw(envelope)

    if output_encoding == "raw":
        return data
    if output_encoding == "base64":
        return b64_encode(data)
    raise InvalidParameterError("output_encoding", "must be 'base64' or 'raw'")


# ==============================================================================
# DESERIALIZATION
# ==============================================================================


def _to_data(blob: Union[str, bytes, bytearray], output_encoding: str) -> bytes:
    if output_encoding == "base64":
        return b64_decode(blob)
    if output_encoding == "raw":
        if not isinstance(blob, (bytes, bytearray)):
            raise MalformedEnvelopeError("Raw envelope must be bytes")
        return bytes(blob)
    raise InvalidParameterError("output_encoding", "must be 'base64' or 'raw'")


def _parse_raw(
    data: bytes, iv_length: int, is_authenticated: bool, tag_length: int
) -> Envelope:
    if not is_authenticated:
        return _split_plain(data, iv_length)
    tag_end = iv_length + tag_length
    _require(data, tag_end, "Envelope")
    return AeadEnvelope(
        iv=data[:iv_length], tag=data[iv_length:tag_end], ciphertext=data[tag_end:]
    )


def _parse_aead_body(body: bytes, iv_length: int) -> AeadEnvelope:
    offset = iv_length + 1
    _require(body, offset, "Envelope body")
    tag_len = body[iv_length]
    tag_end = offset + tag_len
    _require(body, tag_end + _AAD_LEN.size, "Envelope body")
    (aad_len,) = _AAD_LEN.unpack_from(body, tag_end)
    aad_start = tag_end + _AAD_LEN.size
    aad_end = aad_start + aad_len
    _require(body, aad_end, "Envelope body")
    return AeadEnvelope(
        iv=body[:iv_length],
        tag=body[offset:tag_end],
        aad=body[aad_start:aad_end],
        ciphertext=body[aad_end:],
    )


def _parse_tagged(
    data: bytes,
    iv_length: int,
    is_authenticated: bool,
    wire_id: Optional[int],
    algorithm: Optional[str],
) -> Envelope:
    _require(data, _HEADER.size, "Envelope header")
    magic, version, actual_id, variant = _HEADER.unpack_from(data)
    if magic != ENVELOPE_MAGIC:
        raise UnsupportedEnvelopeVersionError(
            "Envelope header is missing", algorithm=algorithm
        )
    if version != ENVELOPE_VERSION:
        raise UnsupportedEnvelopeVersionError(
            f"Unsupported envelope version {version}", algorithm=algorithm
        )
    if wire_id is not None and actual_id != wire_id:
        raise AlgorithmMismatchError(algorithm or str(wire_id), actual_id)

    expected_variant = VARIANT_AEAD if is_authenticated else VARIANT_PLAIN
    if variant != expected_variant:
        raise MalformedEnvelopeError(
            f"Envelope variant {variant} does not match the cipher", algorithm=algorithm
        )

    body = data[_HEADER.size :]
    if variant == VARIANT_AEAD:
        return _parse_aead_body(body, iv_length)
    return _split_plain(body, iv_length)


def decode_envelope(
    blob: Union[str, bytes, bytearray],
    *,
    iv_length: int,
    is_authenticated: bool,
    fmt: EnvelopeFormat = EnvelopeFormat.RAW,
    wire_id: Optional[int] = None,
    tag_length: int = DEFAULT_TAG_LENGTH,
    output_encoding: str = "base64",
    algorithm: Optional[str] = None,
) -> Envelope:
    """
    Разобрать envelope.

    Args:
        blob: Закодированный envelope
        iv_length: Длина IV настроенного шифра
        is_authenticated: Настроенный шифр является AEAD
        fmt: RAW или TAGGED
        wire_id: Ожидаемый идентификатор шифра (TAGGED)
        tag_length: Длина tag (только RAW AEAD; TAGGED хранит её в envelope)
        output_encoding: Кодировка blob ("base64" или "raw")
        algorithm: Имя шифра для сообщений об ошибках

    Raises:
        MalformedEnvelopeError: Не декодируется или слишком короткий
        UnsupportedEnvelopeVersionError: Нет magic или неизвестная версия
        AlgorithmMismatchError: Envelope создан другим шифром
    """
    data = _to_data(blob, output_encoding)
    if fmt is EnvelopeFormat.TAGGED:
        envelope = _parse_tagged(data, iv_length, is_authenticated, wire_id, algorithm)
    else:
        envelope = _parse_raw(data, iv_length, is_authenticated, tag_length)
    logger.debug(
        f"Decoded {fmt.value} envelope: {len(data)} bytes, "
        f"ciphertext {len(envelope.ciphertext)} bytes"
    )
    return envelope
