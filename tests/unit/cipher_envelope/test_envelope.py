"""Tests for the envelope codec (RAW and TAGGED layouts)."""

from __future__ import annotations

import base64

import pytest

from cipher_envelope.config import EnvelopeFormat
from cipher_envelope.core.exceptions import (
    AlgorithmMismatchError,
    InvalidParameterError,
    MalformedEnvelopeError,
    UnsupportedEnvelopeVersionError,
)
from cipher_envelope.envelope import (
    ENVELOPE_MAGIC,
    ENVELOPE_VERSION,
    AeadEnvelope,
    PlainEnvelope,
    decode,
    decode_envelope,
    encode,
    encode_envelope,
)

IV16 = bytes(range(16))
HASH = b"\xaa" * 32
IV12 = bytes(range(12))
TAG = b"\xbb" * 16


# ==============================================================================
# RAW NON-AEAD TRANSFORMS
# ==============================================================================


class TestEncodeDecode:
    def test_layout(self) -> None:
        blob = encode(IV16, HASH, b"ciphertext")

        assert base64.b64decode(blob) == IV16 + HASH + b"ciphertext"

    def test_decode_slices(self) -> None:
        iv, digest, ciphertext = decode(encode(IV16, HASH, b"ct"), 16)

        assert (iv, digest, ciphertext) == (IV16, HASH, b"ct")

    def test_empty_ciphertext(self) -> None:
        blob = encode(IV16, HASH, b"")

        assert decode(blob, 16) == (IV16, HASH, b"")

    @pytest.mark.parametrize("length", [0, 1, 16, 47])
    def test_short_input(self, length: int) -> None:
        blob = base64.b64encode(b"\x00" * length).decode("ascii")

        with pytest.raises(MalformedEnvelopeError) as exc_info:
            decode(blob, 16)
        assert exc_info.value.expected_min == 48
        assert exc_info.value.actual == length

    def test_invalid_base64(self) -> None:
        with pytest.raises(MalformedEnvelopeError):
            decode("%%% not base64 %%%", 16)


# ==============================================================================
# RAW FORMAT
# ==============================================================================


class TestRawFormat:
    def test_plain_round_trip(self) -> None:
        envelope = PlainEnvelope(iv=IV16, hash=HASH, ciphertext=b"data")

        blob = encode_envelope(envelope)

        assert decode_envelope(blob, iv_length=16, is_authenticated=False) == envelope

    def test_aead_layout(self) -> None:
        envelope = AeadEnvelope(iv=IV12, tag=TAG, ciphertext=b"data", aad=b"ignored")

        blob = encode_envelope(envelope, output_encoding="raw")

        assert blob == IV12 + TAG + b"data"

    def test_aead_round_trip_drops_aad(self) -> None:
        envelope = AeadEnvelope(iv=IV12, tag=TAG, ciphertext=b"data", aad=b"hdr")

        decoded = decode_envelope(
            encode_envelope(envelope), iv_length=12, is_authenticated=True
        )

        assert decoded == AeadEnvelope(iv=IV12, tag=TAG, ciphertext=b"data")

    def test_aead_short_tag_length(self) -> None:
        envelope = AeadEnvelope(iv=IV12, tag=TAG[:8], ciphertext=b"data")

        decoded = decode_envelope(
            encode_envelope(envelope), iv_length=12, is_authenticated=True, tag_length=8
        )

        assert decoded.tag == TAG[:8]
        assert decoded.ciphertext == b"data"

    def test_aead_too_short(self) -> None:
        blob = base64.b64encode(IV12 + TAG[:3]).decode("ascii")

        with pytest.raises(MalformedEnvelopeError):
            decode_envelope(blob, iv_length=12, is_authenticated=True)

    def test_raw_encoding_requires_bytes(self) -> None:
        with pytest.raises(MalformedEnvelopeError):
            decode_envelope(
                "text", iv_length=16, is_authenticated=False, output_encoding="raw"
            )

    def test_unknown_output_encoding(self) -> None:
        envelope = PlainEnvelope(iv=IV16, hash=HASH, ciphertext=b"")

        with pytest.raises(InvalidParameterError):
            encode_envelope(envelope, output_encoding="hex")


# ==============================================================================
# TAGGED FORMAT
# ==============================================================================


class TestTaggedFormat:
    def test_plain_header(self) -> None:
        envelope = PlainEnvelope(iv=IV16, hash=HASH, ciphertext=b"data")

        blob = encode_envelope(
            envelope, fmt=EnvelopeFormat.TAGGED, wire_id=0x32, output_encoding="raw"
        )

        assert isinstance(blob, bytes)
        assert blob[:2] == ENVELOPE_MAGIC
        assert blob[2] == ENVELOPE_VERSION
        assert blob[3] == 0x32
        assert blob[4] == 0
        assert blob[5:] == IV16 + HASH + b"data"

    def test_plain_round_trip(self) -> None:
        envelope = PlainEnvelope(iv=IV16, hash=HASH, ciphertext=b"data")
        blob = encode_envelope(envelope, fmt=EnvelopeFormat.TAGGED, wire_id=0x32)

        decoded = decode_envelope(
            blob,
            fmt=EnvelopeFormat.TAGGED,
            iv_length=16,
            is_authenticated=False,
            wire_id=0x32,
        )

        assert decoded == envelope

    def test_aead_round_trip_keeps_aad(self) -> None:
        envelope = AeadEnvelope(iv=IV12, tag=TAG[:12], ciphertext=b"data", aad=b"hdr")
        blob = encode_envelope(envelope, fmt=EnvelopeFormat.TAGGED, wire_id=0x33)

        decoded = decode_envelope(
            blob,
            fmt=EnvelopeFormat.TAGGED,
            iv_length=12,
            is_authenticated=True,
            wire_id=0x33,
        )

        assert decoded == envelope

    def test_aead_empty_fields(self) -> None:
        envelope = AeadEnvelope(iv=IV12, tag=TAG, ciphertext=b"")
        blob = encode_envelope(envelope, fmt=EnvelopeFormat.TAGGED, wire_id=0x33)

        decoded = decode_envelope(
            blob, fmt=EnvelopeFormat.TAGGED, iv_length=12, is_authenticated=True
        )

        assert decoded == envelope

    def test_wire_id_required(self) -> None:
        envelope = PlainEnvelope(iv=IV16, hash=HASH, ciphertext=b"")

        with pytest.raises(InvalidParameterError):
            encode_envelope(envelope, fmt=EnvelopeFormat.TAGGED)

    def test_algorithm_mismatch(self) -> None:
        envelope = PlainEnvelope(iv=IV16, hash=HASH, ciphertext=b"data")
        blob = encode_envelope(envelope, fmt=EnvelopeFormat.TAGGED, wire_id=0x12)

        with pytest.raises(AlgorithmMismatchError) as exc_info:
            decode_envelope(
                blob,
                fmt=EnvelopeFormat.TAGGED,
                iv_length=16,
                is_authenticated=False,
                wire_id=0x32,
                algorithm="aes-256-ctr",
            )
        assert exc_info.value.actual_wire_id == 0x12
        assert exc_info.value.expected == "aes-256-ctr"

    def test_unsupported_version(self) -> None:
        data = ENVELOPE_MAGIC + bytes([9, 0x32, 0]) + IV16 + HASH

        with pytest.raises(UnsupportedEnvelopeVersionError):
            decode_envelope(
                data,
                fmt=EnvelopeFormat.TAGGED,
                iv_length=16,
                is_authenticated=False,
                output_encoding="raw",
            )

    def test_missing_magic(self) -> None:
        data = IV16 + HASH + b"headerless"

        with pytest.raises(UnsupportedEnvelopeVersionError):
            decode_envelope(
                data,
                fmt=EnvelopeFormat.TAGGED,
                iv_length=16,
                is_authenticated=False,
                output_encoding="raw",
            )

    def test_variant_mismatch(self) -> None:
        envelope = PlainEnvelope(iv=IV12, hash=HASH, ciphertext=b"data")
        blob = encode_envelope(envelope, fmt=EnvelopeFormat.TAGGED, wire_id=0x33)

        with pytest.raises(MalformedEnvelopeError):
            decode_envelope(
                blob, fmt=EnvelopeFormat.TAGGED, iv_length=12, is_authenticated=True
            )

    def test_short_header(self) -> None:
        with pytest.raises(MalformedEnvelopeError):
            decode_envelope(
                b"CE",
                fmt=EnvelopeFormat.TAGGED,
                iv_length=16,
                is_authenticated=False,
                output_encoding="raw",
            )

    @pytest.mark.parametrize("cut", [1, 5, 20, 31])
    def test_truncated_aead_body(self, cut: int) -> None:
        envelope = AeadEnvelope(iv=IV12, tag=TAG, ciphertext=b"", aad=b"x" * 8)
        data = encode_envelope(
            envelope, fmt=EnvelopeFormat.TAGGED, wire_id=0x33, output_encoding="raw"
        )

        with pytest.raises(MalformedEnvelopeError):
            decode_envelope(
                data[:-cut],
                fmt=EnvelopeFormat.TAGGED,
                iv_length=12,
                is_authenticated=True,
                output_encoding="raw",
            )
