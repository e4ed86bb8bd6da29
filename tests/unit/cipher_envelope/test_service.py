"""Tests for EnvelopeService and create_pair."""

from __future__ import annotations

import base64
import hashlib
import logging

import pytest

import cipher_envelope
from cipher_envelope.config import EnvelopeConfig, EnvelopeFormat, EnvelopeProfile
from cipher_envelope.core.exceptions import CipherUnavailableError, InvalidHashError
from cipher_envelope.service import EnvelopeService, create_pair


class TestCreatePair:
    def test_shared_suite(self) -> None:
        encryptor, decryptor = create_pair()

        assert encryptor.suite is decryptor.suite
        assert encryptor.suite.algorithm_name == "aes-256-gcm"
        assert encryptor.envelope_format is EnvelopeFormat.TAGGED

    def test_compat_round_trip(self) -> None:
        encryptor, decryptor = create_pair(
            EnvelopeConfig.from_profile(EnvelopeProfile.COMPAT)
        )

        blob = encryptor.encrypt("hello", "EncryptionKey")

        assert len(base64.b64decode(blob)) == 16 + 32 + 5
        assert decryptor.decrypt(blob, "EncryptionKey") == b"hello"

    def test_unavailable_cipher(self) -> None:
        with pytest.raises(CipherUnavailableError):
            create_pair(EnvelopeConfig(cipher="rc4"))


class TestEnvelopeService:
    @pytest.mark.parametrize("profile", list(EnvelopeProfile))
    def test_round_trip(self, profile: EnvelopeProfile) -> None:
        service = EnvelopeService(profile)
        key = service.generate_key()

        blob = service.encrypt(b"Secret document", key)

        assert service.decrypt(blob, key) == b"Secret document"

    def test_generate_key_size(self) -> None:
        assert len(EnvelopeService(EnvelopeProfile.MODERN).generate_key()) == 32

    def test_aad_and_raw_encoding(self) -> None:
        service = EnvelopeService(EnvelopeProfile.MODERN)
        key = service.generate_key()

        blob = service.encrypt(b"doc", key, aad=b"id-42", output_encoding="raw")

        assert isinstance(blob, bytes)
        assert service.decrypt(blob, key, output_encoding="raw") == b"doc"

    def test_explicit_config(self) -> None:
        cfg = EnvelopeConfig(cipher="chacha20-poly1305")

        assert EnvelopeService(config=cfg).suite.algorithm_name == "chacha20-poly1305"

    def test_hash_data(self) -> None:
        service = EnvelopeService()

        assert service.hash_data(b"abc") == hashlib.sha256(b"abc").hexdigest()

    def test_audit_log_on_failure(self, caplog: pytest.LogCaptureFixture) -> None:
        service = EnvelopeService(EnvelopeProfile.COMPAT)
        blob = service.encrypt(b"payload", b"key")
        raw = bytearray(base64.b64decode(blob))
        raw[-1] ^= 0xFF

        with caplog.at_level(logging.INFO, logger="audit.cipher_envelope"):
            with pytest.raises(InvalidHashError):
                service.decrypt(base64.b64encode(bytes(raw)).decode(), b"key")

        assert "decrypt failed: InvalidHashError" in caplog.text


def test_package_exports() -> None:
    for name in cipher_envelope.__all__:
        assert hasattr(cipher_envelope, name)
    assert cipher_envelope.__version__ == "1.0.0"
