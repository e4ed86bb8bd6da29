"""Tests for CryptographyEngine and key fitting."""

from __future__ import annotations

import hashlib
import logging

import pytest

from cipher_envelope.core.exceptions import (
    CipherUnavailableError,
    DecryptionFailedError,
    DigestUnavailableError,
    InvalidIVError,
    InvalidKeyError,
)
from cipher_envelope.core.protocols import CipherEngineProtocol
from cipher_envelope.engine import CryptographyEngine, fit_key


@pytest.fixture
def engine() -> CryptographyEngine:
    return CryptographyEngine()


class TestFitKey:
    def test_pads_short_key(self) -> None:
        assert fit_key("EncryptionKey", 32) == b"EncryptionKey" + b"\x00" * 19

    def test_truncates_long_key(self) -> None:
        assert fit_key(b"k" * 40, 16) == b"k" * 16

    def test_exact_key_unchanged(self) -> None:
        key = bytes(range(32))

        assert fit_key(bytearray(key), 32) == key

    def test_empty_key_rejected(self) -> None:
        with pytest.raises(InvalidKeyError):
            fit_key(b"", 32)

    def test_non_bytes_rejected(self) -> None:
        with pytest.raises(InvalidKeyError):
            fit_key(12345, 32)  # type: ignore[arg-type]

    def test_logs_padding(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="cipher_envelope.engine"):
            fit_key(b"short", 32)

        assert "padded" in caplog.text
        assert "short" not in caplog.text


class TestAvailability:
    def test_protocol(self, engine: CryptographyEngine) -> None:
        assert isinstance(engine, CipherEngineProtocol)

    def test_default_set(self, engine: CryptographyEngine) -> None:
        names = engine.available_ciphers()

        assert {"aes-256-ctr", "aes-256-gcm", "aes-128-cbc"} <= names
        assert all(name == name.lower() for name in names)
        assert not any("ecb" in name for name in names)
        assert "aes256" not in names

    def test_weak_included_on_request(self, engine: CryptographyEngine) -> None:
        assert "aes-256-ecb" in engine.available_ciphers(exclude_weak=False)

    def test_aliases(self, engine: CryptographyEngine) -> None:
        names = engine.available_ciphers(include_aliases=True)

        assert "aes256" in names
        assert "id-aes256-gcm" in names

    def test_digests(self, engine: CryptographyEngine) -> None:
        digests = engine.available_digests()

        assert {"sha256", "sha512"} <= digests
        assert "SHA256" not in digests
        assert "SHA256" in engine.available_digests(include_aliases=True)


class TestCipherInfo:
    @pytest.mark.parametrize(
        "name, length",
        [("aes-256-ctr", 16), ("AES-256-GCM", 12), ("aes128", 16), ("chacha20", 16)],
    )
    def test_iv_length(self, engine: CryptographyEngine, name: str, length: int) -> None:
        assert engine.cipher_iv_length(name) == length

    def test_unknown_cipher(self, engine: CryptographyEngine) -> None:
        with pytest.raises(CipherUnavailableError):
            engine.cipher_iv_length("rot13")

    def test_is_authenticated(self, engine: CryptographyEngine) -> None:
        assert engine.is_authenticated("aes-256-gcm")
        assert not engine.is_authenticated("aes-256-ctr")

    def test_wire_ids_distinct(self, engine: CryptographyEngine) -> None:
        assert engine.wire_id("aes-256-ctr") != engine.wire_id("aes-128-ctr")

    def test_secure_random_bytes(self, engine: CryptographyEngine) -> None:
        assert len(engine.secure_random_bytes(16)) == 16
        assert engine.secure_random_bytes(0) == b""


class TestEncryptDecrypt:
    def test_ctr_round_trip_with_text_key(self, engine: CryptographyEngine) -> None:
        iv = engine.secure_random_bytes(16)

        ciphertext, tag = engine.encrypt(b"data", "aes-256-ctr", "EncryptionKey", iv)

        assert tag == b""
        assert engine.decrypt(ciphertext, "aes-256-ctr", "EncryptionKey", iv) == b"data"

    def test_gcm_round_trip(self, engine: CryptographyEngine) -> None:
        iv = engine.secure_random_bytes(12)
        key = engine.secure_random_bytes(32)

        ciphertext, tag = engine.encrypt(
            b"data", "aes-256-gcm", key, iv, aad=b"hdr", tag_length=12
        )

        assert len(tag) == 12
        assert (
            engine.decrypt(ciphertext, "aes-256-gcm", key, iv, tag=tag, aad=b"hdr")
            == b"data"
        )

    def test_gcm_bad_tag(self, engine: CryptographyEngine) -> None:
        iv = engine.secure_random_bytes(12)
        ciphertext, tag = engine.encrypt(b"data", "aes-256-gcm", b"k", iv)

        with pytest.raises(DecryptionFailedError):
            engine.decrypt(ciphertext, "aes-256-gcm", b"k", iv, tag=bytes(16))

    def test_wrong_iv_length(self, engine: CryptographyEngine) -> None:
        with pytest.raises(InvalidIVError):
            engine.encrypt(b"data", "aes-256-ctr", b"k", b"\x00" * 12)
        with pytest.raises(InvalidIVError):
            engine.decrypt(b"data", "aes-256-ctr", b"k", b"\x00" * 17)

    def test_unknown_cipher(self, engine: CryptographyEngine) -> None:
        with pytest.raises(CipherUnavailableError):
            engine.encrypt(b"data", "rc4", b"k", b"")


class TestDigest:
    def test_raw_and_hex(self, engine: CryptographyEngine) -> None:
        expected = hashlib.sha256(b"abc").digest()

        assert engine.digest(b"abc") == expected
        assert engine.digest(b"abc", "sha256", raw=False) == expected.hex()

    def test_alias(self, engine: CryptographyEngine) -> None:
        assert engine.digest(b"abc", "SHA256") == hashlib.sha256(b"abc").digest()

    def test_unknown(self, engine: CryptographyEngine) -> None:
        with pytest.raises(DigestUnavailableError):
            engine.digest(b"abc", "whirlpool-9000")
