"""Tests for CipherSuite."""

from __future__ import annotations

import hashlib

import pytest

from cipher_envelope.config import DEFAULT_CIPHER
from cipher_envelope.core.exceptions import (
    CipherUnavailableError,
    DigestComputationError,
    DigestUnavailableError,
    InvalidIVError,
)
from cipher_envelope.engine import CryptographyEngine
from cipher_envelope.suite import CipherSuite


@pytest.fixture
def ctr_suite() -> CipherSuite:
    return CipherSuite("aes-256-ctr")


class TestConfigure:
    def test_default_algorithm(self) -> None:
        suite = CipherSuite()

        assert suite.algorithm_name == DEFAULT_CIPHER
        assert suite.is_authenticated
        assert suite.iv_length == 12

    def test_ctr(self, ctr_suite: CipherSuite) -> None:
        assert ctr_suite.algorithm_name == "aes-256-ctr"
        assert not ctr_suite.is_authenticated
        assert ctr_suite.iv_length == 16
        assert ctr_suite.iv == b""

    def test_name_is_lower_cased(self) -> None:
        assert CipherSuite("AES-256-CTR").algorithm_name == "aes-256-ctr"

    @pytest.mark.parametrize("name", ["rot13", "aes-256-ecb", "rc4", "des-ede3-cbc"])
    def test_unavailable(self, name: str) -> None:
        with pytest.raises(CipherUnavailableError):
            CipherSuite(name)

    def test_empty_name(self) -> None:
        with pytest.raises(CipherUnavailableError):
            CipherSuite().configure("")

    @pytest.mark.parametrize("name", ["", "   "])
    def test_empty_name_in_constructor(self, name: str) -> None:
        with pytest.raises(CipherUnavailableError):
            CipherSuite(name)

    def test_reconfigure_resets_iv(self, ctr_suite: CipherSuite) -> None:
        ctr_suite.ensure_iv()

        ctr_suite.configure("aes-128-gcm")

        assert ctr_suite.iv == b""
        assert ctr_suite.iv_length == 12
        assert ctr_suite.is_authenticated

    def test_failed_configure_keeps_previous(self, ctr_suite: CipherSuite) -> None:
        with pytest.raises(CipherUnavailableError):
            ctr_suite.configure("rot13")

        assert ctr_suite.algorithm_name == "aes-256-ctr"

    def test_custom_engine(self) -> None:
        engine = CryptographyEngine()

        assert CipherSuite("aes-256-ctr", engine=engine).engine is engine

    def test_repr(self, ctr_suite: CipherSuite) -> None:
        assert "aes-256-ctr" in repr(ctr_suite)


class TestIV:
    def test_ensure_iv_generates_once(self, ctr_suite: CipherSuite) -> None:
        iv = ctr_suite.ensure_iv()

        assert len(iv) == 16
        assert ctr_suite.ensure_iv() == iv

    def test_generate_iv_does_not_store(self, ctr_suite: CipherSuite) -> None:
        first = ctr_suite.generate_iv()

        assert len(first) == 16
        assert ctr_suite.iv == b""
        assert ctr_suite.generate_iv() != first

    def test_set_iv(self, ctr_suite: CipherSuite) -> None:
        ctr_suite.set_iv(b"\x01" * 16)

        assert ctr_suite.iv == b"\x01" * 16

    @pytest.mark.parametrize("bad", [b"", b"\x01" * 15, b"\x01" * 17])
    def test_set_iv_rejects(self, ctr_suite: CipherSuite, bad: bytes) -> None:
        with pytest.raises(InvalidIVError):
            ctr_suite.set_iv(bad)

    def test_validate_iv_does_not_store(self, ctr_suite: CipherSuite) -> None:
        assert ctr_suite.validate_iv(bytearray(16)) == bytes(16)
        assert ctr_suite.iv == b""

    def test_reset_iv(self, ctr_suite: CipherSuite) -> None:
        ctr_suite.ensure_iv()
        ctr_suite.reset_iv()

        assert ctr_suite.iv == b""


class TestDigest:
    def test_sha256_raw(self, ctr_suite: CipherSuite) -> None:
        assert ctr_suite.digest(b"abc") == hashlib.sha256(b"abc").digest()

    def test_hex(self, ctr_suite: CipherSuite) -> None:
        assert ctr_suite.digest(b"abc", "sha512", raw=False) == hashlib.sha512(b"abc").hexdigest()

    @pytest.mark.parametrize("name", ["Sha256", "SHA256", "sha-256", " sha256 "])
    def test_name_is_case_insensitive(self, ctr_suite: CipherSuite, name: str) -> None:
        assert ctr_suite.digest(b"abc", name) == hashlib.sha256(b"abc").digest()

    def test_unavailable(self, ctr_suite: CipherSuite) -> None:
        with pytest.raises(DigestUnavailableError):
            ctr_suite.digest(b"abc", "whirlpool-9000")

    def test_engine_failure(
        self, ctr_suite: CipherSuite, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def broken(*args: object, **kwargs: object) -> bytes:
            raise OSError("engine exploded")

        monkeypatch.setattr(ctr_suite.engine, "digest", broken)

        with pytest.raises(DigestComputationError):
            ctr_suite.digest(b"abc")


class TestStatefulCalls:
    def test_round_trip(self, ctr_suite: CipherSuite) -> None:
        ciphertext, tag = ctr_suite.encrypt(b"message", b"key")

        assert tag == b""
        assert len(ctr_suite.iv) == 16
        assert ctr_suite.decrypt(ciphertext, b"key") == b"message"

    def test_aead_round_trip(self) -> None:
        suite = CipherSuite("aes-256-gcm")

        ciphertext, tag = suite.encrypt(b"message", b"key", aad=b"a")

        assert suite.decrypt(ciphertext, b"key", tag=tag, aad=b"a") == b"message"

    def test_decrypt_without_iv(self, ctr_suite: CipherSuite) -> None:
        with pytest.raises(InvalidIVError):
            ctr_suite.decrypt(b"data", b"key")
