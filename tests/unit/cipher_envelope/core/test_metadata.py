"""Unit-тесты для core/metadata.py."""

from __future__ import annotations

import pytest

from cipher_envelope.core.metadata import (
    CipherMetadata,
    DigestMetadata,
    SecurityLevel,
    is_authenticated_name,
    is_weak_name,
)


def _meta(**overrides: object) -> CipherMetadata:
    params: dict = {
        "name": "aes-256-ctr",
        "wire_id": 0x32,
        "key_size": 32,
        "iv_size": 16,
        "is_aead": False,
        "security_level": SecurityLevel.STANDARD,
        "library": "cryptography",
    }
    params.update(overrides)
    return CipherMetadata(**params)


class TestSecurityLevel:
    @pytest.mark.parametrize(
        "level, safe",
        [
            (SecurityLevel.BROKEN, False),
            (SecurityLevel.LEGACY, False),
            (SecurityLevel.STANDARD, True),
            (SecurityLevel.HIGH, True),
        ],
    )
    def test_is_safe_for_new_systems(self, level: SecurityLevel, safe: bool) -> None:
        assert level.is_safe_for_new_systems() is safe

    def test_string_values(self) -> None:
        assert SecurityLevel.STANDARD.value == "standard"


class TestCipherMetadata:
    def test_valid(self) -> None:
        meta = _meta()

        assert meta.is_safe_for_production()
        assert meta.block_size == 16
        assert meta.aliases == ()

    def test_frozen(self) -> None:
        meta = _meta()
        with pytest.raises(AttributeError):
            meta.name = "other"  # type: ignore[misc]

    @pytest.mark.parametrize(
        "overrides",
        [
            {"name": "AES-256-CTR"},
            {"wire_id": 0},
            {"wire_id": 256},
            {"key_size": 0},
            {"iv_size": -1},
            {"is_aead": True},
            {"name": "aes-256-gcm", "is_aead": False},
        ],
    )
    def test_invalid(self, overrides: dict) -> None:
        with pytest.raises(ValueError):
            _meta(**overrides)

    def test_weak_name_not_production_safe(self) -> None:
        meta = _meta(name="aes-256-ecb", iv_size=0)

        assert not meta.is_safe_for_production()

    def test_broken_level_not_production_safe(self) -> None:
        assert not _meta(security_level=SecurityLevel.BROKEN).is_safe_for_production()


class TestDigestMetadata:
    def test_defaults(self) -> None:
        meta = DigestMetadata(
            name="sha256", digest_size=32, security_level=SecurityLevel.STANDARD
        )

        assert meta.library == "hashlib"
        assert meta.aliases == ()


class TestNameClassification:
    @pytest.mark.parametrize(
        "name",
        ["aes-256-gcm", "AES-128-GCM", "aes-128-ccm", "aes-256-ocb", "aes-256-siv",
         "chacha20-poly1305", "id-aes256-gcm"],
    )
    def test_authenticated(self, name: str) -> None:
        assert is_authenticated_name(name)

    @pytest.mark.parametrize("name", ["aes-256-ctr", "aes-128-cbc", "chacha20"])
    def test_not_authenticated(self, name: str) -> None:
        assert not is_authenticated_name(name)

    @pytest.mark.parametrize(
        "name", ["rc4", "RC2-CBC", "des-ede3-cbc", "aes-128-ecb", "rc4-hmac-md5"]
    )
    def test_weak(self, name: str) -> None:
        assert is_weak_name(name)

    def test_not_weak(self) -> None:
        assert not is_weak_name("aes-256-ctr")

    def test_custom_markers(self) -> None:
        assert is_weak_name("camellia-128-cbc", markers=("camellia",))
