#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Demo script for the envelope protocol.

Encrypts a JSON object with aes-256-ctr (headerless layout), then repeats the
round trip with the aes-256-gcm tagged layout.

Usage:
    python demo_envelope.py
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root / "src"))

from cipher_envelope import (
    CipherSuite,
    CryptoError,
    Decryptor,
    Encryptor,
    EnvelopeConfig,
    EnvelopeOptions,
    EnvelopeProfile,
    create_pair,
    decode,
)


def print_banner(text: str) -> None:
    """Print section banner."""
    print()
    print("=" * 70)
    print(f"  {text}")
    print("=" * 70)


def print_data(label: str, data: bytes, max_len: int = 64) -> None:
    """Print data preview."""
    hex_data = data.hex()
    if len(hex_data) > max_len:
        preview = f"{hex_data[:max_len]}... ({len(data)} bytes)"
    else:
        preview = f"{hex_data} ({len(data)} bytes)"
    print(f"   {label}: {preview}")


def demo_compat() -> None:
    """aes-256-ctr, IV || SHA-256 || ciphertext."""
    print_banner("aes-256-ctr (compat layout)")

    suite = CipherSuite("aes-256-ctr")
    encryptor = Encryptor(suite)
    decryptor = Decryptor(suite)

    message = json.dumps({"id": 42, "message": "Test encryption of this string."})
    key = "EncryptionKey"

    encrypted = encryptor.encrypt(message, key)
    decrypted = decryptor.decrypt(encrypted, key)

    iv, digest, ciphertext = decode(encrypted, suite.iv_length)

    print(f"Original message: {message}")
    print(f"Encryption Key: {key}")
    print(f"Encrypted Message: {encrypted}")
    print_data("IV", iv)
    print_data("SHA-256", digest)
    print_data("Ciphertext", ciphertext)
    print(f"Decrypted message: {decrypted.decode('utf-8')}")


def demo_modern() -> None:
    """aes-256-gcm, tagged layout with embedded AAD."""
    print_banner("aes-256-gcm (tagged layout)")

    encryptor, decryptor = create_pair(
        EnvelopeConfig.from_profile(EnvelopeProfile.MODERN)
    )
    key = encryptor.suite.engine.secure_random_bytes(32)
    options = EnvelopeOptions(aad=b"document-42")

    result = encryptor.encrypt_detailed(b"Secret document", key, options)
    plaintext = decryptor.decrypt(result.envelope, key)

    print(f"Encrypted Message: {result.envelope}")
    print_data("Nonce", result.iv)
    print_data("Tag", result.tag)
    print(f"Decrypted message: {plaintext.decode('utf-8')}")


def main() -> None:
    """Main demo function."""
    logging.basicConfig(level=logging.WARNING)
    try:
        demo_compat()
        demo_modern()
    except CryptoError as e:
        print()
        print(f"❌ Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
