"""
Unit tests for text-level password encryption (encrypt_text / decrypt_text).
"""

import base64
import os

import pytest
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from smartnotes.core.exceptions import (
    AuthenticationFailureError,
    EncryptionFailedError,
    InvalidPasswordError,
    MalformedEnvelopeError,
)
from smartnotes.security import encryption
from smartnotes.security.encryption import (
    decrypt_text,
    decrypt_text_async,
    encrypt_text,
    encrypt_text_async,
)
from smartnotes.security.envelope import is_envelope_text, unpack
from smartnotes.security.kdf import derive_key


PASSWORD = "correct-horse-battery"


# ==============================================================================
# Round trips
# ==============================================================================

@pytest.mark.parametrize(
    "plaintext",
    [
        "",
        "Shopping List",
        "Hello, 世界! 🔐 ñ",
        "<p>Milk</p><ul><li>Eggs</li></ul>",
        "x" * 100_000,
    ],
)
def test_roundtrip(plaintext):
    envelope = encrypt_text(plaintext, PASSWORD)
    assert is_envelope_text(envelope)
    assert decrypt_text(envelope, PASSWORD) == plaintext


def test_envelope_length_matches_layout():
    """base64 of 16 salt + 12 nonce + len(pt) + 16 tag bytes."""
    envelope = encrypt_text("Shopping List", PASSWORD)
    raw = base64.b64decode(envelope)
    assert len(raw) == 16 + 12 + len("Shopping List".encode("utf-8")) + 16


def test_same_input_gives_different_envelopes():
    """Fresh salt and nonce every call."""
    first = encrypt_text("same", PASSWORD)
    second = encrypt_text("same", PASSWORD)
    assert first != second
    assert unpack(first).salt != unpack(second).salt
    assert unpack(first).nonce != unpack(second).nonce


def test_unicode_password():
    envelope = encrypt_text("data", "pässwörd-🔑")
    assert decrypt_text(envelope, "pässwörd-🔑") == "data"


def test_envelope_built_by_hand_decrypts():
    """Envelopes written by other implementations of the same layout still open."""
    salt, nonce = os.urandom(16), os.urandom(12)
    key = derive_key("legacy-password", salt)
    ct = AESGCM(key).encrypt(nonce, "stored long ago".encode("utf-8"), None)
    envelope = base64.b64encode(salt + nonce + ct).decode("ascii")

    assert decrypt_text(envelope, "legacy-password") == "stored long ago"


# ==============================================================================
# Failures
# ==============================================================================

def test_wrong_password_fails():
    envelope = encrypt_text("Milk, eggs", PASSWORD)
    with pytest.raises(AuthenticationFailureError):
        decrypt_text(envelope, "wrong-password")


@pytest.mark.parametrize("position", [0, 20, 30, -1])
def test_tampering_is_detected(position):
    """A flipped bit in salt, nonce, body or tag never yields plaintext."""
    raw = bytearray(base64.b64decode(encrypt_text("Milk, eggs", PASSWORD)))
    raw[position] ^= 0x80
    tampered = base64.b64encode(bytes(raw)).decode("ascii")

    with pytest.raises(AuthenticationFailureError):
        decrypt_text(tampered, PASSWORD)


def test_short_envelope_is_malformed():
    with pytest.raises(MalformedEnvelopeError):
        decrypt_text(base64.b64encode(b"\x00" * 20).decode(), PASSWORD)


def test_plaintext_input_is_malformed():
    with pytest.raises(MalformedEnvelopeError):
        decrypt_text("Shopping List", PASSWORD)


@pytest.mark.parametrize("bad", ["", None, b""])
def test_invalid_password_on_encrypt(bad):
    with pytest.raises(InvalidPasswordError):
        encrypt_text("data", bad)


@pytest.mark.parametrize("bad", ["", None])
def test_invalid_password_on_decrypt(bad):
    envelope = encrypt_text("data", PASSWORD)
    with pytest.raises(InvalidPasswordError):
        decrypt_text(envelope, bad)


def test_non_text_plaintext_rejected():
    with pytest.raises(TypeError):
        encrypt_text(b"bytes", PASSWORD)


def test_non_utf8_plaintext_is_malformed():
    salt, nonce = os.urandom(16), os.urandom(12)
    ct = AESGCM(derive_key(PASSWORD, salt)).encrypt(nonce, b"\xff\xfe", None)
    envelope = base64.b64encode(salt + nonce + ct).decode("ascii")

    with pytest.raises(MalformedEnvelopeError):
        decrypt_text(envelope, PASSWORD)


def test_cipher_failure_is_wrapped(monkeypatch):
    def boom(*args):
        raise ValueError("primitive failed")

    monkeypatch.setattr(encryption.cipher, "encrypt", boom)
    with pytest.raises(EncryptionFailedError):
        encrypt_text("data", PASSWORD)


def test_password_never_logged(caplog):
    caplog.set_level("DEBUG", logger="smartnotes.security.encryption")
    envelope = encrypt_text("top secret text", PASSWORD)
    decrypt_text(envelope, PASSWORD)
    assert PASSWORD not in caplog.text
    assert "top secret text" not in caplog.text


# ==============================================================================
# Async variants
# ==============================================================================

@pytest.mark.asyncio
async def test_async_roundtrip():
    envelope = await encrypt_text_async("async note", PASSWORD)
    assert await decrypt_text_async(envelope, PASSWORD) == "async note"


@pytest.mark.asyncio
async def test_async_and_sync_interoperate():
    assert decrypt_text(await encrypt_text_async("a", PASSWORD), PASSWORD) == "a"
    assert await decrypt_text_async(encrypt_text("b", PASSWORD), PASSWORD) == "b"


@pytest.mark.asyncio
async def test_async_wrong_password():
    envelope = await encrypt_text_async("async note", PASSWORD)
    with pytest.raises(AuthenticationFailureError):
        await decrypt_text_async(envelope, "wrong-password")


@pytest.mark.asyncio
async def test_async_invalid_password():
    with pytest.raises(InvalidPasswordError):
        await encrypt_text_async("data", "")
    with pytest.raises(MalformedEnvelopeError):
        await decrypt_text_async("not an envelope", PASSWORD)
