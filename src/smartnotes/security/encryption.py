"""
Password-based encryption of note text.

``encrypt_text`` turns a plaintext string into a single envelope string and
``decrypt_text`` reverses it. Every call:

- generates its own 16-byte salt and 12-byte nonce
- derives a fresh AES-256 key with PBKDF2-HMAC-SHA256 (:mod:`.kdf`)
- encrypts with AES-256-GCM (:mod:`.cipher`)
- frames ``salt || nonce || ciphertext`` as base64 (:mod:`.envelope`)

Nothing is cached between calls. The ``*_async`` variants run the key
derivation and the AEAD call in a worker thread so an event loop (the TUI)
keeps running while PBKDF2 burns CPU; those two awaits are the only points
where they yield.
"""

from __future__ import annotations

import asyncio
import logging

from ..core.exceptions import EncryptionFailedError, MalformedEnvelopeError
from . import cipher
from .envelope import pack, unpack
from .kdf import derive_key, generate_salt, normalize_password


logger = logging.getLogger(__name__)


def _encode_plaintext(plaintext: str) -> bytes:
    if not isinstance(plaintext, str):
        raise TypeError("plaintext must be a str")
    return plaintext.encode("utf-8")


def _decode_plaintext(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        # Authentic bytes that are not text were not produced by encrypt_text.
        raise MalformedEnvelopeError("Decrypted data is not UTF-8 text") from e


def encrypt_text(plaintext: str, password: bytes | str) -> str:
    """Encrypt ``plaintext`` under ``password`` and return an envelope string."""
    secret = normalize_password(password)
    data = _encode_plaintext(plaintext)

    salt = generate_salt()
    nonce = cipher.generate_nonce()
    try:
        key = derive_key(secret, salt)
        ct = cipher.encrypt(key, nonce, data)
    except (ValueError, TypeError, OverflowError, MemoryError) as e:
        logger.error("Encryption failed: %s", type(e).__name__)
        raise EncryptionFailedError("Failed to encrypt text") from e

    logger.debug("Encrypted %d bytes into %d byte ciphertext", len(data), len(ct))
    return pack(salt, nonce, ct)


def decrypt_text(envelope: str, password: bytes | str) -> str:
    """
    Decrypt an envelope produced by :func:`encrypt_text`.

    Raises:
        InvalidPasswordError: password empty or not text
        MalformedEnvelopeError: envelope is not base64 or too short
        AuthenticationFailureError: wrong password or tampered data
    """
    secret = normalize_password(password)
    parts = unpack(envelope)

    key = derive_key(secret, parts.salt)
    data = cipher.decrypt(key, parts.nonce, parts.ciphertext)
    return _decode_plaintext(data)


async def encrypt_text_async(plaintext: str, password: bytes | str) -> str:
    """Coroutine version of :func:`encrypt_text`."""
    secret = normalize_password(password)
    data = _encode_plaintext(plaintext)

    salt = generate_salt()
    nonce = cipher.generate_nonce()
    try:
        key = await asyncio.to_thread(derive_key, secret, salt)
        ct = await asyncio.to_thread(cipher.encrypt, key, nonce, data)
    except (ValueError, TypeError, OverflowError, MemoryError) as e:
        logger.error("Encryption failed: %s", type(e).__name__)
        raise EncryptionFailedError("Failed to encrypt text") from e

    return pack(salt, nonce, ct)


async def decrypt_text_async(envelope: str, password: bytes | str) -> str:
    """Coroutine version of :func:`decrypt_text`."""
    secret = normalize_password(password)
    parts = unpack(envelope)

    key = await asyncio.to_thread(derive_key, secret, parts.salt)
    data = await asyncio.to_thread(cipher.decrypt, key, parts.nonce, parts.ciphertext)
    return _decode_plaintext(data)
