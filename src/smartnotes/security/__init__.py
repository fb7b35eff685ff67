"""Security helpers: password-based note encryption for SmartNotes.

This package provides:
- PBKDF2-HMAC-SHA256 key derivation (100,000 iterations, 256-bit keys)
- AES-256-GCM authenticated encryption of raw bytes
- the base64 ``salt || nonce || ciphertext`` envelope stored in note fields
- string-level ``encrypt_text`` / ``decrypt_text`` (blocking and async)

Every encryption derives its own key from its own salt; nothing is cached.
"""

from .kdf import generate_salt, derive_key
from .cipher import generate_nonce, encrypt, decrypt
from .envelope import Envelope, pack, unpack, is_envelope_text
from .encryption import (
    encrypt_text,
    decrypt_text,
    encrypt_text_async,
    decrypt_text_async,
)
from .passwords import validate_encryption_password, generate_password

__all__ = [
    "generate_salt",
    "derive_key",
    "generate_nonce",
    "encrypt",
    "decrypt",
    "Envelope",
    "pack",
    "unpack",
    "is_envelope_text",
    "encrypt_text",
    "decrypt_text",
    "encrypt_text_async",
    "decrypt_text_async",
    "validate_encryption_password",
    "generate_password",
]
