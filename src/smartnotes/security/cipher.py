"""AES-256-GCM encryption of raw bytes under a derived key."""
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..core.exceptions import AuthenticationFailureError


NONCE_SIZE = 12  # 96-bit GCM nonce
TAG_SIZE = 16


def generate_nonce() -> bytes:
    return os.urandom(NONCE_SIZE)


def encrypt(key: bytes, nonce: bytes, plaintext: bytes) -> bytes:
    """
    Encrypt ``plaintext`` and return ``ciphertext || tag``.

    The nonce must never be reused with the same key; callers pass a fresh
    one from :func:`generate_nonce` for every call.
    """
    aead = AESGCM(key)
    return aead.encrypt(nonce, plaintext, None)


def decrypt(key: bytes, nonce: bytes, ciphertext: bytes) -> bytes:
    """
    Decrypt ``ciphertext || tag`` and return the plaintext.

    A tag mismatch raises :class:`AuthenticationFailureError`. Wrong key and
    corrupted ciphertext look identical at this layer.
    """
    aead = AESGCM(key)
    try:
        return aead.decrypt(nonce, ciphertext, None)
    except InvalidTag as e:
        raise AuthenticationFailureError("Incorrect password or corrupted data") from e
