"""Storage format for one encrypted note field.

Layout (raw bytes, then standard base64 as a single string):
- 16 bytes: PBKDF2 salt
- 12 bytes: AES-GCM nonce
- N bytes: ciphertext followed by the 16-byte GCM tag

There is no magic or version byte. Previously stored notes only decrypt as
long as this exact layout is kept.
"""
import base64
import binascii
import re
from typing import NamedTuple

from ..core.exceptions import MalformedEnvelopeError
from .cipher import NONCE_SIZE, TAG_SIZE
from .kdf import SALT_SIZE


HEADER_SIZE = SALT_SIZE + NONCE_SIZE
MIN_ENVELOPE_SIZE = HEADER_SIZE + TAG_SIZE

_BASE64_RE = re.compile(r"[A-Za-z0-9+/]*={0,2}")


class Envelope(NamedTuple):
    salt: bytes
    nonce: bytes
    ciphertext: bytes


def pack(salt: bytes, nonce: bytes, ciphertext: bytes) -> str:
    """Concatenate ``salt || nonce || ciphertext`` and base64-encode it."""
    if len(salt) != SALT_SIZE:
        raise ValueError(f"salt must be {SALT_SIZE} bytes, got {len(salt)}")
    if len(nonce) != NONCE_SIZE:
        raise ValueError(f"nonce must be {NONCE_SIZE} bytes, got {len(nonce)}")

    raw = bytes(salt) + bytes(nonce) + bytes(ciphertext)
    return base64.b64encode(raw).decode("ascii")


def is_envelope_text(value) -> bool:
    """Return True if ``value`` is a string made only of base64 characters."""
    return isinstance(value, str) and _BASE64_RE.fullmatch(value) is not None


def unpack(envelope: str) -> Envelope:
    """
    Split a stored envelope back into salt, nonce and ciphertext.

    Raises :class:`MalformedEnvelopeError` when the input is not base64 text,
    when it decodes to fewer than 28 bytes, or when fewer than a tag's worth
    of ciphertext bytes remain after the header.
    """
    if not is_envelope_text(envelope):
        raise MalformedEnvelopeError("Envelope is not valid base64 text")

    try:
        raw = base64.b64decode(envelope, validate=True)
    except binascii.Error as e:
        raise MalformedEnvelopeError("Envelope is not valid base64 text") from e

    if len(raw) < HEADER_SIZE:
        raise MalformedEnvelopeError(
            f"Encrypted data is too small: {len(raw)} bytes (minimum {HEADER_SIZE})"
        )
    if len(raw) < MIN_ENVELOPE_SIZE:
        raise MalformedEnvelopeError(
            f"Encrypted data is missing its authentication tag: {len(raw)} bytes "
            f"(minimum {MIN_ENVELOPE_SIZE})"
        )

    return Envelope(
        salt=raw[:SALT_SIZE],
        nonce=raw[SALT_SIZE:HEADER_SIZE],
        ciphertext=raw[HEADER_SIZE:],
    )
