"""Password-based key derivation for note encryption."""
import os

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..core.exceptions import InvalidPasswordError


SALT_SIZE = 16
KEY_SIZE = 32  # AES-256
PBKDF2_ITERATIONS = 100_000


def generate_salt(length: int = SALT_SIZE) -> bytes:
    """Return a cryptographically secure random salt."""
    return os.urandom(length)


def normalize_password(password) -> bytes:
    """Return the password as UTF-8 bytes or raise ``InvalidPasswordError``."""
    if isinstance(password, str):
        try:
            password = password.encode("utf-8")
        except UnicodeEncodeError as e:
            raise InvalidPasswordError("Password must be valid text") from e
    if not isinstance(password, (bytes, bytearray)):
        raise InvalidPasswordError("Password must be text")
    if len(password) == 0:
        raise InvalidPasswordError("No password provided")
    return bytes(password)


def derive_key(
    password: bytes | str,
    salt: bytes,
    iterations: int = PBKDF2_ITERATIONS,
    key_len: int = KEY_SIZE,
) -> bytes:
    """
    Derive an AES-256-GCM key from a password using PBKDF2-HMAC-SHA256.
    Returns raw derived key bytes.
    """
    secret = normalize_password(password)

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=key_len,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(secret)
