"""Password strength hints and generation for the encrypt dialog.

These checks are advisory. The encryption core accepts any non-empty
password; the UI uses the score to warn before encrypting.
"""
from __future__ import annotations

import re
import secrets
from dataclasses import dataclass, field


PASSWORD_CHARSET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789!@#$%^&*"
MIN_LENGTH = 8
MIN_VALID_SCORE = 3

_SPECIAL_RE = re.compile(r'[!@#$%^&*(),.?":{}|<>]')


@dataclass
class PasswordStrength:
    is_valid: bool
    score: int
    strength: str
    requirements: dict[str, bool] = field(default_factory=dict)


def validate_encryption_password(password: str) -> PasswordStrength:
    """Score a password on length and character classes (0-5)."""
    requirements = {
        "min_length": len(password) >= MIN_LENGTH,
        "has_uppercase": any(c.isupper() for c in password),
        "has_lowercase": any(c.islower() for c in password),
        "has_numbers": any(c.isdigit() for c in password),
        "has_special_chars": bool(_SPECIAL_RE.search(password)),
    }
    score = sum(1 for ok in requirements.values() if ok)

    if score < 2:
        strength = "Weak"
    elif score < 4:
        strength = "Medium"
    else:
        strength = "Strong"

    return PasswordStrength(
        is_valid=score >= MIN_VALID_SCORE,
        score=score,
        strength=strength,
        requirements=requirements,
    )


def generate_password(length: int = 12) -> str:
    """Return a random password drawn from ``PASSWORD_CHARSET``."""
    if length <= 0:
        raise ValueError("length must be positive")
    return "".join(secrets.choice(PASSWORD_CHARSET) for _ in range(length))
