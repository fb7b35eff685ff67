""" Text statistics and formatting helpers for note content (HTML strings). """

import re
from datetime import datetime, timezone


_TAG_RE = re.compile(r"<[^>]*>")
_ALNUM_RE = re.compile(r"[a-zA-Z0-9]")
_TAG_CLEAN_RE = re.compile(r"[^a-z0-9\s-]")

WORDS_PER_MINUTE = 200
MIN_TAG_LENGTH = 2
MAX_TAG_LENGTH = 20


def strip_html(text, replacement=""):
    # Remove markup, keep only visible text.
    if not text or not isinstance(text, str):
        return ""
    return _TAG_RE.sub(replacement, text)


def word_count(text):
    """
        Count words in HTML content; tokens without a letter or digit are ignored
    """
    plain = strip_html(text, " ")
    return len([w for w in plain.split() if _ALNUM_RE.search(w)])


def char_count(text):
    """
        Count visible characters (markup excluded)
    """
    return len(strip_html(text))


def reading_time(text):
    minutes = -(-word_count(text) // WORDS_PER_MINUTE)
    if minutes < 1:
        return "Less than 1 min"
    if minutes == 1:
        return "1 min"
    return f"{minutes} mins"


def content_complexity(text):
    words = word_count(text)
    chars = char_count(text)

    if words == 0:
        return "Empty"

    avg_word_length = chars / words

    if words < 50:
        return "Simple"
    if words < 200 and avg_word_length < 6:
        return "Medium"
    if words > 500 or avg_word_length > 7:
        return "Complex"
    return "Medium"


def truncate_text(text, max_length=100):
    """
        Truncate on a word boundary when one is close to the limit
    """
    if not text or len(text) <= max_length:
        return text

    truncated = text[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > max_length * 0.8:
        return truncated[:last_space].strip() + "..."
    return truncated.strip() + "..."


def generate_preview(content, max_length=100):
    """
        One-line plain text preview, preferring to end on a sentence
    """
    if not content:
        return "No content"

    plain = " ".join(strip_html(content, " ").split())
    if len(plain) <= max_length:
        return plain

    truncated = plain[:max_length]
    last_sentence = truncated.rfind(".")
    last_space = truncated.rfind(" ")

    if last_sentence > max_length * 0.7:
        return truncated[: last_sentence + 1]
    if last_space > max_length * 0.8:
        return truncated[:last_space] + "..."
    return truncated + "..."


def sanitize_tag(tag):
    """
        Normalize a tag: lowercase, [a-z0-9 -] only, spaces to hyphens.
        Returns None when the result is too short, too long or only digits.
    """
    if not tag or not isinstance(tag, str):
        return None

    cleaned = _TAG_CLEAN_RE.sub("", tag.lower().strip())
    cleaned = re.sub(r"\s+", "-", cleaned)
    cleaned = re.sub(r"-+", "-", cleaned).strip("-")

    if len(cleaned) < MIN_TAG_LENGTH or len(cleaned) > MAX_TAG_LENGTH:
        return None
    if cleaned.isdigit():
        return None
    return cleaned


def format_date(value, now=None):
    """
        Human-friendly relative date ("Just now", "3 hours ago", ...)
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)

    seconds = (now - value).total_seconds()
    minutes = int(seconds // 60)
    hours = int(seconds // 3600)
    days = int(seconds // 86400)

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes} min{'s' if minutes > 1 else ''} ago"
    if hours < 24:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{days} days ago"
    return value.date().isoformat()
