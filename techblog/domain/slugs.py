import re
import unicodedata
from datetime import datetime

_COMBINING_MARKS = re.compile(r"[\u0300-\u036f]")
_NON_ASCII_RUN = re.compile(r"[^\x00-\x7f]+")
_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def slugify(title: str) -> str:
    """
    Turn a title into a URL-safe slug of lowercase ASCII letters, digits and
    single inner hyphens. Returns "" when nothing representable remains.
    """
    if not title:
        return ""

    normalized = _COMBINING_MARKS.sub("", unicodedata.normalize("NFKD", title))
    text = normalized.lower().strip()
    text = _NON_ASCII_RUN.sub("-", text)
    text = _NON_ALNUM_RUN.sub("-", text)
    return text.strip("-")


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36_DIGITS[rem])
    return "".join(reversed(digits))


def fallback_slug_base(now: datetime) -> str:
    """Base used when a title slugifies to nothing."""
    return f"post-{to_base36(int(now.timestamp() * 1000))}"


def is_valid_slug(slug: str) -> bool:
    return bool(re.fullmatch(r"[a-z0-9]+(?:-[a-z0-9]+)*", slug))
