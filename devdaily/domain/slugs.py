"""URL slug helpers."""

import re
import unicodedata

MAX_SLUG_LENGTH = 100

_NON_SLUG = re.compile(r"[^a-z0-9]+")
_ALPHA_DASH = re.compile(r"^[A-Za-z0-9_-]+$")


def slugify(value: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """Convert arbitrary text into a lowercase dash-separated slug.

    Example:
        >>> slugify("  Samsung Galaxy S24 Ultra (256GB) ")
        'samsung-galaxy-s24-ultra-256gb'
    """
    normalized = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode()
    slug = _NON_SLUG.sub("-", normalized.lower()).strip("-")
    return slug[:max_length].rstrip("-")


def is_alpha_dash(value: str) -> bool:
    return bool(_ALPHA_DASH.match(value))
