"""URL slugs for obituaries and products."""

import re
import unicodedata

_NON_WORD = re.compile(r"[^a-z0-9]+")


def slugify(*parts: str | None) -> str:
    text = " ".join(p for p in parts if p)
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    return _NON_WORD.sub("-", text.lower()).strip("-")


def unique_slug(base: str, is_taken) -> str:
    """Append ``-2``, ``-3``... to ``base`` until ``is_taken(candidate)`` is false."""
    candidate = base
    counter = 2
    while is_taken(candidate):
        candidate = f"{base}-{counter}"
        counter += 1
    return candidate
