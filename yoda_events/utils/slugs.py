# yoda_events/utils/slugs.py
import re
import unicodedata
from typing import Iterable

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str, separator: str = "-") -> str:
    """Lower-case ASCII slug: "Darth's Party!" -> "darth-s-party"."""
    ascii_text = unicodedata.normalize("NFKD", text or "").encode("ascii", "ignore").decode("ascii")
    slug = _NON_ALNUM.sub(separator, ascii_text.lower()).strip(separator)
    return slug or "n-a"


def make_unique(base: str, taken: Iterable[str], separator: str = "-") -> str:
    # Append -1, -2, ... until the slug is free
    taken = set(taken)
    if base not in taken:
        return base
    i = 1
    while f"{base}{separator}{i}" in taken:
        i += 1
    return f"{base}{separator}{i}"
