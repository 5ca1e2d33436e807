"""
Slug normalization.

    normalize_slug("La Parrilla del Sur")  -> "la-parrilla-del-sur"
    normalize_slug("Carta Principal ñandú") -> "carta-principal-nandu"
"""

import re
import unicodedata

from shared.config.settings import get_settings
from shared.utils.exceptions import ValidationError

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize_slug(candidate: str, max_length: int | None = None) -> str:
    """
    Lowercase, strip diacritics, hyphenate and truncate a slug candidate.

    Raises:
        ValidationError: if nothing usable remains.
    """
    limit = max_length or get_settings().slug_max_length

    decomposed = unicodedata.normalize("NFD", candidate or "")
    ascii_only = decomposed.encode("ascii", "ignore").decode("ascii").lower()
    slug = _NON_ALNUM.sub("-", ascii_only).strip("-")
    slug = slug[:limit].rstrip("-")

    if not slug:
        raise ValidationError("El identificador no puede estar vacío", candidate=candidate)
    return slug


def suffixed(base: str, n: int, max_length: int | None = None) -> str:
    """Build "base-n", trimming base so the result stays within the limit."""
    limit = max_length or get_settings().slug_max_length
    suffix = f"-{n}"
    return f"{base[: limit - len(suffix)].rstrip('-')}{suffix}"
