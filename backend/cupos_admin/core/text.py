import re
import unicodedata

__all__ = ["fold", "strip_accents", "sort_key"]

_WHITESPACE_RE = re.compile(r"\s+", re.UNICODE)


def strip_accents(value: str) -> str:
    decomposed = unicodedata.normalize("NFD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def fold(value: str | None) -> str:
    """Accent-stripped, case-folded, whitespace-collapsed form used for comparisons."""
    if not value:
        return ""
    return _WHITESPACE_RE.sub(" ", strip_accents(value).strip()).casefold()


def sort_key(label: str) -> tuple[str, str]:
    # Primary-strength ordering ("Álvarez" sorts with "alvarez"); raw label breaks ties.
    return fold(label), label
