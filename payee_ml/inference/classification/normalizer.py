"""Canonical form of payee names for matching and caching."""

import re
import unicodedata

_APOSTROPHES = re.compile(r"['’‘`´]")
_PUNCTUATION = re.compile(r"[^\w\s&]|_")
_WHITESPACE = re.compile(r"\s+")
_MAX_FOLD_ROUNDS = 8


def fold(text: str) -> str:
    """Upper-case and strip diacritics, keeping punctuation and spacing.

    Upper-casing can produce new decomposable characters, so the two steps
    repeat until the string stops changing.
    """
    current = text
    for _ in range(_MAX_FOLD_ROUNDS):
        decomposed = unicodedata.normalize("NFKD", current)
        stripped = "".join(
            c for c in decomposed if unicodedata.category(c) != "Mn"
        ).upper()
        if stripped == current:
            break
        current = stripped
    return current


def normalize(text: str) -> str:
    """Normalize a payee name.

    Upper-cased, diacritic-stripped, apostrophes dropped ("O'Brien" becomes
    "OBRIEN"), other punctuation except "&" turned into spaces, whitespace
    collapsed. Idempotent.

    Examples:
        >>> normalize("  José's Café, S.A. ")
        'JOSES CAFE S A'
    """
    cleaned = _APOSTROPHES.sub("", fold(text))
    cleaned = _PUNCTUATION.sub(" ", cleaned)
    return _WHITESPACE.sub(" ", cleaned).strip()


def tokenize(text: str) -> list[str]:
    """Split a normalized name into tokens."""
    return text.split() if text else []
