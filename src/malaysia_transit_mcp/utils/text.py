"""Place-name text processing utilities."""

import re
import unicodedata

_NON_ALNUM = re.compile(r"[^0-9a-z]+")

# Google returns the federal territories with one of these prefixes
_STATE_PREFIXES = (
    "wilayah persekutuan ",
    "federal territory of ",
    "w p ",
)


def normalize_place_name(text: str) -> str:
    """Normalize a place name for comparison.

    Strips diacritics, lowercases, turns punctuation into spaces and
    collapses whitespace, so "Komtar, Pulau Pinang" and "KOMTAR pulau-pinang"
    compare equal.
    """
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM.sub(" ", stripped.lower()).strip()


def normalize_state_name(name: str) -> str:
    """Normalize a state name, dropping federal territory prefixes."""
    normalized = normalize_place_name(name)
    for prefix in _STATE_PREFIXES:
        if normalized.startswith(prefix):
            return normalized[len(prefix) :]
    return normalized


def contains_phrase(text: str, phrase: str, word_boundary: bool = True) -> bool:
    """Check whether an already-normalized phrase occurs in normalized text.

    Args:
        text: Normalized haystack
        phrase: Normalized needle
        word_boundary: If true, the phrase must start and end on token
            boundaries ("kl" does not match "klang")

    Returns:
        True if the phrase is contained in the text
    """
    if not phrase or not text:
        return False
    if word_boundary:
        return f" {phrase} " in f" {text} "
    return phrase in text
