"""
Locale-aware sort keys for category and product names.

Menu names are mostly Turkish, where plain code-point ordering puts "Çorba"
after "Zeytin" and lowercases "I" to "i" instead of "ı". The "tr" key orders
by the Turkish alphabet (with q, w, x slotted in their Latin positions) and
applies Turkish case folding. Any other locale uses accent-insensitive case
folding.
"""
import unicodedata
from typing import Tuple

_TR_ALPHABET = "abcçdefgğhıijklmnoöpqrsştuüvwxyz"
_TR_INDEX = {ch: i for i, ch in enumerate(_TR_ALPHABET)}

# Key classes: separators < digits < letters < anything else
_SEPARATOR, _DIGIT, _LETTER, _OTHER = 0, 1, 2, 3


def _tr_lower(text: str) -> str:
    return text.replace("I", "ı").replace("İ", "i").lower()


def _strip_accents(ch: str) -> str:
    decomposed = unicodedata.normalize("NFKD", ch)
    return "".join(c for c in decomposed if not unicodedata.combining(c)) or ch


def _tr_char_key(ch: str) -> Tuple[int, int]:
    if ch.isspace() or unicodedata.category(ch).startswith("P"):
        return (_SEPARATOR, ord(ch))
    if ch.isdigit():
        return (_DIGIT, ord(ch))
    if ch in _TR_INDEX:
        return (_LETTER, _TR_INDEX[ch])
    base = _strip_accents(ch)
    if len(base) == 1 and base in _TR_INDEX:
        return (_LETTER, _TR_INDEX[base])
    return (_OTHER, ord(ch))


def name_sort_key(name: str, locale: str = "tr") -> Tuple:
    """
    Sort key for a display name under the given locale.
    The original string is the last component so the order is total.
    """
    text = (name or "").strip()
    if (locale or "").lower().startswith("tr"):
        folded = _tr_lower(text)
        return (tuple(_tr_char_key(ch) for ch in folded), text)
    folded = "".join(_strip_accents(ch) for ch in text).casefold()
    return (folded, text)
