"""Lookup-key normalization for free-text crop and soil names."""

from __future__ import annotations

import unicodedata

# Turkish casing: dotted capital I lowercases to i, dotless capital I to ı.
_TR_UPPER = str.maketrans({"İ": "i", "I": "ı"})
# Letters with no canonical decomposition that still need folding.
_FOLD = str.maketrans({"ı": "i", "ø": "o", "ß": "ss"})


def normalize_key(value: object) -> str:
    """Return a lookup key stable across case and Turkish diacritics.

    ``"Buğday"``, ``"BUGDAY"`` and ``" buğday "`` all map to ``"bugday"``.
    ``None`` and blank input yield ``""``; unknown names are not an error.
    """
    if value is None:
        return ""
    text = " ".join(str(value).split())
    if not text:
        return ""
    text = text.translate(_TR_UPPER).lower()
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.translate(_FOLD)
