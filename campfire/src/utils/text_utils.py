"""
Campfire - Text Utilities
==========================
Helpers for turning catalog fields into stable embedding input.

These functions are stateless and side-effect-free.  Their output feeds
the embedding model, so any change here changes every product vector.
"""

from __future__ import annotations

import re
import unicodedata

# Control characters, BOM, zero-width characters and soft hyphens
_NON_PRINTABLE_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f\ufeff\u200b\u200c\u200d\u00ad\u2060]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalise_text(text: str | None) -> str:
    """
    Normalise a catalog field into a single clean line.

    Steps:
        1. Unicode NFC normalisation.
        2. Strip non-printable / zero-width characters.
        3. Collapse every whitespace run (newlines included) to one space.
        4. Strip leading / trailing whitespace.

    ``None`` becomes an empty string.
    """
    if not text:
        return ""
    text = unicodedata.normalize("NFC", text)
    text = _NON_PRINTABLE_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def format_price(price: float) -> str:
    """Render a price with exactly two decimals (``99`` → ``"99.00"``)."""
    return f"{float(price):.2f}"
