"""Price normalizer — pulls a comparable number out of provider price fields."""

import math
import re

# Substituted when a value is missing or unparseable so the offer sorts last.
PRICE_SENTINEL = 999999
DURATION_SENTINEL = 9999

_PRICE_RE = re.compile(r"[\d,]+")


def extract_numeric_price(raw) -> float:
    """
    Return a numeric price for an offer's price field.

    Finite numbers pass through unchanged. Strings like "$1,234" yield the
    first run of digits/commas with separators stripped. Anything else,
    NaN and infinities included, is PRICE_SENTINEL.
    """
    if isinstance(raw, bool):
        return PRICE_SENTINEL
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return raw if math.isfinite(raw) else PRICE_SENTINEL
    if isinstance(raw, str):
        for match in _PRICE_RE.finditer(raw):
            digits = match.group(0).replace(",", "")
            if digits:
                return float(digits)
    return PRICE_SENTINEL
