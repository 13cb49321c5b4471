from __future__ import annotations

import re
from typing import Optional, Tuple


# Tolerance bands, not exact values: 1/3 arrives as 0.33, 0.333.., or 0.3299999
# depending on where it came from.
_FRACTION_DISPLAY = (
    (0.115, 0.135, "⅛"),
    (0.240, 0.260, "¼"),
    (0.320, 0.345, "⅓"),
    (0.365, 0.385, "⅜"),
    (0.490, 0.510, "½"),
    (0.615, 0.635, "⅝"),
    (0.660, 0.680, "⅔"),
    (0.740, 0.760, "¾"),
    (0.865, 0.885, "⅞"),
)

FRACTION_GLYPHS = {
    "½": 0.5,
    "¼": 0.25,
    "¾": 0.75,
    "⅓": 0.33,
    "⅔": 0.67,
    "⅛": 0.125,
    "⅜": 0.375,
    "⅝": 0.625,
    "⅞": 0.875,
}

_ASCII_FRACTION_RE = re.compile(r"^(\d+)\s*/\s*(\d+)")
_NUMBER_RE = re.compile(r"^(\d+(?:\.\d+)?)")
_WHOLE_EPSILON = 0.05


def format_quantity(value: Optional[float]) -> str:
    """
    Decimal -> kitchen display.
    1.0 -> "1", 0.5 -> "½", 1.5 -> "1½", 0.9 -> "0.9"
    """
    if value is None:
        return ""
    whole = int(value)
    frac = value - whole

    if frac < _WHOLE_EPSILON:
        return str(whole)

    for low, high, glyph in _FRACTION_DISPLAY:
        if low <= frac <= high:
            return f"{whole}{glyph}" if whole > 0 else glyph

    return f"{value:.1f}"


def _leading_fraction(text: str) -> Tuple[Optional[float], str]:
    """Glyph first, then an ASCII n/d."""
    if text and text[0] in FRACTION_GLYPHS:
        return FRACTION_GLYPHS[text[0]], text[1:]
    m = _ASCII_FRACTION_RE.match(text)
    if m:
        denominator = int(m.group(2))
        if denominator:
            return int(m.group(1)) / denominator, text[m.end():]
    return None, text


def parse_quantity(text: Optional[str]) -> Tuple[Optional[float], str]:
    """
    Read a leading quantity and return (quantity, remainder).
    Order: fraction glyph, ASCII fraction, whole/decimal number, then a fraction
    directly after a whole number ("1 1/2", "2½").
    Example: "1 1/2 cups flour" -> (1.5, "cups flour")
    Anything else -> (None, text).
    """
    s = (text or "").strip()
    if not s:
        return None, s

    quantity, rest = _leading_fraction(s)
    if quantity is not None:
        return quantity, rest.strip()

    m = _NUMBER_RE.match(s)
    if not m:
        return None, s

    number = m.group(1)
    quantity = float(number)
    rest = s[m.end():]

    if "." not in number:
        fraction, after = _leading_fraction(rest.lstrip())
        if fraction is not None:
            quantity += fraction
            rest = after

    return quantity, rest.strip()


def scale_quantity(quantity: Optional[float], multiplier: float) -> Optional[float]:
    """Scale the number, never the display string."""
    if quantity is None:
        return None
    return quantity * multiplier
