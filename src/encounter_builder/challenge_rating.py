"""
Challenge rating notation for D&D 5e (2024 rules).

Converts between the CR text written in stat blocks and encounter tables
("1/4", "5") and numeric values, and holds the canonical CR to XP table
(DMG 2024). Malformed CR text never raises: it is logged and treated as 0.
"""

from __future__ import annotations

import logging
import math

logger = logging.getLogger("encounter-builder.cr")


# =============================================================================
# Constants: Challenge Rating to XP (DMG 2024)
# =============================================================================

# Keyed by the exact CR text. Lookups never normalize "0.25" to "1/4".
CR_TO_XP: dict[str, int] = {
    "0":   10,
    "1/8": 25,
    "1/4": 50,
    "1/2": 100,
    "1":   200,
    "2":   450,
    "3":   700,
    "4":   1100,
    "5":   1800,
    "6":   2300,
    "7":   2900,
    "8":   3900,
    "9":   5000,
    "10":  5900,
    "11":  7200,
    "12":  8400,
    "13":  10000,
    "14":  11500,
    "15":  13000,
    "16":  15000,
    "17":  18000,
    "18":  20000,
    "19":  22000,
    "20":  25000,
    "21":  33000,
    "22":  41000,
    "23":  50000,
    "24":  62000,
    "25":  75000,
    "26":  90000,
    "27":  105000,
    "28":  120000,
    "29":  135000,
    "30":  155000,
}

_FRACTIONS: dict[float, str] = {0.125: "1/8", 0.25: "1/4", 0.5: "1/2"}


def _to_number(text: str) -> float | None:
    """Parse a finite, non-negative decimal, or return None."""
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


def parse_challenge_rating(text: str | None) -> float:
    """Convert CR text to a number.

    Fractions ("1/4") are divided out; plain values ("5", "0.5") are parsed
    as decimals.

    Args:
        text: CR as written, e.g. "1/8", "1/2", "12".

    Returns:
        The numeric CR, or 0.0 when the text is missing or malformed.
    """
    if text is None or not str(text).strip():
        logger.warning("Missing CR value, using 0")
        return 0.0

    cr_text = str(text).strip()

    if "/" in cr_text:
        parts = cr_text.split("/")
        if len(parts) != 2:
            logger.warning(f"Bad fraction CR: {cr_text!r}")
            return 0.0
        numerator = _to_number(parts[0].strip())
        denominator = _to_number(parts[1].strip())
        if numerator is None or denominator is None or denominator == 0:
            logger.warning(f"Bad fraction CR: {cr_text!r}")
            return 0.0
        return numerator / denominator

    value = _to_number(cr_text)
    if value is None:
        logger.warning(f"Bad number CR: {cr_text!r}")
        return 0.0
    return value


def lookup_experience_for_challenge_rating(text: str | None) -> int | None:
    """Look up the XP value for a CR written exactly as in the table.

    Args:
        text: CR text such as "0", "1/8", "1/4", "1/2" or "1" to "30".

    Returns:
        The XP value, or None if the text is not a table key.
    """
    if text is None:
        return None
    return CR_TO_XP.get(str(text).strip())


def format_challenge_rating(value: float) -> str:
    """Render a numeric CR the way stat blocks write it (0.25 -> "1/4")."""
    if value in _FRACTIONS:
        return _FRACTIONS[value]
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"
