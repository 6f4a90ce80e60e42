"""
Creature stat extraction from free-form markdown.

Stat blocks come in several shapes: classic "Challenge 5 (1,800 XP)" lines,
2024-style "**CR** :: 5" fields, YAML front matter, and summon templates
whose CR scales with the spell. ``extract_creature_stats`` tries one
strategy per shape in a fixed priority order and returns the first hit.
The order matters: a note can hold both front matter and a challenge line,
and the challenge line wins.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Mapping, Optional

from .challenge_rating import lookup_experience_for_challenge_rating
from .exceptions import ManualEntryError
from .models import StatLookupResult, StatSource

logger = logging.getLogger("encounter-builder.stats")

MetadataProvider = Callable[[], Optional[Mapping[str, Any]]]

CHALLENGE_LINE_RE = re.compile(
    r"(?:\*\*|__)?Challenge(?:\*\*|__)?\s*:?\s*(?:\*\*|__)?\s*([0-9/]+)\s*\(([0-9,]+)\s*XP\)",
    re.IGNORECASE,
)
CR_FIELD_RE = re.compile(r"\*\*CR\*\*[\s:]*::[\s:]*([0-9/]+)", re.IGNORECASE)
CR_LENIENT_RE = re.compile(r"\*\*CR\*\*.*?([0-9/]+)", re.IGNORECASE)
FRONT_MATTER_RE = re.compile(r"^---\s*([\s\S]*?)\s*---")
FRONT_MATTER_CR_RE = re.compile(r"^cr:\s*['\"]?([0-9/]+)['\"]?", re.IGNORECASE | re.MULTILINE)
FRONT_MATTER_XP_RE = re.compile(r"^xp:\s*['\"]?([0-9,]+)['\"]?", re.IGNORECASE | re.MULTILINE)

MONSTER_TEMPLATE_MARKER = "{{monster"
SCALING_PHRASE = "spell's level"
VARIABLE_CR = "Varies"


def _parse_xp(value: Any) -> int | None:
    """Parse an XP value that may carry thousands separators."""
    if value is None or isinstance(value, bool):
        return None
    match = re.match(r"\s*(\d+)", str(value).replace(",", ""))
    return int(match.group(1)) if match else None


def _from_challenge_line(text: str) -> tuple[str, int] | None:
    match = CHALLENGE_LINE_RE.search(text)
    if not match:
        return None
    xp = _parse_xp(match.group(2))
    if xp is None:
        return None
    return match.group(1).strip(), xp


def _from_cr_field(text: str, pattern: re.Pattern[str]) -> tuple[str, int] | None:
    """Read a CR with ``pattern`` and derive the XP from the CR table."""
    match = pattern.search(text)
    if not match:
        return None
    cr = match.group(1).strip()
    xp = lookup_experience_for_challenge_rating(cr)
    if xp is None:
        logger.debug(f"CR {cr!r} matched {pattern.pattern!r} but is not in the XP table")
        return None
    return cr, xp


def _from_fields(cr_value: Any, xp_value: Any) -> tuple[str, int] | None:
    """Combine cr/xp fields, deriving a missing XP from the CR."""
    if cr_value is None:
        return None
    cr = str(cr_value).strip()
    if not cr:
        return None
    xp = _parse_xp(xp_value)
    if xp is None:
        xp = lookup_experience_for_challenge_rating(cr)
    if xp is None:
        logger.warning(f"Found CR {cr!r} in metadata but could not look up its XP")
        return None
    return cr, xp


def _from_front_matter(text: str, metadata: MetadataProvider | None) -> tuple[str, int] | None:
    """Read cr/xp from parsed front matter, or scan the text when there is none."""
    fields = metadata() if metadata is not None else None
    if fields is None:
        return _from_front_matter_text(text)
    return _from_fields(fields.get("cr"), fields.get("xp"))


def _from_front_matter_text(text: str) -> tuple[str, int] | None:
    match = FRONT_MATTER_RE.match(text)
    if not match:
        return None
    block = match.group(1)
    cr_match = FRONT_MATTER_CR_RE.search(block)
    if not cr_match:
        return None
    xp_match = FRONT_MATTER_XP_RE.search(block)
    return _from_fields(cr_match.group(1), xp_match.group(1) if xp_match else None)


def extract_creature_stats(
    text: str,
    creature_name: str = "Unknown",
    metadata: MetadataProvider | None = None,
    source_tag: StatSource = StatSource.CUSTOM,
) -> StatLookupResult | None:
    """Recover a creature's CR and XP from its document text.

    Strategies, first success wins:

    1. Challenge line: ``Challenge 5 (1,800 XP)``.
    2. 2024 field: ``**CR** :: 5``, XP from the CR table.
    3. Lenient field: ``**CR**`` followed by any CR-shaped token.
    4. Structured front matter from ``metadata``.
    5. Front matter scraped from the text, when ``metadata`` is None or
       finds no usable front matter (e.g. invalid YAML).
    6. Summon templates that scale with the spell's level give CR "Varies".

    Args:
        text: Full document text.
        creature_name: Used in log messages only.
        metadata: Callable returning the document's front-matter fields.
        source_tag: Tag to put on a successful result.

    Returns:
        StatLookupResult, or None if no strategy matched.
    """
    text = text or ""

    strategies: list[tuple[str, Callable[[], tuple[str, int] | None]]] = [
        ("challenge line", lambda: _from_challenge_line(text)),
        ("CR field", lambda: _from_cr_field(text, CR_FIELD_RE)),
        ("lenient CR field", lambda: _from_cr_field(text, CR_LENIENT_RE)),
        ("front matter", lambda: _from_front_matter(text, metadata)),
    ]

    for label, strategy in strategies:
        found = strategy()
        if found:
            cr, xp = found
            logger.info(f"Parsed stats for {creature_name} via {label}: CR={cr}, XP={xp}")
            return StatLookupResult(challenge_rating_text=cr, experience_points=xp, source_tag=source_tag)

    if MONSTER_TEMPLATE_MARKER in text and SCALING_PHRASE in text:
        logger.info(f"{creature_name} appears to be a summon with variable CR")
        return StatLookupResult(challenge_rating_text=VARIABLE_CR, experience_points=0, source_tag=source_tag)

    logger.warning(f"Could not find/parse CR/XP for {creature_name}. Check note format.")
    return None


def manual_creature_stats(cr_text: str | None, xp: int | str | None = None) -> StatLookupResult:
    """Build stats typed in by hand when automatic extraction failed.

    A missing XP is filled in from the CR table.

    Raises:
        ManualEntryError: If the CR is blank or the XP is not positive.
    """
    cr = (cr_text or "").strip()
    if not cr:
        raise ManualEntryError("Please enter a Challenge Rating")

    xp_value = _parse_xp(xp)
    if xp_value is None:
        xp_value = lookup_experience_for_challenge_rating(cr)
    if not xp_value or xp_value <= 0:
        raise ManualEntryError(
            "Please enter a valid XP value (greater than 0)",
            details={"cr": cr, "xp": xp},
        )

    return StatLookupResult(challenge_rating_text=cr, experience_points=xp_value, source_tag=StatSource.MANUAL)


def encounter_row_stats(cr_text: str | None, xp: int | str | None = None) -> StatLookupResult:
    """Stats for one row added to an encounter table.

    Unlike manual lookups, a row may be worth 0 XP (summons with a
    "Varies" CR, CR 0 creatures). A missing XP is filled in from the CR table.

    Raises:
        ManualEntryError: If the CR is blank, or the XP is negative, not a
            number, or cannot be derived from the CR.
    """
    cr = (cr_text or "").strip()
    if not cr:
        raise ManualEntryError("Please enter or lookup a CR value")

    if xp is None or (isinstance(xp, str) and not xp.strip()):
        xp_value = lookup_experience_for_challenge_rating(cr)
    else:
        match = None if isinstance(xp, bool) else re.fullmatch(r"\s*([+-]?\d+)\s*", str(xp).replace(",", ""))
        xp_value = int(match.group(1)) if match else None

    if xp_value is None or xp_value < 0:
        raise ManualEntryError(
            "Please enter a valid XP value (0 or more)",
            details={"cr": cr, "xp": xp},
        )

    return StatLookupResult(challenge_rating_text=cr, experience_points=xp_value, source_tag=StatSource.MANUAL)
