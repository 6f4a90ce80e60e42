"""
Encounter table parsing and rendering.

Encounter tables are pipe-delimited markdown tables with the fixed column
order Qty | Creature | CR | XP | Total XP, an optional separator row and an
optional final "Total" row. They are edited by hand, so the parser tolerates
missing cells and bad numbers: defects are logged and defaulted, never
raised.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable

from .challenge_rating import format_challenge_rating, parse_challenge_rating
from .exceptions import EmptyEncounterError
from .models import CreatureEntry, EncounterAggregate

logger = logging.getLogger("encounter-builder.table")

# Column indices
QTY_COL = 0
NAME_COL = 1
CR_COL = 2
XP_COL = 3

TABLE_HEADER = "| Qty | Creature | CR | XP | Total XP |"
TABLE_SEPARATOR = "|:----|:---------|:---|---:|---------:|"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_DIGIT_RUN = re.compile(r"(\d[\d,]*)")
_SEPARATOR_CHARS = re.compile(r"[|\-:\s]")
_ENCOUNTER_BLOCK = re.compile(r"^```encounter[^\n]*\n(.*?)^```", re.MULTILINE | re.DOTALL)


def _split_cells(line: str) -> list[str]:
    """Split a table line on pipes, dropping the empty edge cells."""
    cells = [cell.strip() for cell in line.split("|")]
    if cells and cells[0] == "":
        cells.pop(0)
    if cells and cells[-1] == "":
        cells.pop()
    return cells


def _parse_int(text: str) -> int | None:
    """Parse the leading integer of a cell, ignoring thousands separators."""
    match = _LEADING_INT.match(text.replace(",", ""))
    if not match:
        return None
    return int(match.group(1))


def _unwrap_link(name: str) -> str:
    if name.startswith("[[") and name.endswith("]]"):
        return name[2:-2].strip()
    return name


def _find_explicit_total(lines: list[str]) -> int | None:
    """Return the total XP written on the first usable "total" line."""
    for line in lines:
        trimmed = line.strip()
        if "total" not in trimmed.lower():
            continue
        for cell in reversed(_split_cells(trimmed)):
            if not cell:
                continue
            match = _DIGIT_RUN.search(cell)
            if match:
                return int(match.group(1).replace(",", ""))
    return None


def parse_encounter_table(source: str | None) -> EncounterAggregate:
    """Parse an encounter table into creature entries and totals.

    Args:
        source: Raw table text, one row per line.

    Returns:
        EncounterAggregate with creatures in row order. The total XP is the
        value on an explicit "Total" row when present, otherwise the sum of
        quantity x XP over the rows.
    """
    if not source or not source.strip():
        return EncounterAggregate()

    lines = source.strip().split("\n")
    creatures: list[CreatureEntry] = []
    header_skipped = False
    row_xp = 0
    total_cr = 0.0
    highest_cr = 0.0

    for line in lines:
        trimmed = line.strip()
        if not trimmed or "|" not in trimmed or not _SEPARATOR_CHARS.sub("", trimmed):
            if "---" in trimmed:
                header_skipped = True
            continue

        lowered = trimmed.lower()
        if not header_skipped and ("creature" in lowered or "cr" in lowered):
            header_skipped = True
            continue
        if "total" in lowered:
            continue

        cells = _split_cells(trimmed)
        if len(cells) < XP_COL + 1:
            logger.warning(f"Skipping row, bad columns: {trimmed}")
            continue

        quantity = _parse_int(cells[QTY_COL])
        if quantity is None:
            quantity = 1
        if quantity <= 0:
            logger.debug(f"Dropping row with quantity {quantity}: {trimmed}")
            continue

        cr_text = cells[CR_COL]
        if not cr_text:
            logger.warning(f"Missing CR: {trimmed}")
        cr_value = parse_challenge_rating(cr_text) if cr_text else 0.0

        xp = _parse_int(cells[XP_COL])
        if xp is None or xp < 0:
            xp = 0

        creatures.append(CreatureEntry(
            quantity=quantity,
            name=_unwrap_link(cells[NAME_COL]),
            challenge_rating_text=cr_text,
            challenge_rating_value=cr_value,
            experience_points=xp,
        ))
        row_xp += quantity * xp
        total_cr += quantity * cr_value
        highest_cr = max(highest_cr, cr_value)

    explicit_total = _find_explicit_total(lines)

    return EncounterAggregate(
        creatures=creatures,
        total_experience_points=explicit_total if explicit_total is not None else row_xp,
        total_challenge_rating=total_cr,
        highest_challenge_rating=highest_cr,
    )


def render_encounter_table(creatures: Iterable[CreatureEntry], fenced: bool = False) -> str:
    """Render creatures in the canonical encounter table format.

    Args:
        creatures: Entries in the order they should appear.
        fenced: Wrap the table in an ```encounter code fence.

    Returns:
        The table text, ending with a newline.

    Raises:
        EmptyEncounterError: If there are no creatures.
    """
    creatures = list(creatures)
    if not creatures:
        raise EmptyEncounterError("Add at least one creature.")

    lines = [TABLE_HEADER, TABLE_SEPARATOR]
    total_xp = 0

    for creature in creatures:
        row_total = creature.total_experience_points
        total_xp += row_total

        link_name = creature.name.strip()
        if not (link_name.startswith("[[") and link_name.endswith("]]")):
            link_name = f"[[{link_name}]]"

        cr_text = creature.challenge_rating_text or format_challenge_rating(creature.challenge_rating_value)
        lines.append(
            f"| {creature.quantity} | {link_name} | {cr_text} | "
            f"{creature.experience_points:,} | {row_total:,} |"
        )

    lines.append(f"| **Total** | | | | **{total_xp:,}** |")
    table = "\n".join(lines) + "\n"

    if fenced:
        return f"```encounter\n{table}```\n"
    return table


def extract_encounter_blocks(markdown: str) -> list[str]:
    """Return the bodies of all ```encounter code blocks in a note."""
    return [match.group(1) for match in _ENCOUNTER_BLOCK.finditer(markdown or "")]
