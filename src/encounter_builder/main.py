"""
Encounter Builder MCP Server
Builds D&D 2024 encounter tables, looks up creature stats in a markdown vault,
and rates encounter difficulty, exposed as FastMCP tools.
"""

import json
import logging
import os
from pathlib import Path
from typing import Annotated

from dotenv import load_dotenv
from fastmcp import FastMCP
from pydantic import Field, ValidationError

from .challenge_rating import lookup_experience_for_challenge_rating, parse_challenge_rating
from .config import EncounterBuilderConfig
from .evaluator import evaluate_difficulty, format_difficulty_report
from .exceptions import AmbiguousCreatureError, CreatureNotFoundError, EncounterBuilderError
from .models import CreatureEntry, EncounterAggregate, PartyProfile
from .stat_extractor import encounter_row_stats
from .table_parser import extract_encounter_blocks, parse_encounter_table, render_encounter_table
from .vault import DocumentRepository, VaultRepository, resolve_creature_stats

logger = logging.getLogger("encounter-builder")

logging.basicConfig(
    level=logging.DEBUG,
    )

if not load_dotenv():
    logger.warning("❌ .env file invalid or not found! Using environment and defaults.")

vault_path = Path(os.getenv("ENCOUNTER_VAULT_DIR", "")).resolve()
logger.debug(f"📂 Vault path: {vault_path}")

config = EncounterBuilderConfig.from_env()
repository = VaultRepository(vault_path, config)
logger.debug("✅ Vault repository initialized")

mcp = FastMCP(
    name="encounter-builder"
)


# ----------------------------------------------------------------------
# Tool logic
# ----------------------------------------------------------------------

def _encounter_source(text: str) -> str:
    """Use the first ```encounter block of a note, or the text as-is."""
    blocks = extract_encounter_blocks(text)
    return blocks[0] if blocks else text


def _ambiguous_message(e: AmbiguousCreatureError) -> str:
    options = "\n".join(f"- {c.identifier}" for c in e.candidates)
    return f"🔎 {e.message}. Call again with `choice` set to one of:\n{options}"


def _not_found_message(name: str) -> str:
    return (
        f"❌ Could not find stats for '{name}'. "
        "Enter the CR (and optionally XP) manually when creating the encounter."
    )


def _lookup_creature_logic(
    name: str,
    repository: DocumentRepository,
    config: EncounterBuilderConfig,
    choice: str | None = None,
) -> str:
    try:
        stats = resolve_creature_stats(name, repository, config, choice=choice)
    except AmbiguousCreatureError as e:
        return _ambiguous_message(e)

    if stats is None:
        return _not_found_message(name)
    return (
        f"📖 {name}: CR {stats.challenge_rating_text}, "
        f"{stats.experience_points:,} XP (source: {stats.source_tag.value})"
    )


def _build_creature_entries(
    creatures: list[dict],
    repository: DocumentRepository,
    config: EncounterBuilderConfig,
) -> list[CreatureEntry]:
    """Turn tool input rows into creature entries.

    Each row needs a name and a quantity (default 1). A row without a CR is
    looked up in the vault; a row without XP gets it from the CR table.

    Raises:
        CreatureNotFoundError: If a row without a CR has no note in the vault.
        AmbiguousCreatureError: If a row without a CR matches several notes
            and gives no ``choice``.
    """
    entries = []
    for row in creatures:
        name = str(row.get("name", "")).strip()
        if not name:
            raise EncounterBuilderError("Every creature needs a name")

        cr = "" if row.get("cr") is None else str(row["cr"]).strip()
        if cr:
            stats = encounter_row_stats(cr, row.get("xp"))
        else:
            stats = resolve_creature_stats(name, repository, config, choice=row.get("choice"))
            if stats is None:
                raise CreatureNotFoundError(name)

        entries.append(CreatureEntry(
            quantity=int(row.get("quantity", 1)),
            name=name,
            challenge_rating_text=stats.challenge_rating_text,
            challenge_rating_value=parse_challenge_rating(stats.challenge_rating_text),
            experience_points=stats.experience_points,
        ))
    return entries


def _create_encounter_table_logic(
    creatures_json: str,
    repository: DocumentRepository,
    config: EncounterBuilderConfig,
) -> str:
    try:
        rows = json.loads(creatures_json)
    except json.JSONDecodeError as e:
        return f"❌ Invalid creatures JSON: {e}"
    if not isinstance(rows, list):
        return "❌ Creatures must be a JSON list of objects"

    try:
        entries = _build_creature_entries(rows, repository, config)
        return render_encounter_table(entries, fenced=True)
    except AmbiguousCreatureError as e:
        return _ambiguous_message(e)
    except CreatureNotFoundError as e:
        return _not_found_message(e.creature_name)
    except (EncounterBuilderError, ValidationError, ValueError, TypeError, AttributeError) as e:
        return f"❌ {e}"


def _summarize_encounter(encounter: EncounterAggregate) -> str:
    lines = [f"{'Qty':>4}  {'Creature':<28} {'CR':>5} {'XP':>8}"]
    for c in encounter.creatures:
        lines.append(f"{c.quantity:>4}  {c.name:<28} {c.challenge_rating_text:>5} {c.experience_points:>8,}")
    lines.append(
        f"Total XP: {encounter.total_experience_points:,} | Total CR: {encounter.total_challenge_rating:.2f} "
        f"| Highest CR: {encounter.highest_challenge_rating:.2f} | Creatures: {encounter.creature_count}"
    )
    return "\n".join(lines)


def _parse_encounter_logic(table: str) -> str:
    encounter = parse_encounter_table(_encounter_source(table))
    if not encounter.creatures:
        return "No creatures found in the encounter table."
    return _summarize_encounter(encounter)


def _calculate_difficulty_logic(
    table: str,
    party_size: int,
    party_level: int,
    config: EncounterBuilderConfig,
    use_multipliers: bool | None = None,
) -> str:
    try:
        party = PartyProfile(size=party_size, average_level=party_level)
    except ValidationError:
        return "❌ Party size must be at least 1."

    encounter = parse_encounter_table(_encounter_source(table))
    apply = config.use_encounter_multipliers if use_multipliers is None else use_multipliers
    try:
        result = evaluate_difficulty(encounter, party, apply_multipliers=apply)
    except EncounterBuilderError as e:
        return f"❌ {e.message}"
    return format_difficulty_report(result, party)


# ----------------------------------------------------------------------
# Tools
# ----------------------------------------------------------------------

@mcp.tool
def lookup_creature_stats(
    name: Annotated[str, Field(description="Creature name, matched against note names in the vault")],
    choice: Annotated[str | None, Field(description="Vault path of the note to use when several match")] = None,
) -> str:
    """Look up a creature's CR and XP from its note in the vault."""
    return _lookup_creature_logic(name, repository, config, choice=choice)


@mcp.tool
def get_xp_for_cr(
    cr: Annotated[str, Field(description="Challenge rating, e.g. '1/4' or '5'")],
) -> str:
    """Get the XP value for a challenge rating."""
    xp = lookup_experience_for_challenge_rating(cr)
    if xp is None:
        return f"❌ Unknown challenge rating: '{cr}'"
    return f"CR {cr.strip()} = {xp:,} XP"


@mcp.tool
def create_encounter_table(
    creatures_json: Annotated[str, Field(description="""
        JSON list of creatures, e.g. [{"name": "Goblin", "quantity": 2, "cr": "1/4", "xp": 50}].
        "xp" is optional and looked up from "cr" when missing.
        Leave out "cr" to look the creature up in the vault ("choice" picks a note when several match).
        """)],
) -> str:
    """Create a markdown encounter table (```encounter block) from a list of creatures."""
    return _create_encounter_table_logic(creatures_json, repository, config)


@mcp.tool
def parse_encounter(
    table: Annotated[str, Field(description="Encounter table, or a note containing an ```encounter block")],
) -> str:
    """Parse an encounter table and report its creatures and totals."""
    return _parse_encounter_logic(table)


@mcp.tool
def calculate_encounter_difficulty(
    table: Annotated[str, Field(description="Encounter table, or a note containing an ```encounter block")],
    party_size: Annotated[int | None, Field(description="Number of characters")] = None,
    party_level: Annotated[int | None, Field(description="Average character level (1-20)")] = None,
    use_multipliers: Annotated[bool | None, Field(description="Override the encounter-size multiplier setting")] = None,
) -> str:
    """Rate an encounter with the DMG 2024 XP budgets and the Lazy DM CR benchmark."""
    return _calculate_difficulty_logic(
        table,
        party_size if party_size is not None else config.default_party_size,
        party_level if party_level is not None else config.default_party_level,
        config,
        use_multipliers=use_multipliers,
    )


logger.debug("✅ All tools successfully registered. Encounter Builder server running! 🎲")


def main() -> None:
    """Main entry point for the Encounter Builder MCP server."""
    mcp.run()

if __name__ == "__main__":
    main()
