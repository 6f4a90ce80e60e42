"""
Encounter Builder - D&D 2024 encounter tables, creature stat lookup and
difficulty scoring, served over MCP with FastMCP.
"""

from .challenge_rating import CR_TO_XP, lookup_experience_for_challenge_rating, parse_challenge_rating
from .config import EncounterBuilderConfig
from .evaluator import DIFFICULTY_BUDGETS, evaluate_difficulty
from .exceptions import *
from .models import *
from .stat_extractor import encounter_row_stats, extract_creature_stats, manual_creature_stats
from .table_parser import parse_encounter_table, render_encounter_table

try:
    from importlib.metadata import version as _get_version
    __version__ = _get_version("encounter-builder-mcp")
except Exception:
    __version__ = "0.1.0"  # Fallback if metadata unavailable
__all__ = [
    "CR_TO_XP",
    "DIFFICULTY_BUDGETS",
    "EncounterBuilderConfig",
    "encounter_row_stats",
    "evaluate_difficulty",
    "extract_creature_stats",
    "lookup_experience_for_challenge_rating",
    "manual_creature_stats",
    "parse_challenge_rating",
    "parse_encounter_table",
    "render_encounter_table",
]
