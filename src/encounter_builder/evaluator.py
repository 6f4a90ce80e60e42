"""
Encounter difficulty evaluation.

Scores a parsed encounter against a party with two independent models:

- DMG 2024: total XP, scaled by an encounter-size multiplier, compared to
  per-character XP budgets (Low / Moderate / High / Out of Bounds).
- Lazy DM: summed CR and the single highest CR, compared to fractions of
  the party's total levels.

The two ratings are reported side by side; neither feeds the other.
"""

from __future__ import annotations

import logging
import math

from .exceptions import InvalidPartyLevelError
from .models import (
    DifficultyBudget,
    DifficultyResult,
    DmgRating,
    EncounterAggregate,
    LazyRating,
    PartyProfile,
)

logger = logging.getLogger("encounter-builder.difficulty")


# =============================================================================
# Constants: XP Budget per Character (DMG 2024)
# =============================================================================

def _budget(low: int, moderate: int, high: int, out_of_bounds: int) -> DifficultyBudget:
    return DifficultyBudget(low=low, moderate=moderate, high=high, out_of_bounds=out_of_bounds)


# Not derivable from a formula; reproduced from the published table.
DIFFICULTY_BUDGETS: dict[int, DifficultyBudget] = {
    1:  _budget(50,   75,    100,   150),
    2:  _budget(100,  150,   200,   300),
    3:  _budget(150,  225,   400,   600),
    4:  _budget(250,  375,   500,   750),
    5:  _budget(500,  750,   1100,  1600),
    6:  _budget(600,  1000,  1400,  2100),
    7:  _budget(750,  1300,  1700,  2500),
    8:  _budget(1000, 1700,  2100,  3200),
    9:  _budget(1300, 2000,  2600,  3900),
    10: _budget(1600, 2300,  3100,  4700),
    11: _budget(1900, 2900,  4100,  6100),
    12: _budget(2200, 3700,  4700,  7000),
    13: _budget(2600, 4200,  5400,  8000),
    14: _budget(2900, 4900,  6200,  9200),
    15: _budget(3300, 5400,  7800,  11500),
    16: _budget(3800, 6100,  9800,  14500),
    17: _budget(4500, 7200,  11700, 17500),
    18: _budget(5000, 8700,  14200, 21500),
    19: _budget(5500, 10700, 17200, 26000),
    20: _budget(6400, 13200, 22000, 33000),
}


# =============================================================================
# Constants: Encounter Multipliers
# =============================================================================

# Ordered list of (creature_count_threshold, multiplier).
# Use the multiplier of the last entry whose threshold is <= creature count.
ENCOUNTER_MULTIPLIERS: list[tuple[int, float]] = [
    (1,  1.0),
    (2,  1.5),
    (3,  2.0),
    (7,  2.5),
    (11, 3.0),
    (15, 4.0),
]

# Lazy DM: a tier is reached once either axis passes this share of its threshold
_LAZY_HARD_SHARE = 0.75
_LAZY_MEDIUM_SHARE = 0.5


# =============================================================================
# Core Functions
# =============================================================================

def _check_level(level: int) -> None:
    if level not in DIFFICULTY_BUDGETS:
        raise InvalidPartyLevelError(level)


def get_party_thresholds(party: PartyProfile) -> DifficultyBudget:
    """Party-wide XP thresholds: the per-character budget times party size.

    Raises:
        InvalidPartyLevelError: If the average level is outside 1-20.
    """
    _check_level(party.average_level)
    return DIFFICULTY_BUDGETS[party.average_level].scaled(party.size)


def get_encounter_multiplier(creature_count: int) -> float:
    """Multiplier for the number of creatures in an encounter.

    An empty encounter gets 1.0, like a single creature.
    """
    multiplier = ENCOUNTER_MULTIPLIERS[0][1]
    for threshold, value in ENCOUNTER_MULTIPLIERS:
        if creature_count >= threshold:
            multiplier = value
    return multiplier


def classify_dmg_difficulty(adjusted_xp: int, thresholds: DifficultyBudget) -> DmgRating:
    """Highest DMG tier whose threshold the adjusted XP meets."""
    if adjusted_xp >= thresholds.out_of_bounds:
        return DmgRating.OUT_OF_BOUNDS
    elif adjusted_xp >= thresholds.high:
        return DmgRating.HIGH
    elif adjusted_xp >= thresholds.moderate:
        return DmgRating.MODERATE
    elif adjusted_xp >= thresholds.low:
        return DmgRating.LOW
    else:
        return DmgRating.BELOW_LOW


def lazy_thresholds(party: PartyProfile) -> tuple[float, float]:
    """Lazy DM (total CR, single CR) thresholds for a party.

    Below level 5 the encounter is potentially deadly past 1/4 of the total
    party levels, or a single creature past the average level. From level 5
    on, the limits are 1/2 of total levels and 1.5x the average level.
    """
    level = party.average_level
    total_party_levels = party.size * level
    if level >= 5:
        return total_party_levels / 2, level * 1.5
    return total_party_levels / 4, float(level)


def classify_lazy_difficulty(
    total_cr: float,
    highest_cr: float,
    cr_threshold: float,
    single_threshold: float,
) -> LazyRating:
    """Lazy DM rating: the worse of the total-CR and single-CR axes."""
    if total_cr > cr_threshold or highest_cr > single_threshold:
        return LazyRating.POTENTIALLY_DEADLY
    if (total_cr > cr_threshold * _LAZY_HARD_SHARE
            or highest_cr > single_threshold * _LAZY_HARD_SHARE):
        return LazyRating.HARD
    if (total_cr > cr_threshold * _LAZY_MEDIUM_SHARE
            or highest_cr > single_threshold * _LAZY_MEDIUM_SHARE):
        return LazyRating.MEDIUM
    return LazyRating.EASY


def evaluate_difficulty(
    encounter: EncounterAggregate,
    party: PartyProfile,
    apply_multipliers: bool = True,
) -> DifficultyResult:
    """Rate an encounter for a party with both difficulty models.

    Args:
        encounter: Parsed encounter table.
        party: Party size and average level.
        apply_multipliers: Scale total XP by the encounter-size multiplier.

    Returns:
        DifficultyResult with the DMG and Lazy DM ratings.

    Raises:
        InvalidPartyLevelError: If the average level is outside 1-20.
    """
    thresholds = get_party_thresholds(party)
    base_xp = encounter.total_experience_points
    creature_count = encounter.creature_count

    multiplier = 1.0
    adjusted_xp = base_xp
    if apply_multipliers:
        multiplier = get_encounter_multiplier(creature_count)
        adjusted_xp = math.floor(base_xp * multiplier)

    dmg_rating = classify_dmg_difficulty(adjusted_xp, thresholds)

    cr_threshold, single_threshold = lazy_thresholds(party)
    lazy_rating = classify_lazy_difficulty(
        encounter.total_challenge_rating,
        encounter.highest_challenge_rating,
        cr_threshold,
        single_threshold,
    )

    logger.debug(
        f"Evaluated {creature_count} creatures vs {party.size}x L{party.average_level}: "
        f"{base_xp} XP x{multiplier} = {adjusted_xp} ({dmg_rating.value}), lazy {lazy_rating.value}"
    )

    return DifficultyResult(
        dmg_rating=dmg_rating,
        adjusted_experience_points=adjusted_xp,
        multiplier_applied=multiplier,
        lazy_rating=lazy_rating,
        base_experience_points=base_xp,
        creature_count=creature_count,
        thresholds=thresholds,
        total_challenge_rating=encounter.total_challenge_rating,
        highest_challenge_rating=encounter.highest_challenge_rating,
        cr_threshold=cr_threshold,
        single_creature_threshold=single_threshold,
    )


def format_difficulty_report(result: DifficultyResult, party: PartyProfile) -> str:
    """Render a plain-text difficulty summary for display."""
    level = party.average_level
    lines = [f"Difficulty for {party.size} level {level} characters", ""]

    lines.append("DMG 2024 Difficulty (XP Based)")
    if result.multiplier_applied > 1:
        lines.append(
            f"Base XP: {result.base_experience_points:,} × Multiplier: {result.multiplier_applied:g} "
            f"= Adjusted XP: {result.adjusted_experience_points:,}"
        )
        lines.append(f"(Multiplier based on {result.creature_count} total monsters)")

    if result.thresholds is not None:
        tiers = [
            (DmgRating.LOW, result.thresholds.low),
            (DmgRating.MODERATE, result.thresholds.moderate),
            (DmgRating.HIGH, result.thresholds.high),
            (DmgRating.OUT_OF_BOUNDS, result.thresholds.out_of_bounds),
        ]
        for rating, threshold in tiers:
            if rating == result.dmg_rating:
                status = "✓"
            elif result.adjusted_experience_points < threshold:
                status = "Below"
            else:
                status = "Met/Exceeded"
            lines.append(f"  {rating.value:<14} {threshold:>8,}  {status}")

    if result.multiplier_applied > 1:
        lines.append(
            f"Total XP: {result.base_experience_points:,}, Adjusted: {result.adjusted_experience_points:,}. "
            f"DMG Rating: {result.dmg_rating.value}."
        )
    else:
        lines.append(f"Encounter Total XP: {result.base_experience_points:,}. DMG Rating: {result.dmg_rating.value}.")

    share = "1/2" if level >= 5 else "1/4"
    single_desc = "~1.5x avg party level" if level >= 5 else "~avg party level"
    lines += [
        "",
        "Lazy DM Benchmark (CR Based)",
        f"Party: {party.size} characters, avg level {level} (Total Levels: {party.size * level})",
        f"Potentially deadly if total monster CR > {result.cr_threshold:.2f} ({share} total party levels).",
        f"Sum of Monster CRs: {result.total_challenge_rating:.2f}",
        f"Single monster may be deadly if its CR > {result.single_creature_threshold:.2f} ({single_desc}).",
        f"Highest single monster CR: {result.highest_challenge_rating:.2f}",
        f"Lazy DM CR Rating: {result.lazy_rating.value}",
    ]
    return "\n".join(lines)
