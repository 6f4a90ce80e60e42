"""Pydantic models for encounter parsing, stat lookup and difficulty scoring."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class StatSource(str, Enum):
    """Where a creature's CR/XP came from."""
    PRIMARY_RULESET = "primary-ruleset"
    LEGACY_RULESET = "legacy-ruleset"
    CUSTOM = "custom"
    MANUAL = "manual"


class DmgRating(str, Enum):
    """DMG 2024 difficulty tiers, based on adjusted encounter XP."""
    BELOW_LOW = "Below Low"
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
    OUT_OF_BOUNDS = "Out of Bounds"


class LazyRating(str, Enum):
    """Lazy DM benchmark tiers, based on summed and peak CR."""
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"
    POTENTIALLY_DEADLY = "Potentially Deadly"


class CreatureEntry(BaseModel):
    """One row of an encounter table."""
    quantity: int = Field(ge=1, description="Number of this creature in the encounter")
    name: str = Field(description="Creature name as written in the table")
    challenge_rating_text: str = Field(default="", description="CR as displayed (e.g. '1/4', '5')")
    challenge_rating_value: float = Field(default=0.0, ge=0, description="Numeric CR")
    experience_points: int = Field(default=0, ge=0, description="XP per creature")

    model_config = {"frozen": True}

    @property
    def total_experience_points(self) -> int:
        """XP for the whole row (quantity x XP)."""
        return self.quantity * self.experience_points


class EncounterAggregate(BaseModel):
    """A parsed encounter table with its aggregate totals."""
    creatures: list[CreatureEntry] = Field(default_factory=list, description="Rows in table order")
    total_experience_points: int = Field(default=0, ge=0, description="Explicit total if present, else row sum")
    total_challenge_rating: float = Field(default=0.0, ge=0, description="Sum of quantity x CR")
    highest_challenge_rating: float = Field(default=0.0, ge=0, description="Highest single CR")

    model_config = {"frozen": True}

    @property
    def creature_count(self) -> int:
        """Total number of creatures across all rows."""
        return sum(c.quantity for c in self.creatures)


class StatLookupResult(BaseModel):
    """CR and XP recovered for a single creature."""
    challenge_rating_text: str
    experience_points: int = Field(ge=0)
    source_tag: StatSource = StatSource.CUSTOM

    model_config = {"frozen": True}


class PartyProfile(BaseModel):
    """Party parameters for difficulty scoring.

    The level is not range-checked here; the evaluator rejects levels
    outside 1-20 with its own error.
    """
    size: int = Field(ge=1, description="Number of characters")
    average_level: int = Field(description="Average character level")


class DifficultyBudget(BaseModel):
    """Per-character XP thresholds for one character level."""
    low: int = Field(ge=0)
    moderate: int = Field(ge=0)
    high: int = Field(ge=0)
    out_of_bounds: int = Field(ge=0)

    model_config = {"frozen": True}

    def scaled(self, party_size: int) -> DifficultyBudget:
        """Thresholds for a whole party of ``party_size`` characters."""
        return DifficultyBudget(
            low=self.low * party_size,
            moderate=self.moderate * party_size,
            high=self.high * party_size,
            out_of_bounds=self.out_of_bounds * party_size,
        )


class DifficultyResult(BaseModel):
    """Both difficulty classifications plus the numbers behind them."""
    dmg_rating: DmgRating
    adjusted_experience_points: int = Field(ge=0)
    multiplier_applied: float = Field(gt=0)
    lazy_rating: LazyRating
    base_experience_points: int = Field(default=0, ge=0, description="Total XP before the multiplier")
    creature_count: int = Field(default=0, ge=0)
    thresholds: DifficultyBudget | None = Field(default=None, description="Party-wide XP thresholds")
    total_challenge_rating: float = Field(default=0.0, ge=0)
    highest_challenge_rating: float = Field(default=0.0, ge=0)
    cr_threshold: float = Field(default=0.0, description="Lazy DM total-CR threshold")
    single_creature_threshold: float = Field(default=0.0, description="Lazy DM single-creature threshold")

    model_config = {"frozen": True}


class DocumentCandidate(BaseModel):
    """A document that may hold a creature's stat block."""
    identifier: str = Field(description="Path or other stable identifier of the document")
    text_content: str = Field(default="", description="Full document text")

    model_config = {"frozen": True}

    @property
    def basename(self) -> str:
        """Document name without directories or the .md suffix."""
        name = self.identifier.replace("\\", "/").rsplit("/", 1)[-1]
        if name.lower().endswith(".md"):
            name = name[:-3]
        return name


__all__ = [
    "StatSource",
    "DmgRating",
    "LazyRating",
    "CreatureEntry",
    "EncounterAggregate",
    "StatLookupResult",
    "PartyProfile",
    "DifficultyBudget",
    "DifficultyResult",
    "DocumentCandidate",
]
