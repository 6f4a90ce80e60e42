"""
Configuration model for the encounter builder.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, Field, field_validator

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean (true/false), got {raw!r}")


class EncounterBuilderConfig(BaseModel):
    """Settings for creature lookup and difficulty scoring.

    The config is passed explicitly into lookups and evaluations; nothing
    reads it from module state.
    """

    # Difficulty scoring
    use_encounter_multipliers: bool = Field(
        default=True,
        description="Scale encounter XP by the number of creatures before rating it"
    )
    default_party_size: int = Field(
        default=4,
        ge=1,
        description="Party size used when a caller does not give one"
    )
    default_party_level: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Average party level used when a caller does not give one"
    )

    # Creature lookup
    monster_locations: list[str] = Field(
        default_factory=lambda: ["2024_z_compendium/bestiary", "z_compendium/bestiary"],
        description="Vault sub-paths searched first for creature notes, in priority order"
    )
    search_all_vault: bool = Field(
        default=True,
        description="Fall back to the whole vault when the monster locations have no match"
    )
    primary_ruleset_marker: str = Field(
        default="2024_z_compendium",
        description="Path fragment identifying notes from the current ruleset"
    )
    legacy_ruleset_marker: str = Field(
        default="z_compendium",
        description="Path fragment identifying notes from the legacy ruleset"
    )

    @field_validator("monster_locations")
    @classmethod
    def drop_blank_locations(cls, v: list[str]) -> list[str]:
        """Ignore empty location entries."""
        return [loc.strip() for loc in v if loc and loc.strip()]

    @classmethod
    def from_env(cls) -> EncounterBuilderConfig:
        """Build a config from ENCOUNTER_* environment variables.

        Unset variables keep their defaults.

        Raises:
            ValueError: If a boolean variable holds an unrecognized value.
        """
        defaults = cls()
        data: dict = {
            "use_encounter_multipliers": _env_bool(
                "ENCOUNTER_USE_MULTIPLIERS", defaults.use_encounter_multipliers
            ),
            "search_all_vault": _env_bool("ENCOUNTER_SEARCH_ALL_VAULT", defaults.search_all_vault),
        }
        locations = os.getenv("ENCOUNTER_MONSTER_LOCATIONS")
        if locations is not None:
            data["monster_locations"] = locations.split(",")
        return cls(**data)
