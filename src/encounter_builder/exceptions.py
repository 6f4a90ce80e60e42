"""
Exception hierarchy for the encounter builder.

Parse defects in author-edited tables are never raised; they are defaulted
and logged. The exceptions below cover the cases the caller has to act on:
invalid scoring input, ambiguous document matches, and rejected manual
entries.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import DocumentCandidate


class EncounterBuilderError(Exception):
    """Base exception for all encounter builder errors.

    Attributes:
        message: Human-readable error message
        details: Optional dictionary of additional error context
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidPartyLevelError(EncounterBuilderError, ValueError):
    """Party level is outside the 1-20 range covered by the budget table.

    Attributes:
        level: The rejected level
    """

    def __init__(self, level: int):
        super().__init__(
            f"Party level must be between 1 and 20, got {level}",
            details={"level": level},
        )
        self.level = level


class AmbiguousCreatureError(EncounterBuilderError):
    """Several documents match a creature name and none could be preferred.

    The caller is expected to pick one of ``candidates`` and retry with an
    explicit choice.

    Attributes:
        creature_name: The name that was looked up
        candidates: The documents left after stat-block filtering
    """

    def __init__(self, creature_name: str, candidates: list[DocumentCandidate]):
        super().__init__(
            f"Found {len(candidates)} possible documents for '{creature_name}'",
            details={"identifiers": [c.identifier for c in candidates]},
        )
        self.creature_name = creature_name
        self.candidates = candidates


class CreatureNotFoundError(EncounterBuilderError):
    """A creature named without stats has no note in the vault.

    Attributes:
        creature_name: The name that was looked up
    """

    def __init__(self, creature_name: str):
        super().__init__(f"Could not find stats for '{creature_name}'")
        self.creature_name = creature_name


class ManualEntryError(EncounterBuilderError, ValueError):
    """Manually entered creature stats were rejected."""
    pass


class EmptyEncounterError(EncounterBuilderError, ValueError):
    """An encounter table was requested for an empty creature list."""
    pass


__all__ = [
    "EncounterBuilderError",
    "InvalidPartyLevelError",
    "AmbiguousCreatureError",
    "CreatureNotFoundError",
    "ManualEntryError",
    "EmptyEncounterError",
]
