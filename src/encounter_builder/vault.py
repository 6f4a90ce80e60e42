"""
Creature document lookup over a markdown vault.

The stat extractor works on a single text blob. This module is the host side
of that contract: it finds candidate notes for a creature name, narrows them
down to the one holding a stat block, tags where the stats came from, and
reads YAML front matter for the metadata strategy.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol, Sequence

import yaml

from .config import EncounterBuilderConfig
from .exceptions import AmbiguousCreatureError, EncounterBuilderError
from .models import DocumentCandidate, StatLookupResult, StatSource
from .stat_extractor import extract_creature_stats

logger = logging.getLogger("encounter-builder.vault")

# Text that only shows up in notes holding a stat block
STAT_BLOCK_MARKERS: list[str] = [
    "**AC**",
    "**HP**",
    "**CR**",
    "{{stats",
    "{{vitals",
    "Challenge Rating",
    "hit points",
]


class FrontMatterError(EncounterBuilderError):
    """Raised when a note's YAML front matter cannot be read."""


class DocumentRepository(Protocol):
    """Source of creature documents, supplied by the host application."""

    def find_candidates(self, name: str) -> Sequence[DocumentCandidate]:
        """Return every document that may describe the named creature."""
        ...


def parse_front_matter(content: str) -> dict[str, Any]:
    """Extract YAML front matter from a markdown string.

    Raises:
        FrontMatterError: If delimiters are missing or the YAML is invalid.
    """
    stripped = content.lstrip()
    if not stripped.startswith("---"):
        raise FrontMatterError("Missing opening frontmatter delimiter '---'")

    rest = stripped[3:]
    closing_idx = rest.find("\n---")
    if closing_idx == -1:
        raise FrontMatterError("Missing closing frontmatter delimiter '---'")

    try:
        data = yaml.safe_load(rest[:closing_idx])
    except yaml.YAMLError as e:
        raise FrontMatterError(f"Invalid YAML in frontmatter: {e}") from e

    if not isinstance(data, dict):
        raise FrontMatterError(f"Frontmatter must be a mapping, got {type(data).__name__}")

    return data


class VaultRepository:
    """Finds creature notes in a directory tree of markdown files.

    Search order:
    1. Notes whose name equals the creature name, inside a monster location.
    2. Notes whose name contains the creature name, one location at a time,
       stopping at the first location with hits.
    3. If ``search_all_vault`` is on, partial matches anywhere in the vault.
    """

    def __init__(self, root: Path, config: EncounterBuilderConfig | None = None):
        self.root = Path(root)
        self.config = config or EncounterBuilderConfig()

    def _note_paths(self) -> list[Path]:
        if not self.root.is_dir():
            logger.warning(f"Vault directory not found: {self.root}")
            return []
        return sorted(p for p in self.root.rglob("*") if p.is_file() and p.suffix.lower() == ".md")

    def _identifier(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()

    def _read(self, identifier: str) -> str:
        return (self.root / identifier).read_text(encoding="utf-8")

    def find_candidates(self, name: str) -> list[DocumentCandidate]:
        query = (name or "").strip().lower()
        if not query:
            return []

        notes = [(self._identifier(p), p.stem.lower()) for p in self._note_paths()]
        locations = self.config.monster_locations
        matches: list[str] = []

        if locations:
            matches = [
                ident for ident, stem in notes
                if stem == query and any(loc in ident for loc in locations)
            ]
            if not matches:
                for location in locations:
                    matches = [ident for ident, stem in notes if query in stem and location in ident]
                    if matches:
                        break

        if not matches and self.config.search_all_vault:
            matches = [ident for ident, stem in notes if query in stem]

        logger.debug(f"Found {len(matches)} candidate notes for {name!r}")
        candidates = []
        for ident in matches:
            try:
                candidates.append(DocumentCandidate(identifier=ident, text_content=self._read(ident)))
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Skipping unreadable note {ident}: {e}")
        return candidates

    def get_metadata(self, identifier: str) -> dict[str, Any] | None:
        """Front matter of a note, or None if it has none."""
        try:
            return parse_front_matter(self._read(identifier))
        except (OSError, UnicodeDecodeError, FrontMatterError) as e:
            logger.debug(f"No usable front matter in {identifier}: {e}")
            return None


def has_stat_block(candidate: DocumentCandidate) -> bool:
    """Whether a document contains any stat-block marker."""
    return any(marker in candidate.text_content for marker in STAT_BLOCK_MARKERS)


def classify_source(identifier: str, config: EncounterBuilderConfig) -> StatSource:
    """Tag a document by the compendium its path belongs to."""
    if config.primary_ruleset_marker and config.primary_ruleset_marker in identifier:
        return StatSource.PRIMARY_RULESET
    if config.legacy_ruleset_marker and config.legacy_ruleset_marker in identifier:
        return StatSource.LEGACY_RULESET
    return StatSource.CUSTOM


def select_candidate(
    creature_name: str,
    candidates: Sequence[DocumentCandidate],
    choice: str | None = None,
) -> DocumentCandidate | None:
    """Pick the single document to extract stats from.

    Args:
        creature_name: The name that was looked up.
        candidates: Documents returned by the repository.
        choice: Identifier of a document the caller already picked.

    Returns:
        The chosen document, or None when there is nothing to choose.

    Raises:
        AmbiguousCreatureError: If several documents remain and no choice
            was given.
    """
    if choice is not None:
        for candidate in candidates:
            if candidate.identifier == choice:
                return candidate
        logger.warning(f"Chosen document {choice!r} is not a candidate for {creature_name!r}")
        return None

    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]

    with_stats = [c for c in candidates if has_stat_block(c)]
    if len(with_stats) == 1:
        logger.debug(f"Using file with stat block: {with_stats[0].identifier}")
        return with_stats[0]
    raise AmbiguousCreatureError(creature_name, list(with_stats or candidates))


def resolve_creature_stats(
    creature_name: str,
    repository: DocumentRepository,
    config: EncounterBuilderConfig | None = None,
    choice: str | None = None,
) -> StatLookupResult | None:
    """Find a creature's note and extract its CR and XP.

    Returns:
        StatLookupResult, or None when no note was found or no extraction
        strategy matched. The caller falls back to manual entry.

    Raises:
        AmbiguousCreatureError: If the caller has to pick between notes.
    """
    config = config or EncounterBuilderConfig()
    if not creature_name or not creature_name.strip():
        return None

    candidates = repository.find_candidates(creature_name)
    if not candidates:
        logger.info(f"Creature file not found: {creature_name}")
        return None

    document = select_candidate(creature_name, candidates, choice)
    if document is None:
        return None

    get_metadata = getattr(repository, "get_metadata", None)
    metadata = (lambda: get_metadata(document.identifier)) if get_metadata is not None else None

    return extract_creature_stats(
        document.text_content,
        creature_name=document.basename,
        metadata=metadata,
        source_tag=classify_source(document.identifier, config),
    )
