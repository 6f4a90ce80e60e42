"""
Tests for the MCP tool logic in encounter_builder.main.

The tools are thin wrappers; these tests call the ``_..._logic`` helpers
directly with an explicit config and repository.
"""

import json
from pathlib import Path

import pytest

from encounter_builder.config import EncounterBuilderConfig
from encounter_builder.main import (
    _build_creature_entries,
    _calculate_difficulty_logic,
    _create_encounter_table_logic,
    _lookup_creature_logic,
    _parse_encounter_logic,
)
from encounter_builder.models import DocumentCandidate
from encounter_builder.vault import VaultRepository


ENCOUNTER_NOTE = """# Ambush on the Trade Road

```encounter
| Qty | Creature | CR | XP | Total XP |
|:----|:---------|:---|---:|---------:|
| 4 | [[Goblin]] | 1/4 | 250 | 1,000 |
| **Total** | | | | **1,000** |
```
"""


def write_note(root: Path, relative: str, content: str) -> None:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


class StaticRepository:
    """Repository returning a fixed candidate list."""

    def __init__(self, candidates: list[DocumentCandidate]):
        self.candidates = candidates

    def find_candidates(self, name: str) -> list[DocumentCandidate]:
        return self.candidates


# ─── Creature lookup ───────────────────────────────────────────────────


class TestLookupCreatureLogic:
    """Tests for _lookup_creature_logic()."""

    def test_found(self, tmp_path: Path) -> None:
        note = tmp_path / "2024_z_compendium" / "bestiary" / "ogre.md"
        note.parent.mkdir(parents=True)
        note.write_text("# Ogre\n**CR** :: 2\n", encoding="utf-8")

        result = _lookup_creature_logic("Ogre", VaultRepository(tmp_path), EncounterBuilderConfig())
        assert "CR 2" in result
        assert "450 XP" in result
        assert "primary-ruleset" in result

    def test_not_found(self, tmp_path: Path) -> None:
        result = _lookup_creature_logic("Tarrasque", VaultRepository(tmp_path), EncounterBuilderConfig())
        assert "Could not find stats for 'Tarrasque'" in result

    def test_ambiguous_lists_choices(self) -> None:
        repo = StaticRepository([
            DocumentCandidate(identifier="a/wolf.md", text_content="**AC** 13"),
            DocumentCandidate(identifier="b/wolf.md", text_content="**HP** 11"),
        ])
        result = _lookup_creature_logic("wolf", repo, EncounterBuilderConfig())
        assert "- a/wolf.md" in result
        assert "- b/wolf.md" in result
        assert "choice" in result

    def test_choice_resolves_ambiguity(self) -> None:
        repo = StaticRepository([
            DocumentCandidate(identifier="a/wolf.md", text_content="**AC** 13\nChallenge 1/4 (50 XP)"),
            DocumentCandidate(identifier="b/wolf.md", text_content="**HP** 11\nChallenge 1 (200 XP)"),
        ])
        result = _lookup_creature_logic("wolf", repo, EncounterBuilderConfig(), choice="b/wolf.md")
        assert "CR 1," in result
        assert "200 XP" in result


# ─── Table creation and parsing ────────────────────────────────────────


class TestCreateEncounterTableLogic:
    """Tests for _create_encounter_table_logic()."""

    @pytest.fixture
    def repo(self, tmp_path: Path) -> VaultRepository:
        write_note(tmp_path, "2024_z_compendium/bestiary/ogre.md", "# Ogre\n**CR** :: 2\n")
        write_note(tmp_path, "homebrew/wolf.md", "**AC** 13\nChallenge 1/4 (50 XP)\n")
        write_note(tmp_path, "lore/wolf.md", "**HP** 11\nChallenge 1 (200 XP)\n")
        return VaultRepository(tmp_path)

    def create(self, creatures, repo: VaultRepository) -> str:
        return _create_encounter_table_logic(json.dumps(creatures), repo, EncounterBuilderConfig())

    def test_creates_fenced_table(self, repo) -> None:
        creatures = [
            {"name": "Goblin", "quantity": 2, "cr": "1/4", "xp": 75},
            {"name": "Orc", "quantity": 1, "cr": "1/2"},
        ]
        table = self.create(creatures, repo)
        assert table.startswith("```encounter\n")
        assert "| 2 | [[Goblin]] | 1/4 | 75 | 150 |" in table
        assert "| 1 | [[Orc]] | 1/2 | 100 | 100 |" in table
        assert "| **Total** | | | | **250** |" in table

    def test_variable_cr_row(self, repo) -> None:
        table = self.create([{"name": "Aberrant Spirit", "cr": "Varies", "xp": 0}], repo)
        assert "| 1 | [[Aberrant Spirit]] | Varies | 0 | 0 |" in table

    def test_zero_xp_row(self, repo) -> None:
        table = self.create([{"name": "Rat", "cr": "0", "xp": 0}], repo)
        assert "| 1 | [[Rat]] | 0 | 0 | 0 |" in table

    def test_negative_xp_rejected(self, repo) -> None:
        result = self.create([{"name": "Rat", "cr": "0", "xp": -5}], repo)
        assert result == "❌ Please enter a valid XP value (0 or more)"

    def test_row_without_cr_looked_up_in_vault(self, repo) -> None:
        table = self.create([{"name": "Ogre", "quantity": 2}], repo)
        assert "| 2 | [[Ogre]] | 2 | 450 | 900 |" in table

    def test_row_without_cr_not_in_vault(self, repo) -> None:
        result = self.create([{"name": "Tarrasque"}], repo)
        assert result == _lookup_creature_logic("Tarrasque", repo, EncounterBuilderConfig())
        assert "Could not find stats for 'Tarrasque'" in result

    def test_row_without_cr_ambiguous(self, repo) -> None:
        result = self.create([{"name": "wolf"}], repo)
        assert "- homebrew/wolf.md" in result
        assert "- lore/wolf.md" in result
        assert "choice" in result

    def test_row_choice_resolves_ambiguity(self, repo) -> None:
        table = self.create([{"name": "wolf", "quantity": 3, "choice": "lore/wolf.md"}], repo)
        assert "| 3 | [[wolf]] | 1 | 200 | 600 |" in table

    def test_invalid_json(self, repo) -> None:
        assert "Invalid creatures JSON" in _create_encounter_table_logic("[{", repo, EncounterBuilderConfig())

    def test_not_a_list(self, repo) -> None:
        assert "JSON list" in self.create({"name": "Goblin"}, repo)

    def test_empty_list(self, repo) -> None:
        assert "at least one creature" in self.create([], repo)

    def test_missing_name_rejected(self, repo) -> None:
        assert "needs a name" in self.create([{"cr": "1"}], repo)

    def test_zero_quantity_rejected(self, repo) -> None:
        result = self.create([{"name": "Goblin", "cr": "1/4", "quantity": 0}], repo)
        assert result.startswith("❌")

    def test_build_entries_sets_numeric_cr(self, repo) -> None:
        entries = _build_creature_entries([{"name": "Kobold", "cr": "1/8"}], repo, EncounterBuilderConfig())
        assert entries[0].challenge_rating_value == 0.125
        assert entries[0].experience_points == 25
        assert entries[0].quantity == 1


class TestParseEncounterLogic:
    """Tests for _parse_encounter_logic()."""

    def test_parses_note_with_block(self) -> None:
        result = _parse_encounter_logic(ENCOUNTER_NOTE)
        assert "Goblin" in result
        assert "Total XP: 1,000" in result
        assert "Creatures: 4" in result

    def test_parses_bare_table(self) -> None:
        result = _parse_encounter_logic("| 1 | Ogre | 2 | 450 |")
        assert "Ogre" in result
        assert "Highest CR: 2.00" in result

    def test_empty(self) -> None:
        assert _parse_encounter_logic("") == "No creatures found in the encounter table."


# ─── Difficulty ────────────────────────────────────────────────────────


class TestCalculateDifficultyLogic:
    """Tests for _calculate_difficulty_logic()."""

    def test_rates_encounter(self) -> None:
        report = _calculate_difficulty_logic(ENCOUNTER_NOTE, 4, 3, EncounterBuilderConfig())
        assert "Adjusted XP: 2,000" in report
        assert "DMG Rating: High." in report
        assert "Lazy DM CR Rating: Easy" in report

    def test_config_disables_multipliers(self) -> None:
        config = EncounterBuilderConfig(use_encounter_multipliers=False)
        report = _calculate_difficulty_logic(ENCOUNTER_NOTE, 4, 3, config)
        assert "Encounter Total XP: 1,000. DMG Rating: Moderate." in report

    def test_override_beats_config(self) -> None:
        config = EncounterBuilderConfig(use_encounter_multipliers=False)
        report = _calculate_difficulty_logic(ENCOUNTER_NOTE, 4, 3, config, use_multipliers=True)
        assert "DMG Rating: High." in report

    @pytest.mark.parametrize("level", [0, 21])
    def test_invalid_level(self, level: int) -> None:
        report = _calculate_difficulty_logic(ENCOUNTER_NOTE, 4, level, EncounterBuilderConfig())
        assert report == f"❌ Party level must be between 1 and 20, got {level}"

    def test_invalid_party_size(self) -> None:
        report = _calculate_difficulty_logic(ENCOUNTER_NOTE, 0, 3, EncounterBuilderConfig())
        assert "Party size" in report
