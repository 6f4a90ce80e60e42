"""
Unit tests for EncounterBuilderConfig.
"""

import pytest
from pydantic import ValidationError

from encounter_builder.config import EncounterBuilderConfig


class TestEncounterBuilderConfigDefaults:
    """Tests for default configuration values."""

    def test_multipliers_on_by_default(self) -> None:
        assert EncounterBuilderConfig().use_encounter_multipliers is True

    def test_default_locations(self) -> None:
        assert EncounterBuilderConfig().monster_locations == [
            "2024_z_compendium/bestiary",
            "z_compendium/bestiary",
        ]

    def test_search_all_vault_by_default(self) -> None:
        assert EncounterBuilderConfig().search_all_vault is True

    def test_default_party(self) -> None:
        config = EncounterBuilderConfig()
        assert config.default_party_size == 4
        assert config.default_party_level == 3


class TestEncounterBuilderConfigValidation:
    """Tests for field validation."""

    def test_blank_locations_dropped(self) -> None:
        config = EncounterBuilderConfig(monster_locations=["bestiary", "", "   ", " homebrew "])
        assert config.monster_locations == ["bestiary", "homebrew"]

    @pytest.mark.parametrize("level", [0, 21])
    def test_default_level_range(self, level: int) -> None:
        with pytest.raises(ValidationError):
            EncounterBuilderConfig(default_party_level=level)

    def test_default_size_positive(self) -> None:
        with pytest.raises(ValidationError):
            EncounterBuilderConfig(default_party_size=0)


class TestEncounterBuilderConfigFromEnv:
    """Tests for EncounterBuilderConfig.from_env()."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("ENCOUNTER_USE_MULTIPLIERS", "ENCOUNTER_SEARCH_ALL_VAULT", "ENCOUNTER_MONSTER_LOCATIONS"):
            monkeypatch.delenv(name, raising=False)

    def test_unset_keeps_defaults(self) -> None:
        assert EncounterBuilderConfig.from_env() == EncounterBuilderConfig()

    def test_reads_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENCOUNTER_USE_MULTIPLIERS", "false")
        monkeypatch.setenv("ENCOUNTER_SEARCH_ALL_VAULT", "0")
        monkeypatch.setenv("ENCOUNTER_MONSTER_LOCATIONS", "bestiary, homebrew/monsters,")

        config = EncounterBuilderConfig.from_env()
        assert config.use_encounter_multipliers is False
        assert config.search_all_vault is False
        assert config.monster_locations == ["bestiary", "homebrew/monsters"]

    def test_bad_boolean(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENCOUNTER_USE_MULTIPLIERS", "sometimes")
        with pytest.raises(ValueError, match="ENCOUNTER_USE_MULTIPLIERS"):
            EncounterBuilderConfig.from_env()
