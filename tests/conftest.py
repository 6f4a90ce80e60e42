"""
Pytest configuration and fixtures for encounter-builder tests.
"""

import sys
from pathlib import Path

import pytest

# Add src directory to Python path to allow importing encounter_builder
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from encounter_builder.models import CreatureEntry  # noqa: E402


@pytest.fixture
def goblins_and_orc() -> list[CreatureEntry]:
    """Two goblins and an orc, as entered in the encounter builder."""
    return [
        CreatureEntry(
            quantity=2, name="Goblin", challenge_rating_text="1/4",
            challenge_rating_value=0.25, experience_points=75,
        ),
        CreatureEntry(
            quantity=1, name="Orc", challenge_rating_text="1/2",
            challenge_rating_value=0.5, experience_points=200,
        ),
    ]
