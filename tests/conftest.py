"""Pytest configuration and fixtures."""

import random

import pytest

from rarityroll.engine.rarity_engine import RarityEngine
from rarityroll.models.rarity import EngineConfig, PityRule, RarityDefinition


class RiggedRandom(random.Random):
    """Generator whose uniform draw is fixed."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def two_outcome_config():
    """Common 0.9 / Rare 0.1, no pity or banners."""
    return EngineConfig(
        rarities={
            "Common": RarityDefinition(tier=1, base=0.9),
            "Rare": RarityDefinition(tier=2, base=0.1),
        }
    )


@pytest.fixture
def sparse_config():
    """Table covering well under 100% so most draws hit the floor fallback."""
    return EngineConfig(
        rarities={
            "Common": RarityDefinition(tier=1, base=0.01),
            "Rare": RarityDefinition(tier=3, base=0.005, group="featured"),
            "Legendary": RarityDefinition(tier=5, base=0.0),
        },
        pity=PityRule(hard_cap=10, hard_reward="Legendary"),
    )


@pytest.fixture
def rigged_random():
    """Factory for generators with a fixed draw."""
    return RiggedRandom


@pytest.fixture
def always_miss():
    """Generator that lands beyond any realistic cumulative sum."""
    return RiggedRandom(0.999)


@pytest.fixture
def always_hit():
    """Generator that selects the first eligible outcome."""
    return RiggedRandom(0.0)


@pytest.fixture
def engine(two_outcome_config):
    return RarityEngine.create(two_outcome_config)
