"""Weighted rarity rolls with luck, pity, entropy and banner modifiers."""

from rarityroll.engine import RarityEngine
from rarityroll.exceptions import ConfigurationError, RarityRollError
from rarityroll.models import (
    BannerRule,
    BulkResult,
    DebitResult,
    DebitStatus,
    EngineConfig,
    EngineTuning,
    PityRule,
    RarityDefinition,
    RollResult,
    RollSource,
    RollState,
)

__all__ = [
    "BannerRule",
    "BulkResult",
    "ConfigurationError",
    "DebitResult",
    "DebitStatus",
    "EngineConfig",
    "EngineTuning",
    "PityRule",
    "RarityDefinition",
    "RarityEngine",
    "RarityRollError",
    "RollResult",
    "RollSource",
    "RollState",
]
