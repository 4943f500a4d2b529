"""Data models module for rarityroll."""

# Configuration
from rarityroll.models.rarity import (
    BannerRule,
    EngineConfig,
    EngineTuning,
    PityRule,
    RarityDefinition,
)

# Results
from rarityroll.models.results import (
    BulkResult,
    DebitResult,
    DebitStatus,
    RollResult,
    RollSource,
)

# State
from rarityroll.models.state import RollState

__all__ = [
    # Configuration
    "RarityDefinition",
    "PityRule",
    "BannerRule",
    "EngineTuning",
    "EngineConfig",
    # Results
    "RollSource",
    "RollResult",
    "DebitStatus",
    "DebitResult",
    "BulkResult",
    # State
    "RollState",
]
