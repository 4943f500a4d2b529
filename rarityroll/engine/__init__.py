"""Roll engine package."""

from rarityroll.engine.analytics import RollAnalytics
from rarityroll.engine.currency_gate import CurrencyGate
from rarityroll.engine.modifiers import (
    DEFAULT_MODIFIERS,
    Modifier,
    bad_luck_modifier,
    banner_modifier,
    effective_probability,
    entropy_modifier,
    luck_modifier,
    pity_modifier,
)
from rarityroll.engine.rarity_engine import RarityEngine

__all__ = [
    "CurrencyGate",
    "DEFAULT_MODIFIERS",
    "Modifier",
    "RarityEngine",
    "RollAnalytics",
    "bad_luck_modifier",
    "banner_modifier",
    "effective_probability",
    "entropy_modifier",
    "luck_modifier",
    "pity_modifier",
]
