"""Probability modifier stack.

Every modifier is a pure function of (config, state, definition, luck) that
returns an additive contribution to an outcome's base probability. The engine
sums them left to right on top of ``definition.base``.
"""

import math
from typing import Callable, Optional, Sequence

from rarityroll.config import (
    DEFAULT_BAD_LUCK_PENALTY,
    DEFAULT_ENTROPY_DAMPING,
    DEFAULT_LUCK_SCALE,
    DEFAULT_PITY_EXPONENT,
    DEFAULT_PITY_SCALE,
)
from rarityroll.models.rarity import BannerRule, EngineConfig, RarityDefinition
from rarityroll.models.state import RollState

Modifier = Callable[[EngineConfig, RollState, RarityDefinition, float], float]


def luck_modifier(luck: float, tier: int, scale: float = DEFAULT_LUCK_SCALE) -> float:
    """Logarithmic luck bonus, larger for rarer tiers."""
    return math.log(luck + 1) * tier * scale


def pity_modifier(
    state: RollState,
    tier: int,
    exponent: float = DEFAULT_PITY_EXPONENT,
    scale: float = DEFAULT_PITY_SCALE,
) -> float:
    """Superlinear bonus from consecutive misses of a tier."""
    fails = state.tier_fails.get(tier, 0)
    return (fails ** exponent) * scale


def entropy_modifier(state: RollState, tier: int, damping: float = DEFAULT_ENTROPY_DAMPING) -> float:
    """Accumulated entropy, dampened for tiers no rarer than the last win."""
    if tier <= state.last_tier:
        return state.entropy * damping
    return state.entropy


def banner_modifier(definition: RarityDefinition, banners: Optional[Sequence[BannerRule]]) -> float:
    """Boost from the first banner whose group matches the outcome."""
    if not banners or not definition.group:
        return 0.0
    for banner in banners:
        if banner.group == definition.group:
            return banner.multiplier - 1
    return 0.0


def bad_luck_modifier(state: RollState, penalty: float = DEFAULT_BAD_LUCK_PENALTY) -> float:
    """Flat penalty per consecutive floor fallback."""
    return -state.bad_luck * penalty


def _luck(config: EngineConfig, state: RollState, definition: RarityDefinition, luck: float) -> float:
    return luck_modifier(luck, definition.tier, config.tuning.luck_scale)


def _pity(config: EngineConfig, state: RollState, definition: RarityDefinition, luck: float) -> float:
    return pity_modifier(state, definition.tier, config.tuning.pity_exponent, config.tuning.pity_scale)


def _entropy(config: EngineConfig, state: RollState, definition: RarityDefinition, luck: float) -> float:
    return entropy_modifier(state, definition.tier, config.tuning.entropy_damping)


def _banner(config: EngineConfig, state: RollState, definition: RarityDefinition, luck: float) -> float:
    return banner_modifier(definition, config.banners)


def _bad_luck(config: EngineConfig, state: RollState, definition: RarityDefinition, luck: float) -> float:
    return bad_luck_modifier(state, config.tuning.bad_luck_penalty)


# Order matters for floating point parity
DEFAULT_MODIFIERS: tuple[Modifier, ...] = (_luck, _pity, _entropy, _banner, _bad_luck)


def effective_probability(
    config: EngineConfig,
    state: RollState,
    definition: RarityDefinition,
    luck: float,
    modifiers: Sequence[Modifier] = DEFAULT_MODIFIERS,
) -> float:
    """
    Sum base probability and every modifier for one outcome.

    Args:
        config: Engine configuration
        state: Roll state read by the state-dependent modifiers
        definition: Outcome being scored
        luck: Effective luck multiplier
        modifiers: Modifier stack to apply

    Returns:
        Unclamped effective probability
    """
    prob = definition.base
    for modifier in modifiers:
        prob += modifier(config, state, definition, luck)
    return prob
