"""Rarity roll engine: weighted sampling, pity and state lifecycle."""

import logging
import math
import random
from collections.abc import Mapping
from typing import Any, MutableMapping, Optional, Sequence, Union

from pydantic import ValidationError

from rarityroll.engine.analytics import RollAnalytics
from rarityroll.engine.currency_gate import CurrencyGate
from rarityroll.engine.modifiers import DEFAULT_MODIFIERS, Modifier, effective_probability
from rarityroll.exceptions import ConfigurationError
from rarityroll.models.rarity import BannerRule, EngineConfig, PityRule, RarityDefinition
from rarityroll.models.results import BulkResult, DebitStatus, RollResult, RollSource
from rarityroll.models.state import RollState

logger = logging.getLogger(__name__)

# Process-wide stream for states created without a seed
_shared_random = random.Random()


class RarityEngine:
    """Shared, read-only roll engine. All mutation happens on the RollState passed in."""

    def __init__(
        self,
        config: EngineConfig,
        rng: Optional[random.Random] = None,
        modifiers: Optional[Sequence[Modifier]] = None,
    ) -> None:
        """
        Initialize engine.

        Args:
            config: Engine configuration with at least one rarity
            rng: Generator used by unseeded states, defaults to the process-wide one
            modifiers: Modifier stack, defaults to luck, pity, entropy, banner, bad luck

        Raises:
            ConfigurationError: If the rarity table is empty
        """
        if not config.rarities:
            raise ConfigurationError("Engine requires at least one rarity definition")

        self._config = config
        self._banners: list[BannerRule] = list(config.banners)
        self._order: tuple[str, ...] = tuple(config.sorted_names())
        self._rng = rng if rng is not None else _shared_random
        self._modifiers: tuple[Modifier, ...] = tuple(modifiers) if modifiers is not None else DEFAULT_MODIFIERS

        floor_name = self._order[0]
        self._floor = (floor_name, config.rarities[floor_name].tier)

        self._warn_on_suspicious_config()
        logger.info(f"Rarity engine ready: {len(self._order)} outcomes, {len(self._banners)} banners")

    @classmethod
    def create(
        cls,
        config: Union[EngineConfig, Mapping[str, Any]],
        rng: Optional[random.Random] = None,
        modifiers: Optional[Sequence[Modifier]] = None,
    ) -> "RarityEngine":
        """Build an engine from a config model or already-parsed structured data."""
        if not isinstance(config, EngineConfig):
            try:
                config = EngineConfig.model_validate(config)
            except ValidationError as e:
                raise ConfigurationError(f"Invalid engine configuration: {e}") from e
        return cls(config, rng=rng, modifiers=modifiers)

    def _warn_on_suspicious_config(self) -> None:
        pity = self._config.pity
        if pity and pity.hard_reward and pity.hard_reward not in self._config.rarities:
            logger.warning(f"Hard pity reward '{pity.hard_reward}' is not a configured rarity; hard pity disabled")

        seen_groups: set[str] = set()
        for banner in self._banners:
            if banner.group in seen_groups:
                logger.warning(f"Duplicate banner for group '{banner.group}'; only the first applies")
            seen_groups.add(banner.group)

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def rarities(self) -> dict[str, RarityDefinition]:
        return self._config.rarities

    @property
    def pity(self) -> Optional[PityRule]:
        return self._config.pity

    @property
    def banners(self) -> list[BannerRule]:
        return self._banners

    @property
    def order(self) -> tuple[str, ...]:
        """Canonical iteration order: tier, then name."""
        return self._order

    def new_state(self, seed: Optional[int] = None, pity_target_tiers: Optional[list[int]] = None) -> RollState:
        """Create a fresh state; a seed gives it an isolated, reproducible stream."""
        return RollState(seed=seed, pity_target_tiers=pity_target_tiers)

    def resolve_luck(self, luck: Optional[float]) -> float:
        effective_luck = self._config.tuning.default_luck if luck is None else luck
        if not math.isfinite(effective_luck) or effective_luck < 0:
            raise ValueError(f"Luck must be a finite non-negative number, got {effective_luck}")
        return effective_luck

    def effective_probability(self, state: RollState, rarity: str, luck: float) -> float:
        """Unclamped probability of ``rarity`` under the full modifier stack."""
        return effective_probability(self._config, state, self.rarities[rarity], luck, self._modifiers)

    def _random_for(self, state: RollState) -> random.Random:
        return state.rng if state.rng is not None else self._rng

    def roll(
        self,
        state: RollState,
        luck: Optional[float] = None,
        cost: float = 0,
        balances: Optional[MutableMapping[str, float]] = None,
        pool: Optional[str] = None,
    ) -> RollResult:
        """
        Roll once, mutating ``state``.

        A declined debit is reported on the result; the roll still happens.

        Args:
            state: Actor's roll state
            luck: Optional luck multiplier (default from tuning, must be >= 0)
            cost: Price charged against ``balances[pool]``
            balances: Optional caller-owned balance mapping
            pool: Balance key to charge

        Returns:
            RollResult with the awarded outcome and debit status
        """
        effective_luck = self.resolve_luck(luck)
        debit = CurrencyGate.debit_single(balances, pool, cost)
        result = self._roll(state, effective_luck)
        logger.debug(f"Roll {state.total_rolls} for state {state.state_id}: {result.rarity} ({result.source.value})")
        return result.model_copy(update={"debit": debit})

    def bulk(
        self,
        state: RollState,
        count: int,
        luck: Optional[float] = None,
        cost: float = 0,
        balances: Optional[MutableMapping[str, float]] = None,
        pool: Optional[str] = None,
    ) -> BulkResult:
        """
        Roll ``count`` times in sequence against the same state.

        The whole batch is charged upfront; if it cannot be covered nothing is
        rolled and an empty result with a declined debit is returned.
        """
        if count < 0:
            raise ValueError(f"Bulk roll count must be non-negative, got {count}")
        effective_luck = self.resolve_luck(luck)

        debit = CurrencyGate.debit_bulk(balances, pool, cost, count)
        if debit.status == DebitStatus.DECLINED:
            return BulkResult(requested=count, debit=debit)

        counts: dict[str, int] = {}
        floor_fallbacks = 0
        for _ in range(count):
            result = self._roll(state, effective_luck)
            counts[result.rarity] = counts.get(result.rarity, 0) + 1
            if result.source == RollSource.FLOOR:
                floor_fallbacks += 1

        logger.debug(f"Bulk roll of {count} for state {state.state_id}: {counts}")
        return BulkResult(requested=count, counts=counts, floor_fallbacks=floor_fallbacks, debit=debit)

    def _roll(self, state: RollState, luck: float) -> RollResult:
        state.total_rolls += 1

        soft_pity = self._apply_pity_meter(state)
        if soft_pity is not None:
            return soft_pity

        hard_pity = self._apply_hard_pity(state)
        if hard_pity is not None:
            return hard_pity

        draw = self._random_for(state).random()
        cumulative = 0.0
        for name in self._order:
            prob = self.effective_probability(state, name, luck)
            if prob <= 0:
                continue
            cumulative += prob
            if draw <= cumulative:
                self._clear_streaks(state)
                return self._award(state, name, RollSource.WEIGHTED)

        return self._award_floor(state)

    def _apply_pity_meter(self, state: RollState) -> Optional[RollResult]:
        """Fill the guaranteed-tier meter and award a target tier once it is full."""
        if state.pity_target_tiers is None:
            return None

        pity = self._config.pity
        if pity and pity.soft_start is not None and state.total_rolls <= pity.soft_start:
            return None

        tuning = self._config.tuning
        gain = pity.soft_gain if pity and pity.soft_gain is not None else tuning.default_soft_gain
        state.pity_meter = min(max(state.pity_meter + gain, 0.0), tuning.pity_meter_max)
        if state.pity_meter < 1:
            return None

        eligible = [name for name in self._order if self.rarities[name].tier in state.pity_target_tiers]
        if not eligible:
            return None

        chosen = self._random_for(state).choice(eligible)
        state.pity_meter = 0.0
        logger.info(f"Pity meter filled for state {state.state_id}: awarding {chosen}")
        return self._award(state, chosen, RollSource.SOFT_PITY)

    def _apply_hard_pity(self, state: RollState) -> Optional[RollResult]:
        pity = self._config.pity
        if not pity or pity.hard_cap is None or state.global_fails < pity.hard_cap:
            return None
        if not pity.hard_reward or pity.hard_reward not in self.rarities:
            return None

        logger.info(f"Hard pity reached for state {state.state_id} after {state.global_fails} fails")
        self._clear_streaks(state)
        return self._award(state, pity.hard_reward, RollSource.HARD_PITY)

    def _award_floor(self, state: RollState) -> RollResult:
        """Guaranteed lowest-tier reward when the draw lands outside every outcome."""
        tuning = self._config.tuning
        state.global_fails += 1
        state.bad_luck += 1
        state.entropy = min(max(state.entropy + tuning.entropy_step, 0.0), tuning.entropy_max)

        for name in self._order:
            tier = self.rarities[name].tier
            state.tier_fails[tier] = state.tier_fails.get(tier, 0) + 1
            state.rarity_fails[name] = state.rarity_fails.get(name, 0) + 1

        # last_rarity / last_tier keep the last real selection
        floor_name, floor_tier = self._floor
        state.tier_fails[floor_tier] = 0
        state.rarity_fails[floor_name] = 0
        logger.debug(f"Floor fallback for state {state.state_id}: {floor_name} (global fails {state.global_fails})")
        return RollResult(rarity=floor_name, tier=floor_tier, source=RollSource.FLOOR)

    @staticmethod
    def _clear_streaks(state: RollState) -> None:
        state.entropy = 0.0
        state.bad_luck = 0
        state.global_fails = 0

    def _award(self, state: RollState, name: str, source: RollSource) -> RollResult:
        tier = self.rarities[name].tier
        state.last_rarity = name
        state.last_tier = tier
        state.tier_fails[tier] = 0
        state.rarity_fails[name] = 0
        return RollResult(rarity=name, tier=tier, source=source)

    def reset_state(self, state: RollState) -> None:
        """Zero every counter; identity, seed and random stream are kept."""
        state.total_rolls = 0
        state.last_rarity = None
        state.last_tier = 0
        state.entropy = 0.0
        state.bad_luck = 0
        state.global_fails = 0
        state.tier_fails = {}
        state.rarity_fails = {}
        state.pity_meter = 0.0

    # Analytics

    def get_expected(self, luck: Optional[float] = None) -> dict[str, float]:
        return RollAnalytics.expected(self, luck)

    def get_next_roll_chances(self, state: RollState, luck: Optional[float] = None) -> dict[str, float]:
        return RollAnalytics.next_roll_chances(self, state, luck)

    def get_expected_rolls_for(self, state: RollState, rarity: str, luck: Optional[float] = None) -> float:
        return RollAnalytics.expected_rolls_for(self, state, rarity, luck)

    def get_dry_streak(self, state: RollState, rarity: str) -> int:
        return RollAnalytics.dry_streak(state, rarity)

    def get_tier_dry_streak(self, state: RollState, tier: int) -> int:
        return RollAnalytics.tier_dry_streak(state, tier)

    def get_chance_text(self, luck: Optional[float] = None) -> str:
        return RollAnalytics.chance_text(self, luck)

    def get_expected_rolls_text(self, state: RollState, luck: Optional[float] = None) -> str:
        return RollAnalytics.expected_rolls_text(self, state, luck)

    def get_pity_text(self, state: RollState) -> str:
        return RollAnalytics.pity_text(state)
