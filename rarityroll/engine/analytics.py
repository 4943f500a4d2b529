"""Read-only projections of engine and roll state."""

import math
from typing import TYPE_CHECKING, Iterable, Optional

from rarityroll.engine.modifiers import banner_modifier, luck_modifier
from rarityroll.models.state import RollState

if TYPE_CHECKING:
    from rarityroll.engine.rarity_engine import RarityEngine


class RollAnalytics:
    """Computes expectations, dry streaks and text summaries. Never mutates state."""

    @staticmethod
    def expected(engine: "RarityEngine", luck: Optional[float] = None) -> dict[str, float]:
        """
        Idealized long-run odds per outcome: base plus luck only.

        Pity, entropy, banners and bad luck are deliberately ignored.
        """
        effective_luck = engine.resolve_luck(luck)
        scale = engine.config.tuning.luck_scale
        return {
            name: engine.rarities[name].base + luck_modifier(effective_luck, engine.rarities[name].tier, scale)
            for name in engine.order
        }

    @staticmethod
    def next_roll_chances(
        engine: "RarityEngine", state: RollState, luck: Optional[float] = None
    ) -> dict[str, float]:
        """
        Normalized distribution for the very next weighted draw.

        Args:
            engine: Engine holding the table and modifier stack
            state: Roll state to read
            luck: Optional luck multiplier

        Returns:
            Outcome name to probability; sums to 1, or all zero when no
            outcome has positive effective probability
        """
        effective_luck = engine.resolve_luck(luck)
        chances = {
            name: max(engine.effective_probability(state, name, effective_luck), 0.0)
            for name in engine.order
        }
        total = sum(chances.values())
        if total > 0:
            chances = {name: prob / total for name, prob in chances.items()}
        return chances

    @staticmethod
    def expected_rolls_for(
        engine: "RarityEngine", state: RollState, rarity: str, luck: Optional[float] = None
    ) -> float:
        """Rolls expected until ``rarity`` at the current odds, ``math.inf`` if unreachable."""
        prob = RollAnalytics.next_roll_chances(engine, state, luck).get(rarity, 0.0)
        if prob <= 0:
            return math.inf
        return 1 / prob

    @staticmethod
    def dry_streak(state: RollState, rarity: str) -> int:
        return state.rarity_fails.get(rarity, 0)

    @staticmethod
    def tier_dry_streak(state: RollState, tier: int) -> int:
        return state.tier_fails.get(tier, 0)

    @staticmethod
    def chance_text(engine: "RarityEngine", luck: Optional[float] = None) -> str:
        """Advertised odds per outcome (base, luck and banners), one line each."""
        effective_luck = engine.resolve_luck(luck)
        scale = engine.config.tuning.luck_scale
        lines = {}
        for name in engine.order:
            definition = engine.rarities[name]
            prob = (
                definition.base
                + luck_modifier(effective_luck, definition.tier, scale)
                + banner_modifier(definition, engine.banners)
            )
            lines[name] = f"{name}: {max(prob, 0.0) * 100:.2f}%"
        return RollAnalytics._join_by_tier(engine, lines)

    @staticmethod
    def expected_rolls_text(engine: "RarityEngine", state: RollState, luck: Optional[float] = None) -> str:
        """Expected rolls until each outcome, one line each."""
        lines = {
            name: f"{name}: {RollAnalytics.expected_rolls_for(engine, state, name, luck):.1f} rolls"
            for name in engine.order
        }
        return RollAnalytics._join_by_tier(engine, lines)

    @staticmethod
    def pity_text(state: RollState) -> str:
        return f"Pity: {state.pity_meter * 100:.2f}%"

    @staticmethod
    def sort_by_tier(engine: "RarityEngine", names: Iterable[str]) -> list[str]:
        """Stable sort of outcome names by configured tier."""
        return sorted(names, key=lambda name: engine.rarities[name].tier)

    @staticmethod
    def _join_by_tier(engine: "RarityEngine", lines: dict[str, str]) -> str:
        return "\n".join(lines[name] for name in RollAnalytics.sort_by_tier(engine, lines))
