"""Tests for RarityEngine construction, rolling and state lifecycle."""

import logging

import pytest

from rarityroll.engine.rarity_engine import RarityEngine
from rarityroll.exceptions import ConfigurationError
from rarityroll.models import (
    EngineConfig,
    EngineTuning,
    PityRule,
    RarityDefinition,
    RollSource,
)


class TestEngineConstruction:
    """Test suite for engine creation."""

    def test_empty_rarities_rejected(self):
        """Test that an engine needs at least one outcome."""
        with pytest.raises(ConfigurationError):
            RarityEngine(EngineConfig())
        with pytest.raises(ConfigurationError):
            RarityEngine.create({"rarities": {}})

    def test_create_from_mapping(self):
        """Test building an engine from parsed structured data."""
        engine = RarityEngine.create(
            {
                "rarities": {
                    "Rare": {"tier": 2, "base": 0.1, "group": "featured"},
                    "Common": {"tier": 1, "base": 0.9},
                },
                "banners": [{"group": "featured", "multiplier": 1.5}],
            }
        )
        assert engine.order == ("Common", "Rare")
        assert engine.pity is None
        assert len(engine.banners) == 1

    def test_invalid_mapping_raises_configuration_error(self):
        """Test that schema errors surface as ConfigurationError."""
        with pytest.raises(ConfigurationError):
            RarityEngine.create({"rarities": {"Common": {"tier": 1, "base": 2.0}}})

    def test_configuration_error_is_value_error(self):
        """Test that callers catching ValueError also catch configuration errors."""
        with pytest.raises(ValueError):
            RarityEngine(EngineConfig())

    def test_missing_hard_reward_warns(self, caplog):
        """Test that an unresolvable hard reward is reported at construction."""
        config = EngineConfig(
            rarities={"Common": RarityDefinition(tier=1, base=1.0)},
            pity=PityRule(hard_cap=5, hard_reward="Mythic"),
        )
        with caplog.at_level(logging.WARNING):
            RarityEngine(config)
        assert "Mythic" in caplog.text

    def test_banners_default_empty(self, engine):
        """Test that an engine without banners stores an empty list."""
        assert engine.banners == []

    def test_new_state(self, engine):
        """Test state creation with and without a seed."""
        state = engine.new_state()
        assert state.total_rolls == 0
        assert state.rng is None
        seeded = engine.new_state(seed=3, pity_target_tiers=[2])
        assert seeded.seed == 3
        assert seeded.rng is not None
        assert seeded.pity_target_tiers == [2]


class TestWeightedRoll:
    """Test suite for weighted sampling."""

    def test_negative_luck_rejected(self, engine):
        """Test that luck must be non-negative."""
        with pytest.raises(ValueError):
            engine.roll(engine.new_state(), luck=-0.5)

    @pytest.mark.parametrize("luck", [float("nan"), float("inf")])
    def test_non_finite_luck_rejected(self, engine, luck):
        """Test that NaN and infinite luck never reach the draw."""
        state = engine.new_state(seed=1)
        with pytest.raises(ValueError):
            engine.roll(state, luck=luck)
        with pytest.raises(ValueError):
            engine.bulk(state, 5, luck=luck)
        with pytest.raises(ValueError):
            engine.get_next_roll_chances(state, luck)
        assert state.total_rolls == 0
        assert state.global_fails == 0

    def test_roll_increments_total(self, engine):
        """Test that every roll counts."""
        state = engine.new_state(seed=1)
        for _ in range(3):
            engine.roll(state)
        assert state.total_rolls == 3

    def test_win_resets_only_won_counters(self, two_outcome_config, always_hit):
        """Test counter updates when an outcome is drawn directly."""
        engine = RarityEngine(two_outcome_config, rng=always_hit)
        state = engine.new_state()
        state.tier_fails = {1: 3, 2: 5}
        state.rarity_fails = {"Common": 3, "Rare": 5}
        state.entropy = 0.3
        state.bad_luck = 2
        state.global_fails = 4

        result = engine.roll(state)

        assert result.rarity == "Common"
        assert result.tier == 1
        assert result.source == RollSource.WEIGHTED
        assert state.tier_fails == {1: 0, 2: 5}
        assert state.rarity_fails == {"Common": 0, "Rare": 5}
        assert state.entropy == 0.0
        assert state.bad_luck == 0
        assert state.global_fails == 0
        assert state.last_rarity == "Common"
        assert state.last_tier == 1

    def test_non_positive_outcomes_skipped(self, always_hit):
        """Test that an outcome with zero effective probability never wins."""
        config = EngineConfig(
            rarities={
                "Dust": RarityDefinition(tier=0, base=0.0),
                "Common": RarityDefinition(tier=1, base=0.5),
            }
        )
        engine = RarityEngine(config, rng=always_hit)
        assert engine.roll(engine.new_state()).rarity == "Common"

    def test_two_outcome_scenario(self, engine):
        """Test long-run odds for a fully covered 0.9 / 0.1 table."""
        state = engine.new_state(seed=42)
        result = engine.bulk(state, 1000, luck=1)
        assert result.total == 1000
        assert result.floor_fallbacks == 0
        rare_fraction = result.counts.get("Rare", 0) / 1000
        assert 0.06 < rare_fraction < 0.14

    def test_seeded_states_reproducible(self):
        """Test that equal seeds give equal sequences despite interleaved rolling."""
        config = EngineConfig(
            rarities={
                "Common": RarityDefinition(tier=1, base=0.5),
                "Rare": RarityDefinition(tier=2, base=0.2),
                "Epic": RarityDefinition(tier=3, base=0.05),
            }
        )
        engine = RarityEngine(config)
        first = engine.new_state(seed=7)
        second = engine.new_state(seed=7)
        noise = engine.new_state()

        first_outcomes = []
        for _ in range(200):
            first_outcomes.append(engine.roll(first, luck=1.5))
            engine.roll(noise)
        second_outcomes = [engine.roll(second, luck=1.5) for _ in range(200)]

        assert [(r.rarity, r.source) for r in first_outcomes] == [(r.rarity, r.source) for r in second_outcomes]
        assert first.model_dump(exclude={"state_id"}) == second.model_dump(exclude={"state_id"})


class TestFloorFallback:
    """Test suite for the guaranteed floor reward."""

    def test_floor_awards_lowest_tier(self, sparse_config, always_miss):
        """Test that an uncovered draw returns the most common outcome."""
        engine = RarityEngine(sparse_config, rng=always_miss)
        result = engine.roll(engine.new_state())
        assert result.rarity == "Common"
        assert result.tier == 1
        assert result.source == RollSource.FLOOR

    def test_floor_tie_broken_by_name(self, always_miss):
        """Test that equal lowest tiers resolve in canonical order."""
        config = EngineConfig(
            rarities={
                "Pebble": RarityDefinition(tier=1, base=0.01),
                "Leaf": RarityDefinition(tier=1, base=0.01),
            }
        )
        engine = RarityEngine(config, rng=always_miss)
        assert engine.roll(engine.new_state()).rarity == "Leaf"

    def test_floor_advances_streak_counters(self, sparse_config, always_miss):
        """Test counter updates when the floor fallback fires."""
        engine = RarityEngine(sparse_config, rng=always_miss)
        state = engine.new_state()
        state.tier_fails = {1: 2, 3: 4, 5: 1}
        state.rarity_fails = {"Common": 2, "Rare": 4}

        engine.roll(state)

        assert state.tier_fails == {1: 0, 3: 5, 5: 2}
        assert state.rarity_fails == {"Common": 0, "Rare": 5, "Legendary": 1}
        assert state.global_fails == 1
        assert state.bad_luck == 1
        assert state.entropy == pytest.approx(0.02)
        assert state.last_rarity is None
        assert state.last_tier == 0

    def test_floor_keeps_last_selection(self, sparse_config, rigged_random):
        """Test that a fallback leaves the last drawn outcome in place."""
        rig = rigged_random(0.02)
        engine = RarityEngine(sparse_config, rng=rig)
        state = engine.new_state()

        assert engine.roll(state).rarity == "Rare"
        rig.value = 0.999
        result = engine.roll(state)

        assert result.source == RollSource.FLOOR
        assert result.rarity == "Common"
        assert state.last_rarity == "Rare"
        assert state.last_tier == 3
        assert state.rarity_fails["Common"] == 0
        assert state.tier_fails[1] == 0
        assert state.rarity_fails["Rare"] == 1
        # entropy stays dampened up to the Rare tier
        assert engine.effective_probability(state, "Rare", 0) == pytest.approx(
            0.005 + 0.02 * 0.4 + 1 ** 1.15 * 0.002 - 0.0003
        )

    def test_entropy_clamped(self, always_miss):
        """Test that entropy never exceeds its bound."""
        config = EngineConfig(
            rarities={"Common": RarityDefinition(tier=1, base=0.01)},
            tuning=EngineTuning(entropy_step=0.02, entropy_max=0.05),
        )
        engine = RarityEngine(config, rng=always_miss)
        state = engine.new_state()
        for _ in range(5):
            engine.roll(state)
        assert state.entropy == pytest.approx(0.05)


class TestHardPity:
    """Test suite for the hard pity cap."""

    def test_hard_cap_forces_reward(self, sparse_config, always_miss):
        """Test that ten straight misses force the hard reward on the next roll."""
        engine = RarityEngine(sparse_config, rng=always_miss)
        state = engine.new_state()

        for expected_fails in range(1, 11):
            result = engine.roll(state)
            assert result.source == RollSource.FLOOR
            assert state.global_fails == expected_fails

        result = engine.roll(state)
        assert result.rarity == "Legendary"
        assert result.tier == 5
        assert result.source == RollSource.HARD_PITY
        assert state.global_fails == 0
        assert state.bad_luck == 0
        assert state.entropy == 0.0
        assert state.tier_fails[5] == 0
        assert state.rarity_fails["Legendary"] == 0
        assert state.tier_fails[3] == 10
        assert state.last_tier == 5
        assert state.total_rolls == 11

        assert engine.roll(state).source == RollSource.FLOOR
        assert state.global_fails == 1

    def test_missing_reward_falls_through(self, always_miss):
        """Test that an unknown hard reward leaves sampling untouched."""
        config = EngineConfig(
            rarities={"Common": RarityDefinition(tier=1, base=0.01)},
            pity=PityRule(hard_cap=2, hard_reward="Mythic"),
        )
        engine = RarityEngine(config, rng=always_miss)
        state = engine.new_state()
        for _ in range(4):
            assert engine.roll(state).source == RollSource.FLOOR
        assert state.global_fails == 4


class TestPityMeter:
    """Test suite for the guaranteed-tier pity meter."""

    @pytest.fixture
    def meter_config(self):
        return EngineConfig(
            rarities={
                "Common": RarityDefinition(tier=1, base=0.9),
                "Rare": RarityDefinition(tier=2, base=0.1),
                "Epic": RarityDefinition(tier=3, base=0.0),
            },
            pity=PityRule(soft_gain=0.25),
        )

    def test_meter_awards_target_tier(self, meter_config, always_hit):
        """Test that a full meter awards an outcome of a target tier."""
        engine = RarityEngine(meter_config, rng=always_hit)
        state = engine.new_state(pity_target_tiers=[3])

        for expected_meter in (0.25, 0.5, 0.75):
            assert engine.roll(state).rarity == "Common"
            assert state.pity_meter == pytest.approx(expected_meter)
        assert engine.get_pity_text(state) == "Pity: 75.00%"

        result = engine.roll(state)
        assert result.rarity == "Epic"
        assert result.source == RollSource.SOFT_PITY
        assert state.pity_meter == 0.0
        assert state.last_rarity == "Epic"
        assert state.tier_fails[3] == 0

    def test_meter_disabled_without_targets(self, meter_config, always_hit):
        """Test that states without target tiers never fill the meter."""
        engine = RarityEngine(meter_config, rng=always_hit)
        state = engine.new_state()
        for _ in range(10):
            assert engine.roll(state).source == RollSource.WEIGHTED
        assert state.pity_meter == 0.0

    def test_meter_waits_for_soft_start(self, always_hit):
        """Test that the meter only fills after soft_start rolls."""
        config = EngineConfig(
            rarities={
                "Common": RarityDefinition(tier=1, base=0.9),
                "Epic": RarityDefinition(tier=3, base=0.0),
            },
            pity=PityRule(soft_start=2, soft_gain=0.5),
        )
        engine = RarityEngine(config, rng=always_hit)
        state = engine.new_state(pity_target_tiers=[3])
        assert [engine.roll(state).rarity for _ in range(4)] == ["Common", "Common", "Common", "Epic"]

    def test_meter_clamped_without_eligible_outcomes(self, meter_config, always_hit):
        """Test that a full meter with no matching outcomes stays bounded."""
        engine = RarityEngine(meter_config, rng=always_hit)
        state = engine.new_state(pity_target_tiers=[9])
        for _ in range(60):
            engine.roll(state)
        assert state.pity_meter == pytest.approx(engine.config.tuning.pity_meter_max)


class TestResetState:
    """Test suite for reset_state."""

    def test_reset_matches_fresh_state(self, sparse_config):
        """Test that reset zeroes a seeded state's counters but keeps its stream."""
        engine = RarityEngine(sparse_config)
        state = engine.new_state(seed=11)
        state_id = state.state_id
        stream = state.rng
        for _ in range(6):
            engine.roll(state)
        state.pity_meter = 0.4

        engine.reset_state(state)

        assert state.total_rolls == 0
        assert state.last_rarity is None
        assert state.last_tier == 0
        assert state.entropy == 0.0
        assert state.bad_luck == 0
        assert state.global_fails == 0
        assert state.tier_fails == {}
        assert state.rarity_fails == {}
        assert state.pity_meter == 0.0
        assert state.seed == 11
        assert state.state_id == state_id
        assert state.rng is stream
        assert engine.get_next_roll_chances(state, 2.0) == engine.get_next_roll_chances(engine.new_state(), 2.0)
