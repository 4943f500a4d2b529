"""Rarity table and engine configuration models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rarityroll.config import (
    DEFAULT_BAD_LUCK_PENALTY,
    DEFAULT_ENTROPY_DAMPING,
    DEFAULT_ENTROPY_MAX,
    DEFAULT_ENTROPY_STEP,
    DEFAULT_LUCK,
    DEFAULT_LUCK_SCALE,
    DEFAULT_PITY_EXPONENT,
    DEFAULT_PITY_METER_MAX,
    DEFAULT_PITY_SCALE,
    DEFAULT_SOFT_GAIN,
)


class RarityDefinition(BaseModel):
    """One named outcome of a roll."""

    model_config = ConfigDict(frozen=True)  # Immutable model

    tier: int = Field(ge=0, description="Ordinal rank, lower is more common")
    base: float = Field(ge=0.0, le=1.0, description="Baseline probability mass")
    group: Optional[str] = Field(default=None, description="Tag used for banner matching")


class PityRule(BaseModel):
    """Anti-frustration pity configuration."""

    model_config = ConfigDict(frozen=True)  # Immutable model

    soft_start: Optional[int] = Field(
        default=None, ge=0, description="Rolls before the pity meter starts filling"
    )
    soft_gain: Optional[float] = Field(
        default=None, ge=0.0, description="Pity meter gain per roll"
    )
    hard_cap: Optional[int] = Field(
        default=None, ge=1, description="Consecutive fails that force the hard reward"
    )
    hard_reward: Optional[str] = Field(
        default=None, description="Outcome name guaranteed at the hard cap"
    )


class BannerRule(BaseModel):
    """Contextual boost for every outcome sharing a group tag."""

    model_config = ConfigDict(frozen=True)  # Immutable model

    group: str = Field(description="Group tag matched against RarityDefinition.group")
    multiplier: float = Field(ge=0.0, description="Applied as an additive boost of multiplier - 1")


class EngineTuning(BaseModel):
    """Deployment-level constants of the modifier stack."""

    model_config = ConfigDict(frozen=True)  # Immutable model

    default_luck: float = Field(default=DEFAULT_LUCK, ge=0.0)
    entropy_step: float = Field(default=DEFAULT_ENTROPY_STEP, ge=0.0)
    entropy_max: float = Field(default=DEFAULT_ENTROPY_MAX, ge=0.0)
    entropy_damping: float = Field(default=DEFAULT_ENTROPY_DAMPING, ge=0.0)
    bad_luck_penalty: float = Field(default=DEFAULT_BAD_LUCK_PENALTY, ge=0.0)
    pity_meter_max: float = Field(default=DEFAULT_PITY_METER_MAX, ge=0.0)
    default_soft_gain: float = Field(default=DEFAULT_SOFT_GAIN, ge=0.0)
    luck_scale: float = Field(default=DEFAULT_LUCK_SCALE)
    pity_exponent: float = Field(default=DEFAULT_PITY_EXPONENT)
    pity_scale: float = Field(default=DEFAULT_PITY_SCALE)


class EngineConfig(BaseModel):
    """Complete, immutable description of a roll table."""

    model_config = ConfigDict(frozen=True)  # Immutable model

    rarities: dict[str, RarityDefinition] = Field(
        default_factory=dict, description="Outcome name to definition"
    )
    pity: Optional[PityRule] = Field(default=None, description="Optional pity rule")
    banners: list[BannerRule] = Field(
        default_factory=list, description="Banner rules, first match per group wins"
    )
    tuning: EngineTuning = Field(default_factory=EngineTuning, description="Modifier constants")

    @field_validator("banners", mode="before")
    @classmethod
    def normalize_banners(cls, value):
        """Treat a missing banner list as empty."""
        return [] if value is None else value

    def sorted_names(self) -> list[str]:
        """Outcome names in canonical (tier, name) order."""
        return sorted(self.rarities, key=lambda name: (self.rarities[name].tier, name))
