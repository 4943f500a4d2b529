"""Roll and debit result models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class RollSource(str, Enum):
    """Which part of the pipeline produced an outcome."""

    WEIGHTED = "weighted"
    HARD_PITY = "hard_pity"
    SOFT_PITY = "soft_pity"
    FLOOR = "floor"


class DebitStatus(str, Enum):
    """Outcome of charging a roll against a balance."""

    DEBITED = "debited"
    DECLINED = "declined_insufficient_funds"
    SKIPPED = "skipped"


class DebitResult(BaseModel):
    """Explicit status of a currency debit."""

    model_config = ConfigDict(frozen=True)  # Immutable model

    status: DebitStatus = Field(default=DebitStatus.SKIPPED, description="Debit status")
    pool: Optional[str] = Field(default=None, description="Balance key that was charged")
    cost: float = Field(default=0.0, ge=0.0, description="Amount requested")
    balance: Optional[float] = Field(default=None, description="Balance after the operation")

    @property
    def declined(self) -> bool:
        return self.status == DebitStatus.DECLINED


class RollResult(BaseModel):
    """One awarded outcome."""

    model_config = ConfigDict(frozen=True)  # Immutable model

    rarity: str = Field(description="Awarded outcome name")
    tier: int = Field(description="Tier of the awarded outcome")
    source: RollSource = Field(default=RollSource.WEIGHTED, description="Pipeline stage that awarded it")
    debit: DebitResult = Field(default_factory=DebitResult, description="Currency debit status")


class BulkResult(BaseModel):
    """Aggregate of sequential rolls against one state."""

    model_config = ConfigDict(frozen=True)  # Immutable model

    requested: int = Field(ge=0, description="Number of rolls requested")
    counts: dict[str, int] = Field(default_factory=dict, description="Outcome name to hit count")
    floor_fallbacks: int = Field(default=0, ge=0, description="Rolls resolved by the floor fallback")
    debit: DebitResult = Field(default_factory=DebitResult, description="Upfront debit status")

    @computed_field
    def total(self) -> int:
        """Number of rolls actually performed."""
        return sum(self.counts.values())
