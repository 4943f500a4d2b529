"""Per-actor roll state model."""

import random
import uuid
from typing import Any, Optional

from pydantic import BaseModel, Field, PrivateAttr


class RollState(BaseModel):
    """Mutable counters for one actor. Owned by a single caller at a time."""

    # Identity
    state_id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Unique state identifier")
    seed: Optional[int] = Field(default=None, description="Seed of the isolated random stream, if any")

    # Roll history
    total_rolls: int = Field(default=0, ge=0, description="Monotonic roll counter")
    last_rarity: Optional[str] = Field(default=None, description="Outcome of the most recent roll")
    last_tier: int = Field(default=0, description="Tier of the most recent roll")

    # Frustration counters
    entropy: float = Field(default=0.0, ge=0.0, description="Accumulated frustration score")
    bad_luck: int = Field(default=0, ge=0, description="Consecutive floor fallbacks")
    global_fails: int = Field(default=0, ge=0, description="Draws since the last hard-pity trigger")
    tier_fails: dict[int, int] = Field(default_factory=dict, description="Consecutive misses per tier")
    rarity_fails: dict[str, int] = Field(default_factory=dict, description="Consecutive misses per outcome")

    # Guaranteed-tier pity meter
    pity_meter: float = Field(default=0.0, ge=0.0, description="Soft pity meter, 1.0 triggers")
    pity_target_tiers: Optional[list[int]] = Field(
        default=None, description="Tiers the pity meter awards; None disables the meter"
    )

    _rng: Optional[random.Random] = PrivateAttr(default=None)

    def model_post_init(self, __context: Any) -> None:
        if self.seed is not None:
            self._rng = random.Random(self.seed)

    @property
    def rng(self) -> Optional[random.Random]:
        """Isolated generator for seeded states, None otherwise."""
        return self._rng

    def reseed(self, seed: Optional[int]) -> None:
        """Replace the random stream. Passing None returns the state to the shared generator."""
        self.seed = seed
        self._rng = random.Random(seed) if seed is not None else None
