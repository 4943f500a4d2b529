"""HTTP host configuration."""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from rarityroll.config import (
    DEFAULT_MAX_BULK_COUNT,
    DEFAULT_POOL,
    DEFAULT_ROLL_COST,
    DEFAULT_STARTING_BALANCE,
    DEFAULT_TABLE_PATH,
)
from rarityroll.exceptions import ConfigurationError
from rarityroll.models.rarity import EngineConfig

logger = logging.getLogger(__name__)

# Used when no table file is configured
BUILTIN_TABLE: dict[str, Any] = {
    "rarities": {
        "Common": {"tier": 1, "base": 0.6},
        "Uncommon": {"tier": 2, "base": 0.25},
        "Rare": {"tier": 3, "base": 0.1, "group": "featured"},
        "Epic": {"tier": 4, "base": 0.04},
        "Legendary": {"tier": 5, "base": 0.01, "group": "featured"},
    },
    "pity": {"soft_gain": 0.05, "hard_cap": 90, "hard_reward": "Legendary"},
    "banners": [],
}


class HostConfig(BaseModel):
    """Settings of the HTTP host around the engine."""

    table_path: Optional[str] = Field(
        default=DEFAULT_TABLE_PATH or None, description="JSON file with the engine configuration"
    )
    default_pool: str = Field(default=DEFAULT_POOL, description="Balance key charged by paid rolls")
    roll_cost: float = Field(default=DEFAULT_ROLL_COST, ge=0.0, description="Default price of one roll")
    starting_balance: float = Field(
        default=DEFAULT_STARTING_BALANCE, ge=0.0, description="Balance given to new actors"
    )
    max_bulk_count: int = Field(
        default=DEFAULT_MAX_BULK_COUNT, ge=1, description="Largest bulk roll accepted per request"
    )

    def load_engine_config(self) -> EngineConfig:
        """Read the engine configuration from ``table_path``, or use the built-in table."""
        if not self.table_path:
            return EngineConfig.model_validate(BUILTIN_TABLE)

        path = Path(self.table_path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read rarity table {path}: {e}")
            raise ConfigurationError(f"Cannot read rarity table {path}: {e}") from e

        try:
            config = EngineConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid rarity table {path}: {e}") from e
        logger.info(f"Loaded rarity table from {path}")
        return config
