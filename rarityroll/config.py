"""Central configuration defaults and constants for rarityroll."""

import os

# Roll Defaults
DEFAULT_LUCK = float(os.getenv("RARITYROLL_DEFAULT_LUCK", "1.0"))
DEFAULT_SOFT_GAIN = float(os.getenv("RARITYROLL_DEFAULT_SOFT_GAIN", "0.05"))  # Pity meter gain per roll

# Entropy and bad-luck tuning
DEFAULT_ENTROPY_STEP = float(os.getenv("RARITYROLL_ENTROPY_STEP", "0.02"))  # Added on every floor fallback
DEFAULT_ENTROPY_MAX = float(os.getenv("RARITYROLL_ENTROPY_MAX", "10"))
DEFAULT_ENTROPY_DAMPING = float(os.getenv("RARITYROLL_ENTROPY_DAMPING", "0.4"))  # Applied to tiers no rarer than the last win
DEFAULT_BAD_LUCK_PENALTY = float(os.getenv("RARITYROLL_BAD_LUCK_PENALTY", "0.0003"))
DEFAULT_PITY_METER_MAX = float(os.getenv("RARITYROLL_PITY_METER_MAX", "10"))

# Modifier coefficients
DEFAULT_LUCK_SCALE = float(os.getenv("RARITYROLL_LUCK_SCALE", "0.01"))
DEFAULT_PITY_EXPONENT = float(os.getenv("RARITYROLL_PITY_EXPONENT", "1.15"))
DEFAULT_PITY_SCALE = float(os.getenv("RARITYROLL_PITY_SCALE", "0.002"))

# Host Defaults
DEFAULT_TABLE_PATH = os.getenv("RARITYROLL_TABLE_PATH", "")  # Empty means built-in table
DEFAULT_POOL = os.getenv("RARITYROLL_DEFAULT_POOL", "gems")
DEFAULT_ROLL_COST = float(os.getenv("RARITYROLL_ROLL_COST", "0"))
DEFAULT_STARTING_BALANCE = float(os.getenv("RARITYROLL_STARTING_BALANCE", "0"))
DEFAULT_MAX_BULK_COUNT = int(os.getenv("RARITYROLL_MAX_BULK_COUNT", "1000"))
DEFAULT_LOG_LEVEL = os.getenv("RARITYROLL_LOG_LEVEL", "INFO").upper()
