"""Exceptions raised by rarityroll."""


class RarityRollError(Exception):
    """Base class for rarityroll errors."""


class ConfigurationError(RarityRollError, ValueError):
    """Engine configuration is missing or invalid."""
