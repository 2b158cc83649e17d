"""
Centralized settings for the pricing engine.

The engine reads no files and no environment variables; settings only
carry the defaults used when a caller leaves a field out.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Settings:
    """Engine defaults."""

    # Province used when an order does not name one
    default_province: str = 'ON'

    # Customer tier used when an order does not name one
    default_tier: str = 'retail'

    # Decimals kept on display percentages (margin, markup)
    margin_decimals: int = 2

    @classmethod
    def load(cls, **overrides) -> 'Settings':
        """Build settings, replacing any default passed by keyword."""
        return cls(**overrides)


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the shared default settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
