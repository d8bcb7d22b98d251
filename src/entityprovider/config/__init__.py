"""Configuration module using Pydantic Settings.

Provides typed configuration for data providers with environment variable support.

Usage:
    from entityprovider.config import ProviderSettings

    settings = ProviderSettings(default_range=25)
"""

from entityprovider.config.settings import ProviderSettings

__all__ = [
    "ProviderSettings",
]
