"""Configuration settings using Pydantic Settings.

Provides typed configuration with environment variable support for data providers.

Usage:
    from entityprovider.config import ProviderSettings

    # Load from environment variables (ENTITYPROVIDER_*)
    settings = ProviderSettings()

    # Or override with explicit values
    settings = ProviderSettings(default_range=10, enable_sort=False)
"""

from __future__ import annotations

from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderSettings(BaseSettings):  # type: ignore[misc]
    """Configuration for entity data providers.

    Attributes:
        default_range: Page size when neither request nor resource sets one.
        ids_separator: Delimiter of composite id paths (``1,2,3``).
        id_public_name: Payload key of the canonical id, never writable.
        allowed_conjunctions: Filter conjunctions accepted on entity resources.
        enable_filter: Accept the ``filter`` URL parameter.
        enable_sort: Accept the ``sort`` URL parameter.
        enable_fields: Accept the ``fields`` URL parameter.
        enable_load_by_field_name: Accept the ``loadByFieldName`` URL parameter.
        log_level: Root log level.
        log_format: ``console`` for development, ``json`` for production.

    Environment Variables:
        ENTITYPROVIDER_DEFAULT_RANGE
        ENTITYPROVIDER_IDS_SEPARATOR
        ENTITYPROVIDER_ID_PUBLIC_NAME
        ENTITYPROVIDER_ALLOWED_CONJUNCTIONS (JSON list)
        ENTITYPROVIDER_ENABLE_FILTER
        ENTITYPROVIDER_ENABLE_SORT
        ENTITYPROVIDER_ENABLE_FIELDS
        ENTITYPROVIDER_ENABLE_LOAD_BY_FIELD_NAME
        ENTITYPROVIDER_LOG_LEVEL
        ENTITYPROVIDER_LOG_FORMAT
    """

    model_config = SettingsConfigDict(
        env_prefix="ENTITYPROVIDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_range: int = 50
    ids_separator: str = ","
    id_public_name: str = "id"
    allowed_conjunctions: list[str] = ["AND"]
    enable_filter: bool = True
    enable_sort: bool = True
    enable_fields: bool = True
    enable_load_by_field_name: bool = True
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"

    @field_validator("allowed_conjunctions")
    @classmethod
    def _upper_conjunctions(cls, value: list[str]) -> list[str]:
        return [conjunction.upper() for conjunction in value]

    @field_validator("default_range")
    @classmethod
    def _positive_range(cls, value: int) -> int:
        if value < 1:
            raise ValueError("default_range must be at least 1")
        return value
