"""Shared base classes and utilities for settings modules."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class IntegrationSettings(BaseSettings):
    """Base class for external integration settings (AWS, OAuth providers).

    All integration settings inherit from this class to share env file
    loading and case sensitivity.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


class FeatureSettings(BaseSettings):
    """Base class for feature module settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )
