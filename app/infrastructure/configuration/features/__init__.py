"""Feature settings __init__ - exports all feature settings."""

from infrastructure.configuration.features.identity import IdentityFeatureSettings

__all__ = [
    "IdentityFeatureSettings",
]
