"""Integration settings __init__ - exports all integration settings."""

from infrastructure.configuration.integrations.cognito import CognitoSettings
from infrastructure.configuration.integrations.oauth import OAuthSettings

__all__ = [
    "CognitoSettings",
    "OAuthSettings",
]
