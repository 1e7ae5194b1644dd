"""
Dependency injection services.

Provides application-scoped provider functions for the identity broker.
"""

from infrastructure.services.providers import (
    get_settings,
    get_aws_clients,
    get_identity_service,
)

__all__ = [
    "get_settings",
    "get_aws_clients",
    "get_identity_service",
]
