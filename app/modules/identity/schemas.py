"""Outward-facing shapes returned by the identity service.

Pydantic models, serialized by the front controller as-is.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class LinkedLogins(BaseModel):
    """Logins attached to an identity.

    Attributes:
        id: Durable identity id
        google/facebook/amazon/twitter: Federated logins attached
        stripe/paypal: Developer-owned provider logins attached
        developer_providers: Every pseudo-provider prefix found, known or not
        email: Email developer identifier, if any
    """

    id: str
    google: bool = False
    facebook: bool = False
    amazon: bool = False
    twitter: bool = False
    stripe: bool = False
    paypal: bool = False
    developer_providers: List[str] = Field(default_factory=list)
    email: Optional[str] = None


class UserProfile(LinkedLogins):
    """Full profile: linked logins plus profile records.

    ``name`` falls back to the email, then the identity id. ``password``
    tells whether a password is set, never its value. ``profiles`` maps a
    provider name to the JSON profile stored at its last login.
    """

    name: str
    display_name: str
    provider: Optional[str] = None
    password: bool = False
    profiles: Dict[str, str] = Field(default_factory=dict)
