"""Internal value types for the identity module.

Lightweight dataclasses (not Pydantic) passed between the normalizer, the
record store, the directory gateway and the orchestrator. Outward-facing
shapes live in ``schemas.py``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ProviderDescriptor:
    """Directory-facing form of a (provider, token) pair.

    Attributes:
        name: Directory login namespace (e.g. accounts.google.com) or the
            developer provider name for developer-owned logins
        is_developer: True when the login is a developer identifier
        token: Login token, prefixed with the pseudo-provider name for
            developer-owned provider logins
    """

    name: str
    is_developer: bool
    token: Optional[str]


@dataclass(frozen=True)
class LoginPointer:
    """The (provider, token) pair of the most recent login of an identity.

    ``provider`` None means a developer login; ``token`` then holds the email.
    """

    provider: Optional[str]
    token: Optional[str]

    @property
    def is_empty(self) -> bool:
        return not self.token


class PatchOp(Enum):
    CREATE = "create"
    REPLACE = "replace"
    REMOVE = "remove"


@dataclass(frozen=True)
class Record:
    key: str
    value: Optional[str]
    sync_count: int = 0

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "Record":
        return cls(
            key=data["Key"],
            value=data.get("Value"),
            sync_count=int(data.get("SyncCount", 0)),
        )


@dataclass
class RecordSnapshot:
    """Records of one dataset plus the session token needed to patch it."""

    records: Dict[str, Record]
    session_token: Optional[str]

    def get(self, key: str) -> Optional[Record]:
        return self.records.get(key)


@dataclass(frozen=True)
class RecordPatch:
    """A single record write.

    Cognito Sync has no create operation: a create is a replace against
    sync count 0, so CREATE and REPLACE share the wire op.
    """

    op: PatchOp
    key: str
    value: Optional[str] = None
    sync_count: int = 0

    def to_wire(self) -> Dict[str, Any]:
        patch: Dict[str, Any] = {
            "Op": "remove" if self.op == PatchOp.REMOVE else "replace",
            "Key": self.key,
            "SyncCount": self.sync_count,
        }
        if self.op != PatchOp.REMOVE and self.value is not None:
            patch["Value"] = self.value
        return patch


@dataclass(frozen=True)
class NormalizedProfile:
    """Provider profile reduced to what the broker needs."""

    id_token: Optional[str]
    name: Optional[str] = None
    email: Optional[str] = None


@dataclass
class OAuthToken:
    """Token endpoint response."""

    access_token: str
    refresh_token: Optional[str] = None
    id_token: Optional[str] = None
    expires_in: Optional[int] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_response(cls, payload: Dict[str, Any]) -> "OAuthToken":
        expires_in = payload.get("expires_in")
        return cls(
            access_token=payload["access_token"],
            refresh_token=payload.get("refresh_token"),
            id_token=payload.get("id_token"),
            expires_in=int(expires_in) if expires_in is not None else None,
            raw=payload,
        )


@dataclass
class ProviderLogin:
    """Outcome of an OAuth exchange: token, raw profile and normalized view."""

    provider: str
    token: OAuthToken
    profile: Optional[Dict[str, Any]]
    normalized: NormalizedProfile


@dataclass(frozen=True)
class AwsCredentials:
    """Temporary AWS credentials issued for an identity."""

    identity_id: str
    access_key_id: str
    secret_key: str
    session_token: str
    expiration: datetime

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "AwsCredentials":
        credentials = data["Credentials"]
        return cls(
            identity_id=data["IdentityId"],
            access_key_id=credentials["AccessKeyId"],
            secret_key=credentials["SecretKey"],
            session_token=credentials["SessionToken"],
            expiration=credentials["Expiration"],
        )


@dataclass(frozen=True)
class FederatedLoginResult:
    """Identity id for the token issuer plus the provider session lifetime."""

    id: str
    expires_in: Optional[int] = None


@dataclass(frozen=True)
class RefreshedLogin:
    token: str
    expires_in: Optional[int] = None


@dataclass
class ResetEmail:
    to_address: str
    subject: str
    html_body: str
    text_body: str
    source: str
