"""Current Login Pointer of an identity.

The pointer is the pair of ``provider`` and ``token`` records naming the most
recent login method. A developer login clears both records; reading such a
pointer falls back to the identity's email identifier.
"""

import json
from typing import Any, Dict, Optional

from modules.identity.directory import IdentityDirectory
from modules.identity.models import LoginPointer
from modules.identity.providers import profile_key, refresh_key
from modules.identity.records import ProfileRecordStore


class LoginPointerStore:
    def __init__(
        self, records: ProfileRecordStore, directory: IdentityDirectory
    ) -> None:
        self._records = records
        self._directory = directory

    async def get(self, identity_id: str) -> LoginPointer:
        current = await self._records.get_records(identity_id, ["provider", "token"])
        provider = current.get("provider")
        if not provider:
            email = await self._directory.get_email(identity_id)
            return LoginPointer(provider=None, token=email)
        return LoginPointer(provider=provider, token=current.get("token"))

    async def record_login(
        self,
        identity_id: str,
        provider: Optional[str],
        token: Optional[str],
        refresh_token: Optional[str] = None,
        profile: Optional[Dict[str, Any]] = None,
        name: Optional[str] = None,
    ) -> None:
        """Point the identity at a login and store what came with it.

        ``name`` is only written when the identity has none yet.
        """
        create = {"name": name} if name else None
        replace: Dict[str, Optional[str]]
        if provider:
            replace = {"provider": provider, "token": token}
            replace.update(provider_records(provider, refresh_token, profile))
        else:
            replace = {"provider": None, "token": None}
        await self._records.update_records(identity_id, create=create, replace=replace)

    async def store_provider_tokens(
        self,
        identity_id: str,
        provider: str,
        refresh_token: Optional[str] = None,
        profile: Optional[Dict[str, Any]] = None,
    ) -> None:
        replace = provider_records(provider, refresh_token, profile)
        if replace:
            await self._records.update_records(identity_id, replace=replace)


def provider_records(
    provider: str,
    refresh_token: Optional[str] = None,
    profile: Optional[Dict[str, Any]] = None,
) -> Dict[str, Optional[str]]:
    records: Dict[str, Optional[str]] = {}
    if refresh_token:
        records[refresh_key(provider)] = refresh_token
    if profile:
        records[profile_key(provider)] = json.dumps(profile)
    return records
