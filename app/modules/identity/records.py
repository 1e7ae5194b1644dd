"""Profile Record Store.

Typed access to the per-identity Cognito Sync dataset. Every write lists the
dataset first to learn each key's sync count, then sends one batched patch
echoing the sync session token.
"""

import asyncio
from typing import Dict, Iterable, List, Mapping, Optional

import structlog

from infrastructure.clients.aws.cognito_sync import CognitoSyncClient
from modules.identity.errors import raise_for_result
from modules.identity.models import PatchOp, Record, RecordPatch, RecordSnapshot

logger = structlog.get_logger()


def build_patches(
    snapshot: RecordSnapshot,
    create: Optional[Mapping[str, Optional[str]]] = None,
    replace: Optional[Mapping[str, Optional[str]]] = None,
    remove: Optional[Iterable[str]] = None,
) -> List[RecordPatch]:
    """Build the patch batch for one update.

    - create: only keys without a live value, against their observed sync
      count (0 for a key never written)
    - replace: every key, against its observed sync count or 0
    - remove: only keys with a live value, against their sync count

    A None value in ``replace`` clears the record.
    """
    patches: List[RecordPatch] = []

    for key, value in (create or {}).items():
        existing = snapshot.get(key)
        if existing is not None and existing.value is not None:
            continue
        patches.append(
            RecordPatch(
                op=PatchOp.CREATE,
                key=key,
                value=value,
                sync_count=existing.sync_count if existing else 0,
            )
        )

    for key, value in (replace or {}).items():
        existing = snapshot.get(key)
        patches.append(
            RecordPatch(
                op=PatchOp.REPLACE,
                key=key,
                value=value,
                sync_count=existing.sync_count if existing else 0,
            )
        )

    for key in remove or ():
        existing = snapshot.get(key)
        if existing is None or existing.value is None:
            continue
        patches.append(
            RecordPatch(op=PatchOp.REMOVE, key=key, sync_count=existing.sync_count)
        )

    return patches


class ProfileRecordStore:
    """Key-value profile records of an identity.

    Args:
        sync_client: Cognito Sync client bound to the identity pool and dataset
    """

    def __init__(self, sync_client: CognitoSyncClient) -> None:
        self._sync = sync_client
        self._logger = logger.bind(component="profile_record_store")

    async def snapshot(self, identity_id: str) -> RecordSnapshot:
        result = await asyncio.to_thread(self._sync.list_records, identity_id)
        data = raise_for_result(result, f"list records of {identity_id}") or {}
        records = {}
        for item in data.get("Records", []):
            record = Record.from_response(item)
            records[record.key] = record
        return RecordSnapshot(
            records=records, session_token=data.get("SyncSessionToken")
        )

    async def get_records(
        self, identity_id: str, prefixes: Iterable[str]
    ) -> Dict[str, str]:
        """Return live records whose key starts with any of ``prefixes``.

        Removed or cleared records (no value) are omitted.

        Raises:
            NotFoundError: the identity has no dataset
            UpstreamError: the record store failed
        """
        prefixes = tuple(prefixes)
        snapshot = await self.snapshot(identity_id)
        return {
            key: record.value
            for key, record in snapshot.records.items()
            if record.value is not None and key.startswith(prefixes)
        }

    async def update_records(
        self,
        identity_id: str,
        create: Optional[Mapping[str, Optional[str]]] = None,
        replace: Optional[Mapping[str, Optional[str]]] = None,
        remove: Optional[Iterable[str]] = None,
    ) -> bool:
        """Apply create/replace/remove in one batch.

        A write conflict on the batch is reported as success by the sync
        client; see ``CognitoSyncClient.update_records``.

        Raises:
            NotFoundError: the identity has no dataset
            UpstreamError: the record store failed
        """
        snapshot = await self.snapshot(identity_id)
        patches = build_patches(snapshot, create, replace, remove)
        if not patches:
            self._logger.debug("record_update_skipped", identity_id=identity_id)
            return True

        result = await asyncio.to_thread(
            self._sync.update_records,
            identity_id,
            snapshot.session_token,
            [patch.to_wire() for patch in patches],
        )
        raise_for_result(result, f"update records of {identity_id}")
        self._logger.info(
            "records_updated",
            identity_id=identity_id,
            keys=[patch.key for patch in patches],
        )
        return True
