"""Cognito Sync client for AWS operations.

Provides access to the per-identity dataset used as the profile record store
(list_records, update_records) with OperationResult return types.
"""

from typing import Any, Dict, List, Optional

import structlog

from infrastructure.clients.aws.executor import execute_aws_api_call
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.operations.result import OperationResult

logger = structlog.get_logger()


class CognitoSyncClient:
    """Client for Cognito Sync dataset operations.

    Args:
        session_provider: SessionProvider instance for credential/config management
        identity_pool_id: Identity pool the datasets belong to
        dataset_name: Dataset holding the profile records
    """

    def __init__(
        self,
        session_provider: SessionProvider,
        identity_pool_id: str,
        dataset_name: str = "profile",
    ) -> None:
        self._session_provider = session_provider
        self._service_name = "cognito-sync"
        self._identity_pool_id = identity_pool_id
        self._dataset_name = dataset_name
        self._logger = logger.bind(component="cognito_sync_client")

    def list_records(
        self, identity_id: str, dataset_name: Optional[str] = None
    ) -> OperationResult:
        """List every record in the identity's dataset.

        Returns:
            OperationResult with ``Records`` and ``SyncSessionToken``
        """
        client_kwargs = self._session_provider.build_client_kwargs(
            service_name=self._service_name
        )
        return execute_aws_api_call(
            self._service_name,
            "list_records",
            IdentityPoolId=self._identity_pool_id,
            IdentityId=identity_id,
            DatasetName=dataset_name or self._dataset_name,
            **client_kwargs,
        )

    def update_records(
        self,
        identity_id: str,
        sync_session_token: str,
        record_patches: List[Dict[str, Any]],
        dataset_name: Optional[str] = None,
    ) -> OperationResult:
        """Apply a batch of record patches.

        A ResourceConflictException is reported as success: a concurrent
        writer bumped a sync count between the read and this patch. Lost
        updates from the same identity on two devices are not detected.

        Args:
            identity_id: Identity owning the dataset
            sync_session_token: Token returned by the preceding list_records
            record_patches: Cognito RecordPatches (Op, Key, Value, SyncCount)

        Returns:
            OperationResult with the updated ``Records``
        """
        client_kwargs = self._session_provider.build_client_kwargs(
            service_name=self._service_name
        )

        def _on_conflict(exc: Exception) -> None:
            self._logger.warning(
                "record_patch_conflict_ignored",
                identity_id=identity_id,
                keys=[patch["Key"] for patch in record_patches],
                error=str(exc),
            )

        return execute_aws_api_call(
            self._service_name,
            "update_records",
            treat_conflict_as_success=True,
            conflict_callback=_on_conflict,
            IdentityPoolId=self._identity_pool_id,
            IdentityId=identity_id,
            DatasetName=dataset_name or self._dataset_name,
            SyncSessionToken=sync_session_token,
            RecordPatches=record_patches,
            **client_kwargs,
        )
