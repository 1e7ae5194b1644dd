"""Cognito Identity client for AWS operations.

Provides access to the Cognito Identity operations the identity broker relies
on (developer identifier lookup, identity resolution, OpenID token issuance,
merges, unlinks and credential exchange) with OperationResult return types.
"""

from typing import Dict, Optional

import structlog

from infrastructure.clients.aws.executor import execute_aws_api_call
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.operations.result import OperationResult

logger = structlog.get_logger()


class CognitoIdentityClient:
    """Client for Cognito Identity operations.

    All methods return OperationResult for consistent error handling and
    downstream processing.

    Args:
        session_provider: SessionProvider instance for credential/config management
        identity_pool_id: Identity pool all calls are scoped to
        developer_provider_name: Developer provider name registered on the pool
        account_id: AWS account id passed to GetId
    """

    def __init__(
        self,
        session_provider: SessionProvider,
        identity_pool_id: str,
        developer_provider_name: str,
        account_id: Optional[str] = None,
    ) -> None:
        self._session_provider = session_provider
        self._service_name = "cognito-identity"
        self._identity_pool_id = identity_pool_id
        self._developer_provider_name = developer_provider_name
        self._account_id = account_id
        self._logger = logger.bind(component="cognito_identity_client")

    @property
    def developer_provider_name(self) -> str:
        return self._developer_provider_name

    def _call(self, method: str, **kwargs) -> OperationResult:
        client_kwargs = self._session_provider.build_client_kwargs(
            service_name=self._service_name
        )
        self._logger.debug("cognito_identity_call", method=method)
        return execute_aws_api_call(
            self._service_name, method, **client_kwargs, **kwargs
        )

    def lookup_developer_identity(
        self,
        developer_user_identifier: Optional[str] = None,
        identity_id: Optional[str] = None,
        max_results: int = 10,
    ) -> OperationResult:
        """Look up an identity by developer identifier, or list an identity's identifiers.

        Args:
            developer_user_identifier: Developer identifier to resolve
            identity_id: Identity whose developer identifiers to list

        Returns:
            OperationResult with ``IdentityId`` and ``DeveloperUserIdentifierList``;
            NOT_FOUND when nothing matches
        """
        params: Dict[str, object] = {
            "IdentityPoolId": self._identity_pool_id,
            "MaxResults": max_results,
        }
        if developer_user_identifier is not None:
            params["DeveloperUserIdentifier"] = developer_user_identifier
        if identity_id is not None:
            params["IdentityId"] = identity_id
        return self._call("lookup_developer_identity", **params)

    def get_id(self, logins: Dict[str, str]) -> OperationResult:
        """Resolve (or create) the identity bound to federated logins."""
        params: Dict[str, object] = {
            "IdentityPoolId": self._identity_pool_id,
            "Logins": logins,
        }
        if self._account_id:
            params["AccountId"] = self._account_id
        return self._call("get_id", **params)

    def get_open_id_token_for_developer_identity(
        self,
        logins: Dict[str, str],
        identity_id: Optional[str] = None,
    ) -> OperationResult:
        """Register or attach logins and return an OpenID token for the identity.

        Without ``identity_id`` a developer login that does not exist yet
        creates a new identity. With ``identity_id`` every supplied login is
        attached to that identity.

        Returns:
            OperationResult with ``IdentityId`` and ``Token``
        """
        params: Dict[str, object] = {
            "IdentityPoolId": self._identity_pool_id,
            "Logins": logins,
        }
        if identity_id is not None:
            params["IdentityId"] = identity_id
        return self._call("get_open_id_token_for_developer_identity", **params)

    def merge_developer_identities(
        self, source_user_identifier: str, destination_user_identifier: str
    ) -> OperationResult:
        """Merge the identity owning the source identifier into the destination's."""
        return self._call(
            "merge_developer_identities",
            IdentityPoolId=self._identity_pool_id,
            DeveloperProviderName=self._developer_provider_name,
            SourceUserIdentifier=source_user_identifier,
            DestinationUserIdentifier=destination_user_identifier,
        )

    def unlink_developer_identity(
        self, identity_id: str, developer_user_identifier: str
    ) -> OperationResult:
        return self._call(
            "unlink_developer_identity",
            IdentityId=identity_id,
            IdentityPoolId=self._identity_pool_id,
            DeveloperProviderName=self._developer_provider_name,
            DeveloperUserIdentifier=developer_user_identifier,
        )

    def unlink_identity(
        self,
        identity_id: str,
        logins: Dict[str, str],
        logins_to_remove: list[str],
    ) -> OperationResult:
        return self._call(
            "unlink_identity",
            IdentityId=identity_id,
            Logins=logins,
            LoginsToRemove=logins_to_remove,
        )

    def describe_identity(self, identity_id: str) -> OperationResult:
        """Describe an identity.

        Returns:
            OperationResult with ``IdentityId`` and ``Logins`` (namespaces)
        """
        return self._call("describe_identity", IdentityId=identity_id)

    def get_credentials_for_identity(
        self, identity_id: str, logins: Dict[str, str]
    ) -> OperationResult:
        """Exchange a login for temporary AWS credentials.

        Returns:
            OperationResult with ``IdentityId`` and ``Credentials``; UNAUTHORIZED
            when the presented login token is expired or rejected
        """
        return self._call(
            "get_credentials_for_identity", IdentityId=identity_id, Logins=logins
        )
