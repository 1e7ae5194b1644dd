"""Async gateway over the Cognito Identity client.

Runs the synchronous boto3-backed client in worker threads and turns failed
OperationResults into identity errors.
"""

import asyncio
from typing import Any, Dict, List, Optional

import structlog

from infrastructure.clients.aws.cognito_identity import CognitoIdentityClient
from infrastructure.operations.status import OperationStatus
from modules.identity.errors import NotFoundError, UnauthorizedError, raise_for_result
from modules.identity.models import AwsCredentials
from modules.identity.providers import DEVELOPER_LOGIN_NAMESPACE, ProviderNormalizer

logger = structlog.get_logger()


class LoginExpiredError(UnauthorizedError):
    """The directory rejected a login token (expired federated token)."""


class IdentityDirectory:
    """Identity lookups, merges, unlinks and credential exchange.

    Args:
        client: Cognito Identity client bound to the identity pool
        normalizer: Provider normalizer for the same pool
    """

    def __init__(
        self, client: CognitoIdentityClient, normalizer: ProviderNormalizer
    ) -> None:
        self._client = client
        self._normalizer = normalizer
        self._logger = logger.bind(component="identity_directory")

    @property
    def developer_provider_name(self) -> str:
        return self._normalizer.developer_provider_name

    async def _call(self, method: str, *args, **kwargs):
        return await asyncio.to_thread(getattr(self._client, method), *args, **kwargs)

    async def resolve(self, provider: Optional[str], token: Optional[str]) -> str:
        """Return the identity bound to a login.

        Developer logins are looked up; federated logins go through GetId,
        which creates an empty identity for a login the pool has never seen.

        Raises:
            NotFoundError: no identity owns the developer identifier
            UpstreamError: the directory failed
        """
        descriptor = self._normalizer.normalize(provider, token)
        if not descriptor.token:
            raise NotFoundError(f"no login token for provider {provider}")
        if descriptor.is_developer:
            result = await self._call(
                "lookup_developer_identity",
                developer_user_identifier=descriptor.token,
            )
            data = raise_for_result(result, "lookup developer identity")
        else:
            result = await self._call("get_id", {descriptor.name: descriptor.token})
            data = raise_for_result(result, f"get id for {provider}")
        return data["IdentityId"]

    async def find(self, provider: Optional[str], token: Optional[str]) -> Optional[str]:
        """Like ``resolve`` but returns None instead of raising NotFoundError."""
        try:
            return await self.resolve(provider, token)
        except NotFoundError:
            return None

    async def find_developer(self, identifier: str) -> Optional[str]:
        """Identity owning an already-normalized developer identifier, if any."""
        result = await self._call(
            "lookup_developer_identity", developer_user_identifier=identifier
        )
        if result.status == OperationStatus.NOT_FOUND:
            return None
        return raise_for_result(result, "lookup developer identity")["IdentityId"]

    async def create_developer_identity(self, identifier: str) -> str:
        """Create (or return) the identity owning a developer identifier."""
        result = await self._call(
            "get_open_id_token_for_developer_identity",
            {self.developer_provider_name: identifier},
        )
        data = raise_for_result(result, "create developer identity")
        self._logger.info("developer_identity_ensured", identity_id=data["IdentityId"])
        return data["IdentityId"]

    async def open_id_token(
        self, logins: Dict[str, str], identity_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Issue a directory OpenID token, attaching ``logins`` to ``identity_id``.

        Returns:
            Dict with ``IdentityId`` and ``Token``
        """
        result = await self._call(
            "get_open_id_token_for_developer_identity",
            logins,
            identity_id=identity_id,
        )
        return raise_for_result(result, "get open id token")

    async def developer_login(self, identity_id: str, identifier: str) -> Dict[str, str]:
        """Logins map proving ownership of ``identity_id`` through a developer identifier."""
        data = await self.open_id_token(
            {self.developer_provider_name: identifier}, identity_id=identity_id
        )
        return {DEVELOPER_LOGIN_NAMESPACE: data["Token"]}

    async def developer_tokens(self, identity_id: str) -> List[str]:
        """Developer identifiers of an identity (emails and pseudo-provider tokens)."""
        result = await self._call("lookup_developer_identity", identity_id=identity_id)
        if result.status == OperationStatus.NOT_FOUND:
            return []
        data = raise_for_result(result, "list developer identifiers")
        return list(data.get("DeveloperUserIdentifierList") or [])

    async def get_email(self, identity_id: str) -> Optional[str]:
        """First developer identifier without a pseudo-provider prefix."""
        for identifier in await self.developer_tokens(identity_id):
            if self._normalizer.is_email_identifier(identifier):
                return identifier
        return None

    async def merge(self, source_identifier: str, destination_identifier: str) -> str:
        result = await self._call(
            "merge_developer_identities", source_identifier, destination_identifier
        )
        data = raise_for_result(result, "merge developer identities")
        self._logger.info("developer_identities_merged", identity_id=data["IdentityId"])
        return data["IdentityId"]

    async def unlink_developer_identifier(self, identity_id: str, identifier: str) -> None:
        result = await self._call("unlink_developer_identity", identity_id, identifier)
        raise_for_result(result, "unlink developer identifier")

    async def unlink_login(
        self, identity_id: str, logins: Dict[str, str], logins_to_remove: List[str]
    ) -> None:
        result = await self._call("unlink_identity", identity_id, logins, logins_to_remove)
        raise_for_result(result, "unlink login")

    async def describe(self, identity_id: str) -> Dict[str, Any]:
        result = await self._call("describe_identity", identity_id)
        return raise_for_result(result, "describe identity")

    async def get_credentials(
        self, identity_id: str, logins: Dict[str, str]
    ) -> AwsCredentials:
        """Exchange a login for temporary AWS credentials.

        Raises:
            LoginExpiredError: the login token was rejected
            NotFoundError: the identity does not exist
            UpstreamError: any other directory failure
        """
        result = await self._call("get_credentials_for_identity", identity_id, logins)
        if result.status == OperationStatus.UNAUTHORIZED:
            raise LoginExpiredError(
                f"login rejected for {identity_id}: {result.message}", response=result
            )
        return AwsCredentials.from_response(
            raise_for_result(result, "get credentials for identity")
        )
