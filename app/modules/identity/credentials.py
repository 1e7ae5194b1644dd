"""Credential Resolver.

Exchanges an identity's current login for temporary AWS credentials. An
expired federated token is refreshed through the provider's refresh grant
and the exchange is retried exactly once.

Credential caching is explicit: callers that want reuse hold a
``CredentialContext`` and pass it along; nothing is cached per process.
"""

from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Dict, Optional

import structlog

from modules.identity.directory import IdentityDirectory, LoginExpiredError
from modules.identity.models import AwsCredentials, RefreshedLogin
from modules.identity.pointer import LoginPointerStore
from modules.identity.providers import ProviderNormalizer

logger = structlog.get_logger()

RefreshCallback = Callable[[str], Awaitable[RefreshedLogin]]
Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CredentialResolver:
    """Resolve temporary AWS credentials for an identity.

    Args:
        directory: Identity directory gateway
        pointers: Login pointer store
        normalizer: Provider normalizer
        refresh: Coroutine function renewing the identity's federated login
    """

    def __init__(
        self,
        directory: IdentityDirectory,
        pointers: LoginPointerStore,
        normalizer: ProviderNormalizer,
        refresh: RefreshCallback,
    ) -> None:
        self._directory = directory
        self._pointers = pointers
        self._normalizer = normalizer
        self._refresh = refresh
        self._logger = logger.bind(component="credential_resolver")

    async def get_credentials(self, identity_id: str) -> Optional[AwsCredentials]:
        """Return credentials for the identity's current login.

        Returns:
            AwsCredentials, or None when the identity has no login to present

        Raises:
            UnauthorizedError: the login was still rejected after one refresh
            NotFoundError: no refresh token was stored for an expired login
            UpstreamError: the directory or the provider failed
        """
        pointer = await self._pointers.get(identity_id)
        if pointer.is_empty:
            self._logger.info("no_login_pointer", identity_id=identity_id)
            return None

        descriptor = self._normalizer.normalize(pointer.provider, pointer.token)
        if descriptor.is_developer:
            logins = await self._directory.developer_login(identity_id, descriptor.token)
        else:
            logins = {descriptor.name: descriptor.token}

        try:
            return await self._directory.get_credentials(identity_id, logins)
        except LoginExpiredError:
            if descriptor.is_developer:
                raise
            self._logger.info("login_expired_refreshing", identity_id=identity_id)

        refreshed = await self._refresh(identity_id)
        logins = {descriptor.name: refreshed.token}
        # Second attempt is final; a rejection here propagates
        return await self._directory.get_credentials(identity_id, logins)


class RenewableCredentials:
    """Cached credentials of one identity that renew themselves when expired.

    Args:
        resolver: Credential resolver performing the exchange
        identity_id: Identity whose credentials are cached
        margin_seconds: Treat credentials as expired this long before expiry
        clock: Returns the current aware datetime
    """

    def __init__(
        self,
        resolver: CredentialResolver,
        identity_id: str,
        margin_seconds: int = 60,
        clock: Clock = utcnow,
    ) -> None:
        self._resolver = resolver
        self.identity_id = identity_id
        self._margin = timedelta(seconds=margin_seconds)
        self._clock = clock
        self.credentials: Optional[AwsCredentials] = None

    def is_expired(self) -> bool:
        if self.credentials is None:
            return True
        return self._clock() + self._margin >= self.credentials.expiration

    async def renew(self) -> Optional[AwsCredentials]:
        self.credentials = await self._resolver.get_credentials(self.identity_id)
        return self.credentials

    async def get(self) -> Optional[AwsCredentials]:
        if not self.is_expired():
            return self.credentials
        return await self.renew()


class CredentialContext:
    """Per-caller credential cache keyed by identity id."""

    def __init__(
        self,
        resolver: CredentialResolver,
        margin_seconds: int = 60,
        clock: Clock = utcnow,
    ) -> None:
        self._resolver = resolver
        self._margin_seconds = margin_seconds
        self._clock = clock
        self._entries: Dict[str, RenewableCredentials] = {}

    def for_identity(self, identity_id: str) -> RenewableCredentials:
        if identity_id not in self._entries:
            self._entries[identity_id] = RenewableCredentials(
                self._resolver,
                identity_id,
                margin_seconds=self._margin_seconds,
                clock=self._clock,
            )
        return self._entries[identity_id]

    async def get_credentials(self, identity_id: str) -> Optional[AwsCredentials]:
        return await self.for_identity(identity_id).get()
