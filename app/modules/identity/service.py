"""Login/Signup Orchestrator.

``IdentityService`` composes the normalizer, the directory gateway, the
record store, the linker, the credential resolver and the OAuth adapter into
the broker's use cases. Every public coroutine binds an operation-scoped
logging context.
"""

import asyncio
from typing import Any, Dict, List, Mapping, Optional, Tuple

import requests

from infrastructure.clients.aws import AWSClients
from infrastructure.configuration import Settings
from infrastructure.logging import bind_request_context, get_module_logger
from modules.identity.credentials import (
    Clock,
    CredentialContext,
    CredentialResolver,
    utcnow,
)
from modules.identity.directory import IdentityDirectory
from modules.identity.errors import (
    ConflictError,
    InvalidRequestError,
    NotFoundError,
    UnauthorizedError,
    UpstreamError,
)
from modules.identity.linking import IdentityLinker
from modules.identity.mail import PasswordResetMailer
from modules.identity.models import (
    AwsCredentials,
    FederatedLoginResult,
    LoginPointer,
    RefreshedLogin,
)
from modules.identity.oauth import OAuthExchange
from modules.identity.passwords import (
    generate_reset_token,
    hash_secret,
    verify_secret,
)
from modules.identity.pointer import LoginPointerStore
from modules.identity.providers import (
    Provider,
    ProviderNormalizer,
    build_provider_configs,
    refresh_key,
)
from modules.identity.records import ProfileRecordStore
from modules.identity.schemas import LinkedLogins, UserProfile

logger = get_module_logger()

PROFILE_RECORD_PREFIXES = ["name", "provider", "profile", "password"]


class IdentityService:
    """Identity broker use cases.

    Args:
        directory: Identity directory gateway
        records: Profile record store
        oauth: OAuth exchange adapter
        mailer: Password reset mailer
        normalizer: Provider normalizer for the identity pool
        credentials_margin_seconds: Renew cached credentials this early
        clock: Returns the current aware datetime (credential expiry)
    """

    def __init__(
        self,
        directory: IdentityDirectory,
        records: ProfileRecordStore,
        oauth: OAuthExchange,
        mailer: PasswordResetMailer,
        normalizer: ProviderNormalizer,
        credentials_margin_seconds: int = 60,
        clock: Clock = utcnow,
    ) -> None:
        self._directory = directory
        self._records = records
        self._oauth = oauth
        self._mailer = mailer
        self._normalizer = normalizer
        self._pointers = LoginPointerStore(records, directory)
        self._linker = IdentityLinker(directory, records, normalizer)
        self._credentials = CredentialResolver(
            directory, self._pointers, normalizer, refresh=self.refresh_provider
        )
        self._credentials_margin_seconds = credentials_margin_seconds
        self._clock = clock

    # Email and password

    async def signup(self, name: str, email: str, password: str) -> str:
        """Create an email/password identity.

        Returns:
            The new identity id

        Raises:
            InvalidRequestError: email or password missing
            ConflictError: an identity already owns the email
        """
        with bind_request_context(operation="signup"):
            if not email or not password:
                raise InvalidRequestError("email and password are required")
            if await self._directory.find(None, email) is not None:
                raise ConflictError(f"An account already exists with {email}")

            identity_id = await self._directory.create_developer_identity(email)
            await self._records.update_records(
                identity_id, replace={"password": hash_secret(password)}
            )
            await self._pointers.record_login(identity_id, None, email, name=name)
            logger.info("signup_completed", identity_id=identity_id)
            return identity_id

    async def login(
        self,
        email: str,
        password: Optional[str] = None,
        reset: Optional[str] = None,
    ) -> str:
        """Log in with an email and exactly one of password or reset token.

        A reset token is consumed by a successful login.

        Raises:
            InvalidRequestError: neither or both of password and reset given
            NotFoundError: no identity owns the email
            UnauthorizedError: the password or reset token does not match
        """
        with bind_request_context(operation="login"):
            if bool(password) == bool(reset):
                raise InvalidRequestError(
                    "exactly one of password or reset is required"
                )
            identity_id = await self._directory.find(None, email)
            if identity_id is None:
                raise NotFoundError(f"does not exist {email}")

            stored = await self._records.get_records(identity_id, ["password", "reset"])
            if reset:
                if not stored.get("reset"):
                    raise UnauthorizedError("reset does not exist")
                if not verify_secret(reset, stored["reset"]):
                    raise UnauthorizedError("reset does not match")
                await self._records.update_records(identity_id, remove=["reset"])
            else:
                if not stored.get("password"):
                    raise UnauthorizedError("password does not exist")
                if not verify_secret(password, stored["password"]):
                    raise UnauthorizedError("password does not match")

            await self._pointers.record_login(identity_id, None, email)
            logger.info(
                "login_completed",
                identity_id=identity_id,
                method="reset" if reset else "password",
            )
            return identity_id

    async def forgot_password(self, email: str) -> str:
        """Store a new reset token and email its link to the user.

        Returns:
            The plaintext reset token (for trusted callers and tests)

        Raises:
            NotFoundError: no identity owns the email
            UpstreamError: the record store or mail sender failed
        """
        with bind_request_context(operation="forgot_password"):
            identity_id = await self._directory.find(None, email)
            if identity_id is None:
                raise NotFoundError(f"does not exist {email}")

            reset = generate_reset_token()
            await self._records.update_records(
                identity_id, replace={"reset": hash_secret(reset)}
            )
            stored = await self._records.get_records(identity_id, ["name"])
            await self._mailer.send(email, reset, stored.get("name"))
            logger.info("password_reset_issued", identity_id=identity_id)
            return reset

    async def update_password(self, identity_id: str, password: str) -> bool:
        with bind_request_context(operation="update_password", identity_id=identity_id):
            if not password:
                raise InvalidRequestError("password is required")
            return await self._records.update_records(
                identity_id, replace={"password": hash_secret(password)}
            )

    # Federated login

    def _parse_provider(self, provider: str) -> Provider:
        parsed = Provider.parse(provider)
        if parsed is None:
            raise InvalidRequestError(f"unsupported provider {provider}")
        return parsed

    async def _federated_claimed_elsewhere(
        self, provider: str, token: str, identity_id: str
    ) -> bool:
        owner = await self._directory.find(provider, token)
        if owner is None or owner == identity_id:
            return False
        # GetId creates an empty identity for an unseen login; only a
        # populated one counts as claimed
        if await self._directory.developer_tokens(owner):
            return True
        try:
            records = await self._records.get_records(owner, [""])
        except NotFoundError:
            return False
        return bool(records)

    async def _email_claimed_elsewhere(
        self, email: Optional[str], identity_id: str
    ) -> bool:
        if not email:
            return False
        owner = await self._directory.find(None, email)
        return owner is not None and owner != identity_id

    async def login_federated(
        self,
        provider: str,
        code: str,
        client_id: str,
        redirect_uri: str,
        current_user_id: Optional[str] = None,
    ) -> FederatedLoginResult:
        """Complete an OAuth login, linking it to ``current_user_id`` if given.

        Raises:
            InvalidRequestError: unknown provider
            ConflictError: the login or its email belongs to another identity
            UpstreamError: the provider or the directory failed
        """
        with bind_request_context(
            operation="login_federated",
            provider=provider,
            identity_id=current_user_id,
        ):
            parsed = self._parse_provider(provider)
            provider_login = await self._oauth.login(
                parsed, code, client_id, redirect_uri
            )
            normalized = provider_login.normalized
            token = provider_login.token

            if current_user_id:
                if await self._federated_claimed_elsewhere(
                    provider, normalized.id_token, current_user_id
                ):
                    raise ConflictError(
                        f"There is already an account with {provider} that belongs to you"
                    )
                if await self._email_claimed_elsewhere(
                    normalized.email, current_user_id
                ):
                    raise ConflictError(
                        f"There is already an account with {normalized.email} "
                        "that belongs to you"
                    )
                identity_id = await self.link(
                    current_user_id,
                    provider,
                    normalized.id_token,
                    token.refresh_token,
                    provider_login.profile,
                )
                return FederatedLoginResult(id=identity_id, expires_in=token.expires_in)

            identity_id = await self.login_federated_with_token(
                provider,
                normalized.id_token,
                refresh_token=token.refresh_token,
                profile=provider_login.profile,
                name=normalized.name,
                email=normalized.email,
            )
            return FederatedLoginResult(id=identity_id, expires_in=token.expires_in)

    async def _find_or_create(self, provider: str, token: str) -> str:
        identity_id = await self._directory.find(provider, token)
        if identity_id is not None:
            return identity_id
        # Only developer-owned provider logins can be missing; GetId creates
        # federated identities itself
        descriptor = self._normalizer.normalize(provider, token)
        return await self._directory.create_developer_identity(descriptor.token)

    async def login_federated_with_token(
        self,
        provider: str,
        token: str,
        refresh_token: Optional[str] = None,
        profile: Optional[Dict[str, Any]] = None,
        name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> str:
        """Log in (or sign up) with a provider login token.

        An identity without an email identifier claims the profile email,
        unless another identity already owns it.

        Raises:
            ConflictError: the profile email belongs to another identity
            UpstreamError: the directory failed
        """
        with bind_request_context(
            operation="login_federated_with_token", provider=provider
        ):
            identity_id = await self._find_or_create(provider, token)

            if email and not await self._directory.get_email(identity_id):
                if await self._directory.find(None, email) is not None:
                    raise ConflictError(
                        f"There is already an account with {email} that belongs to you"
                    )
                identity_id = await self._linker.link_with_token(
                    LoginPointer(provider=provider, token=token), None, email
                )
                logger.info("federated_identity_claimed_email", identity_id=identity_id)

            await self._pointers.record_login(
                identity_id, provider, token, refresh_token, profile, name
            )
            logger.info("federated_login_completed", identity_id=identity_id)
            return identity_id

    async def get_refresh_token(
        self, identity_id: str
    ) -> Tuple[Optional[str], Optional[str]]:
        """Return (provider, refresh token) of the identity's current login."""
        stored = await self._records.get_records(identity_id, ["provider", "refresh"])
        provider = stored.get("provider")
        if not provider:
            return None, None
        return provider, stored.get(refresh_key(provider))

    async def refresh_provider(self, identity_id: str) -> RefreshedLogin:
        """Renew the current federated login with its stored refresh token.

        Raises:
            NotFoundError: no refresh token stored
            UpstreamError: the provider cannot refresh, or the exchange failed
        """
        with bind_request_context(operation="refresh_provider", identity_id=identity_id):
            provider, refresh_token = await self.get_refresh_token(identity_id)
            if not refresh_token:
                raise NotFoundError("no refresh token found")

            parsed = Provider.parse(provider)
            if parsed is None or not self._oauth.config_for(parsed).refreshable:
                raise UpstreamError(f"cannot refresh logins with {provider}")

            provider_login = await self._oauth.refresh(parsed, refresh_token)
            new_token = provider_login.normalized.id_token
            # Providers that rotate refresh tokens return a new one with each grant
            await self.login_federated_with_token(
                provider,
                new_token,
                refresh_token=provider_login.token.refresh_token,
            )
            logger.info("provider_login_refreshed", identity_id=identity_id)
            return RefreshedLogin(
                token=new_token, expires_in=provider_login.token.expires_in
            )

    # Linking

    async def link(
        self,
        identity_id: str,
        provider: str,
        token: str,
        refresh_token: Optional[str] = None,
        profile: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Link a provider login to the identity and store its refresh token/profile.

        Returns:
            Id of the identity holding both logins
        """
        with bind_request_context(
            operation="link", identity_id=identity_id, provider=provider
        ):
            current = await self._pointers.get(identity_id)
            linked_id, _ = await asyncio.gather(
                self._linker.link_with_token(current, provider, token),
                self._pointers.store_provider_tokens(
                    identity_id, provider, refresh_token, profile
                ),
            )
            return linked_id

    async def unlink(
        self, identity_id: str, provider: Optional[str], token: Optional[str] = None
    ) -> str:
        with bind_request_context(
            operation="unlink", identity_id=identity_id, provider=provider
        ):
            current = await self._pointers.get(identity_id)
            return await self._linker.unlink_with_token(current, provider, token)

    # Lookups

    async def get_id(self, provider: Optional[str], token: str) -> str:
        return await self._directory.resolve(provider, token)

    async def get_developer_tokens(self, identity_id: str) -> List[str]:
        return await self._directory.developer_tokens(identity_id)

    def _linked_logins(
        self, description: Mapping[str, Any], developer_tokens: List[str]
    ) -> Dict[str, Any]:
        linked: Dict[str, Any] = {"id": description["IdentityId"]}
        for namespace in description.get("Logins") or []:
            provider = self._normalizer.provider_for_namespace(namespace)
            if provider is not None:
                linked[provider.value] = True

        developer_providers = []
        for identifier in developer_tokens:
            prefix = self._normalizer.developer_prefix(identifier)
            if not prefix:
                linked["email"] = identifier
                continue
            developer_providers.append(prefix)
            if Provider.parse(prefix) is not None:
                linked[prefix] = True
        linked["developer_providers"] = developer_providers
        return linked

    async def describe(self, identity_id: str) -> LinkedLogins:
        """Logins attached to the identity."""
        description, developer_tokens = await asyncio.gather(
            self._directory.describe(identity_id),
            self._directory.developer_tokens(identity_id),
        )
        return LinkedLogins(**self._linked_logins(description, developer_tokens))

    async def get_profile(self, identity_id: str) -> UserProfile:
        """Linked logins plus name, current provider, password flag and stored profiles."""
        with bind_request_context(operation="get_profile", identity_id=identity_id):
            linked, stored = await asyncio.gather(
                self.describe(identity_id),
                self._records.get_records(identity_id, PROFILE_RECORD_PREFIXES),
            )
            profiles = {
                key[len("profile"):]: value
                for key, value in stored.items()
                if key.startswith("profile") and key != "profile"
            }
            name = stored.get("name") or linked.email or linked.id
            return UserProfile(
                **linked.model_dump(),
                name=name,
                display_name=name,
                provider=stored.get("provider"),
                password=bool(stored.get("password")),
                profiles=profiles,
            )

    # Credentials

    def credential_context(self) -> CredentialContext:
        """A new caller-owned credential cache."""
        return CredentialContext(
            self._credentials,
            margin_seconds=self._credentials_margin_seconds,
            clock=self._clock,
        )

    async def get_credentials(
        self, identity_id: str, context: Optional[CredentialContext] = None
    ) -> Optional[AwsCredentials]:
        """Temporary AWS credentials for the identity's current login.

        With a ``context`` the credentials are reused until they expire.
        """
        with bind_request_context(operation="get_credentials", identity_id=identity_id):
            if context is None:
                return await self._credentials.get_credentials(identity_id)
            return await context.get_credentials(identity_id)


def build_identity_service(
    settings: Settings,
    aws_clients: AWSClients,
    session: Optional[requests.Session] = None,
) -> IdentityService:
    """Compose an IdentityService from settings and the AWS clients facade.

    Args:
        settings: Application settings
        aws_clients: AWS clients facade bound to the identity pool
        session: HTTP session for OAuth providers (a new one when omitted)
    """
    normalizer = ProviderNormalizer(
        developer_provider_name=settings.cognito.DEVELOPER_PROVIDER_NAME,
        separator=settings.cognito.SEPARATOR,
    )
    return IdentityService(
        directory=IdentityDirectory(aws_clients.cognito_identity, normalizer),
        records=ProfileRecordStore(aws_clients.cognito_sync),
        oauth=OAuthExchange(
            build_provider_configs(settings.oauth),
            session=session,
            timeout=settings.oauth.HTTP_TIMEOUT,
        ),
        mailer=PasswordResetMailer(aws_clients.ses, settings.identity),
        normalizer=normalizer,
        credentials_margin_seconds=settings.identity.CREDENTIALS_EXPIRY_MARGIN_SECONDS,
    )
