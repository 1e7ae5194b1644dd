"""OAuth Exchange Adapter.

Two sequential calls per provider: a form-encoded POST to the token endpoint
(authorization code or refresh token grant), then a bearer GET to the profile
endpoint. ``requests`` is synchronous, so both run in worker threads.
"""

import asyncio
from typing import Any, Dict, Mapping, Optional

import requests
import structlog

from infrastructure.operations.classifiers import classify_http_error
from infrastructure.operations.result import OperationResult
from modules.identity.errors import UpstreamError
from modules.identity.models import OAuthToken, ProviderLogin
from modules.identity.providers import Provider, ProviderConfig

logger = structlog.get_logger()


class OAuthExchange:
    """Exchange authorization codes and refresh tokens with OAuth providers.

    Args:
        configs: Provider registry from ``build_provider_configs``
        session: HTTP session used for every provider call
        timeout: Seconds before a provider call is abandoned
    """

    def __init__(
        self,
        configs: Mapping[Provider, ProviderConfig],
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
    ) -> None:
        self._configs = configs
        self._session = session or requests.Session()
        self._timeout = timeout
        self._logger = logger.bind(component="oauth_exchange")

    def config_for(self, provider: Provider) -> ProviderConfig:
        return self._configs[provider]

    def _send(self, method: str, url: str, **kwargs) -> OperationResult:
        try:
            response = self._session.request(
                method, url, timeout=self._timeout, **kwargs
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            result = classify_http_error(exc)
            try:
                result.data = exc.response.json()
            except ValueError:
                result.data = None
            return result
        except requests.RequestException as exc:
            return classify_http_error(exc)

        try:
            return OperationResult.success(data=response.json())
        except ValueError:
            return OperationResult.permanent_error(
                f"{url} returned a non-JSON body", error_code="INVALID_RESPONSE"
            )

    def _post_token(self, provider: Provider, form: Dict[str, Any]) -> OAuthToken:
        config = self.config_for(provider)
        result = self._send(
            "POST",
            config.token_url,
            data=form,
            headers={"Accept": "application/json"},
        )
        payload = result.data if isinstance(result.data, dict) else {}
        if not payload.get("access_token"):
            self._logger.warning(
                "oauth_token_missing",
                provider=provider.value,
                status=result.status.value,
                error=payload.get("error"),
            )
            raise UpstreamError(
                f"no token from {provider.value}: "
                f"{payload.get('error') or result.message} "
                f"{payload.get('error_description') or ''}".strip(),
                response=result,
            )
        return OAuthToken.from_response(payload)

    def _get_profile(
        self, provider: Provider, access_token: str
    ) -> Optional[Dict[str, Any]]:
        config = self.config_for(provider)
        result = self._send(
            "GET",
            config.profile_url,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
        )
        if result.is_success and isinstance(result.data, dict):
            return result.data
        if config.profile_optional:
            self._logger.info(
                "oauth_profile_unavailable",
                provider=provider.value,
                status=result.status.value,
            )
            return None
        raise UpstreamError(
            f"profile request to {provider.value} failed: {result.message}",
            response=result,
        )

    async def exchange_code(
        self, provider: Provider, code: str, client_id: str, redirect_uri: str
    ) -> OAuthToken:
        """Exchange an authorization code for tokens.

        Raises:
            UpstreamError: transport failure, timeout, or no access token returned
        """
        config = self.config_for(provider)
        form = {
            "code": code,
            "client_id": client_id,
            "client_secret": config.client_secret,
            "redirect_uri": redirect_uri,
            "grant_type": "authorization_code",
        }
        return await asyncio.to_thread(self._post_token, provider, form)

    async def exchange_refresh_token(
        self, provider: Provider, refresh_token: str
    ) -> OAuthToken:
        """Exchange a stored refresh token for a new access token.

        Raises:
            UpstreamError: the provider has no refresh grant, or the exchange failed
        """
        config = self.config_for(provider)
        if not config.refreshable:
            raise UpstreamError(f"{provider.value} does not support token refresh")
        form = {
            "refresh_token": refresh_token,
            "client_id": config.client_id,
            "client_secret": config.client_secret,
            "grant_type": "refresh_token",
        }
        return await asyncio.to_thread(self._post_token, provider, form)

    async def fetch_profile(
        self, provider: Provider, access_token: str
    ) -> Optional[Dict[str, Any]]:
        """Fetch the provider profile; None when an optional profile is unavailable."""
        return await asyncio.to_thread(self._get_profile, provider, access_token)

    def _normalize(
        self,
        provider: Provider,
        token: OAuthToken,
        profile: Optional[Dict[str, Any]],
    ) -> ProviderLogin:
        normalized = self.config_for(provider).normalize(token.raw, profile)
        if not normalized.id_token:
            raise UpstreamError(f"{provider.value} returned no login token")
        return ProviderLogin(
            provider=provider.value,
            token=token,
            profile=profile,
            normalized=normalized,
        )

    async def login(
        self, provider: Provider, code: str, client_id: str, redirect_uri: str
    ) -> ProviderLogin:
        """Run the authorization code exchange and profile fetch."""
        token = await self.exchange_code(provider, code, client_id, redirect_uri)
        profile = await self.fetch_profile(provider, token.access_token)
        login = self._normalize(provider, token, profile)
        self._logger.info(
            "oauth_login_exchanged",
            provider=provider.value,
            has_profile=profile is not None,
            has_refresh=token.refresh_token is not None,
        )
        return login

    async def refresh(self, provider: Provider, refresh_token: str) -> ProviderLogin:
        """Run the refresh token grant; the profile is not fetched again."""
        token = await self.exchange_refresh_token(provider, refresh_token)
        return self._normalize(provider, token, None)
