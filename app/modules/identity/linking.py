"""Identity Linker/Unlinker.

Attaches a login to the identity of the current login, or removes one.
The action depends on whether each side is a developer identifier or a
federated login:

    current    target     action
    developer  developer  merge the target identifier into the current identity
    federated  federated  one OpenID token request presenting both logins
    federated  developer  merge into the identity via its developer identifier, or
                          attach the developer identifier to the identity
    developer  federated  attach the federated login to the identity

Merges keep the current identity id and its profile records. Records of an
identity the target already had are copied over without overwriting.
Callers check for a conflicting populated identity before linking.
"""

from typing import Dict, Optional

import structlog

from modules.identity.directory import IdentityDirectory
from modules.identity.errors import NotFoundError
from modules.identity.models import LoginPointer
from modules.identity.providers import ProviderNormalizer
from modules.identity.records import ProfileRecordStore

logger = structlog.get_logger()


class IdentityLinker:
    def __init__(
        self,
        directory: IdentityDirectory,
        records: ProfileRecordStore,
        normalizer: ProviderNormalizer,
    ) -> None:
        self._directory = directory
        self._records = records
        self._normalizer = normalizer
        self._logger = logger.bind(component="identity_linker")

    async def _carry_records(self, source_id: str, destination_id: str) -> None:
        try:
            records = await self._records.get_records(source_id, [""])
        except NotFoundError:
            return
        if records:
            await self._records.update_records(destination_id, create=records)
            self._logger.info(
                "profile_records_carried",
                identity_id=destination_id,
                source_identity_id=source_id,
                keys=sorted(records),
            )

    async def _merge_developers(self, current_token: str, link_token: str) -> str:
        link_owner = await self._directory.find_developer(link_token)
        if link_owner is None:
            await self._directory.create_developer_identity(link_token)
        identity_id = await self._directory.merge(
            source_identifier=link_token, destination_identifier=current_token
        )
        # The current identity keeps its records; the link's fill the gaps
        if link_owner is not None and link_owner != identity_id:
            await self._carry_records(link_owner, identity_id)
        return identity_id

    async def _attach(self, identity_id: str, logins: Dict[str, str]) -> str:
        data = await self._directory.open_id_token(logins, identity_id=identity_id)
        return data["IdentityId"]

    async def link_with_token(
        self,
        current: LoginPointer,
        link_provider: Optional[str],
        link_token: str,
    ) -> str:
        """Link a login to the identity owning ``current``.

        Args:
            current: Current login of the identity
            link_provider: Provider of the login to link (None for an email)
            link_token: Token of the login to link

        Returns:
            Id of the identity that now holds both logins

        Raises:
            NotFoundError: the current login resolves to no identity
            UpstreamError: the directory failed
        """
        current_d = self._normalizer.normalize(current.provider, current.token)
        link_d = self._normalizer.normalize(link_provider, link_token)
        identity_id = await self._directory.resolve(current.provider, current.token)

        if current_d.is_developer and link_d.is_developer:
            self._logger.info("link_developer_to_developer", identity_id=identity_id)
            return await self._merge_developers(current_d.token, link_d.token)

        if not current_d.is_developer and not link_d.is_developer:
            self._logger.info("link_federated_to_federated", identity_id=identity_id)
            return await self._attach(
                identity_id,
                {current_d.name: current_d.token, link_d.name: link_d.token},
            )

        if not current_d.is_developer and link_d.is_developer:
            developer_tokens = await self._directory.developer_tokens(identity_id)
            if developer_tokens:
                self._logger.info(
                    "link_developer_via_existing_identifier", identity_id=identity_id
                )
                return await self._merge_developers(developer_tokens[0], link_d.token)
            self._logger.info("link_developer_to_federated", identity_id=identity_id)
            return await self._attach(
                identity_id,
                {current_d.name: current_d.token, link_d.name: link_d.token},
            )

        self._logger.info("link_federated_to_developer", identity_id=identity_id)
        return await self._attach(
            identity_id,
            {link_d.name: link_d.token, current_d.name: current_d.token},
        )

    async def unlink_with_token(
        self,
        current: LoginPointer,
        unlink_provider: Optional[str],
        unlink_token: Optional[str] = None,
    ) -> str:
        """Remove a login from the identity owning ``current``.

        A developer identifier is removed by its explicit token or, when no
        token is given, by the identifier whose pseudo-provider prefix matches
        ``unlink_provider`` (no prefix for the email). A federated login is
        removed while presenting the current login as proof of ownership.

        Returns:
            Id of the identity the login was removed from

        Raises:
            NotFoundError: no identity, or no matching developer identifier
            UpstreamError: the directory failed
        """
        current_d = self._normalizer.normalize(current.provider, current.token)
        target_d = self._normalizer.normalize(unlink_provider, unlink_token)
        identity_id = await self._directory.resolve(current.provider, current.token)

        if target_d.is_developer:
            identifier = target_d.token
            if not identifier:
                wanted = unlink_provider or ""
                developer_tokens = await self._directory.developer_tokens(identity_id)
                identifier = next(
                    (
                        token
                        for token in developer_tokens
                        if self._normalizer.developer_prefix(token) == wanted
                    ),
                    None,
                )
            if not identifier:
                raise NotFoundError(
                    f"no developer identifier for {unlink_provider or 'email'}"
                )
            await self._directory.unlink_developer_identifier(identity_id, identifier)
            self._logger.info("developer_identifier_unlinked", identity_id=identity_id)
            return identity_id

        if current_d.is_developer:
            logins = await self._directory.developer_login(identity_id, current_d.token)
        else:
            logins = {current_d.name: current_d.token}
        await self._directory.unlink_login(identity_id, logins, [target_d.name])
        self._logger.info(
            "federated_login_unlinked", identity_id=identity_id, namespace=target_d.name
        )
        return identity_id
