"""Password reset email."""

import asyncio
from typing import Optional

import structlog

from infrastructure.clients.aws.ses import SesClient
from infrastructure.configuration.features.identity import IdentityFeatureSettings
from modules.identity.errors import raise_for_result
from modules.identity.models import ResetEmail

logger = structlog.get_logger()


class PasswordResetMailer:
    """Render and send the reset link built from the configured templates."""

    def __init__(self, ses: SesClient, settings: IdentityFeatureSettings) -> None:
        self._ses = ses
        self._settings = settings
        self._logger = logger.bind(component="password_reset_mailer")

    def render(self, email: str, reset: str, name: Optional[str] = None) -> ResetEmail:
        url = self._settings.PASSWORD_RESET_URL.format(email=email, reset=reset)
        body = self._settings.PASSWORD_RESET_BODY.format(name=name or email)
        link = f'<a href="{url}">{url}</a>'
        return ResetEmail(
            to_address=email,
            subject=self._settings.PASSWORD_RESET_SUBJECT,
            html_body=f"{body}<br/><br/>{link}",
            text_body=f"{body}\n\n{url}",
            source=self._settings.PASSWORD_RESET_SOURCE,
        )

    async def send(self, email: str, reset: str, name: Optional[str] = None) -> None:
        """Send the reset email.

        Raises:
            UpstreamError: SES rejected the message
        """
        message = self.render(email, reset, name)
        result = await asyncio.to_thread(
            self._ses.send_email,
            message.to_address,
            message.subject,
            message.html_body,
            message.text_body,
            message.source,
        )
        raise_for_result(result, "send password reset email")
        self._logger.info("password_reset_email_sent")
