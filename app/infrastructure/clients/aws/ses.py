"""SES client for AWS operations.

Sends the transactional emails (password reset) through Amazon SES with
OperationResult return types.
"""

from typing import Optional

import structlog

from infrastructure.clients.aws.executor import execute_aws_api_call
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.operations.result import OperationResult

logger = structlog.get_logger()


class SesClient:
    """Client for Amazon SES.

    Args:
        session_provider: SessionProvider instance for credential/config management
        default_source: Sender address used when none is given
    """

    def __init__(
        self,
        session_provider: SessionProvider,
        default_source: Optional[str] = None,
    ) -> None:
        self._session_provider = session_provider
        self._service_name = "ses"
        self._default_source = default_source
        self._logger = logger.bind(component="ses_client")

    def send_email(
        self,
        to_address: str,
        subject: str,
        html_body: str,
        text_body: str,
        source: Optional[str] = None,
    ) -> OperationResult:
        """Send a single email with HTML and text parts.

        Returns:
            OperationResult with the SES ``MessageId``
        """
        sender = source or self._default_source
        if not sender:
            return OperationResult.permanent_error(
                message="source address is required", error_code="MISSING_SOURCE"
            )

        client_kwargs = self._session_provider.build_client_kwargs(
            service_name=self._service_name
        )
        return execute_aws_api_call(
            self._service_name,
            "send_email",
            Source=sender,
            Destination={"ToAddresses": [to_address]},
            Message={
                "Subject": {"Data": subject},
                "Body": {
                    "Html": {"Data": html_body},
                    "Text": {"Data": text_body},
                },
            },
            **client_kwargs,
        )
