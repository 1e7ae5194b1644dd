"""Session provider for AWS client operations.

Centralizes boto3 session configuration for the Cognito and SES clients:
region, endpoint override (LocalStack/moto server), per-service role
assumption and the retry budget handed to the executor.
"""

from typing import Any, Dict, Optional

import structlog

logger = structlog.get_logger()


class SessionProvider:
    """Centralized provider for AWS session configuration and credential handling.

    Args:
        region: AWS region for all clients (e.g., 'us-east-1')
        service_role_map: Optional mapping of service name to role ARN to assume
        endpoint_url: Custom endpoint URL (for testing/LocalStack)
        max_retries: Retries on throttling passed to every API call
    """

    def __init__(
        self,
        region: Optional[str] = None,
        service_role_map: Optional[dict[str, str]] = None,
        endpoint_url: Optional[str] = None,
        max_retries: int = 0,
    ) -> None:
        self.region = region
        self.service_role_map = service_role_map
        self.endpoint_url = endpoint_url
        self.max_retries = max_retries

    def get_role_arn_for_service(self, service_name: str) -> Optional[str]:
        """Get the role ARN to assume for the given AWS service.

        Args:
            service_name: AWS service name (e.g., 'cognito-sync')
        Returns:
            Role ARN string or None if no role is configured for the service
        """
        if self.service_role_map and self.service_role_map.get(service_name):
            return self.service_role_map[service_name]
        return None

    def build_client_kwargs(
        self,
        service_name: Optional[str] = None,
        role_arn: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Build session and client configuration kwargs for boto3.

        Resolves the role ARN from the service_role_map when service_name is
        provided and role_arn is not explicitly given.

        Args:
            service_name: AWS service name for role lookup
            role_arn: Optional cross-account role ARN to assume

        Returns:
            Dict with session_config, client_config, role_arn and max_retries
            for passing to execute_aws_api_call
        """
        if role_arn is None and service_name:
            role_arn = self.get_role_arn_for_service(service_name)

        session_config = {}
        client_config = {}

        if self.region:
            session_config["region_name"] = self.region
            client_config["region_name"] = self.region

        if self.endpoint_url:
            client_config["endpoint_url"] = self.endpoint_url

        logger.debug(
            "built_client_kwargs",
            service_name=service_name,
            session_config=session_config,
            client_config=client_config,
            role_arn=role_arn,
        )
        return {
            "session_config": session_config or None,
            "client_config": client_config or None,
            "role_arn": role_arn,
            "max_retries": self.max_retries,
        }
