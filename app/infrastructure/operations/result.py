"""OperationResult: the envelope every infrastructure client returns.

Cognito, SES and OAuth provider failures come back as data, never as raised
exceptions. ``modules.identity.errors.raise_for_result`` is where a failed
envelope turns into a domain error.
"""

from dataclasses import dataclass
from typing import Any, Optional

from infrastructure.operations.status import OperationStatus


@dataclass
class OperationResult:
    """Outcome of one client call.

    Attributes:
        status: High-level outcome
        message: Text for logs and error details
        data: Raw provider payload (also kept on some failures, e.g. an OAuth
            error body)
        error_code: Provider error code such as ``NotAuthorizedException``
        retry_after: Seconds to wait before retrying a throttled call
    """

    status: OperationStatus
    message: str
    data: Optional[Any] = None
    error_code: Optional[str] = None
    retry_after: Optional[int] = None

    @property
    def is_success(self) -> bool:
        return self.status == OperationStatus.SUCCESS

    @property
    def is_retryable(self) -> bool:
        return self.status == OperationStatus.TRANSIENT_ERROR

    @classmethod
    def success(cls, data: Optional[Any] = None, message: str = "ok") -> "OperationResult":
        return cls(OperationStatus.SUCCESS, message, data=data)

    @classmethod
    def error(
        cls,
        status: OperationStatus,
        message: str,
        error_code: Optional[str] = None,
        retry_after: Optional[int] = None,
        data: Optional[Any] = None,
    ) -> "OperationResult":
        """Build a failed result with an explicit status."""
        return cls(status, message, data=data, error_code=error_code, retry_after=retry_after)

    @classmethod
    def transient_error(
        cls,
        message: str,
        error_code: Optional[str] = None,
        retry_after: Optional[int] = None,
    ) -> "OperationResult":
        """Throttling, timeouts, connection failures and 5xx answers."""
        return cls.error(OperationStatus.TRANSIENT_ERROR, message, error_code, retry_after)

    @classmethod
    def permanent_error(
        cls, message: str, error_code: Optional[str] = None, data: Optional[Any] = None
    ) -> "OperationResult":
        """Anything a retry will not fix (bad parameters, rejected grants)."""
        return cls.error(OperationStatus.PERMANENT_ERROR, message, error_code, data=data)

    @classmethod
    def unauthorized(cls, message: str, error_code: Optional[str] = None) -> "OperationResult":
        """A login token or caller credential was rejected."""
        return cls.error(OperationStatus.UNAUTHORIZED, message, error_code)

    @classmethod
    def not_found(cls, message: str, error_code: Optional[str] = None) -> "OperationResult":
        return cls.error(OperationStatus.NOT_FOUND, message, error_code)
