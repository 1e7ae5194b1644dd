"""Errors for the identity module.

Every failure surfaced by the identity operations is an ``IdentityError``
subclass carrying a machine ``kind`` and the HTTP status a front controller
should answer with. The core never renders user-facing text, only
``{kind, detail}``.
"""

from typing import Any, Dict

from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus


class IdentityError(Exception):
    """Base class for identity errors.

    Attributes:
        message: human-friendly message
        response: the OperationResult that caused the error, if any
    """

    kind = "identity_error"
    status_code = 500

    def __init__(self, message: str, response: Any = None):
        super().__init__(message)
        self.message = message
        self.response = response

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind, "detail": self.message}


class NotFoundError(IdentityError):
    """No identity for the given email or token, or a required record is absent."""

    kind = "not_found"
    status_code = 404


class ConflictError(IdentityError):
    """Email or federated login already claimed by a different identity."""

    kind = "conflict"
    status_code = 409


class UnauthorizedError(IdentityError):
    """Password or reset token mismatch."""

    kind = "unauthorized"
    status_code = 401


class InvalidRequestError(IdentityError):
    """Malformed input, such as login without a password or a reset token."""

    kind = "validation_failure"
    status_code = 400


class UpstreamError(IdentityError):
    """The directory service, an OAuth provider or the mail sender failed."""

    kind = "upstream_failure"
    status_code = 502


def raise_for_result(result: OperationResult, action: str) -> Any:
    """Return ``result.data`` or raise the matching identity error.

    Args:
        result: OperationResult returned by an infrastructure client
        action: Short description used in the error message

    Returns:
        The result payload when the operation succeeded

    Raises:
        NotFoundError: result status is NOT_FOUND
        UpstreamError: any other failure
    """
    if result.is_success:
        return result.data
    if result.status == OperationStatus.NOT_FOUND:
        raise NotFoundError(f"{action}: {result.message}", response=result)
    raise UpstreamError(f"{action} failed: {result.message}", response=result)
