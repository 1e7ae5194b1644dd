"""Error classifiers for HTTP provider exceptions.

Converts ``requests`` exceptions raised while talking to OAuth providers into
standardized OperationResult objects. AWS errors are classified by the AWS
executor itself (see ``infrastructure.clients.aws.executor``).

Usage:
    from infrastructure.operations.classifiers import classify_http_error

    try:
        response = session.post(token_url, data=form, timeout=30)
        response.raise_for_status()
    except requests.RequestException as exc:
        return classify_http_error(exc)
"""

from typing import Optional

import requests

from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus


def _retry_after(response: Optional[requests.Response]) -> Optional[int]:
    if response is None:
        return None
    header_value = response.headers.get("Retry-After")
    if not header_value:
        return None
    try:
        return int(header_value)
    except (ValueError, TypeError):
        return None


def classify_http_error(exc: Exception) -> OperationResult:
    """Classify ``requests`` errors into OperationResult.

    Status Code Mapping:
    - Timeout: TRANSIENT_ERROR (TIMEOUT)
    - Connection failure: TRANSIENT_ERROR (CONNECTION_ERROR)
    - 429: Rate limiting, TRANSIENT_ERROR with retry_after
    - 401/403: UNAUTHORIZED
    - 404: NOT_FOUND
    - 5xx: TRANSIENT_ERROR
    - Other 4xx: PERMANENT_ERROR

    Args:
        exc: Exception raised by ``requests``

    Returns:
        OperationResult with appropriate status, message and error_code
    """
    if isinstance(exc, requests.Timeout):
        return OperationResult.transient_error(
            f"HTTP timeout: {exc}", error_code="TIMEOUT"
        )

    if not isinstance(exc, requests.HTTPError):
        # Connection errors, invalid URLs, decode failures
        return OperationResult.transient_error(
            f"Connection error: {type(exc).__name__}: {exc}",
            error_code="CONNECTION_ERROR",
        )

    response = exc.response
    status_code = response.status_code if response is not None else None

    if status_code == 429:
        return OperationResult.error(
            OperationStatus.TRANSIENT_ERROR,
            "Provider rate limited",
            error_code="RATE_LIMITED",
            retry_after=_retry_after(response) or 60,
        )

    if status_code in (401, 403):
        return OperationResult.unauthorized(
            f"Provider rejected credentials ({status_code})",
            error_code="UNAUTHORIZED",
        )

    if status_code == 404:
        return OperationResult.not_found(
            "Provider resource not found", error_code="NOT_FOUND"
        )

    if status_code and 500 <= status_code < 600:
        return OperationResult.transient_error(
            f"Provider server error ({status_code})", error_code="SERVER_ERROR"
        )

    return OperationResult.permanent_error(
        f"Provider client error ({status_code}): {exc}", error_code="HTTP_ERROR"
    )
