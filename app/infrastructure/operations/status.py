"""Operation status enumeration.

Outcome codes shared by every infrastructure client so callers can map a
failed call onto the right domain error without inspecting provider codes.
"""

from enum import Enum


class OperationStatus(Enum):
    """Status codes for operation results.

    Attributes:
        SUCCESS: Operation completed successfully
        TRANSIENT_ERROR: Retryable error (network, timeout, throttling)
        PERMANENT_ERROR: Non-retryable error (validation, bad input)
        UNAUTHORIZED: A login token or caller credential was rejected
        NOT_FOUND: Identity, developer identifier or record set does not exist
    """

    SUCCESS = "success"
    TRANSIENT_ERROR = "transient_error"
    PERMANENT_ERROR = "permanent_error"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
