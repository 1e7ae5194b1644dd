"""Structured logging for the identity broker (structlog).

Modules get their logger with ``get_module_logger()`` and wrap each identity
operation in ``bind_request_context(...)``. ``configure_logging`` has already
run on import; call it again only to apply other settings.
"""

from infrastructure.logging.context import (
    bind_request_context,
    clear_request_context,
    get_correlation_id,
    set_correlation_id,
)
from infrastructure.logging.formatters import (
    SENSITIVE_PATTERNS,
    mask_sensitive_data,
    truncate_large_values,
)
from infrastructure.logging.setup import configure_logging, get_module_logger

__all__ = [
    "configure_logging",
    "get_module_logger",
    "bind_request_context",
    "get_correlation_id",
    "set_correlation_id",
    "clear_request_context",
    "mask_sensitive_data",
    "truncate_large_values",
    "SENSITIVE_PATTERNS",
]
