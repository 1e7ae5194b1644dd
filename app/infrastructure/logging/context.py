"""Request context binding for structured logging.

Binds operation-scoped context (correlation id, identity id, operation name,
provider) so every log entry emitted while an identity operation runs
carries it.

Usage:
    from infrastructure.logging import bind_request_context

    with bind_request_context(operation="login", identity_id="us-east-1:abc"):
        logger.info("password_verified")

Dependencies:
    - structlog.contextvars
"""

import uuid
from contextlib import contextmanager
from typing import Optional, Any, Generator
import structlog


@contextmanager
def bind_request_context(
    correlation_id: Optional[str] = None,
    identity_id: Optional[str] = None,
    operation: Optional[str] = None,
    provider: Optional[str] = None,
    **extra_context: Any,
) -> Generator[None, None, None]:
    """Bind operation-scoped context to all logs within the context manager.

    A correlation id already bound by an outer caller is reused; otherwise
    a new one is generated.

    Args:
        correlation_id: Unique request identifier.
        identity_id: Durable identity the operation acts on (if known).
        operation: Name of the identity operation (e.g. "login_federated").
        provider: Login provider involved (if any).
        **extra_context: Additional key-value pairs to include in logs.

    Yields:
        None - context is bound to structlog's context vars.
    """
    context: dict[str, Any] = {}

    context["correlation_id"] = (
        correlation_id or get_correlation_id() or str(uuid.uuid4())
    )

    if identity_id is not None:
        context["identity_id"] = identity_id

    if operation is not None:
        context["operation"] = operation

    if provider is not None:
        context["provider"] = provider

    context.update(extra_context)

    previous = structlog.contextvars.get_contextvars()
    structlog.contextvars.bind_contextvars(**context)
    try:
        yield
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())
        # Restore values an enclosing block had bound
        restored = {k: v for k, v in previous.items() if k in context}
        if restored:
            structlog.contextvars.bind_contextvars(**restored)


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from the logging context."""
    ctx = structlog.contextvars.get_contextvars()
    return ctx.get("correlation_id")


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID in the current logging context.

    Args:
        correlation_id: The correlation ID to set.
    """
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def clear_request_context() -> None:
    """Clear all request-scoped context from the logging context."""
    structlog.contextvars.clear_contextvars()
