"""Structlog processors for the identity broker log pipeline.

``configure_logging`` installs each of these. They are factories: call one
with its options to get a ``(logger, method_name, event_dict)`` processor.

Identity flows pass secrets around constantly (passwords, reset tokens,
provider access/refresh tokens, Cognito OpenID tokens, AWS session
credentials), so masking walks nested mappings as well: a ``logins`` map or
a raw ``Credentials`` payload gets its values hidden while its keys stay
readable.
"""

from typing import Any, Mapping

EventDict = dict[str, Any]

# Key fragments, matched case-insensitively, whose values are never logged
SENSITIVE_PATTERNS = frozenset(
    {
        "password",
        "secret",
        "token",
        "reset",
        "credential",
        "authorization",
        "api_key",
        "private_key",
        "cookie",
        "bearer",
    }
)

# Keys holding a namespace -> login token map
LOGIN_MAP_KEYS = frozenset({"logins", "Logins"})


def add_app_info(app_name: str, app_version: str = "unknown"):
    """Stamp every entry with the application name and deployed version."""

    def processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict["app_name"] = app_name
        event_dict["app_version"] = app_version
        return event_dict

    return processor


def add_environment_info(environment: str):
    """Stamp every entry with the environment ("production" or the PREFIX)."""

    def processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict["environment"] = environment
        return event_dict

    return processor


def _is_sensitive(key: Any, patterns: frozenset) -> bool:
    lowered = str(key).lower()
    return any(pattern in lowered for pattern in patterns)


def _mask(value: Any, patterns: frozenset, mask_value: str, hide: bool = False) -> Any:
    if isinstance(value, Mapping):
        return {
            key: _mask(
                item,
                patterns,
                mask_value,
                hide or key in LOGIN_MAP_KEYS or _is_sensitive(key, patterns),
            )
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_mask(item, patterns, mask_value, hide) for item in value]
    if hide and value is not None:
        return mask_value
    return value


def mask_sensitive_data(
    mask_value: str = "***REDACTED***",
    additional_patterns: frozenset[str] | None = None,
):
    """Hide the values of sensitive keys, at any depth.

    A key is sensitive when it contains one of ``SENSITIVE_PATTERNS`` (or of
    ``additional_patterns``). Every leaf under a ``logins`` map or under a
    sensitive key is hidden too. None values are left as they are so a
    missing token stays visible as missing.

    Args:
        mask_value: Replacement for hidden values.
        additional_patterns: Extra key fragments to treat as sensitive.
    """
    patterns = SENSITIVE_PATTERNS | (additional_patterns or frozenset())

    def processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        return _mask(event_dict, patterns, mask_value)

    return processor


def truncate_large_values(max_length: int = 500):
    """Cut string values longer than ``max_length``.

    Stored provider profiles are whole JSON documents; one of them in an
    exception message is enough to swamp a log line.
    """

    def processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        for key, value in event_dict.items():
            if isinstance(value, str) and len(value) > max_length:
                event_dict[key] = (
                    f"{value[:max_length]}...[truncated, {len(value)} chars total]"
                )
        return event_dict

    return processor
