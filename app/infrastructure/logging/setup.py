"""Structlog configuration for the identity broker.

``configure_logging`` runs once on import. Entries carry the context bound by
``bind_request_context`` (correlation id, identity id, operation, provider),
pass through the masking processors, and render as console lines in
development or JSON in production. Under pytest everything is silenced.

Usage:
    from infrastructure.logging import get_module_logger

    logger = get_module_logger()
    logger.info("login_completed", identity_id=identity_id)
"""

import inspect
import logging
import sys
from typing import Any, List, Optional

import structlog
from structlog.stdlib import BoundLogger

from infrastructure.configuration.settings import Settings, settings as default_settings
from infrastructure.logging.formatters import (
    add_app_info,
    add_environment_info,
    mask_sensitive_data,
    truncate_large_values,
)

APP_NAME = "identity-broker"
SILENT = logging.CRITICAL + 1


def _is_test_environment() -> bool:
    return "pytest" in sys.modules


def _processors(settings: Settings, production: bool) -> List[Any]:
    renderer = (
        structlog.processors.JSONRenderer()
        if production
        else structlog.dev.ConsoleRenderer()
    )
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
                structlog.processors.CallsiteParameter.FUNC_NAME,
            ]
        ),
        add_app_info(APP_NAME, settings.GIT_SHA),
        add_environment_info("production" if production else settings.PREFIX or "dev"),
        mask_sensitive_data(),
        truncate_large_values(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        renderer,
    ]


def configure_logging(
    settings: Optional[Settings] = None,
    log_level: Optional[str] = None,
    is_production: Optional[bool] = None,
) -> BoundLogger:
    """Configure structlog and the stdlib root logger.

    Args:
        settings: Settings to read LOG_LEVEL, PREFIX and GIT_SHA from
            (the module-level settings when omitted)
        log_level: Overrides settings.LOG_LEVEL
        is_production: Overrides settings.is_production (JSON vs console)

    Returns:
        The configured root logger
    """
    settings = settings or default_settings

    if _is_test_environment():
        structlog.configure(
            processors=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        logging.basicConfig(format="%(message)s", level=SILENT, force=True)
        logging.root.setLevel(SILENT)
        return structlog.stdlib.get_logger()

    production = settings.is_production if is_production is None else is_production
    structlog.configure(
        processors=_processors(settings, production),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    level = (log_level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        format="%(message)s", level=getattr(logging, level, logging.INFO)
    )
    return structlog.stdlib.get_logger()


logger: BoundLogger = configure_logging()


def get_module_logger() -> BoundLogger:
    """Logger bound to the calling module.

    In ``modules/identity/service.py`` the context is
    ``{"component": "service", "module_path": "modules.identity.service"}``.
    """
    frame = inspect.currentframe()
    caller = frame.f_back if frame is not None else None
    module = inspect.getmodule(caller) if caller is not None else None
    if module is None:
        return logger.bind(component="unknown")
    return logger.bind(
        component=module.__name__.split(".")[-1],
        module_path=module.__name__,
    )
