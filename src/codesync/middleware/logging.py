"""Structured logging configuration with structlog."""

import logging
from collections.abc import MutableMapping
from typing import Any

import structlog

from codesync.config import Settings
from codesync.scoring.aggregate import SCORING_VERSION


def _service_context(environment: str) -> structlog.types.Processor:
    """Stamp every event with the environment and scoring version.

    Score changes in the logs are only comparable within one scoring version.
    """

    def processor(_logger: Any, _method: str, event: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
        event.setdefault("service", "codesync")
        event.setdefault("environment", environment)
        event.setdefault("scoring_version", SCORING_VERSION)
        return event

    return processor


def setup_logging(settings: Settings) -> None:
    """Configure structlog for JSON or console output."""
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if settings.log_format == "json" else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            _service_context(settings.environment),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Every adapter fetch is an httpx request; keep those at WARNING.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
