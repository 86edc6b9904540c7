"""Middleware registration."""

from fastapi import FastAPI

from codesync.config import Settings
from codesync.middleware.error_handler import setup_error_handlers
from codesync.middleware.logging import setup_logging
from codesync.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure logging, error handlers and request ids for ``app``."""
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)
