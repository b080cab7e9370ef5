"""FastAPI application entrypoint with the error envelope installed."""

import logging

from fastapi import FastAPI

from rest_errors.core.config import get_error_settings
from rest_errors.core.errors import register_error_handlers

logger = logging.getLogger(__name__)


def create_app(title: str = "rest-errors") -> FastAPI:
    """Build an app whose failures are all reported through the error envelope."""
    app = FastAPI(title=title)
    register_error_handlers(app)
    logger.info("Error handlers registered with settings=%s", get_error_settings().safe_for_logging())
    return app


app = create_app()


@app.get("/health")
def health() -> dict[str, str]:
    """Health check stub endpoint for service readiness."""
    return {"status": "ok"}
