"""
Application lifespan handler.

Startup: logging, configuration checks, optional table creation and demo
seed. Shutdown: release the connection pool.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from rest_api.models import Base
from rest_api.seed import seed
from shared.config.logging import setup_logging, rest_api_logger as logger
from shared.config.settings import settings
from shared.infrastructure.db import engine, session_scope


def _check_configuration() -> None:
    """Refuse to start production with an unsafe configuration."""
    errors = settings.validate_production_secrets()
    if not errors:
        return

    for error in errors:
        logger.error("Configuration error", error=error)
    if settings.environment == "production":
        raise RuntimeError(f"Production configuration errors: {'; '.join(errors)}")
    logger.warning("Running with insecure defaults (development only)")


def _prepare_database() -> None:
    if settings.auto_create_tables:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created/verified")

    if settings.seed_demo_on_startup:
        with session_scope() as db:
            result = seed(db)
        if result is not None and result.warnings:
            logger.warning("Demo seed finished with warnings", warnings=result.warnings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    _check_configuration()

    logger.info(
        "Starting REST API",
        port=settings.rest_api_port,
        env=settings.environment,
        public_base_url=settings.public_base_url,
    )
    _prepare_database()

    yield

    logger.info("Shutting down REST API")
    engine.dispose()
