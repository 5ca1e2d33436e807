"""
REST API main application.
Entry point for the FastAPI REST server.
"""

from fastapi import FastAPI

from rest_api.core.cors import configure_cors
from rest_api.core.lifespan import lifespan
from rest_api.routers.public import health_router, menus_router
from shared.config.settings import settings
from shared.infrastructure.correlation import CorrelationIdMiddleware


# Create FastAPI application
app = FastAPI(
    title="MenuQR REST API",
    description="Public menus of the MenuQR restaurant catalog",
    version="0.1.0",
    lifespan=lifespan,
)

# Middlewares (last added runs first)
configure_cors(app)
app.add_middleware(CorrelationIdMiddleware)


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(health_router)
app.include_router(menus_router)


# =============================================================================
# Development entry point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rest_api.main:app",
        host="0.0.0.0",
        port=settings.rest_api_port,
        reload=True,
    )
