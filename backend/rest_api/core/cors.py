"""
CORS configuration for the public menu API.

Diner-facing pages only read menus: no credentials, safe methods only.
Origins come from ALLOWED_ORIGINS (localhost ports when empty).
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.config.settings import settings

ALLOWED_METHODS = ["GET", "HEAD", "OPTIONS"]
ALLOWED_HEADERS = ["Accept", "Accept-Language", "Content-Type", "X-Request-ID"]
EXPOSED_HEADERS = ["X-Request-ID"]


def configure_cors(app: FastAPI) -> None:
    # No preflight caching in development, so origin changes apply at once
    max_age = 0 if settings.environment == "development" else 600

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=ALLOWED_METHODS,
        allow_headers=ALLOWED_HEADERS,
        expose_headers=EXPOSED_HEADERS,
        max_age=max_age,
    )
