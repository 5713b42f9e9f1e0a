"""
FastAPI application assembly for the scheduling API.

Wires CORS, request logging, the domain exception mapping, the versioned
appointments router and a health check onto one application.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clinic_scheduling.api.exception_handlers import register_exception_handlers
from clinic_scheduling.api.middleware.logging_middleware import RequestLoggingMiddleware
from clinic_scheduling.api.router import api_router
from clinic_scheduling.config.settings import Settings, get_settings
from clinic_scheduling.core.lifecycle import lifespan

logger = logging.getLogger(__name__)

# Headers browsers may read on cross-origin responses
EXPOSED_HEADERS = ["X-Total-Count", "X-Correlation-ID", "X-Response-Time-Ms"]


class AppFactory:
    """Builds the scheduling API from a Settings instance."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def create_app(self) -> FastAPI:
        settings = self._settings
        docs_prefix = settings.API_V1_STR if settings.DEBUG else None

        app = FastAPI(
            title=settings.PROJECT_NAME,
            description=settings.PROJECT_DESCRIPTION,
            version=settings.VERSION,
            docs_url=f"{docs_prefix}/docs" if docs_prefix else None,
            redoc_url=f"{docs_prefix}/redoc" if docs_prefix else None,
            lifespan=lifespan,
        )

        self._add_middleware(app)
        register_exception_handlers(app)
        app.include_router(api_router, prefix=settings.API_V1_STR)
        self._add_health_route(app)

        logger.info(
            f"{settings.PROJECT_NAME} {settings.VERSION} assembled "
            f"(environment={settings.ENVIRONMENT}, docs={'on' if docs_prefix else 'off'})"
        )
        return app

    def _add_middleware(self, app: FastAPI) -> None:
        # Added last runs first: CORS wraps request logging
        app.add_middleware(RequestLoggingMiddleware)
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"] if self._settings.DEBUG else self._settings.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=EXPOSED_HEADERS,
        )

    def _add_health_route(self, app: FastAPI) -> None:
        environment = self._settings.ENVIRONMENT

        @app.get("/health", tags=["health"])
        async def health_check() -> dict[str, str]:
            """Liveness check; does not touch the database."""
            return {"status": "ok", "environment": environment}


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the scheduling API, using the process settings when none are given."""
    return AppFactory(settings).create_app()
