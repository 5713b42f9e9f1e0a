"""
Application lifecycle management using the FastAPI lifespan pattern.

Handles only application startup/shutdown logic.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from clinic_scheduling.config.settings import get_settings
from clinic_scheduling.core.container import get_container, reset_container
from clinic_scheduling.database.async_db import dispose_async_engine

logger = logging.getLogger(__name__)


class LifecycleManager:
    """
    Manages application lifecycle events.

    Startup builds the container (and with it the appointment type catalog);
    shutdown releases pooled database connections.
    """

    def __init__(self) -> None:
        """Initialize lifecycle manager."""
        self._initialized = False

    async def startup(self) -> None:
        """
        Execute startup tasks.

        Called when the application starts.
        """
        if self._initialized:
            logger.warning("Lifecycle already initialized, skipping startup")
            return

        logger.info("Starting application lifecycle...")

        container = get_container()
        self._log_configuration(container.catalog.profiles())

        self._initialized = True
        logger.info("Application lifecycle startup completed")

    async def shutdown(self) -> None:
        """
        Execute shutdown tasks.

        Called when the application stops.
        """
        if not self._initialized:
            logger.warning("Lifecycle not initialized, skipping shutdown")
            return

        logger.info("Stopping application lifecycle...")

        await dispose_async_engine()
        reset_container()

        self._initialized = False
        logger.info("Application lifecycle shutdown completed")

    def _log_configuration(self, profiles) -> None:
        settings = get_settings()
        logger.info(
            f"Clinic hours {settings.CLINIC_OPEN_TIME.strftime('%H:%M')}-"
            f"{settings.CLINIC_CLOSE_TIME.strftime('%H:%M')} ({settings.CLINIC_TIMEZONE}), "
            f"buffer {settings.DEFAULT_BUFFER_MINUTES}m, step {settings.SLOT_STEP_MINUTES}m"
        )
        logger.info(f"Appointment types: {', '.join(p.name for p in profiles)}")

        if not settings.SENTRY_DSN:
            logger.info("SENTRY_DSN not configured - error tracking disabled")


# Global lifecycle manager instance
_lifecycle_manager: LifecycleManager | None = None


def get_lifecycle_manager() -> LifecycleManager:
    """Get or create the global lifecycle manager instance."""
    global _lifecycle_manager
    if _lifecycle_manager is None:
        _lifecycle_manager = LifecycleManager()
    return _lifecycle_manager


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Usage:
        app = FastAPI(lifespan=lifespan)
    """
    lifecycle = get_lifecycle_manager()

    # Startup
    await lifecycle.startup()

    yield  # Application runs here

    # Shutdown
    await lifecycle.shutdown()
