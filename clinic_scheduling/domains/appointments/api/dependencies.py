"""
Appointments API Dependencies

FastAPI dependencies for the appointments domain.
"""

from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduling.core.container import get_container
from clinic_scheduling.core.domain import AuthorizationException
from clinic_scheduling.database.async_db import get_async_db
from clinic_scheduling.domains.appointments.application.dto import Actor
from clinic_scheduling.domains.appointments.application.services import AvailabilityService, BookingService

# Type alias for database session dependency
DbSession = Annotated[AsyncSession, Depends(get_async_db)]


def get_booking_service(db: DbSession) -> BookingService:
    """Get BookingService instance with database session."""
    container = get_container()
    return container.create_booking_service(db)


def get_availability_service(db: DbSession) -> AvailabilityService:
    """Get AvailabilityService instance with database session."""
    container = get_container()
    return container.create_availability_service(db)


def get_current_actor(
    x_user_id: Annotated[int | None, Header()] = None,
    x_user_role: Annotated[str | None, Header()] = None,
) -> Actor:
    """
    Resolve the caller from the identity headers set by the upstream gateway.

    Raises:
        AuthorizationException: Headers missing
    """
    if x_user_id is None or not x_user_role:
        raise AuthorizationException(operation="access appointments", resource="unauthenticated request")
    return Actor(user_id=x_user_id, role=x_user_role.strip())


__all__ = [
    "get_availability_service",
    "get_booking_service",
    "get_current_actor",
]
