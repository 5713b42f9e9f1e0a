"""
Domain Layer - Core DDD building blocks

This module provides base classes for Domain-Driven Design:
- Entities: Objects with identity and lifecycle
- Value Objects: Immutable objects compared by value
- Exceptions: Domain-specific error handling
"""

from clinic_scheduling.core.domain.entities import Entity
from clinic_scheduling.core.domain.exceptions import (
    AppointmentConflictException,
    AuthorizationException,
    DomainException,
    EntityNotFoundException,
    InvalidOperationException,
    OwnershipMismatchException,
    PersistenceException,
    ValidationException,
)
from clinic_scheduling.core.domain.value_objects import StatusEnum, ValueObject

__all__ = [
    # Entities
    "Entity",
    # Value Objects
    "ValueObject",
    "StatusEnum",
    # Exceptions
    "DomainException",
    "ValidationException",
    "EntityNotFoundException",
    "OwnershipMismatchException",
    "InvalidOperationException",
    "AuthorizationException",
    "AppointmentConflictException",
    "PersistenceException",
]
