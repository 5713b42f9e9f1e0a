"""
Domain Exceptions

These exceptions represent business rule violations and domain-specific errors.
They should be caught and translated to appropriate HTTP responses in the API layer.
"""

from typing import Any


class DomainException(Exception):
    """
    Base exception for all domain-related errors.

    Provides a standardized way to communicate business rule violations.
    """

    def __init__(self, message: str, code: str | None = None, details: dict[str, Any] | None = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "APPOINTMENT_CONFLICT")
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(DomainException):
    """
    Raised when domain validation fails.

    Use for missing required fields, invalid durations, unparseable times, etc.
    """

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, "VALIDATION_ERROR", details)
        self.field = field


class EntityNotFoundException(DomainException):
    """
    Raised when an entity is not found.
    """

    def __init__(
        self,
        entity_type: str,
        entity_id: Any,
        message: str | None = None,
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        msg = message or f"{entity_type} with ID {entity_id} not found"
        super().__init__(
            msg,
            "ENTITY_NOT_FOUND",
            {"entity_type": entity_type, "entity_id": str(entity_id)},
        )


class OwnershipMismatchException(DomainException):
    """Raised when a pet does not belong to the stated owner."""

    def __init__(self, pet_id: Any, owner_id: Any, actual_owner_id: Any | None = None):
        self.pet_id = pet_id
        self.owner_id = owner_id
        self.actual_owner_id = actual_owner_id
        super().__init__(
            f"Pet {pet_id} does not belong to owner {owner_id}",
            "OWNERSHIP_MISMATCH",
            {"pet_id": str(pet_id), "owner_id": str(owner_id)},
        )


class InvalidOperationException(DomainException):
    """Raised when an operation is not valid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None):
        self.operation = operation
        self.current_state = current_state
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(
            msg,
            "INVALID_OPERATION",
            {"operation": operation, "current_state": current_state},
        )


class AuthorizationException(DomainException):
    """Raised when a user is not authorized to perform an operation."""

    def __init__(self, operation: str, resource: str | None = None, user_id: str | None = None):
        self.operation = operation
        self.resource = resource
        self.user_id = user_id
        msg = f"Not authorized to perform '{operation}'"
        if resource:
            msg += f" on '{resource}'"
        super().__init__(
            msg,
            "AUTHORIZATION_ERROR",
            {
                "operation": operation,
                "resource": resource,
            },
        )


class AppointmentConflictException(DomainException):
    """Raised when there's a scheduling conflict."""

    def __init__(
        self,
        practitioner_id: int | None = None,
        time_slot: str | None = None,
        message: str | None = None,
    ):
        self.practitioner_id = practitioner_id
        self.time_slot = time_slot
        msg = message or "Appointment conflict: practitioner has another appointment in that time (buffer included)"
        details: dict[str, Any] = {}
        if practitioner_id:
            details["practitioner_id"] = practitioner_id
        if time_slot:
            details["time_slot"] = time_slot
        super().__init__(msg, "APPOINTMENT_CONFLICT", details)


class PersistenceException(DomainException):
    """Raised when the store fails unexpectedly."""

    def __init__(self, operation: str, original_error: Exception | None = None):
        self.operation = operation
        self.original_error = original_error
        details: dict[str, Any] = {"operation": operation}
        if original_error:
            details["original_error"] = str(original_error)
        super().__init__(f"Persistence failure during '{operation}'", "PERSISTENCE_ERROR", details)
