"""
Practitioner Lookup Port

Read-only access to users that may be booked as practitioners.
"""

from typing import Protocol, runtime_checkable

from clinic_scheduling.domains.appointments.application.dto import PractitionerRef


@runtime_checkable
class IPractitionerLookup(Protocol):
    async def find(self, user_id: int) -> PractitionerRef | None:
        """Find a user by ID, whatever their role."""
        ...

    async def list_practitioners(self) -> list[PractitionerRef]:
        """All users holding the practitioner role, ordered by ID."""
        ...
