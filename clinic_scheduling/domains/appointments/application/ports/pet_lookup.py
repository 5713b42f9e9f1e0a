"""
Pet Lookup Port

Read-only access to the pet registry owned by another service.
"""

from typing import Protocol, runtime_checkable

from clinic_scheduling.domains.appointments.application.dto import PetRef


@runtime_checkable
class IPetLookup(Protocol):
    async def get(self, pet_id: int) -> PetRef:
        """
        Resolve a pet and its owner.

        Raises:
            EntityNotFoundException: Pet does not exist
        """
        ...
