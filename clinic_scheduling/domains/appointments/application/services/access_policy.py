"""
Appointment Access Policy

Administrators may act on any appointment. Anyone else may only act on
appointments booked for themselves as owner.
"""

import logging
from dataclasses import replace

from clinic_scheduling.core.domain import AuthorizationException
from clinic_scheduling.domains.appointments.application.dto import Actor, AppointmentFilters

logger = logging.getLogger(__name__)


class AppointmentAccessPolicy:
    def __init__(self, admin_role: str = "admin"):
        self.admin_role = admin_role

    def is_admin(self, actor: Actor) -> bool:
        return actor.role.lower() == self.admin_role.lower()

    def can_act_for_owner(self, actor: Actor, owner_id: int) -> bool:
        return self.is_admin(actor) or actor.user_id == owner_id

    def ensure_can_act_for_owner(self, actor: Actor, owner_id: int, operation: str) -> None:
        """
        Raises:
            AuthorizationException: Actor is neither admin nor the owner
        """
        if not self.can_act_for_owner(actor, owner_id):
            logger.warning(f"User {actor.user_id} ({actor.role}) denied '{operation}' for owner {owner_id}")
            raise AuthorizationException(
                operation=operation,
                resource=f"appointments of owner {owner_id}",
                user_id=str(actor.user_id),
            )

    def scope_filters(self, actor: Actor, filters: AppointmentFilters) -> AppointmentFilters:
        """Restrict a listing to what the actor may see."""
        if self.is_admin(actor):
            return filters
        if filters.owner_id is not None and filters.owner_id != actor.user_id:
            self.ensure_can_act_for_owner(actor, filters.owner_id, "list")
        return replace(filters, owner_id=actor.user_id)
