from __future__ import annotations

from app.application.ports.access_gate import AccessGatePort
from app.domain.entities.booking import Booking
from app.domain.entities.principal import PRIVILEGED_ROLES, Principal, Role


class RoleAccessGate(AccessGatePort):
    """
    Administrators see and change everything, and only they move bookings
    between staff. Staff see and change bookings assigned to them. Customers
    see and change their own bookings.
    """

    def is_privileged(self, principal: Principal) -> bool:
        return principal.role in PRIVILEGED_ROLES

    def can_read(self, principal: Principal, booking: Booking) -> bool:
        if principal.role == Role.ADMIN:
            return True
        if principal.role == Role.STAFF:
            return booking.staff_id == principal.user_id
        return booking.customer_id == principal.user_id

    def can_write(self, principal: Principal, booking: Booking) -> bool:
        return self.can_read(principal, booking)

    def can_act_for(self, principal: Principal, customer_id: str) -> bool:
        return self.is_privileged(principal) or principal.user_id == customer_id

    def can_assign(self, principal: Principal) -> bool:
        return principal.role == Role.ADMIN
