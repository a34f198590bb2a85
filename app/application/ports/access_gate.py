from __future__ import annotations

from abc import ABC, abstractmethod

from app.domain.entities.booking import Booking
from app.domain.entities.principal import Principal


class AccessGatePort(ABC):
    @abstractmethod
    def can_read(self, principal: Principal, booking: Booking) -> bool:
        raise NotImplementedError

    @abstractmethod
    def can_write(self, principal: Principal, booking: Booking) -> bool:
        raise NotImplementedError

    @abstractmethod
    def is_privileged(self, principal: Principal) -> bool:
        """Administrator or staff."""
        raise NotImplementedError

    @abstractmethod
    def can_act_for(self, principal: Principal, customer_id: str) -> bool:
        """Whether the caller may create or list bookings owned by customer_id."""
        raise NotImplementedError

    @abstractmethod
    def can_assign(self, principal: Principal) -> bool:
        """Whether the caller may move bookings between staff schedules."""
        raise NotImplementedError
