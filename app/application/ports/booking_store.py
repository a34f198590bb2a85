from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from contextlib import AbstractContextManager
from datetime import date, datetime

from app.domain.entities.booking import Booking, BookingStatus
from app.domain.entities.page import Page


class BookingStorePort(ABC):
    @abstractmethod
    def save(self, booking: Booking) -> Booking:
        """Insert or replace. Returns the stored value with created_at/updated_at set."""
        raise NotImplementedError

    @abstractmethod
    def find_by_id(self, booking_id: str) -> Booking | None:
        raise NotImplementedError

    @abstractmethod
    def find_by_customer(self, customer_id: str) -> list[Booking]:
        """Bookings of a customer, newest appointment first."""
        raise NotImplementedError

    @abstractmethod
    def find_by_date_range_and_status_in(
        self,
        start: datetime,
        end: datetime,
        statuses: Iterable[BookingStatus],
    ) -> list[Booking]:
        """Bookings with start <= appointment_time < end and status in statuses, ordered by time."""
        raise NotImplementedError

    @abstractmethod
    def delete_by_id(self, booking_id: str) -> bool:
        """Returns True if something was deleted."""
        raise NotImplementedError

    @abstractmethod
    def find_all(self, status: BookingStatus | None = None, page: int = 0, size: int = 20) -> Page[Booking]:
        raise NotImplementedError

    @abstractmethod
    def slot_lock(self, staff_id: str | None, booking_date: date) -> AbstractContextManager[None]:
        """
        Advisory lock for one staff resource on one day.
        Held around check-then-write so two writers cannot both pass the conflict check.
        Raises StoreTimeout if it cannot be acquired in time.
        """
        raise NotImplementedError
