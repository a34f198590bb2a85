from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def description(self) -> str:
        return STATUS_DESCRIPTIONS[self]


TERMINAL_STATUSES = frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.NO_SHOW})
ACTIVE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})

STATUS_DESCRIPTIONS = {
    BookingStatus.PENDING: "Awaiting confirmation",
    BookingStatus.CONFIRMED: "Confirmed",
    BookingStatus.COMPLETED: "Completed",
    BookingStatus.CANCELLED: "Cancelled",
    BookingStatus.NO_SHOW: "Customer did not show up",
}


@dataclass(frozen=True)
class Booking:
    id: str
    customer_id: str
    service_ids: tuple[str, ...]
    appointment_time: datetime  # naive, salon-local
    total_price: Decimal
    status: BookingStatus = BookingStatus.PENDING
    staff_id: str | None = None
    notes: str | None = None
    # store-managed
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def booking_date(self) -> date:
        return self.appointment_time.date()

    @property
    def start_time(self) -> time:
        return self.appointment_time.time()

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES


def normalize_service_ids(service_ids: list[str] | tuple[str, ...]) -> tuple[str, ...]:
    """Collapse duplicates and blanks, keeping first-seen order."""
    cleaned = (str(s).strip() for s in service_ids or ())
    return tuple(dict.fromkeys(s for s in cleaned if s))
