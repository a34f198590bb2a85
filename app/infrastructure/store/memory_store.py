from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime, timezone

from app.application.exceptions import StoreTimeout
from app.application.ports.booking_store import BookingStorePort
from app.domain.entities.booking import Booking, BookingStatus
from app.domain.entities.page import Page

UNASSIGNED = "__unassigned__"


class SlotLocks:
    """
    Per-(staff, date) locks with bounded acquisition.

    An entry lives only while someone holds or waits for it, so the table does
    not grow with every day ever booked.
    """

    def __init__(self, timeout_seconds: float = 5.0) -> None:
        self._timeout = timeout_seconds
        self._locks: dict[tuple[str, date], list] = {}  # key -> [lock, users]
        self._lock_lock = threading.Lock()  # guards the locks dict

    def __len__(self) -> int:
        with self._lock_lock:
            return len(self._locks)

    def _checkout(self, key: tuple[str, date]) -> threading.Lock:
        with self._lock_lock:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = [threading.Lock(), 0]
            entry[1] += 1
            return entry[0]

    def _checkin(self, key: tuple[str, date]) -> None:
        with self._lock_lock:
            entry = self._locks[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    @contextmanager
    def hold(self, staff_id: str | None, booking_date: date) -> Iterator[None]:
        key = (staff_id or UNASSIGNED, booking_date)
        lock = self._checkout(key)
        try:
            if not lock.acquire(timeout=self._timeout):
                raise StoreTimeout(f"Timed out waiting for schedule lock {key[0]} on {booking_date.isoformat()}")
            try:
                yield
            finally:
                lock.release()
        finally:
            self._checkin(key)


class MemoryBookingStore(BookingStorePort):
    def __init__(self, lock_timeout_seconds: float = 5.0) -> None:
        self._bookings: dict[str, Booking] = {}
        self._mutex = threading.RLock()
        self._slot_locks = SlotLocks(lock_timeout_seconds)

    def save(self, booking: Booking) -> Booking:
        now = datetime.now(timezone.utc)
        with self._mutex:
            previous = self._bookings.get(booking.id)
            stored = replace(
                booking,
                created_at=previous.created_at if previous else now,
                updated_at=now,
            )
            self._bookings[booking.id] = stored
            return stored

    def find_by_id(self, booking_id: str) -> Booking | None:
        with self._mutex:
            return self._bookings.get(booking_id)

    def find_by_customer(self, customer_id: str) -> list[Booking]:
        with self._mutex:
            found = [b for b in self._bookings.values() if b.customer_id == customer_id]
        return sorted(found, key=lambda b: b.appointment_time, reverse=True)

    def find_by_date_range_and_status_in(
        self,
        start: datetime,
        end: datetime,
        statuses: Iterable[BookingStatus],
    ) -> list[Booking]:
        wanted = set(statuses)
        with self._mutex:
            found = [
                b
                for b in self._bookings.values()
                if start <= b.appointment_time < end and b.status in wanted
            ]
        return sorted(found, key=lambda b: b.appointment_time)

    def delete_by_id(self, booking_id: str) -> bool:
        with self._mutex:
            return self._bookings.pop(booking_id, None) is not None

    def find_all(self, status: BookingStatus | None = None, page: int = 0, size: int = 20) -> Page[Booking]:
        with self._mutex:
            found = [b for b in self._bookings.values() if status is None or b.status == status]
        return paginate(found, page, size)

    def slot_lock(self, staff_id: str | None, booking_date: date):
        return self._slot_locks.hold(staff_id, booking_date)


def paginate(bookings: list[Booking], page: int, size: int) -> Page[Booking]:
    """Newest appointment first, zero-based page index."""
    ordered = sorted(bookings, key=lambda b: b.appointment_time, reverse=True)
    page = max(page, 0)
    size = max(size, 1)
    offset = page * size
    return Page(items=tuple(ordered[offset : offset + size]), page=page, size=size, total=len(ordered))
