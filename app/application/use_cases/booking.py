from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable, Iterator
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from app.application.exceptions import (
    AccessDenied,
    BookingConflict,
    InvalidBooking,
    InvalidOperation,
    ResourceNotFound,
    StoreTimeout,
)
from app.application.ports.access_gate import AccessGatePort
from app.application.ports.booking_store import BookingStorePort
from app.application.ports.customer_directory import CustomerDirectoryPort
from app.application.ports.service_catalog import ServiceCatalogPort
from app.application.utils.conflict_checker import find_conflicts, same_resource
from app.application.utils.pricing import PricingCalculator, total_duration_minutes
from app.application.utils.status_transitions import StatusTransitionValidator
from app.domain.entities.booking import (
    ACTIVE_STATUSES,
    Booking,
    BookingStatus,
    normalize_service_ids,
)
from app.domain.entities.page import Page
from app.domain.entities.principal import PRIVILEGED_ROLES, Principal
from app.domain.entities.service_catalog import CatalogService


@dataclass(frozen=True)
class ScheduledBooking:
    booking: Booking
    services: tuple[CatalogService, ...]
    end_time: datetime

    @property
    def duration_minutes(self) -> int:
        return int((self.end_time - self.booking.appointment_time).total_seconds() // 60)

    @property
    def can_cancel(self) -> bool:
        return self.booking.is_active


@dataclass(frozen=True)
class SlotCheck:
    available: bool
    start: datetime
    end: datetime
    reason: str | None = None  # "in_past" | "conflict"
    conflicting_ids: tuple[str, ...] = ()


class BookingScheduler:
    """
    Create, reschedule, re-price and move bookings through their lifecycle.

    Authorization goes through the AccessGate on every call. Conflict checks and
    the write that follows them run under the store's per-(staff, date) slot lock,
    so two concurrent requests for the same resource cannot both pass the check.
    Every mutation of an existing booking also holds the lock of the slot the
    booking currently occupies and re-reads it there, so it never writes back a
    stale copy.
    """

    def __init__(
        self,
        store: BookingStorePort,
        catalog: ServiceCatalogPort,
        access_gate: AccessGatePort,
        directory: CustomerDirectoryPort,
        timezone: ZoneInfo,
        clock: Callable[[], datetime] | None = None,
        open_hour: int = 9,
        close_hour: int = 17,
        slot_step_minutes: int = 30,
        validator: StatusTransitionValidator | None = None,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._gate = access_gate
        self._directory = directory
        self._timezone = timezone
        self._clock = clock or (lambda: datetime.now(timezone))
        self._open_hour = open_hour
        self._close_hour = close_hour
        self._slot_step_minutes = slot_step_minutes
        self._validator = validator or StatusTransitionValidator()
        self._logger = logging.getLogger(__name__)

    # ------------------------------------------------------------------ commands

    def create(
        self,
        principal: Principal,
        customer_id: str,
        service_ids: list[str],
        booking_date: date,
        start_time: time,
        notes: str | None = None,
        staff_id: str | None = None,
    ) -> ScheduledBooking:
        if not self._gate.can_act_for(principal, customer_id):
            raise AccessDenied("Not allowed to book on behalf of this customer")
        if not self._directory.is_customer(customer_id):
            raise ResourceNotFound(f"Customer not found: {customer_id}", code="USER_NOT_FOUND")

        ids = self._require_services(service_ids)
        start = datetime.combine(booking_date, start_time)
        self._ensure_not_past(start)
        services = self._catalog.lookup_many(ids)
        if staff_id is not None:
            self._ensure_staff(staff_id)
        end = start + timedelta(minutes=total_duration_minutes(services.values()))
        self._ensure_business_hours(start, end)

        with self._hold([(staff_id, booking_date)]):
            self._ensure_free(start, end, staff_id)
            saved = self._store.save(
                Booking(
                    id=uuid.uuid4().hex,
                    customer_id=customer_id,
                    service_ids=ids,
                    appointment_time=start,
                    total_price=PricingCalculator.total_for(services.values()),
                    status=BookingStatus.PENDING,
                    staff_id=staff_id,
                    notes=notes,
                )
            )

        self._logger.info(
            "Booking created",
            extra={"booking_id": saved.id, "customer_id": customer_id, "staff_id": staff_id},
        )
        return self._view(saved, services)

    def update(
        self,
        principal: Principal,
        booking_id: str,
        service_ids: list[str] | None = None,
        booking_date: date | None = None,
        start_time: time | None = None,
        notes: str | None = None,
        customer_id: str | None = None,
    ) -> ScheduledBooking:
        """Reschedule and/or re-price. Omitted fields keep their current value."""

        def target_slot(booking: Booking) -> list[tuple[str | None, date]]:
            return [(booking.staff_id, booking.booking_date if booking_date is None else booking_date)]

        with self._locked_booking(booking_id, target_slot) as booking:
            if not self._gate.can_write(principal, booking):
                raise AccessDenied("Not allowed to modify this booking")
            if booking.is_terminal:
                raise InvalidOperation(
                    f"Cannot modify a booking in status {booking.status.value}",
                    current_status=booking.status.value,
                )
            if customer_id is not None and customer_id != booking.customer_id:
                raise InvalidOperation("Booking owner cannot be changed", code="BOOKING_INVALID_CUSTOMER")

            ids = booking.service_ids if service_ids is None else self._require_services(service_ids)
            start = datetime.combine(
                booking.booking_date if booking_date is None else booking_date,
                booking.start_time if start_time is None else start_time,
            )
            if start != booking.appointment_time:
                self._ensure_not_past(start)
            services = self._catalog.lookup_many(ids)
            end = start + timedelta(minutes=total_duration_minutes(services.values()))
            if start != booking.appointment_time or ids != booking.service_ids:
                self._ensure_business_hours(start, end)

            self._ensure_free(start, end, booking.staff_id, exclude_id=booking.id)
            saved = self._store.save(
                replace(
                    booking,
                    service_ids=ids,
                    appointment_time=start,
                    total_price=PricingCalculator.total_for(services.values()),
                    notes=booking.notes if notes is None else notes,
                )
            )

        self._logger.info("Booking updated", extra={"booking_id": saved.id, "staff_id": saved.staff_id})
        return self._view(saved, services)

    def change_status(self, principal: Principal, booking_id: str, new_status: BookingStatus) -> ScheduledBooking:
        """Administrators may move any booking; staff only the bookings assigned to them."""
        if not self._gate.is_privileged(principal):
            raise AccessDenied("Only staff or administrators can change booking status")

        with self._locked_booking(booking_id) as booking:
            if not self._gate.can_write(principal, booking):
                raise AccessDenied("Not allowed to change the status of this booking")
            self._validator.validate(booking.status, new_status)
            saved = self._store.save(replace(booking, status=new_status))

        self._logger.info(
            "Booking status changed",
            extra={"booking_id": saved.id, "status": f"{booking.status.value}->{new_status.value}"},
        )
        return self._views([saved])[0]

    def assign_staff(self, principal: Principal, booking_id: str, staff_id: str | None) -> ScheduledBooking:
        """Move a booking onto a staff member's schedule (or back to the unassigned pool). Admin only."""
        if not self._gate.can_assign(principal):
            raise AccessDenied("Only administrators can assign staff")
        if staff_id is not None:
            self._ensure_staff(staff_id)

        def target_slot(booking: Booking) -> list[tuple[str | None, date]]:
            return [(staff_id, booking.booking_date)]

        with self._locked_booking(booking_id, target_slot) as booking:
            if booking.is_terminal:
                raise InvalidOperation(
                    f"Cannot reassign a booking in status {booking.status.value}",
                    current_status=booking.status.value,
                )
            services = self._catalog.lookup_many(booking.service_ids)
            end = booking.appointment_time + timedelta(minutes=total_duration_minutes(services.values()))
            self._ensure_business_hours(booking.appointment_time, end)
            self._ensure_free(booking.appointment_time, end, staff_id, exclude_id=booking.id)
            saved = self._store.save(
                replace(
                    booking,
                    staff_id=staff_id,
                    total_price=PricingCalculator.total_for(services.values()),
                )
            )

        self._logger.info("Staff assigned", extra={"booking_id": saved.id, "staff_id": staff_id})
        return self._view(saved, services)

    def delete(self, principal: Principal, booking_id: str) -> None:
        with self._locked_booking(booking_id) as booking:
            if not self._gate.can_write(principal, booking):
                raise AccessDenied("Not allowed to delete this booking")
            if not booking.is_active:
                raise InvalidOperation(
                    f"Cannot delete a booking in status {booking.status.value}",
                    current_status=booking.status.value,
                    code="BOOKING_CANNOT_BE_CANCELLED",
                )
            self._store.delete_by_id(booking.id)
        self._logger.info("Booking deleted", extra={"booking_id": booking.id})

    # ------------------------------------------------------------------ queries

    def get_by_id(self, principal: Principal, booking_id: str) -> ScheduledBooking:
        booking = self._load(booking_id)
        if not self._gate.can_read(principal, booking):
            raise AccessDenied("Not allowed to view this booking")
        return self._views([booking])[0]

    def get_by_customer(self, principal: Principal, customer_id: str) -> list[ScheduledBooking]:
        if not self._gate.can_act_for(principal, customer_id):
            raise AccessDenied("Not allowed to view bookings of this customer")
        return self._views(self._store.find_by_customer(customer_id))

    def get_by_date(
        self,
        principal: Principal,
        booking_date: date,
        statuses: Iterable[BookingStatus] | None = None,
    ) -> list[ScheduledBooking]:
        self._require_privileged(principal)
        day_start = datetime.combine(booking_date, time.min)
        bookings = self._store.find_by_date_range_and_status_in(
            day_start,
            day_start + timedelta(days=1),
            list(statuses) if statuses else list(BookingStatus),
        )
        return self._views(bookings)

    def get_all(
        self,
        principal: Principal,
        status: BookingStatus | None = None,
        page: int = 0,
        size: int = 20,
    ) -> Page[ScheduledBooking]:
        self._require_privileged(principal)
        result = self._store.find_all(status=status, page=page, size=size)
        return Page(items=tuple(self._views(result.items)), page=result.page, size=result.size, total=result.total)

    def check_slot(
        self,
        booking_date: date,
        start_time: time,
        service_ids: list[str],
        staff_id: str | None = None,
    ) -> SlotCheck:
        ids = self._require_services(service_ids)
        services = self._catalog.lookup_many(ids)
        start = datetime.combine(booking_date, start_time)
        end = start + timedelta(minutes=total_duration_minutes(services.values()))
        if start < self._now():
            return SlotCheck(available=False, start=start, end=end, reason="in_past")

        existing = same_resource(self._active_on(booking_date), staff_id)
        conflicts = find_conflicts(start, end, existing, self._duration_resolver(existing))
        if conflicts:
            return SlotCheck(
                available=False,
                start=start,
                end=end,
                reason="conflict",
                conflicting_ids=tuple(b.id for b in conflicts),
            )
        return SlotCheck(available=True, start=start, end=end)

    def available_slots(
        self,
        booking_date: date,
        service_ids: list[str],
        staff_id: str | None = None,
    ) -> list[datetime]:
        """Start times inside business hours where the whole service set fits."""
        ids = self._require_services(service_ids)
        duration = total_duration_minutes(self._catalog.lookup_many(ids).values())
        existing = same_resource(self._active_on(booking_date), staff_id)
        duration_of = self._duration_resolver(existing)
        now = self._now()

        slots: list[datetime] = []
        current = datetime.combine(booking_date, time(hour=self._open_hour))
        closing = datetime.combine(booking_date, time(hour=self._close_hour))
        while current + timedelta(minutes=duration) <= closing:
            slot_end = current + timedelta(minutes=duration)
            if current >= now and not find_conflicts(current, slot_end, existing, duration_of):
                slots.append(current)
            current += timedelta(minutes=self._slot_step_minutes)
        return slots

    # ------------------------------------------------------------------ helpers

    def _now(self) -> datetime:
        now = self._clock()
        if now.tzinfo is not None:
            now = now.astimezone(self._timezone).replace(tzinfo=None)
        return now

    def _load(self, booking_id: str) -> Booking:
        booking = self._store.find_by_id(booking_id)
        if booking is None:
            raise ResourceNotFound(f"Booking not found: {booking_id}", code="BOOKING_NOT_FOUND")
        return booking

    def _require_privileged(self, principal: Principal) -> None:
        if not self._gate.is_privileged(principal):
            raise AccessDenied("Only staff or administrators can list bookings")

    def _require_services(self, service_ids: list[str] | tuple[str, ...] | None) -> tuple[str, ...]:
        ids = normalize_service_ids(service_ids or ())
        if not ids:
            raise InvalidBooking("At least one service is required", code="BOOKING_INVALID_SERVICES")
        return ids

    def _ensure_not_past(self, start: datetime) -> None:
        if start < self._now():
            raise InvalidBooking("Booking time must be in the future", code="INVALID_BOOKING_TIME")

    def _ensure_business_hours(self, start: datetime, end: datetime) -> None:
        opening = datetime.combine(start.date(), time(hour=self._open_hour))
        closing = datetime.combine(start.date(), time(hour=self._close_hour))
        if start < opening or end > closing:
            raise InvalidBooking(
                f"Booking must fit between {opening:%H:%M} and {closing:%H:%M}",
                code="INVALID_BOOKING_TIME",
            )

    @contextmanager
    def _hold(self, slots: Iterable[tuple[str | None, date]]) -> Iterator[None]:
        # fixed acquisition order so overlapping slot sets cannot deadlock
        ordered = sorted(set(slots), key=lambda slot: (slot[0] or "", slot[1]))
        with ExitStack() as stack:
            for staff_id, booking_date in ordered:
                stack.enter_context(self._store.slot_lock(staff_id, booking_date))
            yield

    @contextmanager
    def _locked_booking(
        self,
        booking_id: str,
        extra_slots: Callable[[Booking], Iterable[tuple[str | None, date]]] = lambda booking: (),
        attempts: int = 3,
    ) -> Iterator[Booking]:
        """
        Hold the slot the booking occupies (plus extra_slots) and yield a fresh copy.

        A concurrent move of the same booking needs the same slot lock, so once the
        re-read shows it still sits there, nobody else can change it until release.
        """
        for _ in range(attempts):
            booking = self._load(booking_id)
            home = (booking.staff_id, booking.booking_date)
            with self._hold([home, *extra_slots(booking)]):
                fresh = self._load(booking_id)
                if (fresh.staff_id, fresh.booking_date) == home:
                    yield fresh
                    return
        raise StoreTimeout(f"Booking {booking_id} kept moving while waiting for its schedule lock")

    def _ensure_staff(self, staff_id: str) -> None:
        user = self._directory.get_user(staff_id)
        if user is None or user.role not in PRIVILEGED_ROLES:
            raise ResourceNotFound(f"Staff member not found: {staff_id}", code="SPECIALIST_NOT_FOUND")

    def _active_on(self, booking_date: date) -> list[Booking]:
        day_start = datetime.combine(booking_date, time.min)
        return self._store.find_by_date_range_and_status_in(
            day_start, day_start + timedelta(days=1), ACTIVE_STATUSES
        )

    def _ensure_free(
        self,
        start: datetime,
        end: datetime,
        staff_id: str | None,
        exclude_id: str | None = None,
    ) -> None:
        existing = same_resource(self._active_on(start.date()), staff_id)
        conflicts = find_conflicts(start, end, existing, self._duration_resolver(existing), exclude_id)
        if conflicts:
            self._logger.info(
                "Booking conflict",
                extra={"staff_id": staff_id, "reason": ",".join(b.id for b in conflicts)},
            )
            raise BookingConflict(
                "Requested time overlaps an existing booking",
                conflicting_ids=[b.id for b in conflicts],
            )

    def _duration_resolver(self, bookings: Iterable[Booking]) -> Callable[[Booking], int]:
        """One batched catalog call for every service the given bookings reference."""
        bookings = list(bookings)
        wanted = {sid for b in bookings for sid in b.service_ids}
        found = self._catalog.find_many(wanted) if wanted else {}
        missing = wanted - found.keys()
        if missing:
            self._logger.warning(
                "Existing bookings reference unknown services",
                extra={"reason": ",".join(sorted(missing))},
            )

        def duration_of(booking: Booking) -> int:
            return total_duration_minutes(found[sid] for sid in booking.service_ids if sid in found)

        return duration_of

    def _view(self, booking: Booking, services: dict[str, CatalogService]) -> ScheduledBooking:
        resolved = tuple(services[sid] for sid in booking.service_ids if sid in services)
        end = booking.appointment_time + timedelta(minutes=total_duration_minutes(resolved))
        return ScheduledBooking(booking=booking, services=resolved, end_time=end)

    def _views(self, bookings: Iterable[Booking]) -> list[ScheduledBooking]:
        bookings = list(bookings)
        wanted = {sid for b in bookings for sid in b.service_ids}
        found = self._catalog.find_many(wanted) if wanted else {}
        return [self._view(b, found) for b in bookings]
