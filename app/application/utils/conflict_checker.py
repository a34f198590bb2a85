from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timedelta

from app.domain.entities.booking import Booking


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open interval overlap; touching endpoints do not overlap."""
    return a_start < b_end and a_end > b_start


def find_conflicts(
    candidate_start: datetime,
    candidate_end: datetime,
    existing: Iterable[Booking],
    duration_of: Callable[[Booking], int],
    exclude_id: str | None = None,
) -> list[Booking]:
    """
    Active bookings among `existing` whose interval overlaps the candidate.

    `existing` is expected to be pre-filtered to the candidate's calendar date
    and staff resource. Terminal bookings never conflict.
    """
    conflicts: list[Booking] = []
    for booking in existing:
        if not booking.is_active:
            continue
        if exclude_id is not None and booking.id == exclude_id:
            continue
        existing_start = booking.appointment_time
        existing_end = existing_start + timedelta(minutes=duration_of(booking))
        if overlaps(candidate_start, candidate_end, existing_start, existing_end):
            conflicts.append(booking)
    return conflicts


def has_conflict(
    candidate_start: datetime,
    candidate_end: datetime,
    existing: Iterable[Booking],
    duration_of: Callable[[Booking], int],
    exclude_id: str | None = None,
) -> bool:
    return bool(find_conflicts(candidate_start, candidate_end, existing, duration_of, exclude_id))


def same_resource(bookings: Iterable[Booking], staff_id: str | None) -> list[Booking]:
    """
    Bookings competing for the same staff member.
    Unassigned bookings (staff_id None) form one shared pool.
    """
    return [b for b in bookings if b.staff_id == staff_id]
