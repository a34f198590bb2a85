from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from app.application.utils.conflict_checker import find_conflicts, has_conflict, overlaps, same_resource
from app.domain.entities.booking import Booking, BookingStatus


def _booking(booking_id: str, start: datetime, status=BookingStatus.PENDING, staff_id=None) -> Booking:
    return Booking(
        id=booking_id,
        customer_id="cust-1",
        service_ids=("svc",),
        appointment_time=start,
        total_price=Decimal("10.00"),
        status=status,
        staff_id=staff_id,
    )


def _hour(_: Booking) -> int:
    return 60


AT_9 = datetime(2025, 1, 10, 9, 0)


def test_touching_intervals_do_not_conflict():
    existing = [_booking("a", AT_9)]  # 09:00-10:00
    assert not has_conflict(AT_9 + timedelta(hours=1), AT_9 + timedelta(hours=2), existing, _hour)
    assert not has_conflict(AT_9 - timedelta(minutes=30), AT_9, existing, _hour)


def test_strict_overlap_conflicts():
    existing = [_booking("a", AT_9)]
    assert has_conflict(datetime(2025, 1, 10, 9, 30), datetime(2025, 1, 10, 10, 30), existing, _hour)


def test_containment_conflicts_both_ways():
    existing = [_booking("a", AT_9)]
    assert has_conflict(datetime(2025, 1, 10, 9, 15), datetime(2025, 1, 10, 9, 45), existing, _hour)
    assert has_conflict(datetime(2025, 1, 10, 8, 0), datetime(2025, 1, 10, 11, 0), existing, _hour)


@pytest.mark.parametrize("status", [BookingStatus.CANCELLED, BookingStatus.COMPLETED, BookingStatus.NO_SHOW])
def test_terminal_bookings_never_conflict(status):
    existing = [_booking("a", AT_9, status=status)]
    assert not has_conflict(AT_9, AT_9 + timedelta(hours=1), existing, _hour)


def test_confirmed_bookings_conflict():
    existing = [_booking("a", AT_9, status=BookingStatus.CONFIRMED)]
    assert has_conflict(AT_9, AT_9 + timedelta(minutes=15), existing, _hour)


def test_excluded_id_is_ignored():
    existing = [_booking("a", AT_9)]
    assert not has_conflict(AT_9, AT_9 + timedelta(hours=1), existing, _hour, exclude_id="a")
    assert has_conflict(AT_9, AT_9 + timedelta(hours=1), existing, _hour, exclude_id="b")


@pytest.mark.parametrize(
    "a_start,a_end,b_start,b_end",
    [
        (9 * 60, 10 * 60, 9 * 60 + 30, 10 * 60 + 30),
        (9 * 60, 10 * 60, 10 * 60, 11 * 60),
        (9 * 60, 12 * 60, 10 * 60, 11 * 60),
        (9 * 60, 9 * 60 + 5, 14 * 60, 15 * 60),
    ],
)
def test_overlap_is_symmetric(a_start, a_end, b_start, b_end):
    base = datetime(2025, 1, 10)

    def at(minutes):
        return base + timedelta(minutes=minutes)

    a = _booking("a", at(a_start))
    b = _booking("b", at(b_start))

    def duration_of(booking):
        return (a_end - a_start) if booking.id == "a" else (b_end - b_start)

    assert has_conflict(at(a_start), at(a_end), [b], duration_of) == has_conflict(
        at(b_start), at(b_end), [a], duration_of
    )
    assert overlaps(at(a_start), at(a_end), at(b_start), at(b_end)) == overlaps(
        at(b_start), at(b_end), at(a_start), at(a_end)
    )


def test_find_conflicts_returns_offenders():
    existing = [_booking("a", AT_9), _booking("b", AT_9 + timedelta(hours=3))]
    conflicts = find_conflicts(AT_9 + timedelta(minutes=30), AT_9 + timedelta(minutes=45), existing, _hour)
    assert [b.id for b in conflicts] == ["a"]


def test_same_resource_groups_unassigned_together():
    bookings = [
        _booking("a", AT_9, staff_id="staff-1"),
        _booking("b", AT_9, staff_id=None),
        _booking("c", AT_9, staff_id="staff-2"),
        _booking("d", AT_9, staff_id=None),
    ]
    assert [b.id for b in same_resource(bookings, "staff-1")] == ["a"]
    assert [b.id for b in same_resource(bookings, None)] == ["b", "d"]
