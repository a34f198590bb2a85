from __future__ import annotations

from app.application.exceptions import InvalidOperation
from app.domain.entities.booking import BookingStatus

ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset(
        {BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.NO_SHOW}
    ),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.NO_SHOW: frozenset(),
}


class StatusTransitionValidator:
    """Booking lifecycle state machine. Same-state moves are not in the table and are rejected."""

    def __init__(self, transitions: dict[BookingStatus, frozenset[BookingStatus]] | None = None) -> None:
        self._transitions = transitions or ALLOWED_TRANSITIONS

    def allowed_targets(self, current: BookingStatus) -> frozenset[BookingStatus]:
        return self._transitions.get(current, frozenset())

    def can_transition(self, current: BookingStatus, target: BookingStatus) -> bool:
        return target in self.allowed_targets(current)

    def validate(self, current: BookingStatus, target: BookingStatus) -> None:
        if not self.can_transition(current, target):
            raise InvalidOperation(
                f"Cannot change booking status from {current.value} to {target.value}",
                current_status=current.value,
                target_status=target.value,
            )
