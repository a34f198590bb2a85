from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal

from pydantic import BaseModel, Field

from app.application.use_cases.booking import ScheduledBooking, SlotCheck
from app.domain.entities.booking import BookingStatus
from app.domain.entities.page import Page


class BookingCreateSchema(BaseModel):
    # defaults to the caller when omitted
    customer_id: str | None = None
    service_ids: list[str] = Field(default_factory=list)
    booking_date: date
    start_time: time
    notes: str | None = None
    staff_id: str | None = None


class BookingUpdateSchema(BaseModel):
    customer_id: str | None = None
    service_ids: list[str] | None = None
    booking_date: date | None = None
    start_time: time | None = None
    notes: str | None = None


class AssignStaffSchema(BaseModel):
    staff_id: str | None = None


class SlotCheckRequestSchema(BaseModel):
    booking_date: date
    start_time: time
    service_ids: list[str] = Field(default_factory=list)
    staff_id: str | None = None


class ServiceDetailSchema(BaseModel):
    id: str
    name: str
    price: Decimal
    duration_minutes: int


class BookingResponseSchema(BaseModel):
    id: str
    customer_id: str
    staff_id: str | None
    status: BookingStatus
    status_description: str
    booking_date: date
    start_time: time
    end_time: time
    duration_minutes: int
    total_price: Decimal
    services: list[ServiceDetailSchema]
    notes: str | None
    can_cancel: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @staticmethod
    def from_scheduled(scheduled: ScheduledBooking) -> "BookingResponseSchema":
        booking = scheduled.booking
        return BookingResponseSchema(
            id=booking.id,
            customer_id=booking.customer_id,
            staff_id=booking.staff_id,
            status=booking.status,
            status_description=booking.status.description,
            booking_date=booking.booking_date,
            start_time=booking.start_time,
            end_time=scheduled.end_time.time(),
            duration_minutes=scheduled.duration_minutes,
            total_price=booking.total_price,
            services=[
                ServiceDetailSchema(
                    id=s.service_id,
                    name=s.name,
                    price=s.price,
                    duration_minutes=s.duration_minutes,
                )
                for s in scheduled.services
            ],
            notes=booking.notes,
            can_cancel=scheduled.can_cancel,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )


class BookingPageSchema(BaseModel):
    items: list[BookingResponseSchema]
    page: int
    size: int
    total: int
    total_pages: int

    @staticmethod
    def from_page(page: Page[ScheduledBooking]) -> "BookingPageSchema":
        return BookingPageSchema(
            items=[BookingResponseSchema.from_scheduled(s) for s in page.items],
            page=page.page,
            size=page.size,
            total=page.total,
            total_pages=page.total_pages,
        )


class SlotCheckResponseSchema(BaseModel):
    available: bool
    start: datetime
    end: datetime
    reason: str | None = None
    conflicting_ids: list[str] = Field(default_factory=list)

    @staticmethod
    def from_check(check: SlotCheck) -> "SlotCheckResponseSchema":
        return SlotCheckResponseSchema(
            available=check.available,
            start=check.start,
            end=check.end,
            reason=check.reason,
            conflicting_ids=list(check.conflicting_ids),
        )


class AvailableSlotsResponseSchema(BaseModel):
    booking_date: date
    slots: list[time]
