from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, Query, Response

from app.api.v1.schemas import (
    AssignStaffSchema,
    AvailableSlotsResponseSchema,
    BookingCreateSchema,
    BookingPageSchema,
    BookingResponseSchema,
    BookingUpdateSchema,
    SlotCheckRequestSchema,
    SlotCheckResponseSchema,
)
from app.application.use_cases.booking import BookingScheduler
from app.core.config import settings
from app.domain.entities.booking import BookingStatus
from app.domain.entities.principal import Principal
from app.wiring.dependencies import get_booking_scheduler, get_principal

router = APIRouter(prefix="/api/v1/bookings")
logger = logging.getLogger(__name__)


@router.get("", response_model=BookingPageSchema)
def list_bookings(
    status: BookingStatus | None = Query(None),
    page: int = Query(0, ge=0),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    principal: Principal = Depends(get_principal),
    scheduler: BookingScheduler = Depends(get_booking_scheduler),
):
    result = scheduler.get_all(principal, status=status, page=page, size=size)
    return BookingPageSchema.from_page(result)


@router.get("/my-bookings", response_model=list[BookingResponseSchema])
def my_bookings(
    principal: Principal = Depends(get_principal),
    scheduler: BookingScheduler = Depends(get_booking_scheduler),
):
    bookings = scheduler.get_by_customer(principal, principal.user_id)
    return [BookingResponseSchema.from_scheduled(b) for b in bookings]


@router.get("/by-date", response_model=list[BookingResponseSchema])
def bookings_by_date(
    booking_date: date = Query(..., alias="date"),
    status: list[BookingStatus] | None = Query(None),
    principal: Principal = Depends(get_principal),
    scheduler: BookingScheduler = Depends(get_booking_scheduler),
):
    bookings = scheduler.get_by_date(principal, booking_date, statuses=status)
    return [BookingResponseSchema.from_scheduled(b) for b in bookings]


@router.get(
    "/available-slots",
    response_model=AvailableSlotsResponseSchema,
    dependencies=[Depends(get_principal)],
)
def available_slots(
    booking_date: date = Query(..., alias="date"),
    service_ids: list[str] = Query([]),
    staff_id: str | None = Query(None),
    scheduler: BookingScheduler = Depends(get_booking_scheduler),
):
    slots = scheduler.available_slots(booking_date, service_ids, staff_id=staff_id)
    return AvailableSlotsResponseSchema(booking_date=booking_date, slots=[s.time() for s in slots])


@router.post("/check-slot", response_model=SlotCheckResponseSchema, dependencies=[Depends(get_principal)])
def check_slot(
    req: SlotCheckRequestSchema,
    scheduler: BookingScheduler = Depends(get_booking_scheduler),
):
    check = scheduler.check_slot(req.booking_date, req.start_time, req.service_ids, staff_id=req.staff_id)
    return SlotCheckResponseSchema.from_check(check)


@router.get("/{booking_id}", response_model=BookingResponseSchema)
def get_booking(
    booking_id: str,
    principal: Principal = Depends(get_principal),
    scheduler: BookingScheduler = Depends(get_booking_scheduler),
):
    return BookingResponseSchema.from_scheduled(scheduler.get_by_id(principal, booking_id))


@router.post("", response_model=BookingResponseSchema, status_code=201)
def create_booking(
    req: BookingCreateSchema,
    principal: Principal = Depends(get_principal),
    scheduler: BookingScheduler = Depends(get_booking_scheduler),
):
    logger.info("Create booking request", extra={"customer_id": req.customer_id or principal.user_id})
    created = scheduler.create(
        principal,
        customer_id=req.customer_id or principal.user_id,
        service_ids=req.service_ids,
        booking_date=req.booking_date,
        start_time=req.start_time,
        notes=req.notes,
        staff_id=req.staff_id,
    )
    return BookingResponseSchema.from_scheduled(created)


@router.put("/{booking_id}", response_model=BookingResponseSchema)
def update_booking(
    booking_id: str,
    req: BookingUpdateSchema,
    principal: Principal = Depends(get_principal),
    scheduler: BookingScheduler = Depends(get_booking_scheduler),
):
    updated = scheduler.update(
        principal,
        booking_id,
        service_ids=req.service_ids,
        booking_date=req.booking_date,
        start_time=req.start_time,
        notes=req.notes,
        customer_id=req.customer_id,
    )
    return BookingResponseSchema.from_scheduled(updated)


@router.put("/{booking_id}/status", response_model=BookingResponseSchema)
def update_booking_status(
    booking_id: str,
    status: BookingStatus = Query(...),
    principal: Principal = Depends(get_principal),
    scheduler: BookingScheduler = Depends(get_booking_scheduler),
):
    return BookingResponseSchema.from_scheduled(scheduler.change_status(principal, booking_id, status))


@router.put("/{booking_id}/assign", response_model=BookingResponseSchema)
def assign_staff(
    booking_id: str,
    req: AssignStaffSchema,
    principal: Principal = Depends(get_principal),
    scheduler: BookingScheduler = Depends(get_booking_scheduler),
):
    return BookingResponseSchema.from_scheduled(scheduler.assign_staff(principal, booking_id, req.staff_id))


@router.delete("/{booking_id}", status_code=204)
def delete_booking(
    booking_id: str,
    principal: Principal = Depends(get_principal),
    scheduler: BookingScheduler = Depends(get_booking_scheduler),
) -> Response:
    scheduler.delete(principal, booking_id)
    return Response(status_code=204)
