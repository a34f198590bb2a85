from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterable
from dataclasses import replace
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation as DecimalError
from pathlib import Path
from typing import Any

from app.application.ports.booking_store import BookingStorePort
from app.domain.entities.booking import Booking, BookingStatus
from app.domain.entities.page import Page
from app.infrastructure.store.memory_store import SlotLocks, paginate


class JsonBookingStore(BookingStorePort):
    """One JSON document per booking under data_dir. Single-process only."""

    def __init__(self, data_dir: str = "./data/bookings", lock_timeout_seconds: float = 5.0) -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._write_lock = threading.Lock()
        self._slot_locks = SlotLocks(lock_timeout_seconds)
        self._logger = logging.getLogger(__name__)

    def _get_file_path(self, booking_id: str) -> Path:
        """Get the file path for a booking id."""
        return self._data_dir / f"{booking_id}.json"

    def _load_file(self, file_path: Path) -> Booking | None:
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return self._deserialize_booking(json.load(f))
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, KeyError, ValueError, DecimalError) as e:
            self._logger.warning("Skipping unreadable booking file", extra={"reason": f"{file_path.name}: {e}"})
            return None

    def _load_all(self) -> list[Booking]:
        bookings: list[Booking] = []
        for file_path in self._data_dir.glob("*.json"):
            booking = self._load_file(file_path)
            if booking is not None:
                bookings.append(booking)
        return bookings

    def _write_file(self, booking: Booking) -> None:
        """Save booking to its JSON file atomically."""
        file_path = self._get_file_path(booking.id)
        temp_path = file_path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(self._serialize_booking(booking), f, indent=2, ensure_ascii=False)
            temp_path.replace(file_path)
        except OSError:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise

    def save(self, booking: Booking) -> Booking:
        now = datetime.now(timezone.utc)
        with self._write_lock:
            previous = self._load_file(self._get_file_path(booking.id))
            stored = replace(
                booking,
                created_at=previous.created_at if previous else now,
                updated_at=now,
            )
            self._write_file(stored)
            return stored

    def find_by_id(self, booking_id: str) -> Booking | None:
        return self._load_file(self._get_file_path(booking_id))

    def find_by_customer(self, customer_id: str) -> list[Booking]:
        found = [b for b in self._load_all() if b.customer_id == customer_id]
        return sorted(found, key=lambda b: b.appointment_time, reverse=True)

    def find_by_date_range_and_status_in(
        self,
        start: datetime,
        end: datetime,
        statuses: Iterable[BookingStatus],
    ) -> list[Booking]:
        wanted = set(statuses)
        found = [b for b in self._load_all() if start <= b.appointment_time < end and b.status in wanted]
        return sorted(found, key=lambda b: b.appointment_time)

    def delete_by_id(self, booking_id: str) -> bool:
        with self._write_lock:
            file_path = self._get_file_path(booking_id)
            if not file_path.exists():
                return False
            file_path.unlink()
            return True

    def find_all(self, status: BookingStatus | None = None, page: int = 0, size: int = 20) -> Page[Booking]:
        found = [b for b in self._load_all() if status is None or b.status == status]
        return paginate(found, page, size)

    def slot_lock(self, staff_id: str | None, booking_date: date):
        return self._slot_locks.hold(staff_id, booking_date)

    def _serialize_booking(self, booking: Booking) -> dict[str, Any]:
        return {
            "id": booking.id,
            "customer_id": booking.customer_id,
            "staff_id": booking.staff_id,
            "service_ids": list(booking.service_ids),
            "appointment_time": booking.appointment_time.isoformat(),
            "total_price": str(booking.total_price),
            "status": booking.status.value,
            "notes": booking.notes,
            "created_at": booking.created_at.isoformat() if booking.created_at else None,
            "updated_at": booking.updated_at.isoformat() if booking.updated_at else None,
            "version": 1,
        }

    def _deserialize_booking(self, data: dict[str, Any]) -> Booking:
        return Booking(
            id=data["id"],
            customer_id=data["customer_id"],
            staff_id=data.get("staff_id"),
            service_ids=tuple(data.get("service_ids") or ()),
            appointment_time=datetime.fromisoformat(data["appointment_time"]),
            total_price=Decimal(data["total_price"]),
            status=BookingStatus(data.get("status", BookingStatus.PENDING.value)),
            notes=data.get("notes"),
            created_at=_parse_dt(data.get("created_at")),
            updated_at=_parse_dt(data.get("updated_at")),
        )


def _parse_dt(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except (ValueError, TypeError):
        return None
