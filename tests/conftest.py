"""
Shared fixtures: a salon with a tiny catalog, two customers, one staff member
and a clock frozen at 2025-01-09 12:00 UTC.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from app.application.use_cases.booking import BookingScheduler
from app.domain.entities.booking import BookingStatus
from app.domain.entities.principal import Principal, Role
from app.domain.entities.service_catalog import CatalogService
from app.domain.entities.user import CustomerProfile, User
from app.infrastructure.access.role_access_gate import RoleAccessGate
from app.infrastructure.catalog.service_catalog_store import ServiceCatalogStore
from app.infrastructure.directory.memory_directory import MemoryCustomerDirectory
from app.infrastructure.store.memory_store import MemoryBookingStore

UTC = ZoneInfo("UTC")
NOW = datetime(2025, 1, 9, 12, 0, tzinfo=UTC)

HAIRCUT = CatalogService("haircut", "Haircut", Decimal("20.00"), 30)
FACIAL = CatalogService("facial", "Facial", Decimal("35.50"), 45)
MASSAGE = CatalogService("massage", "Massage", Decimal("60.00"), 60)

CUSTOMER = Principal("cust-1", Role.CUSTOMER)
OTHER_CUSTOMER = Principal("cust-2", Role.CUSTOMER)
STAFF = Principal("staff-1", Role.STAFF)
OTHER_STAFF = Principal("staff-2", Role.STAFF)
ADMIN = Principal("admin-1", Role.ADMIN)

LEGAL_MOVES = frozenset(
    {
        (BookingStatus.PENDING, BookingStatus.CONFIRMED),
        (BookingStatus.PENDING, BookingStatus.CANCELLED),
        (BookingStatus.CONFIRMED, BookingStatus.COMPLETED),
        (BookingStatus.CONFIRMED, BookingStatus.CANCELLED),
        (BookingStatus.CONFIRMED, BookingStatus.NO_SHOW),
    }
)


@pytest.fixture
def catalog() -> ServiceCatalogStore:
    return ServiceCatalogStore({s.service_id: s for s in (HAIRCUT, FACIAL, MASSAGE)})


@pytest.fixture
def directory() -> MemoryCustomerDirectory:
    return MemoryCustomerDirectory(
        users=[
            User("cust-1", "Lan", "lan@example.com"),
            User("cust-2", "Minh", "minh@example.com"),
            User("staff-1", "Hoa", "hoa@example.com", Role.STAFF),
            User("staff-2", "Tuan", "tuan@example.com", Role.STAFF),
            User("admin-1", "Admin", "admin@example.com", Role.ADMIN),
        ],
        profiles=[CustomerProfile("cust-1", skin_type="oily"), CustomerProfile("cust-2")],
    )


@pytest.fixture
def store() -> MemoryBookingStore:
    return MemoryBookingStore(lock_timeout_seconds=0.5)


@pytest.fixture
def scheduler(store, catalog, directory) -> BookingScheduler:
    return BookingScheduler(
        store=store,
        catalog=catalog,
        access_gate=RoleAccessGate(),
        directory=directory,
        timezone=UTC,
        clock=lambda: NOW,
    )
