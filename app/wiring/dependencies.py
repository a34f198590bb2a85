from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from fastapi import Header, HTTPException

from app.core.config import settings
from app.application.ports.access_gate import AccessGatePort
from app.application.ports.booking_store import BookingStorePort
from app.application.ports.customer_directory import CustomerDirectoryPort
from app.application.ports.service_catalog import ServiceCatalogPort
from app.application.use_cases.booking import BookingScheduler
from app.domain.entities.principal import Principal
from app.infrastructure.access.role_access_gate import RoleAccessGate
from app.infrastructure.catalog.cached_catalog import CachedServiceCatalog
from app.infrastructure.catalog.http_catalog import HttpServiceCatalog
from app.infrastructure.catalog.service_catalog_store import ServiceCatalogStore
from app.infrastructure.directory.memory_directory import seed_directory
from app.infrastructure.store.json_store import JsonBookingStore
from app.infrastructure.store.memory_store import MemoryBookingStore


logger = logging.getLogger(__name__)


@lru_cache
def get_booking_store() -> BookingStorePort:
    if settings.STORE_PROVIDER.lower() == "json":
        logger.info("Using JsonBookingStore at %s", settings.STORE_DATA_DIR)
        return JsonBookingStore(
            data_dir=settings.STORE_DATA_DIR,
            lock_timeout_seconds=settings.STORE_LOCK_TIMEOUT_SECONDS,
        )
    return MemoryBookingStore(lock_timeout_seconds=settings.STORE_LOCK_TIMEOUT_SECONDS)


@lru_cache
def get_service_catalog() -> ServiceCatalogPort:
    if settings.CATALOG_BASE_URL:
        logger.info("Using HttpServiceCatalog at %s", settings.CATALOG_BASE_URL)
        inner: ServiceCatalogPort = HttpServiceCatalog()
    else:
        if settings.ENV.lower() not in {"dev", "local", "test"}:
            raise ValueError("CATALOG_BASE_URL is required outside dev/local.")
        inner = ServiceCatalogStore()
    return CachedServiceCatalog(inner, ttl_seconds=settings.CATALOG_CACHE_TTL_SECONDS)


@lru_cache
def get_access_gate() -> AccessGatePort:
    return RoleAccessGate()


@lru_cache
def get_customer_directory() -> CustomerDirectoryPort:
    return seed_directory()


def get_booking_scheduler() -> BookingScheduler:
    return BookingScheduler(
        store=get_booking_store(),
        catalog=get_service_catalog(),
        access_gate=get_access_gate(),
        directory=get_customer_directory(),
        timezone=ZoneInfo(settings.BUSINESS_TIMEZONE),
        open_hour=settings.BUSINESS_OPEN_HOUR,
        close_hour=settings.BUSINESS_CLOSE_HOUR,
        slot_step_minutes=settings.SLOT_STEP_MINUTES,
    )


def get_principal(
    x_user_id: str | None = Header(None, alias="X-User-Id"),
    x_user_role: str | None = Header(None, alias="X-User-Role"),
) -> Principal:
    """Caller identity as forwarded by the authenticating gateway."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    try:
        return Principal.from_headers(x_user_id, x_user_role)
    except ValueError:
        raise HTTPException(status_code=401, detail=f"Unknown role: {x_user_role}")
