import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.v1.bookings import router as bookings_router
from app.application.exceptions import (
    AccessDenied,
    BookingConflict,
    BookingError,
    CatalogUnavailable,
    InvalidBooking,
    InvalidOperation,
    ResourceNotFound,
    StoreTimeout,
)
from app.core.config import settings


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("booking_id", "customer_id", "staff_id", "status", "code", "path", "reason"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

logger = logging.getLogger(__name__)

app = FastAPI(title="Salon Booking Scheduler", version="1.0.0")

app.include_router(bookings_router, tags=["bookings"])

_STATUS_BY_ERROR: list[tuple[type[BookingError], int]] = [
    (ResourceNotFound, 404),
    (InvalidBooking, 400),
    (BookingConflict, 409),
    (InvalidOperation, 400),
    (AccessDenied, 403),
]


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    # expected outcomes; informational only
    status_code = next((code for cls, code in _STATUS_BY_ERROR if isinstance(exc, cls)), 400)
    logger.info(exc.message, extra={"code": exc.code, "path": request.url.path})
    content: dict[str, object] = {"detail": exc.message, "code": exc.code}
    if isinstance(exc, InvalidOperation):
        content["current_status"] = exc.current_status
        content["target_status"] = exc.target_status
    if isinstance(exc, BookingConflict):
        content["conflicting_ids"] = exc.conflicting_ids
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(StoreTimeout)
async def store_timeout_handler(request: Request, exc: StoreTimeout) -> JSONResponse:
    logger.warning("Booking store timed out", extra={"path": request.url.path, "reason": str(exc)})
    return JSONResponse(
        status_code=503,
        content={"detail": "Booking store is busy, please retry", "code": "STORE_TIMEOUT"},
        headers={"Retry-After": "1"},
    )


@app.exception_handler(CatalogUnavailable)
async def catalog_unavailable_handler(request: Request, exc: CatalogUnavailable) -> JSONResponse:
    logger.error("Service catalog unavailable", exc_info=exc, extra={"path": request.url.path})
    return JSONResponse(
        status_code=503,
        content={"detail": "Service catalog unavailable", "code": "CATALOG_UNAVAILABLE"},
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error",
        exc_info=exc,
        extra={"path": f"{request.method} {request.url.path}", "reason": repr(exc)},
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error", "code": "INTERNAL_ERROR"})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
