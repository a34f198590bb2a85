from __future__ import annotations

from decimal import Decimal

from app.domain.entities.service_catalog import CatalogService


def _entry(service_id: str, name: str, price: str, duration_minutes: int, description: str | None = None) -> CatalogService:
    return CatalogService(
        service_id=service_id,
        name=name,
        price=Decimal(price),
        duration_minutes=duration_minutes,
        description=description,
    )


# Seed catalog for dev/local runs when no remote catalog is configured.
SERVICE_CATALOG: dict[str, CatalogService] = {
    e.service_id: e
    for e in (
        _entry("haircut", "Haircut", "20.00", 30),
        _entry("hair-wash", "Hair wash & blow dry", "12.50", 20),
        _entry("basic-facial", "Basic facial", "35.00", 45, "Cleanse, exfoliate and hydrate"),
        _entry("acne-treatment", "Acne treatment facial", "55.00", 60),
        _entry("deep-blackhead-removal", "Deep blackhead removal", "40.00", 45),
        _entry("manicure", "Manicure", "18.00", 30),
        _entry("pedicure", "Pedicure", "25.00", 45),
        _entry("full-body-massage", "Full body massage", "60.00", 90),
    )
}
