from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from app.application.ports.service_catalog import ServiceCatalogPort
from app.domain.entities.service_catalog import CatalogService

CENT = Decimal("0.01")


class PricingCalculator:
    def __init__(self, catalog: ServiceCatalogPort) -> None:
        self._catalog = catalog

    def compute_total(self, service_ids: Iterable[str]) -> Decimal:
        """Sum of current catalog prices. Raises ResourceNotFound for unknown ids."""
        services = self._catalog.lookup_many(service_ids)
        return self.total_for(services.values())

    @staticmethod
    def total_for(services: Iterable[CatalogService]) -> Decimal:
        total = sum((Decimal(s.price) for s in services), Decimal("0"))
        return total.quantize(CENT, rounding=ROUND_HALF_UP)


def total_duration_minutes(services: Iterable[CatalogService]) -> int:
    return sum(int(s.duration_minutes) for s in services)
