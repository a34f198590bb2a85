from __future__ import annotations

from collections.abc import Iterable

from app.application.ports.service_catalog import ServiceCatalogPort
from app.domain.entities.service_catalog import CatalogService
from app.infrastructure.catalog.service_catalog_data import SERVICE_CATALOG


class ServiceCatalogStore(ServiceCatalogPort):
    def __init__(self, catalog: dict[str, CatalogService] | None = None) -> None:
        self._catalog = dict(SERVICE_CATALOG if catalog is None else catalog)

    def get_service(self, service_id: str) -> CatalogService | None:
        return self._catalog.get(service_id.strip())

    def find_many(self, service_ids: Iterable[str]) -> dict[str, CatalogService]:
        found: dict[str, CatalogService] = {}
        for service_id in service_ids:
            entry = self.get_service(service_id)
            if entry:
                found[service_id] = entry
        return found
