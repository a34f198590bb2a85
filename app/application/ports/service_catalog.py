from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from app.application.exceptions import ResourceNotFound
from app.domain.entities.service_catalog import CatalogService


class ServiceCatalogPort(ABC):
    @abstractmethod
    def get_service(self, service_id: str) -> CatalogService | None:
        """Get catalog entry by id, None if unknown."""
        raise NotImplementedError

    @abstractmethod
    def find_many(self, service_ids: Iterable[str]) -> dict[str, CatalogService]:
        """Resolve many ids in one call. Unknown ids are absent from the result."""
        raise NotImplementedError

    def lookup(self, service_id: str) -> CatalogService:
        entry = self.get_service(service_id)
        if entry is None:
            raise ResourceNotFound(f"Service not found: {service_id}", code="SERVICE_NOT_FOUND")
        return entry

    def lookup_many(self, service_ids: Iterable[str]) -> dict[str, CatalogService]:
        """Resolve every id or raise ResourceNotFound naming the missing ones."""
        wanted = list(dict.fromkeys(service_ids))
        found = self.find_many(wanted)
        missing = [sid for sid in wanted if sid not in found]
        if missing:
            raise ResourceNotFound(f"Service not found: {', '.join(missing)}", code="SERVICE_NOT_FOUND")
        return {sid: found[sid] for sid in wanted}
