from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable

from app.application.ports.service_catalog import ServiceCatalogPort
from app.domain.entities.service_catalog import CatalogService


class CachedServiceCatalog(ServiceCatalogPort):
    """
    Time-to-live cache in front of another catalog.

    Entries (including "unknown id" answers) expire ttl_seconds after they were
    fetched. Call invalidate() after a price or duration change to drop one
    service, or every service, before expiry.
    """

    def __init__(
        self,
        inner: ServiceCatalogPort,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._inner = inner
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, CatalogService | None]] = {}
        self._lock = threading.Lock()

    def _fresh(self, service_id: str) -> tuple[bool, CatalogService | None]:
        cached = self._entries.get(service_id)
        if cached is None:
            return False, None
        fetched_at, entry = cached
        if self._clock() - fetched_at >= self._ttl:
            return False, None
        return True, entry

    def get_service(self, service_id: str) -> CatalogService | None:
        return self.find_many([service_id]).get(service_id)

    def find_many(self, service_ids: Iterable[str]) -> dict[str, CatalogService]:
        wanted = list(dict.fromkeys(service_ids))
        found: dict[str, CatalogService] = {}
        misses: list[str] = []
        with self._lock:
            for service_id in wanted:
                hit, entry = self._fresh(service_id)
                if not hit:
                    misses.append(service_id)
                elif entry is not None:
                    found[service_id] = entry

        if misses:
            fetched = self._inner.find_many(misses)
            now = self._clock()
            with self._lock:
                for service_id in misses:
                    self._entries[service_id] = (now, fetched.get(service_id))
            found.update(fetched)
        return found

    def invalidate(self, service_id: str | None = None) -> None:
        with self._lock:
            if service_id is None:
                self._entries.clear()
            else:
                self._entries.pop(service_id, None)
