from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal, InvalidOperation as DecimalError
from typing import Any

import httpx

from app.application.exceptions import CatalogUnavailable
from app.application.ports.service_catalog import ServiceCatalogPort
from app.core.config import settings
from app.domain.entities.service_catalog import CatalogService


class HttpServiceCatalog(ServiceCatalogPort):
    """Reads services from the salon's catalog service over HTTP."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout_seconds: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = (base_url or settings.CATALOG_BASE_URL or "").rstrip("/")
        self._api_key = api_key or settings.CATALOG_API_KEY
        self._client = client or httpx.Client(timeout=timeout_seconds or settings.CATALOG_TIMEOUT_SECONDS)
        self._logger = logging.getLogger(__name__)

        if not self._base_url:
            raise ValueError("CATALOG_BASE_URL is required for the HTTP service catalog")

    def _headers(self) -> dict[str, str]:
        if self._api_key:
            return {"Authorization": f"Bearer {self._api_key}"}
        return {}

    def get_service(self, service_id: str) -> CatalogService | None:
        url = f"{self._base_url}/services/{service_id}"
        try:
            response = self._client.get(url, headers=self._headers())
            if response.status_code == 404:
                return None
            response.raise_for_status()
            return _parse_service(response.json())
        except (httpx.HTTPError, ValueError) as e:
            self._logger.error("Catalog lookup failed", extra={"reason": str(e)})
            raise CatalogUnavailable(f"Service catalog unavailable: {e}") from e

    def find_many(self, service_ids: Iterable[str]) -> dict[str, CatalogService]:
        wanted = list(dict.fromkeys(service_ids))
        if not wanted:
            return {}
        url = f"{self._base_url}/services"
        try:
            response = self._client.get(url, params={"ids": ",".join(wanted)}, headers=self._headers())
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            self._logger.error("Catalog batch lookup failed", extra={"reason": str(e)})
            raise CatalogUnavailable(f"Service catalog unavailable: {e}") from e

        items = data.get("services", []) if isinstance(data, dict) else data
        found: dict[str, CatalogService] = {}
        for item in items or []:
            entry = _parse_service(item)
            if entry.service_id in wanted:
                found[entry.service_id] = entry
        return found


def _parse_service(payload: Any) -> CatalogService:
    try:
        return CatalogService(
            service_id=str(payload["id"]),
            name=str(payload.get("name") or payload["id"]),
            price=Decimal(str(payload["price"])),
            duration_minutes=int(payload.get("duration_minutes", payload.get("duration"))),
            description=payload.get("description"),
        )
    except (KeyError, TypeError, ValueError, DecimalError) as e:
        raise CatalogUnavailable(f"Malformed catalog entry: {payload!r}") from e
