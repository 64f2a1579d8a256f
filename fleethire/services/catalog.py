"""Loads the active vehicle types, locations and pricing rules from the fleet backend"""
import asyncio
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from fleethire.core.config import settings
from fleethire.core.errors import CatalogUnavailableError
from fleethire.core.metrics import cache_hits, cache_misses, catalog_loads
from fleethire.core.redis import get_redis
from fleethire.schemas.catalog import Catalog

logger = logging.getLogger(__name__)

CATALOG_CACHE_KEY = "catalog:active"
CATALOG_ENDPOINTS = {
    "vehicle_types": "vehicle-types",
    "locations": "locations",
    "pricing_rules": "pricing-rules",
}


def _records(payload) -> list:
    # list endpoints may answer with a bare list or a paginated envelope
    if isinstance(payload, dict):
        payload = payload.get("results", [])
    if not isinstance(payload, list):
        raise ValueError(f"Expected a list of records, got {type(payload).__name__}")
    return payload


class CatalogSource:

    def __init__(
        self,
        base_url: str,
        timeout: int = 10,
        cache_ttl: int = 300,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.cache_ttl = cache_ttl
        self.transport = transport

    async def load(self) -> Catalog:
        cached = await self._read_cache()
        if cached is not None:
            return cached

        catalog = await self._fetch()
        await self._write_cache(catalog)
        return catalog

    async def _fetch(self) -> Catalog:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self.transport
            ) as client:
                responses = await asyncio.gather(
                    *(client.get(f"/{path}") for path in CATALOG_ENDPOINTS.values())
                )
                for response in responses:
                    response.raise_for_status()
            records = {
                name: _records(response.json())
                for name, response in zip(CATALOG_ENDPOINTS, responses)
            }
            catalog = Catalog.from_records(**records)
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            catalog_loads.labels(source="remote", status="error").inc()
            logger.error(f"Catalog fetch from {self.base_url} failed: {e}")
            raise CatalogUnavailableError(f"Catalog unavailable: {e}") from e

        catalog_loads.labels(source="remote", status="success").inc()
        logger.info(
            f"Loaded catalog: {len(catalog.vehicle_types)} vehicle types, "
            f"{len(catalog.locations)} locations, {len(catalog.pricing_rules)} pricing rules"
        )
        return catalog

    async def _read_cache(self) -> Optional[Catalog]:
        redis = get_redis()
        if redis is None:
            return None
        try:
            cached = await redis.get(CATALOG_CACHE_KEY)
        except Exception as e:
            logger.warning(f"Catalog cache retrieval failed: {e}")
            return None
        if not cached:
            cache_misses.labels(cache_key="catalog").inc()
            return None
        cache_hits.labels(cache_key="catalog").inc()
        catalog_loads.labels(source="cache", status="success").inc()
        return Catalog.model_validate_json(cached)

    async def _write_cache(self, catalog: Catalog) -> None:
        redis = get_redis()
        if redis is None:
            return
        try:
            await redis.set(CATALOG_CACHE_KEY, catalog.model_dump_json(), ex=self.cache_ttl)
        except Exception as e:
            logger.warning(f"Catalog cache write failed: {e}")


def get_catalog_source() -> CatalogSource:
    return CatalogSource(
        settings.CATALOG_API_URL,
        timeout=settings.CATALOG_TIMEOUT,
        cache_ttl=settings.CATALOG_CACHE_TTL,
    )
