"""Async client for the shared package-category service."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from pubsentinel.categorization.models import PackageCategory
from pubsentinel.core.config import http_timeout

log = structlog.get_logger(__name__)


class CategoryApiClient:
    """Thin async wrapper around the category service.

    ``GET  /category?packages=a,b`` returns ``{"packages": [...]}``;
    ``POST /packages`` stores one category document for everyone.

    Every call degrades to an empty result on network, HTTP or decoding
    errors: categorization must never block or fail the analysis.
    """

    def __init__(self, base_url: str, timeout: float | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Accept": "application/json"},
            timeout=timeout if timeout is not None else http_timeout(),
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> CategoryApiClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    async def fetch_packages(self, package_names: list[str]) -> list[PackageCategory]:
        if not package_names:
            return []
        try:
            response = await self._client.get(
                "/category", params={"packages": ",".join(package_names)}
            )
            if response.status_code != 200:
                log.debug("category_api.status", status=response.status_code)
                return []
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            log.debug("category_api.fetch_failed", error=str(exc))
            return []

        return _parse_packages(data)

    async def fetch_package(self, package_name: str) -> PackageCategory | None:
        for category in await self.fetch_packages([package_name]):
            if category.name == package_name:
                return category
        return None

    async def publish(self, category: PackageCategory) -> bool:
        """Share a freshly resolved category with the remote store."""
        try:
            response = await self._client.post("/packages", json=category.to_json())
        except httpx.HTTPError as exc:
            log.debug("category_api.publish_failed", package=category.name, error=str(exc))
            return False
        return response.status_code in (200, 201, 204)


def _parse_packages(data: Any) -> list[PackageCategory]:
    if not isinstance(data, dict):
        return []
    packages = data.get("packages") or []
    if not isinstance(packages, list):
        return []

    results: list[PackageCategory] = []
    for item in packages:
        if not isinstance(item, dict):
            continue
        try:
            results.append(PackageCategory.from_json({"source": "remote", **item}))
        except (KeyError, ValueError, TypeError, IndexError):
            continue
    return results
