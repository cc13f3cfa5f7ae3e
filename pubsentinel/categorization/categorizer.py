"""PackageCategorizer — ordered retrieval chain: cache -> remote -> heuristic."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import structlog

from pubsentinel.categorization.api_client import CategoryApiClient
from pubsentinel.categorization.cache import CategoryCache
from pubsentinel.categorization.heuristics import infer_category
from pubsentinel.categorization.models import PackageCategory

log = structlog.get_logger(__name__)

Provider = Callable[[str], Awaitable[PackageCategory | None]]


class PackageCategorizer:
    """Resolve a package's categories through an explicit list of providers.

    The first provider returning a result wins. A remote hit is written to
    the local cache and published to the shared store; a heuristic guess is
    cached locally only. The heuristic always answers, so lookups never fail.
    """

    def __init__(
        self,
        cache: CategoryCache,
        api_client: CategoryApiClient | None = None,
        *,
        publish_remote_hits: bool = True,
    ) -> None:
        self.cache = cache
        self.api_client = api_client
        self.publish_remote_hits = publish_remote_hits
        self._chain: list[tuple[str, Provider]] = [("cache", self._from_cache)]
        if api_client is not None:
            self._chain.append(("remote", self._from_remote))
        self._chain.append(("heuristic", self._from_heuristic))

    def initialize(self) -> None:
        self.cache.load()

    async def resolve(self, package_name: str) -> PackageCategory:
        for tier, provider in self._chain:
            hit = await provider(package_name)
            if hit is not None:
                log.debug("categorizer.hit", package=package_name, tier=tier)
                return hit
        # Unreachable: the heuristic tier always answers.
        raise AssertionError(f"no provider resolved {package_name!r}")

    async def classify_package(self, package_name: str) -> str:
        return (await self.resolve(package_name)).primary_category

    async def get_package_categories(self, package_name: str) -> list[str]:
        return list((await self.resolve(package_name)).categories)

    async def refresh_from_remote(self) -> int:
        """Re-fetch every cached package from the remote tier; return how many changed."""
        if self.api_client is None:
            return 0
        names = self.cache.keys
        refreshed = 0
        for category in await self.api_client.fetch_packages(names):
            if category.name in names:
                self.cache.save(category.name, category)
                refreshed += 1
        return refreshed

    def clear_cache(self) -> None:
        self.cache.clear()

    # ── providers ────────────────────────────────────────────────────────

    async def _from_cache(self, package_name: str) -> PackageCategory | None:
        return self.cache.get_valid(package_name)

    async def _from_remote(self, package_name: str) -> PackageCategory | None:
        assert self.api_client is not None
        category = await self.api_client.fetch_package(package_name)
        if category is None:
            return None
        self.cache.save(package_name, category)
        if self.publish_remote_hits:
            published = await self.api_client.publish(category)
            if not published:
                log.debug("categorizer.publish_skipped", package=package_name)
        return category

    async def _from_heuristic(self, package_name: str) -> PackageCategory | None:
        inferred = infer_category(package_name)
        category = PackageCategory(
            name=package_name,
            categories=[inferred],
            primary_category=inferred,
            source="heuristic",
            confidence=0.5,
        )
        self.cache.save(package_name, category)
        return category
