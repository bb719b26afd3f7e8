"""Read-only measurement of reclaimable space per category."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from pctuneup.core.catalog import CategoryCatalog, resolve_paths
from pctuneup.core.system import SystemActions
from pctuneup.models.category import Browser, Category
from pctuneup.models.scan_result import ScanResult
from pctuneup.utils import dir_size

log = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str], None]  # (category_id, status)
ResultCallback = Callable[[ScanResult], None]


class ScanEngine:
    """Measures every category of a catalog, one after another."""

    def __init__(self, catalog: CategoryCatalog, system: SystemActions) -> None:
        self.catalog = catalog
        self.system = system

    def measure_category(self, category: Category) -> int:
        """Total size of all existing candidate paths of *category*."""
        return sum(dir_size(path) for path in resolve_paths(category, self.system))

    def measure(self, category_id: str) -> int:
        """Measure a category by ID. Unknown IDs measure 0."""
        category = self.catalog.get(category_id)
        if category is None:
            log.warning("Category '%s' not found", category_id)
            return 0
        return self.measure_category(category)

    def scan_browser(self, browser: Browser) -> int:
        """Measure the cache of *browser*. Unknown browsers measure 0."""
        category = self.catalog.for_browser(browser)
        return self.measure_category(category) if category else 0

    def scan_category(self, category: Category) -> ScanResult | None:
        """Scan one category; None when there is nothing to offer."""
        size = self.measure_category(category)
        if size > 0 or category.always_report:
            return ScanResult(category_id=category.id, size_bytes=size, category=category)
        return None

    def scan_all(
        self,
        on_progress: ProgressCallback | None = None,
        on_result: ResultCallback | None = None,
    ) -> list[ScanResult]:
        """Scan all categories in catalog order.

        Categories with nothing to clean are left out unless they are
        always reported. A category that crashes is logged and left out.
        """
        results: list[ScanResult] = []
        for category in self.catalog:
            if on_progress:
                on_progress(category.id, "scanning")
            try:
                result = self.scan_category(category)
            except Exception:
                log.exception("Category '%s' failed during scan", category.id)
                if on_progress:
                    on_progress(category.id, "error")
                continue
            self._emit(result, results, on_result)
            if on_progress:
                on_progress(category.id, "done")
        return results

    async def scan_all_async(
        self,
        on_progress: ProgressCallback | None = None,
        on_result: ResultCallback | None = None,
    ) -> list[ScanResult]:
        """Like :meth:`scan_all`, with each walk off the event loop thread.

        Each category is awaited before the next one starts.
        """
        results: list[ScanResult] = []
        for category in self.catalog:
            if on_progress:
                on_progress(category.id, "scanning")
            try:
                result = await asyncio.to_thread(self.scan_category, category)
            except Exception:
                log.exception("Category '%s' failed during scan", category.id)
                if on_progress:
                    on_progress(category.id, "error")
                continue
            self._emit(result, results, on_result)
            if on_progress:
                on_progress(category.id, "done")
        return results

    @staticmethod
    def _emit(
        result: ScanResult | None,
        results: list[ScanResult],
        on_result: ResultCallback | None,
    ) -> None:
        if result is None:
            return
        results.append(result)
        if on_result:
            on_result(result)
