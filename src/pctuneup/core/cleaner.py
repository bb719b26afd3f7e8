"""Deletion of reclaimable data per category."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from pctuneup.core.catalog import CategoryCatalog, resolve_paths
from pctuneup.core.system import SystemActions
from pctuneup.models.category import Browser, Category, SystemAction
from pctuneup.models.clean_result import CleanOutcome, CleanReport
from pctuneup.utils import delete_contents, dir_size

log = logging.getLogger(__name__)

LogSink = Callable[[str], None]
ProgressCallback = Callable[[str, str], None]  # (category_id, status)
OutcomeCallback = Callable[[CleanOutcome], None]


def _discard(message: str) -> None:
    pass


class CleanEngine:
    """Cleans categories of a catalog and reports what was freed."""

    def __init__(self, catalog: CategoryCatalog, system: SystemActions) -> None:
        self.catalog = catalog
        self.system = system

    def clean(self, category_id: str, log_sink: LogSink | None = None) -> CleanOutcome:
        """Clean one category by ID.

        Exceptions from system actions propagate; use :meth:`clean_selected`
        to isolate categories from each other. Unknown IDs clean nothing.
        """
        category = self.catalog.get(category_id)
        if category is None:
            log.warning("Category '%s' not found, skipping", category_id)
            return CleanOutcome(category_id=category_id)
        return self.clean_category(category, log_sink)

    def clean_browser(self, browser: Browser, log_sink: LogSink | None = None) -> CleanOutcome:
        """Clean the cache of *browser*. Unknown browsers clean nothing."""
        category = self.catalog.for_browser(browser)
        if category is None:
            return CleanOutcome(category_id=f"browserCache:{browser.value}")
        return self.clean_category(category, log_sink)

    def clean_category(self, category: Category, log_sink: LogSink | None = None) -> CleanOutcome:
        sink = log_sink or _discard
        match category.action:
            case SystemAction.EMPTY_RECYCLE_BIN:
                return self._empty_recycle_bin(category)
            case SystemAction.FLUSH_DNS:
                self.system.flush_dns()
                return CleanOutcome(category_id=category.id)
            case _:
                return self._delete_paths(category, sink)

    def _empty_recycle_bin(self, category: Category) -> CleanOutcome:
        # The shell call does not report a size, so measure it first
        size = sum(dir_size(path) for path in resolve_paths(category, self.system))
        self.system.empty_recycle_bin()
        log.info("Emptied Recycle Bin (%d bytes)", size)
        return CleanOutcome(category_id=category.id, freed_bytes=size)

    def _delete_paths(self, category: Category, sink: LogSink) -> CleanOutcome:
        outcome = CleanOutcome(category_id=category.id)
        for path in resolve_paths(category, self.system):
            report = delete_contents(path)
            outcome.freed_bytes += report.freed_bytes
            outcome.skipped += report.skipped
            if report.skipped and category.browser is None:
                sink(f"   Skipped {report.skipped} files in use")
        if outcome.skipped and category.browser is not None:
            sink(f"   Skipped {outcome.skipped} files (browser may still be running)")
        log.info(
            "Cleaned %s: %d bytes freed, %d files skipped",
            category.id,
            outcome.freed_bytes,
            outcome.skipped,
        )
        return outcome

    def clean_selected(
        self,
        category_ids: list[str],
        on_progress: ProgressCallback | None = None,
        on_result: OutcomeCallback | None = None,
        log_sink: LogSink | None = None,
    ) -> CleanReport:
        """Clean several categories, one after another.

        A category that raises is recorded as a failed outcome carrying the
        error message; the remaining categories still run.
        """
        report = CleanReport()
        for category_id in category_ids:
            if on_progress:
                on_progress(category_id, "cleaning")
            try:
                outcome = self.clean(category_id, log_sink)
            except Exception as exc:
                outcome = self._crashed(category_id, exc, log_sink)
            self._record(report, outcome, on_progress, on_result)
        return report

    async def clean_selected_async(
        self,
        category_ids: list[str],
        on_progress: ProgressCallback | None = None,
        on_result: OutcomeCallback | None = None,
        log_sink: LogSink | None = None,
    ) -> CleanReport:
        """Like :meth:`clean_selected`, with each category off the event loop thread."""
        report = CleanReport()
        for category_id in category_ids:
            if on_progress:
                on_progress(category_id, "cleaning")
            try:
                outcome = await asyncio.to_thread(self.clean, category_id, log_sink)
            except Exception as exc:
                outcome = self._crashed(category_id, exc, log_sink)
            self._record(report, outcome, on_progress, on_result)
        return report

    @staticmethod
    def _crashed(category_id: str, exc: Exception, log_sink: LogSink | None) -> CleanOutcome:
        log.exception("Category '%s' failed during clean", category_id)
        if log_sink:
            log_sink(f"   ✗ Error: {exc}")
        return CleanOutcome(category_id=category_id, errors=[str(exc) or type(exc).__name__])

    def _record(
        self,
        report: CleanReport,
        outcome: CleanOutcome,
        on_progress: ProgressCallback | None,
        on_result: OutcomeCallback | None,
    ) -> None:
        report.outcomes.append(outcome)
        if self._succeeded(outcome):
            report.succeeded += 1
            status = "done"
        else:
            report.failed += 1
            status = "error" if outcome.errors else "skipped"
        if on_result:
            on_result(outcome)
        if on_progress:
            on_progress(outcome.category_id, status)

    def _succeeded(self, outcome: CleanOutcome) -> bool:
        if outcome.errors:
            return False
        category = self.catalog.get(outcome.category_id)
        return outcome.freed_bytes > 0 or (category is not None and category.always_report)
