"""Closing browsers before their caches are cleaned."""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable

from pctuneup.core.catalog import CategoryCatalog
from pctuneup.core.system import SystemActions
from pctuneup.models.category import Browser

log = logging.getLogger(__name__)

# Seconds to wait for each killed process to exit.
PROCESS_EXIT_TIMEOUT = 3.0

# Seconds to let the browsers release their files before cleaning.
GRACE_PERIOD = 2.0


def running_browsers(
    category_ids: Iterable[str],
    catalog: CategoryCatalog,
    system: SystemActions,
) -> list[Browser]:
    """Browsers that are running and whose cache is among *category_ids*."""
    running: list[Browser] = []
    for category_id in category_ids:
        category = catalog.get(category_id)
        if category is None or category.browser is None:
            continue
        process_name = category.browser.process_name
        if process_name and system.process_ids(process_name):
            running.append(category.browser)
    return running


def close_browsers(
    browsers: Iterable[Browser],
    system: SystemActions,
    grace_period: float = GRACE_PERIOD,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Kill the given browsers and wait for the grace period.

    Returns the number of processes that were killed.
    """
    targets = [b for b in browsers if b.process_name is not None]
    killed = 0
    for browser in targets:
        count = system.terminate_processes(browser.process_name, timeout=PROCESS_EXIT_TIMEOUT)
        log.info("Closed %d %s process(es)", count, browser.label)
        killed += count
    if targets:
        sleep(grace_period)
    return killed
