"""The table of cleanup categories and their candidate locations."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

from pctuneup.core.system import SystemActions
from pctuneup.models.category import (
    Browser,
    Category,
    FixedPaths,
    NoPaths,
    PathRule,
    ProfileSubdirs,
    SystemAction,
    VolumeSubdirs,
)
from pctuneup.utils import local_app_data, temp_dir, windows_dir

log = logging.getLogger(__name__)

_CHROMIUM_CACHE_DIRS = ("Cache", "Code Cache", "GPUCache")


@dataclass(frozen=True)
class WindowsLocations:
    """Well-known directories the catalog is built from."""

    temp_dir: Path
    windows_dir: Path
    local_app_data: Path

    @classmethod
    def from_environ(cls) -> WindowsLocations:
        """Read the locations from the current environment."""
        return cls(temp_dir=temp_dir(), windows_dir=windows_dir(), local_app_data=local_app_data())


def browser_cache_rule(browser: Browser, locations: WindowsLocations) -> PathRule:
    """Where *browser* keeps its disk cache."""
    base = locations.local_app_data
    match browser:
        case Browser.CHROME:
            profile = base / "Google" / "Chrome" / "User Data" / "Default"
            return FixedPaths(tuple(profile / name for name in _CHROMIUM_CACHE_DIRS))
        case Browser.EDGE:
            profile = base / "Microsoft" / "Edge" / "User Data" / "Default"
            return FixedPaths(tuple(profile / name for name in _CHROMIUM_CACHE_DIRS))
        case Browser.FIREFOX:
            return ProfileSubdirs(base / "Mozilla" / "Firefox" / "Profiles", "cache2")
        case _:
            return NoPaths()


def _browser_category(browser: Browser, icon: str, locations: WindowsLocations) -> Category:
    return Category(
        id=f"browserCache:{browser.value}",
        name=f"{browser.label} Browser Cache",
        icon=icon,
        description=f"Cached data (close {browser.label} first!)",
        paths=browser_cache_rule(browser, locations),
        browser=browser,
    )


def default_categories(locations: WindowsLocations) -> list[Category]:
    """The built-in categories, in display order."""
    return [
        Category(
            id="temp",
            name="Windows Temp Files",
            icon="🗂️",
            description="Temporary files from Windows and applications",
            paths=FixedPaths((locations.temp_dir, locations.windows_dir / "Temp")),
        ),
        Category(
            id="updateCache",
            name="Windows Update Cache",
            icon="📦",
            description="Old Windows Update download files",
            paths=FixedPaths((locations.windows_dir / "SoftwareDistribution" / "Download",)),
        ),
        Category(
            id="recycleBin",
            name="Recycle Bin",
            icon="🗑️",
            description="Deleted files waiting to be permanently removed",
            paths=VolumeSubdirs("$Recycle.Bin"),
            action=SystemAction.EMPTY_RECYCLE_BIN,
        ),
        _browser_category(Browser.CHROME, "🌐", locations),
        _browser_category(Browser.EDGE, "🌐", locations),
        _browser_category(Browser.FIREFOX, "🦊", locations),
        Category(
            id="dns",
            name="DNS Cache",
            icon="🔗",
            description="Flush to resolve connectivity issues",
            paths=NoPaths(),
            always_report=True,
            action=SystemAction.FLUSH_DNS,
        ),
    ]


class CategoryCatalog:
    """Read-only, ordered registry of cleanup categories."""

    def __init__(self, categories: Iterable[Category]) -> None:
        self._categories: dict[str, Category] = {}
        for category in categories:
            if category.id in self._categories:
                log.warning("Category '%s' already registered, skipping duplicate", category.id)
                continue
            self._categories[category.id] = category

    def get(self, category_id: str) -> Category | None:
        """Get a category by its ID."""
        return self._categories.get(category_id)

    def get_all(self) -> list[Category]:
        """Get all categories in display order."""
        return list(self._categories.values())

    def for_browser(self, browser: Browser) -> Category | None:
        """Get the cache category of *browser*, if there is one."""
        if browser is Browser.UNKNOWN:
            return None
        return next((c for c in self._categories.values() if c.browser is browser), None)

    def __len__(self) -> int:
        return len(self._categories)

    def __iter__(self) -> Iterator[Category]:
        return iter(self._categories.values())

    def __contains__(self, category_id: str) -> bool:
        return category_id in self._categories


def build_catalog(locations: WindowsLocations | None = None) -> CategoryCatalog:
    """Build the catalog of built-in categories."""
    return CategoryCatalog(default_categories(locations or WindowsLocations.from_environ()))


def resolve_paths(category: Category, system: SystemActions) -> list[Path]:
    """Existing directories of *category*, in order and without duplicates."""
    resolved: list[Path] = []
    seen: set[str] = set()
    for path in category.paths.candidates(system):
        key = os.path.normcase(os.path.normpath(path))
        if key in seen:
            continue
        seen.add(key)
        try:
            if path.is_dir():
                resolved.append(path)
        except OSError:
            log.debug("Cannot access: %s", path)
    return resolved
