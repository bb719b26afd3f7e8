"""Cleanup category descriptors and their path rules."""

from __future__ import annotations

import enum
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pctuneup.core.system import SystemActions

log = logging.getLogger(__name__)


class Browser(enum.Enum):
    """Browsers whose caches can be cleaned."""

    CHROME = "chrome"
    EDGE = "edge"
    FIREFOX = "firefox"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, name: str) -> Browser:
        """Map a browser name to a variant, case-insensitively."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            return cls.UNKNOWN

    @property
    def process_name(self) -> str | None:
        """Executable name of the running browser, without extension."""
        return _PROCESS_NAMES.get(self)

    @property
    def label(self) -> str:
        return _LABELS.get(self, "Unknown")


_PROCESS_NAMES = {
    Browser.CHROME: "chrome",
    Browser.EDGE: "msedge",
    Browser.FIREFOX: "firefox",
}

_LABELS = {
    Browser.CHROME: "Chrome",
    Browser.EDGE: "Edge",
    Browser.FIREFOX: "Firefox",
}


class SystemAction(enum.Enum):
    """Platform calls that replace directory deletion for a category."""

    EMPTY_RECYCLE_BIN = "empty_recycle_bin"
    FLUSH_DNS = "flush_dns"


class PathRule(ABC):
    """Expands into the candidate locations of a category."""

    @abstractmethod
    def candidates(self, system: SystemActions) -> list[Path]:
        """Return candidate paths. They may or may not exist."""


@dataclass(frozen=True)
class FixedPaths(PathRule):
    """A fixed, ordered list of candidate directories."""

    paths: tuple[Path, ...]

    def candidates(self, system: SystemActions) -> list[Path]:
        return list(self.paths)


@dataclass(frozen=True)
class ProfileSubdirs(PathRule):
    """Every subdirectory of *root*, joined with a fixed *suffix*.

    Used for browsers that keep one cache per profile directory.
    """

    root: Path
    suffix: str

    def candidates(self, system: SystemActions) -> list[Path]:
        try:
            profiles = sorted(p for p in self.root.iterdir() if p.is_dir())
        except OSError:
            log.debug("Cannot list profiles in %s", self.root)
            return []
        return [profile / self.suffix for profile in profiles]


@dataclass(frozen=True)
class VolumeSubdirs(PathRule):
    """The same directory name at the root of every ready volume."""

    name: str

    def candidates(self, system: SystemActions) -> list[Path]:
        return [volume / self.name for volume in system.ready_volumes()]


@dataclass(frozen=True)
class NoPaths(PathRule):
    """Category without any filesystem location."""

    def candidates(self, system: SystemActions) -> list[Path]:
        return []


@dataclass(frozen=True)
class Category:
    """A named class of reclaimable data.

    ``always_report`` keeps the category in scan results even when nothing
    was measured. ``action`` replaces directory deletion with a platform call.
    """

    id: str
    name: str
    icon: str
    description: str
    paths: PathRule
    always_report: bool = False
    action: SystemAction | None = None
    browser: Browser | None = None
